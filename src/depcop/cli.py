"""
CLI entry point for depcop.

This module provides the Typer-based command-line interface for depcop.

Commands:
    check           Check module dependencies against MODULE.POLICY rules
    list            List modules imported by the given modules
    list-importers  List modules that import the given modules

Exit codes:
    0   No violations
    1   Dependency policy violations were found
    2   depcop could not run (unknown module, malformed policy file, bad usage)

Architecture Note:
    The CLI only parses arguments and formats output; all checks go through
    depcop.engine.DependencyEngine so they can be used programmatically.
"""

import json
import logging
import traceback
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from depcop import __version__
from depcop.engine import DependencyEngine
from depcop.errors import DepcopError
from depcop.listing import flatten_dependencies
from depcop.report import (
    generate_console_report,
    generate_json_report,
    print_dependency_set,
    print_dependency_trees,
    print_importers,
    render_dot,
)
from depcop.report.json import dependency_tree_dict

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2

# Initialize Typer app with metadata
app = typer.Typer(
    name="depcop",
    help="Check module dependencies against user-defined rules.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


class ListStyle(str, Enum):
    """Output style of the list command."""

    SET = "set"
    INDENT = "indent"
    DOT = "dot"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]depcop[/bold] version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("depcop")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=err_console, show_path=False, show_time=False))


@app.callback()
def main(
    ctx: typer.Context,
    roots: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--root",
            "-r",
            help="Source root containing modules (repeatable). Defaults to the current directory.",
            envvar="DEPCOP_PATH",
            file_okay=False,
            resolve_path=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable verbose output for debugging.",
        ),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    depcop - Dependency policy checks for Python source trees.

    Every module directory may contain a MODULE.POLICY file with incoming and
    outgoing allow/deny rules. Files are consulted from the module's own
    directory upwards until a rule decides; if none does, the import is
    allowed. Modules under a directory named "internal" may only be imported
    from that directory's parent and below.
    """
    _configure_logging(verbose)
    ctx.obj = {
        "roots": roots or [Path.cwd()],
        "verbose": verbose,
    }


def _engine(ctx: typer.Context) -> DependencyEngine:
    return DependencyEngine(search_roots=ctx.obj["roots"])


def _fail(error: Exception, json_output: bool, debug: bool) -> None:
    """Report a fatal error and exit with EXIT_ERROR."""
    if json_output:
        output = {"error": True}
        if isinstance(error, DepcopError):
            output.update(error.to_dict())
        else:
            output.update({"error_type": type(error).__name__, "message": str(error)})
        if debug:
            output["traceback"] = traceback.format_exc()
        print(json.dumps(output, indent=2))
    else:
        err_console.print(f"[red]Error: {escape(str(error))}[/red]", highlight=False)
        if debug:
            err_console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
    raise typer.Exit(code=EXIT_ERROR)


@app.command()
def check(
    ctx: typer.Context,
    modules: Annotated[
        list[str],
        typer.Argument(help='Modules to check; "prefix/..." selects a sub-tree.'),
    ],
    recursive: Annotated[
        bool,
        typer.Option(
            "--recursive",
            "-R",
            help="Check transitive dependencies, not only direct imports.",
        ),
    ] = False,
    include_tests: Annotated[
        bool,
        typer.Option(
            "--include-tests",
            help="Also check imports made by test files.",
        ),
    ] = False,
    jobs: Annotated[
        int,
        typer.Option(
            "--jobs",
            "-j",
            help="Number of modules to check in parallel.",
            min=1,
        ),
    ] = 1,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Show full tracebacks for errors.",
        ),
    ] = False,
) -> None:
    """
    Check module dependency constraints.

    Example:
        $ depcop check --recursive acme/...
    """
    try:
        result = _engine(ctx).check_dependencies(
            modules,
            recursive=recursive,
            include_tests=include_tests,
            jobs=jobs,
        )
    except DepcopError as e:
        _fail(e, json_output, debug)

    if json_output:
        print(generate_json_report(result))
    else:
        generate_console_report(result, console=console, verbose=ctx.obj["verbose"])

    raise typer.Exit(code=EXIT_OK if result.success else EXIT_VIOLATIONS)


@app.command("list")
def list_dependencies(
    ctx: typer.Context,
    modules: Annotated[
        list[str],
        typer.Argument(help="Modules whose imports to list."),
    ],
    transitive: Annotated[
        bool,
        typer.Option(
            "--transitive",
            "-t",
            help="List transitive dependencies, not only direct imports.",
        ),
    ] = False,
    stdlib: Annotated[
        bool,
        typer.Option(
            "--stdlib",
            help="Show standard library modules.",
        ),
    ] = False,
    include_tests: Annotated[
        bool,
        typer.Option(
            "--include-tests",
            help="Also list imports made by test files.",
        ),
    ] = False,
    style: Annotated[
        ListStyle,
        typer.Option(
            "--style",
            help="set: sorted unique modules; indent: dependency tree; dot: Graphviz graph.",
            case_sensitive=False,
        ),
    ] = ListStyle.SET,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output dependency trees in JSON format.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Show full tracebacks for errors.",
        ),
    ] = False,
) -> None:
    """
    List modules imported by the given modules.

    Example:
        $ depcop list --transitive --style indent acme/api
    """
    try:
        trees = _engine(ctx).list_outgoing_dependencies(
            modules,
            transitive=transitive,
            include_stdlib=stdlib,
            include_tests=include_tests,
        )
    except DepcopError as e:
        _fail(e, json_output, debug)

    # Nested JSON and rich trees are rendered recursively by their libraries.
    try:
        if json_output:
            print(json.dumps([dependency_tree_dict(tree) for tree in trees], indent=2))
        elif style == ListStyle.INDENT:
            print_dependency_trees(trees, console=console)
        elif style == ListStyle.DOT:
            typer.echo(render_dot(trees), nl=False)
        else:
            print_dependency_set(flatten_dependencies(trees), console=console)
    except RecursionError as e:
        _fail(e, json_output, debug)


@app.command("list-importers")
def list_importers(
    ctx: typer.Context,
    modules: Annotated[
        list[str],
        typer.Argument(help="Modules whose importers to list."),
    ],
    transitive: Annotated[
        bool,
        typer.Option(
            "--transitive",
            "-t",
            help="Also list modules importing the importers.",
        ),
    ] = False,
    include_tests: Annotated[
        bool,
        typer.Option(
            "--include-tests",
            help="Count imports made by test files.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Show full tracebacks for errors.",
        ),
    ] = False,
) -> None:
    """
    List modules that import the given modules; the reverse of "list".

    Example:
        $ depcop list-importers acme/core
    """
    try:
        importers = _engine(ctx).list_importers(
            modules,
            transitive=transitive,
            include_tests=include_tests,
        )
    except DepcopError as e:
        _fail(e, False, debug)

    print_importers(importers, console=console)


if __name__ == "__main__":
    app()
