"""
Console report generator for depcop.

Renders check results and dependency listings with the Rich library.

Design Principles:
    - Clean runs print nothing but a one-line summary
    - Violations are grouped in one table: who, what, which rule, where
    - Listings print plain module names so they can be piped to other tools
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from depcop.engine import CheckResult
from depcop.schema import DependencyNode, Direction, Violation

ICON_CLEAN = "[green]✓[/green]"
ICON_VIOLATION = "[red]✗[/red]"


def generate_console_report(
    result: CheckResult,
    console: Console | None = None,
    verbose: bool = False,
) -> None:
    """
    Print a check result.

    Args:
        result: Result of DependencyEngine.check_dependencies
        console: Rich Console instance (creates one if not provided)
        verbose: Also print the checked modules and timing
    """
    if console is None:
        console = Console()

    if verbose:
        console.print(f"[dim]Checked: {', '.join(result.modules) or '(none)'}[/dim]")

    if result.success:
        console.print(f"{ICON_CLEAN} No dependency violations in {len(result.modules)} module(s)")
    else:
        _print_violations(console, result.violations)
        console.print()
        console.print(
            f"{ICON_VIOLATION} [red]{len(result.violations)} dependency violation(s)[/red] "
            f"in {len(result.modules)} module(s)"
        )

    if verbose:
        console.print(f"[dim]Duration: {result.duration_ms:.1f}ms[/dim]")


def _print_violations(console: Console, violations: list[Violation]) -> None:
    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Importer", style="cyan", overflow="fold")
    table.add_column("Imported", style="cyan", overflow="fold")
    table.add_column("Kind", width=8)
    table.add_column("Rule", overflow="fold")
    table.add_column("Source", style="dim", overflow="fold")

    for violation in violations:
        table.add_row(
            escape(violation.importer),
            escape(violation.imported),
            _kind(violation),
            "internal package" if violation.internal else escape(str(violation.rule)),
            escape(violation.path),
        )

    console.print(table)


def _kind(violation: Violation) -> str:
    if violation.internal:
        return "[magenta]internal[/magenta]"
    if violation.direction == Direction.OUTGOING:
        return "[red]outgoing[/red]"
    return "[yellow]incoming[/yellow]"


def print_dependency_set(names: list[str], console: Console | None = None) -> None:
    """Print one module name per line."""
    if console is None:
        console = Console()
    for name in names:
        console.print(name, highlight=False, markup=False)


def print_dependency_trees(trees: list[DependencyNode], console: Console | None = None) -> None:
    """Print each dependency tree with indentation."""
    if console is None:
        console = Console()
    for root in trees:
        tree = Tree(f"[bold]{escape(root.name)}[/bold]")
        _add_children(tree, root)
        console.print(tree)


def _add_children(tree: Tree, node: DependencyNode) -> None:
    stack = [(tree, node)]
    while stack:
        branch, current = stack.pop()
        for child in current.children:
            label = escape(child.name)
            if child.is_stdlib:
                label = f"[dim]{label}[/dim]"
            if child.repeated:
                label += " [dim](see above)[/dim]"
            stack.append((branch.add(label), child))


def print_importers(names: list[str], console: Console | None = None) -> None:
    """Print importer names, one per line."""
    print_dependency_set(names, console)
