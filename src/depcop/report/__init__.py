"""
Reporting module for depcop.

This module renders check results and dependency listings for humans and
for other programs.

Output formats:
    - Console: Rich terminal output (violation table, dependency trees)
    - JSON: Structured output for programmatic consumption
    - DOT: Dependency graphs for Graphviz

Example:
    from depcop.report import generate_console_report, generate_json_report

    result = engine.check_dependencies(["acme/..."], recursive=True)
    generate_console_report(result)
    print(generate_json_report(result))
"""

from depcop.report.console import (
    generate_console_report,
    print_dependency_set,
    print_dependency_trees,
    print_importers,
)
from depcop.report.dot import render_dot
from depcop.report.json import build_report_dict, generate_json_report

__all__ = [
    "build_report_dict",
    "generate_console_report",
    "generate_json_report",
    "print_dependency_set",
    "print_dependency_trees",
    "print_importers",
    "render_dot",
]
