"""
JSON report generator for depcop.

Generates structured JSON output for programmatic consumption.

Design Principles:
    - Complete data: every violation field, including the matching rule
    - Consistent schema: same keys whether or not violations were found
    - Human-readable keys: descriptive snake_case names
"""

import json
from datetime import UTC, datetime
from typing import Any

from depcop import __version__
from depcop.engine import CheckResult
from depcop.schema import DependencyNode


def generate_json_report(result: CheckResult, indent: int = 2) -> str:
    """
    Generate a JSON report for a check result.

    Args:
        result: Result of DependencyEngine.check_dependencies
        indent: JSON indentation level (default: 2)

    Returns:
        JSON string with the full report
    """
    return json.dumps(build_report_dict(result), indent=indent)


def build_report_dict(result: CheckResult) -> dict[str, Any]:
    """Build the report dictionary for a check result."""
    return {
        "report_version": "1.0",
        "tool_version": __version__,
        "generated_at": datetime.now(UTC).isoformat(),
        "success": result.success,
        "recursive": result.recursive,
        "modules": list(result.modules),
        "violations": [
            {**v.model_dump(mode="json"), "message": v.describe()}
            for v in result.violations
        ],
        "summary": {
            "modules_checked": len(result.modules),
            "violations": len(result.violations),
            "internal_violations": sum(1 for v in result.violations if v.internal),
            "duration_ms": result.duration_ms,
        },
    }


def dependency_tree_dict(node: DependencyNode) -> dict[str, Any]:
    """Convert a dependency tree to nested dictionaries."""
    root: dict[str, Any] = {}
    stack = [(node, root)]
    while stack:
        current, data = stack.pop()
        data.update(
            name=current.name,
            is_stdlib=current.is_stdlib,
            repeated=current.repeated,
            children=[],
        )
        for child in current.children:
            child_data: dict[str, Any] = {}
            data["children"].append(child_data)
            stack.append((child, child_data))
    return root
