"""
depcop - Dependency policy checks for Python source trees.

depcop verifies that each module's imports satisfy allow/deny rules declared
in per-directory MODULE.POLICY files, and enforces the "internal" visibility
convention: modules below a directory named internal may only be imported by
code rooted at that directory's parent.

It provides:
- Hierarchical policy resolution (nearest decisive rule wins)
- Incoming and outgoing rules per directory
- Recursive checks that report every violation in one run
- Dependency listings (set, indented tree, DOT graph) and reverse lookups

Example usage:
    $ depcop check --recursive acme/...
    $ depcop list --transitive --style indent acme/api
    $ depcop list-importers acme/core
"""

__version__ = "0.1.0"
__author__ = "depcop Contributors"

from depcop.engine import CheckResult, DependencyEngine  # noqa: E402

__all__ = [
    "CheckResult",
    "DependencyEngine",
    "__author__",
    "__version__",
]
