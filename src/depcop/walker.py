"""
Graph walker.

Applies the DependencyValidator across the import graph of a root module,
collecting every violation instead of stopping at the first.

Traversal:
    - The root is entered without a parent: nothing is validated for it.
    - Every edge parent -> module is validated, even when module was already
      visited; only the exploration below an already visited module stops.
    - Non-recursive walks validate the root's direct imports only.

Each root gets its own visited set, keyed by module name, so cyclic graphs
terminate and every edge is validated once per root.
"""

from __future__ import annotations

import logging

from depcop.context import ResolutionContext
from depcop.schema import Module, Violation

logger = logging.getLogger(__name__)


class GraphWalker:
    """
    Walks import graphs and validates each edge.

    Usage:
        walker = GraphWalker(context)
        violations = walker.walk(context.modules.resolve("acme/api"), recursive=True)

    Attributes:
        context: ResolutionContext providing modules and the validator
    """

    def __init__(self, context: ResolutionContext) -> None:
        self.context = context

    def walk(
        self,
        root: Module,
        recursive: bool = False,
        include_tests: bool = False,
    ) -> list[Violation]:
        """
        Validate the imports reachable from root.

        Args:
            root: Module to start from
            recursive: Walk the transitive closure instead of direct imports
            include_tests: Also follow test-only imports, at every level

        Returns:
            Every violation found, in depth-first order

        Raises:
            ModuleNotResolvedError: If an imported module cannot be located
            PolicyParseError: If a consulted policy document is malformed
        """
        violations: list[Violation] = []
        visited: set[str] = set()
        stack: list[tuple[Module, Module | None]] = [(root, None)]

        while stack:
            module, parent = stack.pop()

            if parent is not None:
                violations.extend(self.context.validator.validate(parent, module))

            if module.name in visited:
                continue
            visited.add(module.name)

            if parent is not None and not recursive:
                continue

            names = module.all_imports(include_tests=include_tests)
            children = [self.context.modules.resolve(name) for name in names]
            stack.extend((child, module) for child in reversed(children))

        logger.debug(
            "Checked %s: %d modules visited, %d violations",
            root.name,
            len(visited),
            len(violations),
        )
        return violations
