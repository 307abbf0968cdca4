"""
Outgoing dependency listing.

Builds DependencyNode trees describing what a module imports, directly or
transitively. No policy is applied.
"""

from __future__ import annotations

from typing import Iterator

from depcop.context import ResolutionContext
from depcop.schema import DependencyNode, Module


class DependencyLister:
    """
    Lists the outgoing dependencies of modules.

    Attributes:
        context: ResolutionContext used to resolve modules
        transitive: Expand dependencies of dependencies
        include_stdlib: Keep standard library modules in the listing
        include_tests: Also list test-only imports, at every level
    """

    def __init__(
        self,
        context: ResolutionContext,
        transitive: bool = False,
        include_stdlib: bool = False,
        include_tests: bool = False,
    ) -> None:
        self.context = context
        self.transitive = transitive
        self.include_stdlib = include_stdlib
        self.include_tests = include_tests

    def tree(self, root: Module) -> DependencyNode:
        """
        Build the dependency tree of one root module.

        Modules are expanded in depth-first order with an explicit stack; a
        node is built once all of its children are.
        """
        # Listing a standard library module always shows standard library deps.
        include_stdlib = self.include_stdlib or root.is_stdlib
        visited = {root.name}
        # Each frame: (module, imports still to list, children built so far).
        stack: list[tuple[Module, Iterator[str], list[DependencyNode]]] = [
            (root, iter(root.all_imports(include_tests=self.include_tests)), [])
        ]

        while True:
            module, pending, built = stack[-1]
            name = next(pending, None)
            if name is None:
                stack.pop()
                node = DependencyNode(
                    name=module.name,
                    is_stdlib=module.is_stdlib,
                    children=tuple(built),
                )
                if not stack:
                    return node
                stack[-1][2].append(node)
                continue

            child = self.context.modules.resolve(name)
            if child.is_stdlib and not include_stdlib:
                continue
            if child.name in visited:
                built.append(DependencyNode(name=child.name, is_stdlib=child.is_stdlib, repeated=True))
                continue
            visited.add(child.name)
            names = child.all_imports(include_tests=self.include_tests) if self.transitive else []
            stack.append((child, iter(names), []))


def flatten_dependencies(trees: list[DependencyNode]) -> list[str]:
    """
    Return every dependency in trees exactly once.

    Standard library modules come first, each group sorted by name. The roots
    themselves are only listed if another root depends on them.
    """
    found: dict[str, bool] = {}
    stack = [child for tree in trees for child in tree.children]
    while stack:
        node = stack.pop()
        found[node.name] = node.is_stdlib
        stack.extend(node.children)
    return sorted(found, key=lambda name: (not found[name], name))
