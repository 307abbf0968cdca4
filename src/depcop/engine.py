"""
Dependency engine for depcop.

The DependencyEngine is the API the CLI (or any other caller) uses. It
coordinates:
- Module discovery and resolution
- Policy loading and validation of each import edge
- Graph walking over one or many root modules

Check Flow:
    1. Expand module arguments ("acme/..." patterns) into module names
    2. Resolve each root module
    3. Walk each root's import graph, validating every edge
    4. Return all violations; fatal errors (unresolvable modules, malformed
       policy files) propagate as exceptions

Design Principles:
    - Collect everything: violations never stop a check
    - Fail on configuration errors: a malformed policy aborts the run
    - Isolated runs: each engine owns a fresh ResolutionContext
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from depcop.context import ResolutionContext
from depcop.discovery import ModuleDiscoverer, SourceTreeDiscoverer
from depcop.index import compute_incoming_index, list_importers
from depcop.listing import DependencyLister
from depcop.schema import WILDCARD_PATTERN, DependencyNode, Module, Violation
from depcop.walker import GraphWalker

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """
    Result of checking a set of modules.

    Attributes:
        modules: Root modules that were checked, in order
        violations: Every violation found, grouped by root in order
        recursive: Whether transitive imports were checked
        duration_ms: Total check time in milliseconds
    """

    modules: list[str]
    violations: list[Violation] = field(default_factory=list)
    recursive: bool = False
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        """Whether no violations were found."""
        return not self.violations


class DependencyEngine:
    """
    Main entry point for dependency policy checks.

    Usage:
        engine = DependencyEngine(search_roots=["src"])
        result = engine.check_dependencies(["acme/..."], recursive=True)
        for violation in result.violations:
            print(violation.describe())

    Attributes:
        context: ResolutionContext holding this engine's caches
    """

    def __init__(
        self,
        search_roots: Sequence[Path | str] | None = None,
        discoverer: ModuleDiscoverer | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            search_roots: Source roots for the built-in discoverer
                (defaults to the current directory)
            discoverer: Custom discoverer; overrides search_roots
        """
        if discoverer is None:
            discoverer = SourceTreeDiscoverer(search_roots or [Path.cwd()])
        self.context = ResolutionContext(discoverer)

    def expand(self, patterns: Iterable[str]) -> list[str]:
        """
        Expand module arguments into module names.

        "..." and "prefix/..." are expanded through the discoverer; other
        names are kept as given. Duplicates are dropped, order is kept.
        """
        names: list[str] = []
        for pattern in patterns:
            if pattern == WILDCARD_PATTERN or pattern.endswith("/" + WILDCARD_PATTERN):
                matched = self.context.discoverer.list_modules(pattern)
                if not matched:
                    logger.warning('Pattern "%s" matched no modules', pattern)
            else:
                matched = [pattern]
            for name in matched:
                if name not in names:
                    names.append(name)
        return names

    def resolve_all(self, patterns: Iterable[str]) -> list[Module]:
        """Expand patterns and resolve every resulting module."""
        return [self.context.modules.resolve(name) for name in self.expand(patterns)]

    # =========================================================================
    # Checks
    # =========================================================================

    def check_dependencies(
        self,
        module_names: Iterable[str],
        recursive: bool = False,
        include_tests: bool = False,
        jobs: int = 1,
    ) -> CheckResult:
        """
        Check modules against their dependency policies.

        Args:
            module_names: Module names or "prefix/..." patterns
            recursive: Check the transitive closure, not only direct imports
            include_tests: Also check the roots' test-only imports
            jobs: Number of worker threads (one root per task)

        Returns:
            CheckResult with every violation found

        Raises:
            ModuleNotResolvedError: If a module cannot be located
            PolicyParseError: If a policy document is malformed
        """
        start = time.perf_counter()
        roots = self.resolve_all(module_names)
        walker = GraphWalker(self.context)

        def walk(root: Module) -> list[Violation]:
            return walker.walk(root, recursive=recursive, include_tests=include_tests)

        if jobs > 1 and len(roots) > 1:
            with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="depcop") as executor:
                per_root = list(executor.map(walk, roots))
        else:
            per_root = [walk(root) for root in roots]

        return CheckResult(
            modules=[root.name for root in roots],
            violations=[v for violations in per_root for v in violations],
            recursive=recursive,
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    # =========================================================================
    # Listings
    # =========================================================================

    def list_outgoing_dependencies(
        self,
        module_names: Iterable[str],
        transitive: bool = False,
        include_stdlib: bool = False,
        include_tests: bool = False,
    ) -> list[DependencyNode]:
        """Build one dependency tree per root module."""
        lister = DependencyLister(
            self.context,
            transitive=transitive,
            include_stdlib=include_stdlib,
            include_tests=include_tests,
        )
        return [lister.tree(root) for root in self.resolve_all(module_names)]

    def compute_incoming_index(self, include_tests: bool = False) -> dict[str, set[str]]:
        """Map every module under the search roots to the modules importing it."""
        return compute_incoming_index(self.context, include_tests=include_tests)

    def list_importers(
        self,
        module_names: Iterable[str],
        transitive: bool = False,
        include_tests: bool = False,
    ) -> list[str]:
        """List the modules that import any of module_names."""
        targets = self.expand(module_names)
        for name in targets:
            self.context.modules.resolve(name)
        index = self.compute_incoming_index(include_tests=include_tests)
        return list_importers(targets, index, transitive=transitive)
