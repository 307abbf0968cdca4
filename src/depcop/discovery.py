"""
Module discovery for depcop.

A ModuleDiscoverer turns a hierarchical module name into a Module: where its
source lives, whether it belongs to the standard library, and which modules
it imports. The policy engine never reads source code itself; it only consumes
what a discoverer reports.

SourceTreeDiscoverer is the built-in implementation. It treats every directory
below a search root that holds at least one .py file as a module, and reads
the import statements of those files with the ast module.

Name mapping:
    acme/billing/__init__.py     -> module "acme/billing"
    import acme.billing.ledger   -> "acme/billing/ledger" if that directory is a
                                    module, else the deepest existing parent
    import json                  -> "json" (standard library)
    import requests              -> "requests" (installed third-party module)
"""

from __future__ import annotations

import ast
import importlib.util
import logging
import os
import sys
from abc import ABC, abstractmethod
from fnmatch import fnmatch
from importlib.machinery import ModuleSpec
from pathlib import Path
from typing import Iterator, Sequence

from depcop.errors import ModuleNotResolvedError
from depcop.schema import WILDCARD_PATTERN, Module

logger = logging.getLogger(__name__)

# Files whose imports only count as test imports.
TEST_FILE_PATTERNS = ("test_*.py", "*_test.py", "conftest.py")

# Directory names never treated as modules.
SKIP_DIRS = frozenset({"__pycache__", "node_modules"})


class ModuleDiscoverer(ABC):
    """
    Abstract source of module metadata.

    Implementations must be deterministic: discovering the same name twice
    must describe the same module.
    """

    @abstractmethod
    def discover(self, name: str) -> Module:
        """
        Describe the module with the given name.

        Raises:
            ModuleNotResolvedError: If the module cannot be located
        """

    @abstractmethod
    def list_modules(self, pattern: str = WILDCARD_PATTERN) -> list[str]:
        """
        List known module names matching a pattern.

        "..." lists every module, "prefix/..." lists prefix and its sub-tree,
        any other pattern lists at most the module with that exact name.
        """


def _is_skipped(name: str) -> bool:
    return name.startswith(".") or name in SKIP_DIRS


def _has_python_files(directory: Path) -> bool:
    try:
        return any(
            entry.suffix == ".py" and entry.is_file() for entry in directory.iterdir()
        )
    except OSError:
        return False


def _is_test_file(path: Path) -> bool:
    return any(fnmatch(path.name, pattern) for pattern in TEST_FILE_PATTERNS)


def _spec_directory(spec: ModuleSpec) -> Path | None:
    """Directory of an installed package, None for single-file modules."""
    locations = spec.submodule_search_locations
    if locations:
        return Path(next(iter(locations)))
    return None


class SourceTreeDiscoverer(ModuleDiscoverer):
    """
    Discover modules by scanning Python source trees.

    Attributes:
        search_roots: Directories module names are relative to, in lookup order
    """

    def __init__(self, search_roots: Sequence[Path | str]) -> None:
        self.search_roots = [Path(root).resolve() for root in search_roots]
        self._directories: dict[str, Path | None] = {}

    def find_directory(self, name: str) -> Path | None:
        """Return the source directory of a module under the search roots."""
        if name in self._directories:
            return self._directories[name]

        found = None
        parts = name.split("/")
        if not any(_is_skipped(part) or not part for part in parts):
            for root in self.search_roots:
                candidate = root.joinpath(*parts)
                if candidate.is_dir() and _has_python_files(candidate):
                    found = candidate
                    break

        self._directories[name] = found
        return found

    def discover(self, name: str) -> Module:
        directory = self.find_directory(name)
        if directory is not None:
            imports, test_imports = self._scan(name, directory)
            return Module(
                name=name,
                directory=directory,
                imports=imports,
                test_imports=test_imports,
            )

        if "/" not in name and name.isidentifier():
            if name in sys.stdlib_module_names:
                return Module(name=name, is_stdlib=True)
            try:
                spec = importlib.util.find_spec(name)
            except (ImportError, ValueError):
                spec = None
            if spec is not None:
                return Module(name=name, directory=_spec_directory(spec))

        raise ModuleNotResolvedError(
            module=name,
            search_roots=[str(root) for root in self.search_roots],
        )

    def list_modules(self, pattern: str = WILDCARD_PATTERN) -> list[str]:
        if pattern == WILDCARD_PATTERN:
            prefix = None
        elif pattern.endswith("/" + WILDCARD_PATTERN):
            prefix = pattern[: -len("/" + WILDCARD_PATTERN)]
        else:
            return [pattern] if self.find_directory(pattern) is not None else []

        names: set[str] = set()
        for root in self.search_roots:
            for name in self._walk(root):
                if prefix is None or name == prefix or name.startswith(prefix + "/"):
                    names.add(name)
        return sorted(names)

    # =========================================================================
    # Scanning
    # =========================================================================

    def _walk(self, root: Path) -> Iterator[str]:
        """Yield the names of every module directory below root."""
        for dirpath, dirnames, _ in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not _is_skipped(d))
            directory = Path(dirpath)
            if directory == root:
                continue
            if _has_python_files(directory):
                yield directory.relative_to(root).as_posix()

    def _scan(self, name: str, directory: Path) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Collect (imports, test_imports) of the module in directory."""
        regular: set[str] = set()
        tests: set[str] = set()

        for path in sorted(directory.glob("*.py")):
            try:
                tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
            except (SyntaxError, UnicodeDecodeError, ValueError, OSError) as e:
                logger.warning("Skipping %s: %s", path, e)
                continue

            target = tests if _is_test_file(path) else regular
            for parts in _iter_imported_names(tree, name.split("/")):
                imported = self._resolve_import(parts)
                if imported != name:
                    target.add(imported)

        logger.debug("Scanned module %s: %d imports, %d test imports", name, len(regular), len(tests - regular))
        return tuple(sorted(regular)), tuple(sorted(tests - regular))

    def _resolve_import(self, parts: list[str]) -> str:
        """Map a dotted import to the deepest existing module, else its top level."""
        for i in range(len(parts), 0, -1):
            candidate = "/".join(parts[:i])
            if self.find_directory(candidate) is not None:
                return candidate
        return parts[0]


def _iter_imported_names(tree: ast.AST, package: list[str]) -> Iterator[list[str]]:
    """
    Yield the dotted name of every import in tree, split into parts.

    For "from x import y" the yielded name is x.y, so that importing a
    sub-module resolves to it; _resolve_import falls back to x when y is not
    a module. Relative imports are resolved against package.
    """
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name.split(".")
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                up = node.level - 1
                if up > len(package):
                    continue
                base = package[: len(package) - up]
            else:
                base = []
            parent = base + (node.module.split(".") if node.module else [])
            if not parent:
                continue
            for alias in node.names:
                if alias.name == "*":
                    yield parent
                else:
                    yield parent + [alias.name]
