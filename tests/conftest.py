"""
Pytest configuration and fixtures for depcop tests.

This module provides shared fixtures used across unit and integration tests:
temporary source trees with MODULE.POLICY files, and an in-memory
discoverer for graph tests that need no files at all.
"""

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from depcop.context import ResolutionContext
from depcop.discovery import ModuleDiscoverer
from depcop.errors import ModuleNotResolvedError
from depcop.schema import POLICY_FILE_NAME, WILDCARD_PATTERN, Module

TreeBuilder = Callable[..., Path]


class InMemoryDiscoverer(ModuleDiscoverer):
    """Discoverer backed by a dict of pre-built modules."""

    def __init__(self, modules: list[Module]) -> None:
        self.modules = {m.name: m for m in modules}
        self.discovered: list[str] = []

    def discover(self, name: str) -> Module:
        self.discovered.append(name)
        try:
            return self.modules[name]
        except KeyError:
            raise ModuleNotResolvedError(module=name) from None

    def list_modules(self, pattern: str = WILDCARD_PATTERN) -> list[str]:
        if pattern == WILDCARD_PATTERN:
            return sorted(n for n, m in self.modules.items() if not m.is_stdlib)
        if pattern.endswith("/" + WILDCARD_PATTERN):
            prefix = pattern[: -len("/" + WILDCARD_PATTERN)]
            return sorted(
                n for n in self.modules if n == prefix or n.startswith(prefix + "/")
            )
        return [pattern] if pattern in self.modules else []


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def make_tree(temp_dir: Path) -> TreeBuilder:
    """
    Return a builder for source trees under temp_dir.

    Usage:
        root = make_tree(
            modules={"acme/api": "import acme.core\\n", "acme/core": ""},
            policies={"acme": "dependencies: {outgoing: [{deny: '...'}]}"},
        )

    Each module becomes a package directory with an __init__.py holding the
    given source. Policies are written as MODULE.POLICY in the named
    directory ("" is the root itself).
    """

    def build(
        modules: dict[str, str],
        policies: dict[str, str] | None = None,
        files: dict[str, str] | None = None,
    ) -> Path:
        for name, source in modules.items():
            directory = temp_dir.joinpath(*name.split("/"))
            directory.mkdir(parents=True, exist_ok=True)
            (directory / "__init__.py").write_text(source)
        for name, content in (policies or {}).items():
            directory = temp_dir.joinpath(*name.split("/")) if name else temp_dir
            directory.mkdir(parents=True, exist_ok=True)
            (directory / POLICY_FILE_NAME).write_text(content)
        for relpath, content in (files or {}).items():
            path = temp_dir / relpath
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return temp_dir

    return build


@pytest.fixture
def deny_all_policy() -> str:
    """Return a policy denying every outgoing non-stdlib import."""
    return """
dependencies:
  outgoing:
    - deny: "..."
"""


@pytest.fixture
def memory_context() -> Callable[[list[Module]], ResolutionContext]:
    """Return a builder for a ResolutionContext over in-memory modules."""

    def build(modules: list[Module]) -> ResolutionContext:
        return ResolutionContext(InMemoryDiscoverer(modules))

    return build
