"""
Unit tests for the reverse dependency index.
"""

import logging

import pytest

from depcop.context import ResolutionContext
from depcop.discovery import ModuleDiscoverer, SourceTreeDiscoverer
from depcop.errors import ModuleNotResolvedError
from depcop.index import compute_incoming_index, list_importers
from depcop.schema import WILDCARD_PATTERN, Module


@pytest.fixture
def context(make_tree) -> ResolutionContext:
    root = make_tree(
        {
            "acme/core": "",
            "acme/api": "import acme.core\n",
            "acme/web": "import acme.api\nimport json\n",
            "tool": "import acme.web\n",
        },
        files={"tool/test_tool.py": "import acme.core\n"},
    )
    return ResolutionContext(SourceTreeDiscoverer([root]))


class GhostDiscoverer(ModuleDiscoverer):
    """Lists a module it cannot describe."""

    def discover(self, name: str) -> Module:
        if name == "ghost":
            raise ModuleNotResolvedError(module=name)
        return Module(name=name, imports=("ghost",))

    def list_modules(self, pattern: str = WILDCARD_PATTERN) -> list[str]:
        return ["ghost", "real"]


class TestComputeIncomingIndex:
    """Tests for compute_incoming_index."""

    def test_index(self, context: ResolutionContext) -> None:
        index = compute_incoming_index(context)
        assert index == {
            "acme/core": {"acme/api"},
            "acme/api": {"acme/web"},
            "acme/web": {"tool"},
            "tool": set(),
        }

    def test_index_with_tests(self, context: ResolutionContext) -> None:
        index = compute_incoming_index(context, include_tests=True)
        assert index["acme/core"] == {"acme/api", "tool"}

    def test_unresolvable_module_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        context = ResolutionContext(GhostDiscoverer())

        with caplog.at_level(logging.WARNING, logger="depcop"):
            index = compute_incoming_index(context)

        assert index == {"ghost": {"real"}, "real": set()}
        assert "ghost" in caplog.text


class TestListImporters:
    """Tests for list_importers."""

    def test_direct(self, context: ResolutionContext) -> None:
        index = compute_incoming_index(context)
        assert list_importers(["acme/core"], index) == ["acme/api"]

    def test_transitive(self, context: ResolutionContext) -> None:
        index = compute_incoming_index(context)
        assert list_importers(["acme/core"], index, transitive=True) == [
            "acme/api",
            "acme/web",
            "tool",
        ]

    def test_cycle(self) -> None:
        index = {"a": {"b"}, "b": {"a"}}
        assert list_importers(["a"], index, transitive=True) == ["a", "b"]

    def test_unknown_target(self) -> None:
        assert list_importers(["nothing"], {}) == []
