"""
Unit tests for the module resolver.
"""

import pytest

from depcop.errors import ModuleNotResolvedError
from depcop.modules import (
    PSEUDO_MODULE_BUILTINS,
    PSEUDO_MODULE_FUTURE,
    ModuleResolver,
    is_pseudo_module,
)
from depcop.schema import Module


class TestModuleResolver:
    """Tests for ModuleResolver."""

    def test_resolve_is_cached(self, memory_context) -> None:
        """The same name yields the same instance; the discoverer runs once."""
        context = memory_context([Module(name="acme")])
        resolver = context.modules

        first = resolver.resolve("acme")
        second = resolver.resolve("acme")

        assert first is second
        assert context.discoverer.discovered == ["acme"]

    def test_pseudo_modules_preseeded(self, memory_context) -> None:
        """Pseudo-modules never reach the discoverer."""
        context = memory_context([])
        assert context.modules.resolve("__future__") is PSEUDO_MODULE_FUTURE
        assert context.modules.resolve("builtins") is PSEUDO_MODULE_BUILTINS
        assert context.discoverer.discovered == []

    def test_unresolved_not_cached(self, memory_context) -> None:
        context = memory_context([])
        for _ in range(2):
            with pytest.raises(ModuleNotResolvedError):
                context.modules.resolve("missing")
        assert context.discoverer.discovered == ["missing", "missing"]

    def test_cached_names(self, memory_context) -> None:
        context = memory_context([Module(name="acme")])
        context.modules.resolve("acme")
        assert context.modules.cached() == ["__future__", "acme", "builtins"]

    def test_independent_contexts(self, memory_context) -> None:
        """Separate contexts never share cached modules."""
        modules = [Module(name="acme")]
        first = memory_context(modules)
        second = memory_context(modules)
        first.modules.resolve("acme")
        assert second.modules.cached() == ["__future__", "builtins"]


class TestPseudoModules:
    """Tests for is_pseudo_module."""

    def test_pseudo_modules(self) -> None:
        assert is_pseudo_module(PSEUDO_MODULE_FUTURE)
        assert is_pseudo_module(PSEUDO_MODULE_BUILTINS)
        assert PSEUDO_MODULE_FUTURE.is_stdlib

    def test_equal_module_is_not_pseudo(self) -> None:
        """Identity, not equality, marks a pseudo-module."""
        assert not is_pseudo_module(Module(name="builtins", is_stdlib=True))

    def test_standalone_resolver(self, memory_context) -> None:
        discoverer = memory_context([Module(name="x")]).discoverer
        assert ModuleResolver(discoverer).resolve("x").name == "x"
