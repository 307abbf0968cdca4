"""
Module resolver for depcop.

The resolver is a name-keyed cache in front of a ModuleDiscoverer. Every
lookup of the same name returns the same Module instance for the lifetime of
the resolver, so the discoverer scans each module at most once.

Two pseudo-modules are pre-seeded as standard library members:
    - __future__: compiler directives, not a runtime dependency
    - builtins: the low-level built-in namespace
No policy ever applies to them.
"""

from __future__ import annotations

import logging
import threading

from depcop.discovery import ModuleDiscoverer
from depcop.schema import Module

logger = logging.getLogger(__name__)

PSEUDO_MODULE_FUTURE = Module(name="__future__", is_stdlib=True)
PSEUDO_MODULE_BUILTINS = Module(name="builtins", is_stdlib=True)
PSEUDO_MODULES = (PSEUDO_MODULE_FUTURE, PSEUDO_MODULE_BUILTINS)


def is_pseudo_module(module: Module) -> bool:
    """Check whether a module is one of the pre-seeded pseudo-modules."""
    return any(module is pseudo for pseudo in PSEUDO_MODULES)


class ModuleResolver:
    """
    Resolves module names to cached Module instances.

    Usage:
        resolver = ModuleResolver(SourceTreeDiscoverer(["src"]))
        module = resolver.resolve("acme/billing")

    Attributes:
        discoverer: Collaborator that locates and scans modules
    """

    def __init__(
        self,
        discoverer: ModuleDiscoverer,
        lock: threading.RLock | None = None,
    ) -> None:
        self.discoverer = discoverer
        self._lock = lock or threading.RLock()
        self._cache: dict[str, Module] = {m.name: m for m in PSEUDO_MODULES}

    def resolve(self, name: str) -> Module:
        """
        Resolve a module by name.

        Args:
            name: Hierarchical module name

        Returns:
            The cached Module for name

        Raises:
            ModuleNotResolvedError: If the discoverer cannot locate the module
        """
        with self._lock:
            module = self._cache.get(name)
            if module is None:
                logger.debug("Resolving module %s", name)
                module = self.discoverer.discover(name)
                self._cache[name] = module
            return module

    def cached(self) -> list[str]:
        """Names of all modules resolved so far."""
        with self._lock:
            return sorted(self._cache)
