"""
Resolution context.

A ResolutionContext owns all state of one depcop invocation: the module
cache, the policy document cache, and the objects built on top of them.
Independent contexts never share state, so tests (or several runs in one
process) cannot leak cached modules or documents into each other.

The caches share one re-entrant lock, which makes a context safe to use from
several worker threads at once.
"""

import threading

from depcop.discovery import ModuleDiscoverer
from depcop.modules import ModuleResolver
from depcop.policy.loader import PolicyLoader
from depcop.policy.resolver import PolicyResolver
from depcop.policy.validator import DependencyValidator


class ResolutionContext:
    """
    Per-invocation state shared by every depcop component.

    Attributes:
        discoverer: Collaborator that locates and scans modules
        modules: Name-keyed module cache
        policies: Path-keyed policy document cache
        resolver: Ancestor document sequence builder
        validator: Single-import validator
    """

    def __init__(self, discoverer: ModuleDiscoverer) -> None:
        self._lock = threading.RLock()
        self.discoverer = discoverer
        self.modules = ModuleResolver(discoverer, lock=self._lock)
        self.policies = PolicyLoader(lock=self._lock)
        self.resolver = PolicyResolver(self.policies)
        self.validator = DependencyValidator(self.resolver)
