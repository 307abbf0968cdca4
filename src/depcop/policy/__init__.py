"""
Policy module for depcop.

This module implements the dependency policy model: allow/deny rules stored
in per-directory MODULE.POLICY files and evaluated hierarchically.

Key concepts:
    - PolicyLoader: Reads, validates and caches policy documents
    - PolicyResolver: Yields the documents that apply to a module, nearest first
    - Rule engine: First matching rule in a ruleset decides
    - DependencyValidator: Checks one import against outgoing, incoming and
      internal visibility rules

Resolution is permissive by default: when no document in a module's ancestry
decides, the import is allowed. This keeps modules without declared policies
working unchanged.
"""

from depcop.policy.loader import PolicyLoader
from depcop.policy.resolver import PolicyResolver
from depcop.policy.rules import evaluate_rule, evaluate_rules
from depcop.policy.validator import DependencyValidator

__all__ = [
    "DependencyValidator",
    "PolicyLoader",
    "PolicyResolver",
    "evaluate_rule",
    "evaluate_rules",
]
