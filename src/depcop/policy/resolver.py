"""
Policy resolver.

Given a module, yields the policy documents that apply to it, nearest first:
the module's own directory, then one parent directory per "/" in the module
name, ending at the top-level package directory.

    module "acme/billing/ledger" in src/
        src/acme/billing/ledger/MODULE.POLICY
        src/acme/billing/MODULE.POLICY
        src/acme/MODULE.POLICY

The sequence is lazy so that a check that decides early never loads the
documents further up.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from depcop.errors import PolicyNotFoundError
from depcop.modules import is_pseudo_module
from depcop.policy.loader import PolicyLoader
from depcop.schema import POLICY_FILE_NAME, Module, PolicyDocument


class PolicyResolver:
    """
    Produces the ordered policy documents for a module.

    Attributes:
        loader: Loader used to read (and cache) documents
    """

    def __init__(self, loader: PolicyLoader) -> None:
        self.loader = loader

    def directories(self, module: Module) -> Iterator[Path]:
        """Yield the directories consulted for module, nearest first."""
        if is_pseudo_module(module) or module.directory is None:
            return

        directory = module.directory
        for _ in range(module.depth + 1):
            yield directory
            directory = directory.parent

    def documents(self, module: Module) -> Iterator[PolicyDocument]:
        """
        Yield the policy documents for module, nearest first.

        Directories without a policy file yield an empty placeholder.

        Raises:
            PolicyParseError: If a document is malformed; the sequence ends
        """
        for directory in self.directories(module):
            path = directory / POLICY_FILE_NAME
            try:
                yield self.loader.load(path)
            except PolicyNotFoundError:
                yield PolicyDocument.empty(path)
