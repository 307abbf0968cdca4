"""
Dependency validator.

Checks a single import (importer -> imported) three ways:

1. Outgoing: the importer's documents, nearest first, against their
   "outgoing" rules with the imported module as candidate.
2. Incoming: the imported module's documents, nearest first, against their
   "incoming" rules with the importer as candidate.
3. Internal visibility: if the imported module lives under a directory named
   "internal", the importer must live in that directory's parent or below.

The three checks are independent; one call may report several violations.
For the rule checks, the first document that renders a verdict decides, and
an import no document decides is approved.
"""

from __future__ import annotations

from pathlib import Path

from depcop.policy.resolver import PolicyResolver
from depcop.policy.rules import evaluate_rules
from depcop.schema import Direction, Module, Verdict, Violation

INTERNAL_DIR_NAME = "internal"


class DependencyValidator:
    """
    Validates imports against policy documents.

    Usage:
        validator = DependencyValidator(resolver)
        violations = validator.validate(importer, imported)

    Attributes:
        resolver: PolicyResolver producing documents for a module
    """

    def __init__(self, resolver: PolicyResolver) -> None:
        self.resolver = resolver

    def validate(self, importer: Module, imported: Module) -> list[Violation]:
        """
        Check one import against every applicable policy.

        Args:
            importer: The module containing the import
            imported: The module being imported

        Returns:
            Violations found (possibly empty)

        Raises:
            PolicyParseError: If a consulted policy document is malformed
        """
        violations = []

        outgoing = self.check_rules(importer, imported, Direction.OUTGOING)
        if outgoing is not None:
            violations.append(outgoing)

        incoming = self.check_rules(imported, importer, Direction.INCOMING)
        if incoming is not None:
            violations.append(incoming)

        internal = self.check_internal(importer, imported)
        if internal is not None:
            violations.append(internal)

        return violations

    def check_rules(
        self,
        owner: Module,
        candidate: Module,
        direction: Direction,
    ) -> Violation | None:
        """
        Walk owner's documents and apply the ruleset for direction to candidate.

        For OUTGOING checks owner is the importer; for INCOMING checks owner is
        the imported module and candidate is the importer.
        """
        for document in self.resolver.documents(owner):
            rules = document.rules(direction)
            verdict, index = evaluate_rules(rules, candidate)
            if verdict == Verdict.APPROVE:
                return None
            if verdict == Verdict.REJECT:
                importer, imported = (
                    (owner, candidate) if direction == Direction.OUTGOING else (candidate, owner)
                )
                return Violation(
                    importer=importer.name,
                    imported=imported.name,
                    direction=direction,
                    rule_index=index,
                    rule=rules[index],
                    path=str(document.path),
                )
        return None

    def check_internal(self, importer: Module, imported: Module) -> Violation | None:
        """Enforce the internal visibility convention for one import."""
        internal_dir = self._nearest_internal_dir(imported)
        if internal_dir is None:
            return None

        allowed_root = internal_dir.parent
        if importer.directory is not None and _is_within(importer.directory, allowed_root):
            return None

        return Violation(
            importer=importer.name,
            imported=imported.name,
            direction=Direction.INCOMING,
            internal=True,
            path=str(internal_dir),
        )

    def _nearest_internal_dir(self, module: Module) -> Path | None:
        for directory in self.resolver.directories(module):
            if directory.name == INTERNAL_DIR_NAME:
                return directory
        return None


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents
