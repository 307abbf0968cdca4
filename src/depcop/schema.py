"""
Schema definitions for depcop.

This module defines the Pydantic models used throughout depcop:
- Module: A resolved source module and its imports
- Rule/PolicyDocument: Allow/deny rules loaded from a MODULE.POLICY file
- Violation: One failed dependency check
- DependencyNode: A node of an outgoing dependency listing

It also defines the on-disk policy file format (PolicyFileSpec) and the
helpers that parse and serialize it.

Design Decisions:
    - All models are immutable (frozen=True) and reject unknown fields
    - Policy files are YAML; JSON documents load too since JSON is a YAML subset
    - A rule in a file must carry exactly one of "allow" or "deny"
"""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from depcop.errors import PolicyParseError

# Name of the per-directory policy document.
POLICY_FILE_NAME = "MODULE.POLICY"

# Pattern matching every module (standard library modules stay undecided).
WILDCARD_PATTERN = "..."


# =============================================================================
# Enums
# =============================================================================


class Verdict(str, Enum):
    """Outcome of evaluating a rule (or a ruleset) against a module."""

    APPROVE = "approve"
    REJECT = "reject"
    UNDECIDED = "undecided"


class Direction(str, Enum):
    """Which ruleset of a policy document a check consults."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"


# =============================================================================
# Module Model
# =============================================================================


class Module(BaseModel):
    """
    A resolved module.

    Modules are identified by their hierarchical name, using "/" as the
    separator (e.g. "acme/billing/ledger"). Instances are cached by name for
    the lifetime of a ResolutionContext.

    Attributes:
        name: Hierarchical module name
        directory: Source directory (None for built-in modules)
        is_stdlib: Whether the module belongs to the standard library
        imports: Modules imported by regular source files
        test_imports: Modules imported only by test files
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Hierarchical module name")
    directory: Path | None = Field(default=None, description="Source directory")
    is_stdlib: bool = Field(default=False, description="Standard library member")
    imports: tuple[str, ...] = Field(default=(), description="Direct imports")
    test_imports: tuple[str, ...] = Field(default=(), description="Test-only imports")

    @property
    def depth(self) -> int:
        """Number of separators in the module name."""
        return self.name.count("/")

    def all_imports(self, include_tests: bool = False) -> list[str]:
        """Return direct imports, optionally followed by test-only imports."""
        if include_tests:
            return [*self.imports, *self.test_imports]
        return list(self.imports)


# =============================================================================
# Policy Models
# =============================================================================


class Rule(BaseModel):
    """
    A single allow or deny rule.

    Attributes:
        pattern: Module name, "prefix/..." sub-tree pattern, or "..."
        is_deny: True for deny rules, False for allow rules
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str = Field(..., min_length=1, description="Module name pattern")
    is_deny: bool = Field(default=False, description="Whether this is a deny rule")

    @classmethod
    def allow(cls, pattern: str) -> "Rule":
        """Create an allow rule."""
        return cls(pattern=pattern, is_deny=False)

    @classmethod
    def deny(cls, pattern: str) -> "Rule":
        """Create a deny rule."""
        return cls(pattern=pattern, is_deny=True)

    def to_dict(self) -> dict[str, str]:
        """Convert to the policy file representation."""
        return {"deny" if self.is_deny else "allow": self.pattern}

    def __str__(self) -> str:
        key = "deny" if self.is_deny else "allow"
        return f'{{"{key}": "{self.pattern}"}}'


class PolicyDocument(BaseModel):
    """
    The rules attached to one directory.

    A directory without a MODULE.POLICY file is represented by an empty
    placeholder document (see PolicyDocument.empty).

    Attributes:
        path: Path of the policy file (whether or not it exists)
        incoming: Rules restricting who may import modules here
        outgoing: Rules restricting what modules here may import
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path = Field(..., description="Path of the policy file")
    incoming: tuple[Rule, ...] = Field(default=(), description="Incoming rules")
    outgoing: tuple[Rule, ...] = Field(default=(), description="Outgoing rules")
    placeholder: bool = Field(default=False, description="True if no file exists")

    @classmethod
    def empty(cls, path: Path) -> "PolicyDocument":
        """Create the placeholder for a directory without a policy file."""
        return cls(path=path, placeholder=True)

    @property
    def directory(self) -> Path:
        """Directory the document applies to."""
        return self.path.parent

    def rules(self, direction: Direction) -> tuple[Rule, ...]:
        """Return the ruleset for the given direction."""
        if direction == Direction.INCOMING:
            return self.incoming
        return self.outgoing

    def to_dict(self) -> dict[str, Any]:
        """Convert to the policy file representation."""
        return {
            "dependencies": {
                "incoming": [rule.to_dict() for rule in self.incoming],
                "outgoing": [rule.to_dict() for rule in self.outgoing],
            }
        }


# =============================================================================
# Policy File Format
# =============================================================================


class RuleSpec(BaseModel):
    """A rule as written in a policy file: exactly one of allow/deny."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow: str | None = None
    deny: str | None = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> "RuleSpec":
        """Reject rules with both or neither of allow/deny, or empty patterns."""
        if self.allow is not None and self.deny is not None:
            msg = "both allow and deny are specified"
            raise ValueError(msg)
        if self.allow is None and self.deny is None:
            msg = "neither allow nor deny is specified"
            raise ValueError(msg)
        if not (self.allow or self.deny):
            msg = "empty rule pattern"
            raise ValueError(msg)
        return self

    def to_rule(self) -> Rule:
        """Convert to a Rule."""
        if self.deny is not None:
            return Rule.deny(self.deny)
        return Rule.allow(self.allow or "")


class DependenciesSpec(BaseModel):
    """The "dependencies" section of a policy file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    incoming: list[RuleSpec] = Field(default_factory=list)
    outgoing: list[RuleSpec] = Field(default_factory=list)


class PolicyFileSpec(BaseModel):
    """Top-level structure of a policy file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    dependencies: DependenciesSpec = Field(default_factory=DependenciesSpec)


# =============================================================================
# Result Models
# =============================================================================


class Violation(BaseModel):
    """
    A structured record of one failed dependency check.

    Attributes:
        importer: Module doing the import
        imported: Module being imported
        direction: Ruleset that rejected the import
        rule_index: Index of the matching deny rule (None for internal breaches)
        rule: The matching deny rule (None for internal breaches)
        internal: True when the internal visibility convention was breached
        path: Policy document that decided, or the "internal" directory
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    importer: str
    imported: str
    direction: Direction
    rule_index: int | None = None
    rule: Rule | None = None
    internal: bool = False
    path: str = ""

    def describe(self) -> str:
        """One-line human-readable description."""
        if self.internal:
            return (
                f'"{self.importer}" may not import "{self.imported}": '
                f"internal package outside {self.path}"
            )
        if self.direction == Direction.OUTGOING:
            return (
                f'"{self.importer}" violates its outgoing rule by depending on '
                f'"{self.imported}": {self.rule} (in {self.path})'
            )
        return (
            f'"{self.importer}" violates incoming rule of package '
            f'"{self.imported}": {self.rule} (in {self.path})'
        )


class DependencyNode(BaseModel):
    """
    A module in an outgoing dependency listing.

    Attributes:
        name: Module name
        is_stdlib: Whether the module belongs to the standard library
        repeated: True if the module was already expanded earlier in the tree
        children: Dependencies listed below this module
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    is_stdlib: bool = False
    repeated: bool = False
    children: tuple["DependencyNode", ...] = ()


# =============================================================================
# Policy File Helpers
# =============================================================================


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item["loc"])
        msg = item["msg"].removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_policy(content: str, path: Path | str) -> PolicyDocument:
    """
    Parse policy file content.

    Args:
        content: YAML (or JSON) text of the policy file
        path: Path the content was read from, recorded on the document

    Returns:
        PolicyDocument with rules in declaration order

    Raises:
        PolicyParseError: If the content is not a valid policy document
    """
    path = Path(path)
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise PolicyParseError(path=str(path), reason=f"invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise PolicyParseError(path=str(path), reason="policy document must be a mapping")

    try:
        spec = PolicyFileSpec.model_validate(data)
    except ValidationError as e:
        raise PolicyParseError(path=str(path), reason=_format_validation_error(e)) from e

    return PolicyDocument(
        path=path,
        incoming=tuple(r.to_rule() for r in spec.dependencies.incoming),
        outgoing=tuple(r.to_rule() for r in spec.dependencies.outgoing),
    )


def dump_policy(document: PolicyDocument) -> str:
    """Serialize a policy document back to YAML."""
    return yaml.safe_dump(document.to_dict(), sort_keys=False)
