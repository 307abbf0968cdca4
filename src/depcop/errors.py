"""
Exception hierarchy for depcop.

All depcop exceptions inherit from DepcopError, allowing callers to catch
all depcop-specific exceptions with a single except clause.

Exception Categories:
    - PolicyParseError: A MODULE.POLICY file is malformed (fatal)
    - PolicyNotFoundError: No MODULE.POLICY file in a directory (never fatal)
    - ModuleNotResolvedError: A module name cannot be located (fatal)

Dependency violations are NOT exceptions. They are ordinary result values
(see depcop.schema.Violation) gathered into a list, so that one run reports
every problem instead of stopping at the first.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Policy errors: 1xxx
ERROR_POLICY_PARSE = 1001
ERROR_POLICY_NOT_FOUND = 1002

# Module errors: 2xxx
ERROR_MODULE_NOT_RESOLVED = 2001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class DepcopError(Exception):
    """
    Base exception for all depcop errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Policy Errors
# =============================================================================


@dataclass
class PolicyError(DepcopError):
    """
    Base class for policy document errors.

    Attributes:
        path: Filesystem path of the policy document
    """

    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["path"] = self.path


@dataclass
class PolicyParseError(PolicyError):
    """
    Raised when a policy document cannot be parsed.

    Covers invalid YAML/JSON, a document that is not a mapping, unknown keys,
    and rules that specify both or neither of allow/deny.
    """

    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid policy file: {self.path}: {self.reason}"
        if self.code == 0:
            self.code = ERROR_POLICY_PARSE
        if not self.suggestion:
            self.suggestion = 'Each rule must be a mapping with exactly one "allow" or "deny" key'
        super().__post_init__()
        self.context["reason"] = self.reason


@dataclass
class PolicyNotFoundError(PolicyError):
    """Raised when a directory has no policy document."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Policy file not found: {self.path}"
        if self.code == 0:
            self.code = ERROR_POLICY_NOT_FOUND
        super().__post_init__()


# =============================================================================
# Module Errors
# =============================================================================


@dataclass
class ModuleError(DepcopError):
    """
    Base class for module resolution errors.

    Attributes:
        module: Hierarchical name of the module (e.g. "acme/billing")
    """

    module: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["module"] = self.module


@dataclass
class ModuleNotResolvedError(ModuleError):
    """Raised when a module name cannot be located by the discoverer."""

    search_roots: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot find module: {self.module}"
        if self.code == 0:
            self.code = ERROR_MODULE_NOT_RESOLVED
        if not self.suggestion:
            self.suggestion = "Check the module name or add its source root with --root / DEPCOP_PATH"
        super().__post_init__()
        self.context["search_roots"] = self.search_roots
