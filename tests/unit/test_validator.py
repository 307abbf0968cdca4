"""
Unit tests for the dependency validator.

Tests cover:
- Default approval without policies
- Nearest decisive document wins, undecided documents are skipped
- Outgoing and incoming rules reported independently
- Internal visibility convention
- Malformed documents propagate
"""

from pathlib import Path

import pytest

from depcop.errors import PolicyParseError
from depcop.policy.loader import PolicyLoader
from depcop.policy.resolver import PolicyResolver
from depcop.policy.validator import DependencyValidator
from depcop.schema import POLICY_FILE_NAME, Direction, Module, Rule


@pytest.fixture
def validator() -> DependencyValidator:
    return DependencyValidator(PolicyResolver(PolicyLoader()))


def make_module(root: Path, name: str) -> Module:
    return Module(name=name, directory=root.joinpath(*name.split("/")))


def write_policy(root: Path, directory: str, content: str) -> Path:
    path = root.joinpath(*directory.split("/")) / POLICY_FILE_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


# =============================================================================
# Rule checks
# =============================================================================


class TestRuleChecks:
    """Tests for outgoing and incoming rule checks."""

    def test_no_policies_approves(self, temp_dir: Path, validator: DependencyValidator) -> None:
        """Without any document both directions approve."""
        importer = make_module(temp_dir, "acme/api")
        imported = make_module(temp_dir, "acme/db")
        assert validator.validate(importer, imported) == []

    def test_outgoing_reject(self, temp_dir: Path, validator: DependencyValidator, deny_all_policy: str) -> None:
        path = write_policy(temp_dir, "acme/api", deny_all_policy)
        importer = make_module(temp_dir, "acme/api")
        imported = make_module(temp_dir, "acme/db")

        violations = validator.validate(importer, imported)

        assert len(violations) == 1
        violation = violations[0]
        assert violation.direction == Direction.OUTGOING
        assert violation.importer == "acme/api"
        assert violation.imported == "acme/db"
        assert violation.rule == Rule.deny("...")
        assert violation.rule_index == 0
        assert violation.path == str(path)
        assert not violation.internal

    def test_outgoing_stdlib_never_decided_by_wildcard(
        self, temp_dir: Path, validator: DependencyValidator, deny_all_policy: str
    ) -> None:
        write_policy(temp_dir, "acme/api", deny_all_policy)
        importer = make_module(temp_dir, "acme/api")
        assert validator.validate(importer, Module(name="json", is_stdlib=True)) == []

    def test_nearest_decisive_wins(self, temp_dir: Path, validator: DependencyValidator) -> None:
        """A closer approval overrides a farther rejection."""
        write_policy(temp_dir, "acme/api", "dependencies: {outgoing: [{allow: acme/db}]}")
        write_policy(temp_dir, "acme", "dependencies: {outgoing: [{deny: '...'}]}")
        importer = make_module(temp_dir, "acme/api")

        assert validator.validate(importer, make_module(temp_dir, "acme/db")) == []
        violations = validator.validate(importer, make_module(temp_dir, "acme/cache"))
        assert len(violations) == 1
        assert violations[0].path == str(temp_dir / "acme" / POLICY_FILE_NAME)

    def test_undecided_closer_document_does_not_block(
        self, temp_dir: Path, validator: DependencyValidator
    ) -> None:
        """A closer document that does not match defers to its ancestors."""
        write_policy(temp_dir, "acme/api", "dependencies: {outgoing: [{deny: other/...}]}")
        write_policy(temp_dir, "acme", "dependencies: {outgoing: [{deny: acme/db}]}")
        importer = make_module(temp_dir, "acme/api")

        violations = validator.validate(importer, make_module(temp_dir, "acme/db"))

        assert [v.rule for v in violations] == [Rule.deny("acme/db")]

    def test_incoming_reject(self, temp_dir: Path, validator: DependencyValidator) -> None:
        """Incoming rules of the imported module apply to the importer."""
        write_policy(
            temp_dir,
            "acme/db",
            "dependencies: {incoming: [{allow: acme/api/...}, {deny: '...'}]}",
        )
        imported = make_module(temp_dir, "acme/db")

        assert validator.validate(make_module(temp_dir, "acme/api/v1"), imported) == []
        violations = validator.validate(make_module(temp_dir, "acme/web"), imported)
        assert len(violations) == 1
        assert violations[0].direction == Direction.INCOMING
        assert violations[0].importer == "acme/web"
        assert violations[0].imported == "acme/db"
        assert violations[0].rule_index == 1

    def test_outgoing_and_incoming_both_reported(
        self, temp_dir: Path, validator: DependencyValidator, deny_all_policy: str
    ) -> None:
        write_policy(temp_dir, "acme/web", deny_all_policy)
        write_policy(temp_dir, "acme/db", "dependencies: {incoming: [{deny: acme/web}]}")

        violations = validator.validate(make_module(temp_dir, "acme/web"), make_module(temp_dir, "acme/db"))

        assert [v.direction for v in violations] == [Direction.OUTGOING, Direction.INCOMING]

    def test_malformed_policy_propagates(self, temp_dir: Path, validator: DependencyValidator) -> None:
        write_policy(temp_dir, "acme/api", "dependencies: [")
        with pytest.raises(PolicyParseError):
            validator.validate(make_module(temp_dir, "acme/api"), make_module(temp_dir, "acme/db"))


# =============================================================================
# Internal visibility
# =============================================================================


class TestInternalVisibility:
    """Tests for the internal directory convention."""

    @pytest.mark.parametrize("importer", ["a/b", "a/b/x", "a/b/internal/d"])
    def test_allowed_importers(self, temp_dir: Path, validator: DependencyValidator, importer: str) -> None:
        imported = make_module(temp_dir, "a/b/internal/c")
        assert validator.validate(make_module(temp_dir, importer), imported) == []

    @pytest.mark.parametrize("importer", ["a/other", "a", "x/b"])
    def test_rejected_importers(self, temp_dir: Path, validator: DependencyValidator, importer: str) -> None:
        imported = make_module(temp_dir, "a/b/internal/c")

        violations = validator.validate(make_module(temp_dir, importer), imported)

        assert len(violations) == 1
        assert violations[0].internal
        assert violations[0].rule is None
        assert violations[0].path == str(temp_dir / "a" / "b" / "internal")

    def test_importing_internal_itself(self, temp_dir: Path, validator: DependencyValidator) -> None:
        """The internal directory's own module follows the same rule."""
        imported = make_module(temp_dir, "a/internal")
        assert validator.validate(make_module(temp_dir, "a/x"), imported) == []
        assert len(validator.validate(make_module(temp_dir, "b"), imported)) == 1

    def test_nearest_internal_directory(self, temp_dir: Path, validator: DependencyValidator) -> None:
        """The innermost internal directory decides."""
        imported = make_module(temp_dir, "a/internal/b/internal/c")
        assert len(validator.validate(make_module(temp_dir, "a/internal/x"), imported)) == 1
        assert validator.validate(make_module(temp_dir, "a/internal/b/y"), imported) == []

    def test_similar_names_are_not_internal(self, temp_dir: Path, validator: DependencyValidator) -> None:
        imported = make_module(temp_dir, "a/internals/c")
        assert validator.validate(make_module(temp_dir, "z"), imported) == []

    def test_stdlib_importer(self, temp_dir: Path, validator: DependencyValidator) -> None:
        """Modules without a directory are never inside an internal root."""
        imported = make_module(temp_dir, "a/internal/c")
        violations = validator.validate(Module(name="json", is_stdlib=True), imported)
        assert len(violations) == 1
