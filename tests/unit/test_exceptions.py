"""Tests for the weaver.exceptions hierarchy."""

from __future__ import annotations

from pathlib import Path

import pytest

from weaver.exceptions import (
    ConfigError,
    CoordinationError,
    CyclicDependencyError,
    DanglingDependencyError,
    DuplicateTemplateError,
    ForbiddenTemplateError,
    TemplateError,
    TemplateNotFoundError,
    TemplateStorageError,
    TemplateValidationError,
    WeaverError,
    WorkflowWriteError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            TemplateNotFoundError("t"),
            ForbiddenTemplateError("t", "built-in", "delete"),
            DuplicateTemplateError("t"),
            TemplateValidationError("t", ["bad"]),
            TemplateStorageError("failed", Path("x.json"), "write"),
        ],
    )
    def test_template_errors(self, error: TemplateError) -> None:
        assert isinstance(error, TemplateError)
        assert isinstance(error, WeaverError)
        assert error.template_id in ("t", None)

    def test_coordination_errors(self) -> None:
        assert issubclass(DanglingDependencyError, CoordinationError)
        assert issubclass(CyclicDependencyError, CoordinationError)
        assert issubclass(CoordinationError, WeaverError)

    def test_other_errors(self) -> None:
        assert issubclass(ConfigError, WeaverError)
        assert issubclass(WorkflowWriteError, WeaverError)
        assert not issubclass(WorkflowWriteError, CoordinationError)


class TestMessages:
    def test_not_found(self) -> None:
        assert TemplateNotFoundError("ci-basic").message == "Template ci-basic not found"

    def test_forbidden(self) -> None:
        error = ForbiddenTemplateError("ci-basic", "built-in", "update")
        assert error.message == "Cannot update built-in template 'ci-basic'"
        assert error.category == "built-in"

    def test_validation_joins_errors(self) -> None:
        error = TemplateValidationError(None, ["a", "b"])
        assert error.errors == ("a", "b")
        assert error.message == "Template (unnamed) failed validation: a; b"

    def test_dangling_names_token_and_workflow(self) -> None:
        error = DanglingDependencyError("deploy", "release")
        assert error.token == "deploy"
        assert "deploy" in str(error)
        assert "'release'" in str(error)

    def test_cyclic_names_node_and_path(self) -> None:
        error = CyclicDependencyError("ci", ("ci", "cd", "ci"))
        assert error.node == "ci"
        assert error.message == (
            "Circular dependency detected involving workflow: ci (ci -> cd -> ci)"
        )

    def test_config_error_fields(self) -> None:
        error = ConfigError("bad", field="templates.custom_dir", value=3)
        assert (error.message, error.field, error.value) == ("bad", "templates.custom_dir", 3)
