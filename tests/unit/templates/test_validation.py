"""Tests for weaver.templates.validation."""

from __future__ import annotations

import pytest

from weaver.exceptions import TemplateValidationError
from weaver.templates import Template, validate_template
from tests.fixtures.templates import CI_CONTENT, make_record


class TestValidateTemplate:
    """Tests for validate_template."""

    def test_valid_record(self) -> None:
        result = validate_template(make_record("ci-basic"))

        assert result.is_valid
        assert result.errors == ()
        assert result.warnings == ()

    def test_accepts_template_instances(self) -> None:
        template = Template.model_validate(make_record("ci-basic"))
        assert validate_template(template).is_valid

    @pytest.mark.parametrize("field", ["id", "name", "content", "type"])
    def test_required_fields(self, field: str) -> None:
        record = make_record("t")
        del record[field]

        result = validate_template(record)

        assert not result.is_valid
        assert f"Template {field} is required" in result.errors

    def test_unknown_type(self) -> None:
        result = validate_template(make_record("t", type="deploy"))
        assert "Unknown template type: deploy" in result.errors

    @pytest.mark.parametrize("template_id", ["../escaped", "a/b", "a\\b", ".hidden", "ci\n"])
    def test_id_must_be_a_file_name(self, template_id: str) -> None:
        result = validate_template(make_record(template_id))

        assert not result.is_valid
        assert result.errors[0].startswith(f"Template id {template_id!r} may only contain")

    def test_id_with_dots_and_underscores(self) -> None:
        assert validate_template(make_record("node_ci.v2")).is_valid

    def test_placeholders_do_not_break_yaml(self) -> None:
        content = "name: {{projectName}}\non: push\njobs:\n  build: {{job}}\n"
        assert validate_template(make_record("t", content=content)).is_valid

    def test_invalid_yaml(self) -> None:
        result = validate_template(make_record("t", content="jobs: [unclosed\n"))

        assert not result.is_valid
        assert result.errors[0].startswith("Invalid YAML structure:")

    def test_content_must_be_a_mapping(self) -> None:
        result = validate_template(make_record("t", content="- just\n- a list\n"))
        assert "Template content must be a YAML mapping" in result.errors

    def test_missing_trigger_and_jobs(self) -> None:
        result = validate_template(make_record("t", content="name: Empty\nenv: {}\n"))

        assert "Template must include trigger events (on:)" in result.errors
        assert "Template must include jobs section" in result.errors

    def test_missing_name_is_a_warning(self) -> None:
        content = CI_CONTENT.replace("name: CI\n", "")
        result = validate_template(make_record("t", content=content))

        assert result.is_valid
        assert result.warnings == ("Template should include a workflow name",)

    def test_quoted_on_key_is_accepted(self) -> None:
        content = 'name: X\n"on": push\njobs: {}\n'
        assert validate_template(make_record("t", content=content)).is_valid

    def test_variable_without_name(self) -> None:
        result = validate_template(make_record("t", variables=[{"description": "x"}]))
        assert "Template variable must have a name" in result.errors

    def test_required_variable_without_default_warns(self) -> None:
        record = make_record(
            "t",
            variables=[
                {"name": "projectName", "required": True},
                {"name": "region", "required": True, "defaultValue": "eu"},
            ],
        )
        result = validate_template(record)

        assert result.is_valid
        assert result.warnings == ("Required variable 'projectName' has no default value",)


class TestRaiseForErrors:
    def test_raises_with_every_error(self) -> None:
        result = validate_template(make_record("t", content="name: X\n"))

        with pytest.raises(TemplateValidationError) as exc_info:
            result.raise_for_errors("t")

        assert exc_info.value.template_id == "t"
        assert exc_info.value.errors == result.errors
        assert "'t'" in exc_info.value.message

    def test_valid_result_does_not_raise(self) -> None:
        validate_template(make_record("t")).raise_for_errors("t")
