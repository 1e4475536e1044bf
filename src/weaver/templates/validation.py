"""Structural validation for template records.

This is deliberately shallow: it checks the record's required fields, that the
body parses as YAML once placeholders are masked, and that the body has the
sections every workflow needs. It is not a schema validator for the workflow
language.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from weaver.exceptions import TemplateValidationError
from weaver.templates.extraction import PLACEHOLDER_PATTERN
from weaver.templates.models import TEMPLATE_ID_PATTERN, Template, WorkflowType

__all__ = [
    "ValidationResult",
    "validate_template",
]

_REQUIRED_FIELDS = ("id", "name", "content", "type")
_WORKFLOW_TYPES = frozenset(t.value for t in WorkflowType)
_TEMPLATE_ID = re.compile(TEMPLATE_ID_PATTERN)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of :func:`validate_template`.

    Attributes:
        is_valid: True when there are no errors (warnings are allowed).
        errors: Problems that make the template unusable.
        warnings: Problems worth reporting that do not block use.
    """

    is_valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def raise_for_errors(self, template_id: str | None = None) -> None:
        """Raise :class:`TemplateValidationError` if there are errors."""
        if not self.is_valid:
            raise TemplateValidationError(template_id, self.errors)


def _mask_placeholders(content: str) -> str:
    # An unquoted ``{{x}}`` is a YAML flow mapping with a mapping key, which
    # fails to construct; the masked form keeps line numbers intact.
    return PLACEHOLDER_PATTERN.sub(lambda m: f"__{m.group(1)}__", content)


def _check_content(content: str, errors: list[str], warnings: list[str]) -> None:
    try:
        document = yaml.safe_load(_mask_placeholders(content))
    except yaml.YAMLError as e:
        errors.append(f"Invalid YAML structure: {e}")
        return

    if not isinstance(document, Mapping):
        errors.append("Template content must be a YAML mapping")
        return

    if "name" not in document:
        warnings.append("Template should include a workflow name")
    # YAML 1.1 reads a bare ``on`` key as boolean true.
    if "on" not in document and True not in document:
        errors.append("Template must include trigger events (on:)")
    if "jobs" not in document:
        errors.append("Template must include jobs section")


def _check_variables(
    variables: Any, errors: list[str], warnings: list[str]
) -> None:
    if not variables:
        return
    if not isinstance(variables, list):
        errors.append("Template variables must be a list")
        return

    for variable in variables:
        if not isinstance(variable, Mapping) or not variable.get("name"):
            errors.append("Template variable must have a name")
            continue
        default = variable.get("defaultValue", variable.get("default_value"))
        if variable.get("required") and default is None:
            warnings.append(
                f"Required variable '{variable['name']}' has no default value"
            )


def validate_template(record: Template | Mapping[str, Any]) -> ValidationResult:
    """Validate a template or a raw template record.

    Args:
        record: A :class:`Template` or a mapping in the on-disk (camelCase) or
            Python (snake_case) shape.

    Returns:
        ValidationResult listing every error and warning found.

    Example:
        ```python
        result = validate_template(json.loads(path.read_text()))
        if not result.is_valid:
            for error in result.errors:
                print(error)
        ```
    """
    data: Mapping[str, Any] = (
        record.to_record() if isinstance(record, Template) else record
    )
    errors: list[str] = []
    warnings: list[str] = []

    for name in _REQUIRED_FIELDS:
        if not data.get(name):
            errors.append(f"Template {name} is required")

    template_id = data.get("id")
    if template_id and not (
        isinstance(template_id, str) and _TEMPLATE_ID.fullmatch(template_id)
    ):
        errors.append(
            f"Template id {template_id!r} may only contain letters, digits, "
            "'.', '_' and '-', and must start with a letter or digit"
        )

    template_type = data.get("type")
    if template_type and str(getattr(template_type, "value", template_type)) not in (
        _WORKFLOW_TYPES
    ):
        errors.append(f"Unknown template type: {template_type}")

    content = data.get("content")
    if content:
        if isinstance(content, str):
            _check_content(content, errors, warnings)
        else:
            errors.append("Template content must be text")

    _check_variables(data.get("variables"), errors, warnings)

    return ValidationResult(
        is_valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
