"""Workflow compilation: variable substitution, header and filename."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from weaver.coordination.models import (
    CompileContext,
    CompileWarning,
    WorkflowConfiguration,
    WorkflowGenerationResult,
)
from weaver.logging import get_logger
from weaver.templates.extraction import PLACEHOLDER_PATTERN
from weaver.templates.models import Template
from weaver.templates.store import TemplateStore

__all__ = [
    "WorkflowCompiler",
    "build_filename",
    "build_header",
    "stringify",
    "substitute_variables",
]

logger = get_logger(__name__)

HEADER_TEMPLATE = (
    "# Generated from template: {name} ({id})\n"
    "# Template version: {version}\n"
    "# Generated at: {generated_at}\n"
    "# Template ID: {id}\n"
    "\n"
)


def stringify(value: Any) -> str:
    """Render a variable value the way it appears in workflow YAML."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def substitute_variables(content: str, variables: Mapping[str, Any]) -> str:
    """Replace every ``{{name}}`` that has a variable.

    Placeholders without a variable are left verbatim. The replacement is a
    single pass, so a substituted value is never expanded again.
    """

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        return stringify(variables[name])

    return PLACEHOLDER_PATTERN.sub(replace, content)


def build_header(template: Template, context: CompileContext) -> str:
    return HEADER_TEMPLATE.format(
        name=template.name,
        id=template.id,
        version=template.version,
        generated_at=context.generated_at.isoformat(),
    )


def build_filename(template: Template, config: WorkflowConfiguration) -> str:
    """``<type>-<fw1>-<fw2>.yml``, or ``<type>.yml`` without enabled frameworks."""
    parts = [template.type.value, *config.framework_names]
    return "-".join(parts) + ".yml"


class WorkflowCompiler:
    """Turns a template plus a workflow configuration into a workflow file.

    Args:
        store: When given, every successful compile is counted as a usage of
            the template, which feeds template ranking.
    """

    def __init__(self, store: TemplateStore | None = None) -> None:
        self._store = store

    def variables_for(
        self,
        template: Template,
        config: WorkflowConfiguration,
        context: CompileContext,
    ) -> dict[str, Any]:
        """Collect substitution variables.

        Precedence, lowest first: declared defaults of the template, shared
        variables, workflow settings, per-call context.
        """
        variables: dict[str, Any] = dict(context.shared_variables)
        for declared in template.variables:
            if declared.default_value is not None:
                variables.setdefault(declared.name, declared.default_value)

        variables.update(
            {
                "frameworks": config.framework_names,
                "deploymentTargets": [t.platform for t in config.deployment_targets],
                "securityLevel": config.security_level,
                "optimizationLevel": config.optimization_level,
                "includeComments": config.include_comments,
            }
        )
        variables.update(
            {
                "readmePath": str(context.input_path),
                "inputPath": str(context.input_path),
                "outputDirectory": str(context.output_directory),
                "templateId": template.id,
                "generatedAt": context.generated_at.isoformat(),
            }
        )
        return variables

    def compile(
        self,
        template: Template,
        config: WorkflowConfiguration,
        context: CompileContext,
    ) -> WorkflowGenerationResult:
        variables = self.variables_for(template, config, context)

        warnings = [
            CompileWarning(template.id, f"Required variable '{v.name}' has no value")
            for v in template.variables
            if v.required and variables.get(v.name) is None
        ]

        content = build_header(template, context) + substitute_variables(
            template.content, variables
        )

        result = WorkflowGenerationResult(
            template_id=template.id,
            filename=build_filename(template, config),
            content=content,
            type=template.type,
            workflow=context.workflow or config.identity,
            frameworks=config.framework_names,
            warnings=[str(w) for w in warnings],
        )

        if self._store is not None:
            self._store.record_usage(template.id)

        logger.debug(
            "workflow_compiled",
            template_id=template.id,
            filename=result.filename,
            warnings=len(warnings),
        )
        return result
