"""Data models for multi-workflow generation.

Request-side models (configurations, dependencies, coordination) are pydantic
models because they are read from plan files; they accept both snake_case and
camelCase keys. Result-side models are dataclasses: a
:class:`WorkflowGenerationResult` is created by the compiler and mutated by the
merger and coordinator, and the :class:`MultiWorkflowResult` aggregate is
frozen once returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from weaver.templates.models import TemplateCustomization, WorkflowType

__all__ = [
    # Request
    "ConflictResolution",
    "FrameworkSelection",
    "DeploymentTarget",
    "WorkflowConfiguration",
    "WorkflowDependency",
    "WorkflowCoordination",
    "MultiWorkflowConfiguration",
    "CompileContext",
    # Result
    "CompileWarning",
    "WorkflowGenerationResult",
    "CoordinationSummary",
    "MultiWorkflowResult",
]


#: How existing or colliding workflow files are handled when writing.
ConflictResolution = Literal["merge", "override", "prompt"]


class _Request(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Request models
# =============================================================================


class FrameworkSelection(_Request):
    """A framework detected in (or chosen for) the project."""

    name: str = Field(..., min_length=1)
    version: str | None = None
    enabled: bool = True
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class DeploymentTarget(_Request):
    """A platform the generated workflows deploy to.

    Attributes:
        platform: Platform identifier (e.g. "aws", "kubernetes", "pages").
        environment: Optional environment name.
        secrets: Secret names the target needs at deploy time.
    """

    platform: str = Field(..., min_length=1)
    environment: str | None = None
    secrets: list[str] = Field(default_factory=list)


class WorkflowConfiguration(_Request):
    """One requested workflow.

    The first entry of ``workflow_types`` is the workflow's identity token,
    the name dependency declarations refer to it by.
    """

    workflow_types: list[WorkflowType] = Field(..., min_length=1)
    frameworks: list[FrameworkSelection] = Field(default_factory=list)
    deployment_targets: list[DeploymentTarget] = Field(default_factory=list)
    security_level: Literal["basic", "standard", "strict"] = "standard"
    optimization_level: Literal["basic", "standard", "aggressive"] = "standard"
    include_comments: bool = True
    custom_steps: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def identity(self) -> str:
        return self.workflow_types[0].value

    @property
    def framework_names(self) -> list[str]:
        """Names of the enabled frameworks, in order."""
        return [f.name for f in self.frameworks if f.enabled]

    def provides(self, token: str) -> bool:
        """Whether this configuration answers to a dependency token."""
        return any(t.value == token for t in self.workflow_types)


class WorkflowDependency(_Request):
    """``workflow`` must be generated after every entry of ``depends_on``."""

    workflow: str = Field(..., min_length=1)
    depends_on: list[str] = Field(default_factory=list)
    condition: str | None = None
    timeout: int | None = Field(default=None, gt=0)


class WorkflowCoordination(_Request):
    """Cross-workflow settings shared by one generation batch."""

    dependencies: list[WorkflowDependency] = Field(default_factory=list)
    execution_order: list[str] = Field(default_factory=list)
    shared_secrets: list[str] = Field(default_factory=list)
    shared_variables: dict[str, Any] = Field(default_factory=dict)
    conflict_resolution: ConflictResolution = "merge"


class MultiWorkflowConfiguration(_Request):
    """Everything :meth:`Coordinator.generate_multi_workflow` needs.

    Attributes:
        workflows: Requested workflows, in caller order.
        coordination: Dependencies and shared resources.
        templates: Candidate template ids. Empty means the whole catalog.
        customizations: Per-request customizations; they take precedence
            over stored ones for the same template.
    """

    workflows: list[WorkflowConfiguration] = Field(default_factory=list)
    coordination: WorkflowCoordination = Field(default_factory=WorkflowCoordination)
    templates: list[str] = Field(default_factory=list)
    customizations: list[TemplateCustomization] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CompileContext:
    """Per-call inputs for :meth:`WorkflowCompiler.compile`.

    Attributes:
        input_path: Project description the workflows are generated for.
        output_directory: Where generated files will be written.
        generated_at: Timestamp recorded in the header and variables.
        shared_variables: Batch-wide variables (lowest precedence).
        workflow: Identity token of the workflow being compiled.
    """

    input_path: Path | str
    output_directory: Path | str
    generated_at: datetime
    shared_variables: dict[str, Any] = field(default_factory=dict)
    workflow: str | None = None


# =============================================================================
# Result models
# =============================================================================


@dataclass(frozen=True, slots=True)
class CompileWarning:
    """A non-fatal compile finding, attached to a result rather than raised."""

    template_id: str
    message: str

    def __str__(self) -> str:
        return f"{self.template_id}: {self.message}"


@dataclass(slots=True)
class WorkflowGenerationResult:
    """One generated workflow file."""

    template_id: str
    filename: str
    content: str
    type: WorkflowType
    workflow: str | None = None
    frameworks: list[str] = field(default_factory=list)
    customized: bool = False
    warnings: list[str] = field(default_factory=list)
    shared_secrets: list[str] = field(default_factory=list)
    shared_variables: dict[str, Any] = field(default_factory=dict)
    dependencies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "templateId": self.template_id,
            "workflow": self.workflow,
            "filename": self.filename,
            "content": self.content,
            "type": self.type.value,
            "frameworks": list(self.frameworks),
            "customized": self.customized,
            "warnings": list(self.warnings),
            "sharedSecrets": list(self.shared_secrets),
            "sharedVariables": dict(self.shared_variables),
            "dependencies": list(self.dependencies),
        }


@dataclass(frozen=True, slots=True)
class CoordinationSummary:
    """Batch-level coordination facts reported with the results.

    Attributes:
        execution_order: Identity tokens in the order workflows were compiled.
        dependencies: The dependency declarations of the request.
        shared_resources: Shared secret names followed by shared variable keys.
    """

    execution_order: tuple[str, ...] = ()
    dependencies: tuple[WorkflowDependency, ...] = ()
    shared_resources: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MultiWorkflowResult:
    """Aggregate outcome of one multi-workflow generation.

    ``success`` is False as soon as any workflow failed, but the workflows
    that did compile are still returned.
    """

    success: bool
    workflows: tuple[WorkflowGenerationResult, ...] = ()
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    coordination: CoordinationSummary = field(default_factory=CoordinationSummary)

    @property
    def partial(self) -> bool:
        return not self.success and bool(self.workflows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "workflows": [w.to_dict() for w in self.workflows],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "coordination": {
                "executionOrder": list(self.coordination.execution_order),
                "dependencies": [
                    d.model_dump(mode="json", by_alias=True, exclude_none=True)
                    for d in self.coordination.dependencies
                ],
                "sharedResources": list(self.coordination.shared_resources),
            },
        }
