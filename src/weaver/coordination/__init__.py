"""Multi-workflow coordination.

Turns a :class:`MultiWorkflowConfiguration` into a set of workflow files whose
generation order respects the declared dependencies.
"""

from __future__ import annotations

from weaver.coordination.compiler import (
    WorkflowCompiler,
    build_filename,
    build_header,
    stringify,
    substitute_variables,
)
from weaver.coordination.coordinator import Coordinator
from weaver.coordination.merger import CustomizationMerger
from weaver.coordination.models import (
    CompileContext,
    CompileWarning,
    ConflictResolution,
    CoordinationSummary,
    DeploymentTarget,
    FrameworkSelection,
    MultiWorkflowConfiguration,
    MultiWorkflowResult,
    WorkflowConfiguration,
    WorkflowCoordination,
    WorkflowDependency,
    WorkflowGenerationResult,
)
from weaver.coordination.planning import (
    build_coordination,
    derive_dependencies,
    required_secrets,
    shared_secrets,
)
from weaver.coordination.resolver import DependencyResolver, dependency_map
from weaver.coordination.selector import TemplateSelector
from weaver.coordination.writer import write_workflow_files

__all__ = [
    # Request models
    "ConflictResolution",
    "DeploymentTarget",
    "FrameworkSelection",
    "MultiWorkflowConfiguration",
    "WorkflowConfiguration",
    "WorkflowCoordination",
    "WorkflowDependency",
    "CompileContext",
    # Result models
    "CompileWarning",
    "CoordinationSummary",
    "MultiWorkflowResult",
    "WorkflowGenerationResult",
    # Services
    "Coordinator",
    "CustomizationMerger",
    "DependencyResolver",
    "TemplateSelector",
    "WorkflowCompiler",
    # Helpers
    "build_coordination",
    "build_filename",
    "build_header",
    "dependency_map",
    "derive_dependencies",
    "required_secrets",
    "shared_secrets",
    "stringify",
    "substitute_variables",
    "write_workflow_files",
]
