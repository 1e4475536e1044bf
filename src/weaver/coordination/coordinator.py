"""Multi-workflow generation.

The :class:`Coordinator` ties the pieces together for one batch request:

1. validate the dependency graph (a bad graph aborts before compiling);
2. order the requested workflows so dependencies come first;
3. select and compile templates per workflow, isolating per-template errors;
4. reapply saved customizations;
5. annotate every result with the batch's shared resources.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from weaver.coordination.compiler import WorkflowCompiler
from weaver.coordination.merger import CustomizationMerger
from weaver.coordination.models import (
    CompileContext,
    CoordinationSummary,
    MultiWorkflowConfiguration,
    MultiWorkflowResult,
    WorkflowConfiguration,
    WorkflowDependency,
    WorkflowGenerationResult,
)
from weaver.coordination.resolver import DependencyResolver, dependency_map
from weaver.coordination.selector import TemplateSelector
from weaver.exceptions import CoordinationError, WeaverError
from weaver.logging import get_logger
from weaver.templates.models import TemplateCustomization, utc_now
from weaver.templates.store import TemplateStore

__all__ = ["Coordinator"]

logger = get_logger(__name__)


class Coordinator:
    """Generates a set of interdependent workflows from the template catalog.

    Every collaborator is injected; omitted ones are built around ``store``.

    Args:
        store: Template catalog used for selection, usage counts and saved
            customizations.
        resolver: Dependency graph checks and ordering.
        selector: Template choice per workflow.
        compiler: Template compilation.
        merger: Customization reapplication.
        clock: Returns the generation timestamp (UTC now by default).

    Example:
        ```python
        store = TemplateStore(custom_dir=tmp_path)
        store.load()
        result = Coordinator(store).generate_multi_workflow(
            plan, input_path="README.md", output_directory=".github/workflows"
        )
        ```
    """

    def __init__(
        self,
        store: TemplateStore,
        resolver: DependencyResolver | None = None,
        selector: TemplateSelector | None = None,
        compiler: WorkflowCompiler | None = None,
        merger: CustomizationMerger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver or DependencyResolver()
        self._selector = selector or TemplateSelector(store)
        self._compiler = compiler or WorkflowCompiler(store)
        self._merger = merger or CustomizationMerger()
        self._clock = clock or utc_now

    def generate_multi_workflow(
        self,
        configuration: MultiWorkflowConfiguration,
        input_path: Path | str,
        output_directory: Path | str,
    ) -> MultiWorkflowResult:
        """Generate every workflow of ``configuration``.

        Returns:
            The aggregate result. ``success`` is False when the dependency
            graph is invalid (nothing is compiled) or when any template failed
            to compile (the other workflows are still returned).
        """
        coordination = configuration.coordination
        dependencies = coordination.dependencies
        log = logger.bind(
            workflows=len(configuration.workflows),
            dependencies=len(dependencies),
        )
        log.info("multi_workflow_started")

        try:
            self._resolver.validate(dependencies)
            order = self._resolver.execution_order(
                configuration.workflows, dependencies
            )
        except CoordinationError as e:
            log.warning("multi_workflow_rejected", error=e.message)
            return MultiWorkflowResult(success=False, errors=(e.message,))

        candidates = configuration.templates or self._store.ids()
        generated_at = self._clock()

        results: list[WorkflowGenerationResult] = []
        errors: list[str] = []
        warnings: list[str] = []

        for index in order:
            workflow = configuration.workflows[index]
            context = CompileContext(
                input_path=input_path,
                output_directory=output_directory,
                generated_at=generated_at,
                shared_variables=dict(coordination.shared_variables),
                workflow=workflow.identity,
            )
            compiled, failed = self._generate_one(workflow, candidates, context)
            if not compiled and not failed:
                types = ", ".join(t.value for t in workflow.workflow_types)
                warnings.append(f"No template found for workflow types: {types}")
            results.extend(compiled)
            errors.extend(failed)

        self._apply_customizations(results, configuration.customizations)
        self._attach_coordination(
            results,
            dependencies,
            coordination.shared_secrets,
            coordination.shared_variables,
        )
        warnings.extend(w for r in results for w in r.warnings)

        summary = CoordinationSummary(
            execution_order=tuple(configuration.workflows[i].identity for i in order),
            dependencies=tuple(dependencies),
            shared_resources=tuple(
                dict.fromkeys(
                    [*coordination.shared_secrets, *coordination.shared_variables]
                )
            ),
        )

        log.info(
            "multi_workflow_completed",
            generated=len(results),
            errors=len(errors),
            warnings=len(warnings),
        )
        return MultiWorkflowResult(
            success=not errors,
            workflows=tuple(results),
            errors=tuple(errors),
            warnings=tuple(warnings),
            coordination=summary,
        )

    def _generate_one(
        self,
        workflow: WorkflowConfiguration,
        candidates: Sequence[str],
        context: CompileContext,
    ) -> tuple[list[WorkflowGenerationResult], list[str]]:
        compiled: list[WorkflowGenerationResult] = []
        failed: list[str] = []

        for template_id in self._selector.select(workflow, candidates):
            try:
                template = self._store.get(template_id)
                compiled.append(self._compiler.compile(template, workflow, context))
            except WeaverError as e:
                logger.warning(
                    "workflow_generation_failed",
                    template_id=template_id,
                    workflow=workflow.identity,
                    error=e.message,
                )
                failed.append(
                    f"Failed to generate workflow from template {template_id}: {e.message}"
                )
        return compiled, failed

    def _apply_customizations(
        self,
        results: Sequence[WorkflowGenerationResult],
        requested: Sequence[TemplateCustomization],
    ) -> None:
        # Request customizations take precedence over stored ones.
        explicit = {c.template_id: c for c in requested}
        for result in results:
            customization = explicit.get(result.template_id)
            if customization is None:
                customization = self._store.get_customization(result.template_id)
            self._merger.apply(result, customization)

    @staticmethod
    def _attach_coordination(
        results: Sequence[WorkflowGenerationResult],
        dependencies: Sequence[WorkflowDependency],
        secrets: Sequence[str],
        variables: Mapping[str, Any],
    ) -> None:
        graph = dependency_map(dependencies)
        for result in results:
            result.shared_secrets = list(secrets)
            result.shared_variables = copy.deepcopy(dict(variables))
            result.dependencies = list(graph.get(result.workflow or "", ()))
