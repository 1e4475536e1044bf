"""Planning helpers: default dependencies and shared secrets for a batch.

These fill in the coordination block of a :class:`MultiWorkflowConfiguration`
when the caller only lists the workflows it wants.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from typing import Any

from weaver.coordination.models import (
    WorkflowConfiguration,
    WorkflowCoordination,
    WorkflowDependency,
)

__all__ = [
    "DEFAULT_EDGES",
    "FRAMEWORK_SECRETS",
    "build_coordination",
    "derive_dependencies",
    "required_secrets",
    "shared_secrets",
]

#: workflow -> (depends on, condition)
DEFAULT_EDGES: dict[str, tuple[str, str | None]] = {
    "cd": ("ci", "success"),
    "security": ("ci", None),
    "release": ("cd", None),
}

FRAMEWORK_SECRETS: dict[str, tuple[str, ...]] = {
    "docker": ("DOCKER_USERNAME", "DOCKER_PASSWORD"),
    "aws": ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"),
}


def derive_dependencies(configs: Sequence[WorkflowConfiguration]) -> list[WorkflowDependency]:
    """Default ordering between the requested workflows.

    Continuous delivery and security scans run after CI; releases run after
    continuous delivery. An edge is only emitted when both ends are requested.
    Every requested workflow gets an entry (possibly with no dependencies) so
    the result always passes reference validation.
    """
    identities = list(dict.fromkeys(c.identity for c in configs))
    dependencies = []
    for identity in identities:
        depends_on: list[str] = []
        condition = None
        edge = DEFAULT_EDGES.get(identity)
        if edge is not None and edge[0] in identities:
            depends_on = [edge[0]]
            condition = edge[1]
        dependencies.append(
            WorkflowDependency(workflow=identity, depends_on=depends_on, condition=condition)
        )
    return dependencies


def required_secrets(config: WorkflowConfiguration) -> list[str]:
    """Secrets one workflow needs, de-duplicated in first-seen order."""
    secrets: list[str] = []
    for target in config.deployment_targets:
        secrets.extend(target.secrets)
    for name in config.framework_names:
        secrets.extend(FRAMEWORK_SECRETS.get(name, ()))
    return list(dict.fromkeys(secrets))


def shared_secrets(configs: Sequence[WorkflowConfiguration]) -> list[str]:
    """Secrets required by more than one workflow, in first-seen order."""
    counts: Counter[str] = Counter()
    for config in configs:
        counts.update(required_secrets(config))
    return [secret for secret, count in counts.items() if count > 1]


def build_coordination(
    configs: Sequence[WorkflowConfiguration],
    shared_variables: Mapping[str, Any] | None = None,
    dependencies: Sequence[WorkflowDependency] | None = None,
) -> WorkflowCoordination:
    """Assemble a coordination block, deriving dependencies unless given."""
    deps = list(dependencies) if dependencies is not None else derive_dependencies(configs)
    return WorkflowCoordination(
        dependencies=deps,
        shared_secrets=shared_secrets(configs),
        shared_variables=dict(shared_variables or {}),
        conflict_resolution="merge",
    )
