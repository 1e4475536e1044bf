"""Dependency graph validation and execution ordering.

Workflows are nodes named by identity token (the first workflow type of a
configuration); a :class:`WorkflowDependency` adds the edges
``workflow -> depends_on``. Both traversals below use an explicit stack rather
than recursion, so arbitrarily deep chains do not hit the interpreter's
recursion limit.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from enum import Enum

from weaver.coordination.models import WorkflowConfiguration, WorkflowDependency
from weaver.exceptions import CyclicDependencyError, DanglingDependencyError
from weaver.logging import get_logger

__all__ = ["DependencyResolver", "dependency_map"]

logger = get_logger(__name__)


class _Color(Enum):
    WHITE = 0  # not visited
    GRAY = 1  # on the current path
    BLACK = 2  # finished


def dependency_map(dependencies: Sequence[WorkflowDependency]) -> dict[str, list[str]]:
    """Map each workflow token to its dependency tokens.

    Several declarations for the same workflow are merged; duplicates are
    dropped and first-seen order is kept.
    """
    merged: dict[str, dict[str, None]] = {}
    for dep in dependencies:
        targets = merged.setdefault(dep.workflow, {})
        for token in dep.depends_on:
            targets[token] = None
    return {workflow: list(targets) for workflow, targets in merged.items()}


def _index_edges(
    workflows: Sequence[WorkflowConfiguration],
    dependencies: Sequence[WorkflowDependency],
) -> list[list[int]]:
    # A token resolves to the first configuration providing it. A
    # configuration depending on one of its own types has no ordering edge.
    graph = dependency_map(dependencies)
    provider: dict[str, int] = {}
    for i, config in enumerate(workflows):
        for workflow_type in config.workflow_types:
            provider.setdefault(workflow_type.value, i)

    edges: list[list[int]] = []
    for i, config in enumerate(workflows):
        targets = [
            provider[t]
            for t in graph.get(config.identity, ())
            if t in provider and provider[t] != i
        ]
        edges.append(list(dict.fromkeys(targets)))
    return edges


class DependencyResolver:
    """Validates workflow dependency graphs and orders workflows.

    Example:
        ```python
        resolver = DependencyResolver()
        deps = [WorkflowDependency(workflow="release", depends_on=["ci"]),
                WorkflowDependency(workflow="ci")]
        order = resolver.resolve(configs, deps)  # indices into configs
        ```
    """

    def validate(self, dependencies: Sequence[WorkflowDependency]) -> None:
        """Check references, then check for cycles.

        Raises:
            DanglingDependencyError: A ``depends_on`` token is not declared
                as a ``workflow`` anywhere in ``dependencies``.
            CyclicDependencyError: The graph has a cycle.
        """
        self.check_references(dependencies)
        self.check_cycles(dependencies)

    def check_references(self, dependencies: Sequence[WorkflowDependency]) -> None:
        declared = {dep.workflow for dep in dependencies}
        for dep in dependencies:
            for token in dep.depends_on:
                if token not in declared:
                    raise DanglingDependencyError(token, dep.workflow)

    def check_cycles(self, dependencies: Sequence[WorkflowDependency]) -> None:
        """White/gray/black depth-first search.

        Raises:
            CyclicDependencyError: Naming the first gray node re-entered; it
                lies on the reported cycle.
        """
        graph = dependency_map(dependencies)
        color: dict[str, _Color] = {}

        for root in graph:
            if color.get(root, _Color.WHITE) is not _Color.WHITE:
                continue

            path: list[str] = [root]
            stack: list[Iterator[str]] = [iter(graph.get(root, ()))]
            color[root] = _Color.GRAY

            while stack:
                node = path[-1]
                child = next(stack[-1], None)
                if child is None:
                    color[node] = _Color.BLACK
                    path.pop()
                    stack.pop()
                    continue

                state = color.get(child, _Color.WHITE)
                if state is _Color.GRAY:
                    start = path.index(child)
                    cycle = (*path[start:], child)
                    logger.warning("dependency_cycle_detected", cycle=list(cycle))
                    raise CyclicDependencyError(child, cycle)
                if state is _Color.WHITE:
                    color[child] = _Color.GRAY
                    path.append(child)
                    stack.append(iter(graph.get(child, ())))

    def execution_order(
        self,
        workflows: Sequence[WorkflowConfiguration],
        dependencies: Sequence[WorkflowDependency],
    ) -> list[int]:
        """Topological order of ``workflows`` as indices.

        Post-order DFS in input order: a workflow is emitted right after
        everything it depends on. A dependency token resolves to the first
        configuration that lists it among its workflow types; tokens with no
        configuration are ignored. Workflows without edges keep their
        relative input order.

        Raises:
            CyclicDependencyError: If the configurations depend on each other
                in a cycle. A validated token graph can still produce one when
                a configuration carries several workflow types.
        """
        edges = _index_edges(workflows, dependencies)

        order: list[int] = []
        visited: set[int] = set()
        in_progress: set[int] = set()

        for root in range(len(workflows)):
            if root in visited:
                continue

            in_progress.add(root)
            stack: list[tuple[int, Iterator[int]]] = [(root, iter(edges[root]))]
            while stack:
                node, pending = stack[-1]
                child = next(pending, None)
                if child is None:
                    stack.pop()
                    in_progress.discard(node)
                    visited.add(node)
                    order.append(node)
                    continue
                if child in visited:
                    continue
                if child in in_progress:
                    raise CyclicDependencyError(workflows[child].identity)
                in_progress.add(child)
                stack.append((child, iter(edges[child])))

        return order

    def resolve(
        self,
        workflows: Sequence[WorkflowConfiguration],
        dependencies: Sequence[WorkflowDependency],
    ) -> list[int]:
        """Validate ``dependencies`` and return the execution order."""
        self.validate(dependencies)
        return self.execution_order(workflows, dependencies)

    def execution_levels(
        self,
        workflows: Sequence[WorkflowConfiguration],
        dependencies: Sequence[WorkflowDependency],
    ) -> list[list[int]]:
        """Group the execution order into levels.

        Every workflow only depends on workflows of earlier levels, so the
        members of one level can be compiled concurrently. Levels list
        indices in execution order.
        """
        edges = _index_edges(workflows, dependencies)
        order = self.execution_order(workflows, dependencies)
        position = {index: n for n, index in enumerate(order)}

        level_of: dict[int, int] = {}
        for index in order:
            level_of[index] = 1 + max((level_of[j] for j in edges[index]), default=-1)

        levels: list[list[int]] = [[] for _ in range(max(level_of.values(), default=-1) + 1)]
        for index in sorted(level_of, key=position.__getitem__):
            levels[level_of[index]].append(index)
        return levels
