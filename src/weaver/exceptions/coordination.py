from __future__ import annotations

from pathlib import Path

from weaver.exceptions.base import WeaverError


class CoordinationError(WeaverError):
    """Base exception for malformed multi-workflow requests.

    These are raised before any template is compiled.
    """


class DanglingDependencyError(CoordinationError):
    """A ``depends_on`` token names a workflow that is not declared.

    Attributes:
        token: The undeclared workflow token.
        workflow: The workflow whose dependency list referenced it.
    """

    def __init__(self, token: str, workflow: str | None = None) -> None:
        self.token = token
        self.workflow = workflow
        message = f"Workflow dependency not found: {token}"
        if workflow:
            message += f" (required by '{workflow}')"
        super().__init__(message)


class CyclicDependencyError(CoordinationError):
    """The dependency graph contains a cycle.

    Attributes:
        node: A workflow token that lies on the cycle.
        cycle: The cycle path, starting and ending at ``node``.
    """

    def __init__(self, node: str, cycle: tuple[str, ...] = ()) -> None:
        self.node = node
        self.cycle = cycle
        message = f"Circular dependency detected involving workflow: {node}"
        if cycle:
            message += f" ({' -> '.join(cycle)})"
        super().__init__(message)


class WorkflowWriteError(WeaverError):
    """A generated workflow file could not be written.

    Attributes:
        path: Destination of the failed write.
    """

    def __init__(self, message: str, path: Path) -> None:
        self.path = path
        super().__init__(message)
