from __future__ import annotations


class WeaverError(Exception):
    """Root of the Weaver exception hierarchy.

    Everything Weaver raises on purpose derives from this class, so the CLI
    and embedding hosts can catch one type at their boundary and let genuine
    programming errors propagate.

    Attributes:
        message: Human-readable description that names the offending
            template id or workflow token where there is one.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
