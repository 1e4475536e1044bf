from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from weaver.exceptions.base import WeaverError


class TemplateError(WeaverError):
    """Base exception for template catalog errors.

    Attributes:
        message: Human-readable error message.
        template_id: Id of the template involved, if known.
    """

    def __init__(self, message: str, template_id: str | None = None) -> None:
        self.template_id = template_id
        super().__init__(message)


class TemplateNotFoundError(TemplateError):
    """Raised when a template id is not in the catalog."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template {template_id} not found", template_id)


class ForbiddenTemplateError(TemplateError):
    """Raised when a read-only template is updated or deleted.

    Built-in and organization templates are read-only at runtime.

    Attributes:
        category: Category value of the protected template.
        operation: The rejected operation ("update", "delete", ...).
    """

    def __init__(self, template_id: str, category: str, operation: str) -> None:
        self.category = category
        self.operation = operation
        super().__init__(
            f"Cannot {operation} {category} template '{template_id}'",
            template_id,
        )


class DuplicateTemplateError(TemplateError):
    """Raised when creating a template whose derived id is already taken."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template '{template_id}' already exists", template_id)


class TemplateValidationError(TemplateError):
    """Raised when a template record fails structural validation.

    Attributes:
        errors: Every validation error found, in check order.
    """

    def __init__(self, template_id: str | None, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        label = f"'{template_id}'" if template_id else "(unnamed)"
        super().__init__(
            f"Template {label} failed validation: {'; '.join(self.errors)}",
            template_id,
        )


class TemplateStorageError(TemplateError):
    """Raised when a template record cannot be written or removed.

    Attributes:
        path: File the operation targeted.
        operation: "write", "delete" or "read".
    """

    def __init__(
        self,
        message: str,
        path: Path,
        operation: str,
        template_id: str | None = None,
    ) -> None:
        self.path = path
        self.operation = operation
        super().__init__(message, template_id)
