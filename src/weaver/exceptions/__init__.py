"""Weaver exception hierarchy.

All exceptions can be imported from this package:
    from weaver.exceptions import TemplateNotFoundError, CyclicDependencyError
"""

from __future__ import annotations

from weaver.exceptions.base import WeaverError
from weaver.exceptions.config import ConfigError
from weaver.exceptions.coordination import (
    CoordinationError,
    CyclicDependencyError,
    DanglingDependencyError,
    WorkflowWriteError,
)
from weaver.exceptions.templates import (
    DuplicateTemplateError,
    ForbiddenTemplateError,
    TemplateError,
    TemplateNotFoundError,
    TemplateStorageError,
    TemplateValidationError,
)

__all__ = [
    # Base
    "WeaverError",
    # Configuration
    "ConfigError",
    # Coordination
    "CoordinationError",
    "CyclicDependencyError",
    "DanglingDependencyError",
    "WorkflowWriteError",
    # Templates
    "DuplicateTemplateError",
    "ForbiddenTemplateError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateStorageError",
    "TemplateValidationError",
]
