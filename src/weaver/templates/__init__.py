"""Template catalog.

Templates are loaded from three kinds of source, in this order:
1. Built-in: packaged with Weaver (read-only)
2. Custom: ~/.config/weaver/templates/ (read-write)
3. Organization: a configured directory, also the import target (read-only)

An id registered by an earlier source is never replaced by a later one.
"""

from __future__ import annotations

from weaver.templates.extraction import (
    extract_dependencies,
    extract_variables,
    slugify,
)
from weaver.templates.locator import TemplateLocator
from weaver.templates.models import (
    CATEGORY_POLICIES,
    CategoryPolicy,
    Template,
    TemplateCategory,
    TemplateCustomization,
    TemplateExample,
    TemplateFilter,
    TemplateMetadata,
    TemplateVariable,
    VariableValidation,
    WorkflowType,
)
from weaver.templates.results import (
    ExportResult,
    ImportResult,
    ItemError,
    LoadReport,
    SkippedTemplate,
)
from weaver.templates.store import BUNDLE_VERSION, TemplateStore, builtin_templates_path
from weaver.templates.validation import ValidationResult, validate_template

__all__ = [
    # Enums
    "TemplateCategory",
    "WorkflowType",
    # Models
    "CATEGORY_POLICIES",
    "CategoryPolicy",
    "Template",
    "TemplateCustomization",
    "TemplateExample",
    "TemplateFilter",
    "TemplateMetadata",
    "TemplateVariable",
    "VariableValidation",
    # Results
    "ExportResult",
    "ImportResult",
    "ItemError",
    "LoadReport",
    "SkippedTemplate",
    "ValidationResult",
    # Services
    "BUNDLE_VERSION",
    "TemplateLocator",
    "TemplateStore",
    "builtin_templates_path",
    # Helpers
    "extract_dependencies",
    "extract_variables",
    "slugify",
    "validate_template",
]
