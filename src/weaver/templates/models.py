"""Data models for the template catalog.

Template records are pydantic models because they cross a serialization
boundary: every template is stored as one JSON document and bundles are
exchanged between teams. Field names are snake_case in Python and camelCase on
disk (``defaultValue``, ``preserveOnUpdate``), so records written by other
tooling load unchanged.

Category behavior (ordering, mutability, export) is a lookup table keyed on
:class:`TemplateCategory` rather than a class hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

__all__ = [
    # Enums
    "TemplateCategory",
    "WorkflowType",
    # Category table
    "CategoryPolicy",
    "CATEGORY_POLICIES",
    "TEMPLATE_ID_PATTERN",
    # Records
    "VariableValidation",
    "TemplateVariable",
    "TemplateExample",
    "TemplateMetadata",
    "Template",
    "TemplateCustomization",
    # Queries
    "TemplateFilter",
    "utc_now",
]


def utc_now() -> datetime:
    """Timezone-aware current time used for every catalog timestamp."""
    return datetime.now(UTC)


# =============================================================================
# Enums
# =============================================================================


class WorkflowType(str, Enum):
    """Kind of workflow a template produces."""

    CI = "ci"
    CD = "cd"
    RELEASE = "release"
    SECURITY = "security"
    PERFORMANCE = "performance"
    MAINTENANCE = "maintenance"


class TemplateCategory(str, Enum):
    """Where a template came from.

    Values:
        BUILTIN: Shipped with Weaver (read-only).
        ORGANIZATION: Shared by an organization, imported from a bundle
            (read-only).
        CUSTOM: Authored locally through the API (read-write).
    """

    BUILTIN = "built-in"
    ORGANIZATION = "organization"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class CategoryPolicy:
    """Per-category behavior.

    Attributes:
        rank: Sort position in catalog listings (lower first).
        writable: Whether update/delete are allowed through the store API.
        exportable: Whether the template may be written to an export bundle.
    """

    rank: int
    writable: bool
    exportable: bool


CATEGORY_POLICIES: dict[TemplateCategory, CategoryPolicy] = {
    TemplateCategory.BUILTIN: CategoryPolicy(rank=0, writable=False, exportable=False),
    TemplateCategory.ORGANIZATION: CategoryPolicy(
        rank=1, writable=False, exportable=True
    ),
    TemplateCategory.CUSTOM: CategoryPolicy(rank=2, writable=True, exportable=True),
}

#: Ids name the record file (``<id>.json``); no separators, no leading dot.
TEMPLATE_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"


# =============================================================================
# Records
# =============================================================================


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape used on disk."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VariableValidation(_Record):
    """Optional constraints attached to a template variable."""

    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    min: float | None = None
    max: float | None = None
    enum: list[Any] | None = None


class TemplateVariable(_Record):
    """A ``{{name}}`` placeholder declared by a template."""

    name: str
    description: str = ""
    type: Literal["string", "boolean", "number", "array", "object"] = "string"
    required: bool = False
    default_value: Any = None
    validation: VariableValidation | None = None


class TemplateExample(_Record):
    name: str
    description: str = ""
    configuration: dict[str, Any] = Field(default_factory=dict)
    expected_output: str = ""


class TemplateMetadata(_Record):
    """Bookkeeping for a template.

    ``usage`` drives template ranking; it counts successful compiles.
    """

    created: datetime = Field(default_factory=utc_now)
    modified: datetime = Field(default_factory=utc_now)
    usage: int = Field(default=0, ge=0)
    rating: float | None = None
    compatibility: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    examples: list[TemplateExample] = Field(default_factory=list)


class Template(_Record):
    """A reusable workflow body with declared variables.

    Validation Rules:
        - ``id`` is unique across the whole catalog, whatever the category.
        - ``id`` is also the record's file name, so it is limited to
          letters, digits, ``.``, ``_`` and ``-`` and starts with a letter
          or digit.
        - ``tags``, ``frameworks`` and ``dependencies`` hold no duplicates;
          first-seen order is kept.
    """

    id: str = Field(..., min_length=1, pattern=TEMPLATE_ID_PATTERN)
    name: str = Field(..., min_length=1)
    description: str = ""
    type: WorkflowType
    category: TemplateCategory = TemplateCategory.CUSTOM
    version: str = "1.0.0"
    author: str | None = None
    tags: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    content: str
    variables: list[TemplateVariable] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    metadata: TemplateMetadata = Field(default_factory=TemplateMetadata)

    @field_validator("tags", "frameworks", "dependencies")
    @classmethod
    def dedupe(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @property
    def policy(self) -> CategoryPolicy:
        return CATEGORY_POLICIES[self.category]

    @property
    def usage(self) -> int:
        return self.metadata.usage


class TemplateCustomization(_Record):
    """Saved overrides for one template, reapplied on every regeneration.

    Only keys listed in ``preserve_on_update`` are applied when a workflow is
    regenerated; the rest must be migrated explicitly.
    """

    template_id: str = Field(..., min_length=1)
    customizations: dict[str, Any] = Field(default_factory=dict)
    preserve_on_update: list[str] = Field(default_factory=list)
    last_modified: datetime = Field(default_factory=utc_now)


# =============================================================================
# Queries
# =============================================================================


@dataclass(frozen=True, slots=True)
class TemplateFilter:
    """Catalog query. Unset fields match everything.

    ``frameworks`` and ``tags`` match when the template shares at least one
    entry with the filter.
    """

    type: WorkflowType | None = None
    category: TemplateCategory | None = None
    frameworks: tuple[str, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)

    def matches(self, template: Template) -> bool:
        if self.type is not None and template.type != self.type:
            return False
        if self.category is not None and template.category != self.category:
            return False
        if self.frameworks and not set(self.frameworks) & set(template.frameworks):
            return False
        if self.tags and not set(self.tags) & set(template.tags):
            return False
        return True
