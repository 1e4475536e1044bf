"""Result objects returned by catalog loading, import and export."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

__all__ = [
    "ExportResult",
    "ImportResult",
    "ItemError",
    "LoadReport",
    "SkippedTemplate",
]


@dataclass(frozen=True, slots=True)
class SkippedTemplate:
    """A record file that could not be loaded.

    Attributes:
        file_path: The offending file.
        error_message: Human-readable reason.
        error_type: ``parse_error``, ``schema_error`` or ``io_error``.
    """

    file_path: Path
    error_message: str
    error_type: str


@dataclass(frozen=True, slots=True)
class LoadReport:
    """What :meth:`TemplateStore.load` found.

    Attributes:
        loaded: Number of templates registered per category value.
        warnings: Non-fatal problems (missing sources, duplicate ids).
        skipped: Record files that could not be parsed.
        locations_scanned: Source directories that were looked at.
        load_time_ms: Wall time spent loading.
    """

    loaded: dict[str, int]
    warnings: tuple[str, ...]
    skipped: tuple[SkippedTemplate, ...]
    locations_scanned: tuple[Path, ...]
    load_time_ms: float

    @property
    def total(self) -> int:
        return sum(self.loaded.values())


@dataclass(frozen=True, slots=True)
class ItemError:
    """A per-template failure inside a batch operation."""

    template_id: str
    error: str


@dataclass(slots=True)
class ImportResult:
    success: bool = False
    imported: list[str] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)
    skipped: list[ItemError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "imported": list(self.imported),
            "errors": [{"templateId": e.template_id, "error": e.error} for e in self.errors],
            "skipped": [
                {"templateId": s.template_id, "reason": s.error} for s in self.skipped
            ],
        }


@dataclass(slots=True)
class ExportResult:
    success: bool = False
    exported: list[str] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)
    destination: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "exported": list(self.exported),
            "errors": [{"templateId": e.template_id, "error": e.error} for e in self.errors],
            "destination": str(self.destination) if self.destination else None,
        }
