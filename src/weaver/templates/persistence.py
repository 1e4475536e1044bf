"""File-backed persistence for template records and customizations.

Each template is one ``<id>.json`` file in the directory of its category;
customizations are a single JSON list stored beside the custom templates.
Writes go through ``atomicwrites`` so a crash never leaves a half-written
record behind.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from atomicwrites import atomic_write  # type: ignore[import-untyped]
from pydantic import ValidationError

from weaver.exceptions import TemplateStorageError
from weaver.templates.locator import CUSTOMIZATIONS_FILENAME
from weaver.templates.models import Template, TemplateCustomization

__all__ = [
    "RECORD_ERRORS",
    "read_customizations",
    "read_template",
    "remove_template",
    "template_path",
    "write_customizations",
    "write_json",
    "write_template",
]


def template_path(directory: Path, template_id: str) -> Path:
    return directory / f"{template_id}.json"


def write_json(path: Path, data: Any, *, template_id: str | None = None) -> None:
    """Atomically write ``data`` as indented JSON, creating parent dirs.

    Raises:
        TemplateStorageError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with atomic_write(str(path), mode="w", encoding="utf-8", overwrite=True) as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise TemplateStorageError(
            f"Failed to write {path}: {e}", path, "write", template_id
        ) from e


def read_template(path: Path) -> Template:
    """Parse one template record.

    Raises:
        OSError: The file could not be read.
        json.JSONDecodeError: The file is not JSON.
        pydantic.ValidationError: The JSON is not a template record.
    """
    return Template.model_validate(json.loads(path.read_text(encoding="utf-8")))


def write_template(directory: Path, template: Template) -> Path:
    path = template_path(directory, template.id)
    write_json(path, template.to_record(), template_id=template.id)
    return path


def remove_template(directory: Path, template_id: str) -> None:
    """Delete a persisted record. A record that is already gone is fine."""
    path = template_path(directory, template_id)
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise TemplateStorageError(
            f"Failed to delete {path}: {e}", path, "delete", template_id
        ) from e


def read_customizations(directory: Path) -> list[TemplateCustomization]:
    """Load the customizations list; a missing file means none.

    Raises:
        OSError, json.JSONDecodeError, pydantic.ValidationError: The file
            exists but is unreadable or malformed.
    """
    path = directory / CUSTOMIZATIONS_FILENAME
    if not path.exists():
        return []
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON list")
    return [TemplateCustomization.model_validate(item) for item in raw]


def write_customizations(
    directory: Path, customizations: Iterable[TemplateCustomization]
) -> None:
    write_json(
        directory / CUSTOMIZATIONS_FILENAME,
        [c.to_record() for c in customizations],
    )


# Exceptions a malformed or unreadable record can raise while loading.
RECORD_ERRORS: tuple[type[Exception], ...] = (
    OSError,
    UnicodeDecodeError,
    json.JSONDecodeError,
    ValidationError,
    ValueError,
)
