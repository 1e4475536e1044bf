"""In-memory template catalog backed by category-scoped JSON directories.

The store is the only owner of catalog entries and customization records.
Reads hand out deep copies; writes are serialized through a single-writer,
multiple-reader lock, so a reader never observes a half-updated template.

Load order is BUILTIN, then CUSTOM, then ORGANIZATION. Unlike workflow
overrides, a later source never replaces an earlier one: the first template
registered under an id wins and the collision is reported.
"""

from __future__ import annotations

import json
import time
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from weaver.config import TemplateSourcesConfig, get_user_templates_path
from weaver.exceptions import (
    DuplicateTemplateError,
    ForbiddenTemplateError,
    TemplateNotFoundError,
    TemplateStorageError,
    TemplateValidationError,
)
from weaver.logging import get_logger
from weaver.templates import persistence
from weaver.templates.extraction import (
    extract_dependencies,
    extract_variables,
    slugify,
)
from weaver.templates.locator import TemplateLocator
from weaver.templates.models import (
    CATEGORY_POLICIES,
    Template,
    TemplateCategory,
    TemplateCustomization,
    TemplateFilter,
    TemplateVariable,
    WorkflowType,
    utc_now,
)
from weaver.templates.results import (
    ExportResult,
    ImportResult,
    ItemError,
    LoadReport,
    SkippedTemplate,
)
from weaver.templates.validation import validate_template
from weaver.utils.locking import ReadWriteLock

__all__ = [
    "BUNDLE_VERSION",
    "TemplateStore",
    "builtin_templates_path",
]

logger = get_logger(__name__)

BUNDLE_VERSION = "1.0.0"

# Fields callers may change through update(); the rest are owned by the store.
_IMMUTABLE_FIELDS = frozenset({"id", "category", "metadata"})


def builtin_templates_path() -> Path:
    """Directory of the template records packaged with Weaver."""
    from importlib.resources import files

    return Path(str(files("weaver.library") / "templates"))


def _classify_error(error: Exception) -> str:
    if isinstance(error, (json.JSONDecodeError, UnicodeDecodeError)):
        return "parse_error"
    if isinstance(error, (ValidationError, ValueError)):
        return "schema_error"
    return "io_error"


class TemplateStore:
    """Catalog of built-in, organization and custom templates.

    Example:
        ```python
        store = TemplateStore(custom_dir=Path("~/.config/weaver/templates"))
        report = store.load()
        for template in store.list(TemplateFilter(type=WorkflowType.CI)):
            print(template.id, template.usage)
        ```
    """

    def __init__(
        self,
        *,
        builtin_dir: Path | None = None,
        custom_dir: Path | None = None,
        organization_dir: Path | None = None,
        include_builtin: bool = True,
        locator: TemplateLocator | None = None,
    ) -> None:
        """Initialize an empty store; call :meth:`load` to populate it.

        Args:
            builtin_dir: Built-in records (defaults to the packaged library).
            custom_dir: Custom records and ``customizations.json``.
            organization_dir: Organization records, also the import target.
            include_builtin: Skip built-in records entirely when False.
            locator: Custom locator implementation (uses default if None).
        """
        self._builtin_dir = builtin_dir
        self._custom_dir = custom_dir or get_user_templates_path()
        self._organization_dir = organization_dir
        self._include_builtin = include_builtin
        self._locator = locator or TemplateLocator()

        self._lock = ReadWriteLock()
        self._templates: dict[str, Template] = {}
        self._origins: dict[str, Path] = {}
        self._customizations: dict[str, TemplateCustomization] = {}

    @classmethod
    def from_config(cls, config: TemplateSourcesConfig) -> TemplateStore:
        return cls(
            builtin_dir=config.builtin_dir,
            custom_dir=config.custom_dir,
            organization_dir=config.organization_dir,
            include_builtin=config.include_builtin,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def custom_dir(self) -> Path:
        return self._custom_dir

    @property
    def organization_dir(self) -> Path | None:
        return self._organization_dir

    def _directory_for(self, category: TemplateCategory) -> Path | None:
        if category is TemplateCategory.BUILTIN:
            return self._builtin_dir or builtin_templates_path()
        if category is TemplateCategory.ORGANIZATION:
            return self._organization_dir
        return self._custom_dir

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> LoadReport:
        """(Re)load every source and the customizations file.

        Never raises for missing or unreadable sources; everything that was
        skipped is described in the returned report.
        """
        start = time.perf_counter()

        sources: list[tuple[TemplateCategory, Path]] = []
        if self._include_builtin:
            sources.append(
                (TemplateCategory.BUILTIN, self._builtin_dir or builtin_templates_path())
            )
        sources.append((TemplateCategory.CUSTOM, self._custom_dir))
        if self._organization_dir is not None:
            sources.append((TemplateCategory.ORGANIZATION, self._organization_dir))

        templates: dict[str, Template] = {}
        origins: dict[str, Path] = {}
        loaded = {category.value: 0 for category in TemplateCategory}
        warnings: list[str] = []
        skipped: list[SkippedTemplate] = []

        for category, directory in sources:
            if not directory.is_dir():
                warnings.append(
                    f"Template source {directory} ({category.value}) is not available"
                )

            for path in self._locator.scan(directory):
                try:
                    template = persistence.read_template(path)
                except persistence.RECORD_ERRORS as e:
                    logger.warning("template_record_skipped", path=str(path), error=str(e))
                    skipped.append(
                        SkippedTemplate(
                            file_path=path,
                            error_message=str(e),
                            error_type=_classify_error(e),
                        )
                    )
                    continue

                template.category = category
                if template.id in templates:
                    message = (
                        f"Duplicate template id '{template.id}' in {path} ignored; "
                        f"keeping {origins[template.id]}"
                    )
                    logger.warning(
                        "duplicate_template_skipped",
                        template_id=template.id,
                        kept=str(origins[template.id]),
                        ignored=str(path),
                    )
                    warnings.append(message)
                    continue

                templates[template.id] = template
                origins[template.id] = path
                loaded[category.value] += 1

        customizations: dict[str, TemplateCustomization] = {}
        try:
            for customization in persistence.read_customizations(self._custom_dir):
                customizations[customization.template_id] = customization
        except persistence.RECORD_ERRORS as e:
            logger.warning("customizations_unreadable", error=str(e))
            warnings.append(f"Could not load customizations: {e}")

        with self._lock.write():
            self._templates = templates
            self._origins = origins
            self._customizations = customizations

        report = LoadReport(
            loaded=loaded,
            warnings=tuple(warnings),
            skipped=tuple(skipped),
            locations_scanned=tuple(directory for _, directory in sources),
            load_time_ms=(time.perf_counter() - start) * 1000,
        )
        logger.info(
            "template_catalog_loaded",
            total=report.total,
            skipped=len(skipped),
            warnings=len(warnings),
        )
        return report

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, filter: TemplateFilter | None = None) -> list[Template]:
        """Templates matching ``filter``, in catalog display order.

        Order: category rank (built-in, organization, custom), then usage
        (highest first), then name, then id.
        """
        with self._lock.read():
            matches = [
                t.model_copy(deep=True)
                for t in self._templates.values()
                if filter is None or filter.matches(t)
            ]

        matches.sort(
            key=lambda t: (
                CATEGORY_POLICIES[t.category].rank,
                -t.metadata.usage,
                t.name.casefold(),
                t.id,
            )
        )
        return matches

    def get(self, template_id: str) -> Template:
        """Return a copy of one template.

        Raises:
            TemplateNotFoundError: No template has this id.
        """
        with self._lock.read():
            template = self._templates.get(template_id)
            if template is None:
                raise TemplateNotFoundError(template_id)
            return template.model_copy(deep=True)

    def has(self, template_id: str) -> bool:
        with self._lock.read():
            return template_id in self._templates

    def ids(self) -> list[str]:
        """Template ids in registration order."""
        with self._lock.read():
            return list(self._templates)

    def usage(self, template_id: str) -> int:
        with self._lock.read():
            template = self._templates.get(template_id)
            if template is None:
                raise TemplateNotFoundError(template_id)
            return template.metadata.usage

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return isinstance(template_id, str) and self.has(template_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        content: str,
        type: WorkflowType | str,
        *,
        description: str = "",
        frameworks: Sequence[str] = (),
        tags: Sequence[str] = (),
        variables: Sequence[TemplateVariable] | None = None,
        version: str = "1.0.0",
        author: str | None = None,
    ) -> Template:
        """Author a new custom template.

        The id is derived from ``name``; variables default to the
        placeholders found in ``content``.

        Raises:
            TemplateValidationError: The name yields no id, or the template
                fails structural validation.
            DuplicateTemplateError: The derived id is already in the catalog.
            TemplateStorageError: The record could not be written.
        """
        template_id = slugify(name)
        if not template_id:
            raise TemplateValidationError(
                None, [f"Template name {name!r} does not produce a valid id"]
            )

        now = utc_now()
        template = Template(
            id=template_id,
            name=name,
            description=description,
            type=WorkflowType(type),
            category=TemplateCategory.CUSTOM,
            version=version,
            author=author,
            tags=list(tags),
            frameworks=list(frameworks),
            content=content,
            variables=list(variables) if variables is not None else extract_variables(content),
            dependencies=extract_dependencies(content),
        )
        template.metadata.created = now
        template.metadata.modified = now

        validation = validate_template(template)
        validation.raise_for_errors(template_id)
        for warning in validation.warnings:
            logger.warning("template_validation_warning", template_id=template_id, warning=warning)

        with self._lock.write():
            if template_id in self._templates:
                raise DuplicateTemplateError(template_id)
            path = persistence.write_template(self._custom_dir, template)
            self._templates[template_id] = template
            self._origins[template_id] = path

        logger.info("template_created", template_id=template_id, type=template.type.value)
        return template.model_copy(deep=True)

    def update(self, template_id: str, **fields: Any) -> Template:
        """Change fields of a custom template.

        New ``content`` re-derives the action dependencies and, unless
        ``variables`` is passed too, the variables: declarations of
        placeholders that remain are kept, new placeholders are added and
        unused ones dropped.

        Raises:
            TemplateNotFoundError: No template has this id.
            ForbiddenTemplateError: The template is built-in or organization.
            ValueError: ``id``, ``category`` or ``metadata`` was passed.
            pydantic.ValidationError: A field value has the wrong shape.
            TemplateValidationError: The updated template fails structural
                validation; nothing is changed.
            TemplateStorageError: The record could not be written.
        """
        blocked = _IMMUTABLE_FIELDS & fields.keys()
        if blocked:
            raise ValueError(f"Cannot update template fields: {', '.join(sorted(blocked))}")
        unknown = fields.keys() - Template.model_fields.keys()
        if unknown:
            raise ValueError(f"Unknown template fields: {', '.join(sorted(unknown))}")

        with self._lock.write():
            current = self._templates.get(template_id)
            if current is None:
                raise TemplateNotFoundError(template_id)
            self._ensure_writable(current, "update")

            data = current.model_dump()
            data.update(fields)
            if isinstance(fields.get("content"), str):
                data["dependencies"] = extract_dependencies(fields["content"])
                if "variables" not in fields:
                    # Keep declarations for placeholders that are still used.
                    declared = {v["name"]: v for v in data["variables"]}
                    data["variables"] = [
                        declared.get(v.name, v) for v in extract_variables(fields["content"])
                    ]
            data["metadata"]["modified"] = utc_now()
            updated = Template.model_validate(data)

            validation = validate_template(updated)
            validation.raise_for_errors(template_id)
            for warning in validation.warnings:
                logger.warning(
                    "template_validation_warning", template_id=template_id, warning=warning
                )

            path = persistence.write_template(self._custom_dir, updated)
            self._templates[template_id] = updated
            self._origins[template_id] = path

        logger.info("template_updated", template_id=template_id, fields=sorted(fields))
        return updated.model_copy(deep=True)

    def delete(self, template_id: str) -> None:
        """Remove a custom template and its customization.

        Raises:
            TemplateNotFoundError: No template has this id.
            ForbiddenTemplateError: The template is built-in or organization.
            TemplateStorageError: The record could not be removed.
        """
        with self._lock.write():
            current = self._templates.get(template_id)
            if current is None:
                raise TemplateNotFoundError(template_id)
            self._ensure_writable(current, "delete")

            persistence.remove_template(self._custom_dir, template_id)
            del self._templates[template_id]
            self._origins.pop(template_id, None)
            if self._customizations.pop(template_id, None) is not None:
                persistence.write_customizations(
                    self._custom_dir, self._customizations.values()
                )

        logger.info("template_deleted", template_id=template_id)

    def record_usage(self, template_id: str) -> int:
        """Count one successful compile of ``template_id``.

        Returns:
            The new usage count.

        Raises:
            TemplateNotFoundError: No template has this id.
        """
        with self._lock.write():
            template = self._templates.get(template_id)
            if template is None:
                raise TemplateNotFoundError(template_id)
            template.metadata.usage += 1
            return template.metadata.usage

    @staticmethod
    def _ensure_writable(template: Template, operation: str) -> None:
        if not CATEGORY_POLICIES[template.category].writable:
            raise ForbiddenTemplateError(template.id, template.category.value, operation)

    # ------------------------------------------------------------------
    # Customizations
    # ------------------------------------------------------------------

    def save_customization(self, customization: TemplateCustomization) -> None:
        """Store (or replace) the customization for one template.

        Raises:
            TemplateNotFoundError: The template is not in the catalog.
            TemplateStorageError: ``customizations.json`` could not be written.
        """
        with self._lock.write():
            if customization.template_id not in self._templates:
                raise TemplateNotFoundError(customization.template_id)
            record = customization.model_copy(deep=True)
            record.last_modified = utc_now()
            updated = {**self._customizations, record.template_id: record}
            persistence.write_customizations(self._custom_dir, updated.values())
            self._customizations = updated

    def get_customization(self, template_id: str) -> TemplateCustomization | None:
        with self._lock.read():
            customization = self._customizations.get(template_id)
            return customization.model_copy(deep=True) if customization else None

    def list_customizations(self) -> list[TemplateCustomization]:
        with self._lock.read():
            return [c.model_copy(deep=True) for c in self._customizations.values()]

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_templates(
        self, template_ids: Iterable[str], destination: Path
    ) -> ExportResult:
        """Write a versioned bundle of shareable templates.

        Unknown and built-in ids are reported per id and left out.

        Raises:
            TemplateStorageError: The bundle could not be written.
        """
        result = ExportResult(destination=destination)
        records: list[dict[str, Any]] = []

        with self._lock.read():
            for template_id in template_ids:
                template = self._templates.get(template_id)
                if template is None:
                    result.errors.append(ItemError(template_id, "Template not found"))
                    continue
                if not CATEGORY_POLICIES[template.category].exportable:
                    result.errors.append(
                        ItemError(
                            template_id,
                            f"Cannot export {template.category.value} templates",
                        )
                    )
                    continue
                records.append(template.to_record())
                result.exported.append(template_id)

        bundle = {
            "version": BUNDLE_VERSION,
            "exportedAt": utc_now().isoformat(),
            "templates": records,
        }
        persistence.write_json(destination, bundle)
        result.success = True
        logger.info(
            "templates_exported",
            destination=str(destination),
            exported=len(result.exported),
            errors=len(result.errors),
        )
        return result

    def import_file(self, path: Path) -> ImportResult:
        """Import a bundle stored as JSON or YAML.

        Raises:
            TemplateStorageError: The file could not be read.
            TemplateValidationError: The file is not a bundle.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateStorageError(f"Failed to read {path}: {e}", path, "read") from e

        try:
            bundle = (
                json.loads(text)
                if path.suffix.lower() == ".json"
                else yaml.safe_load(text)
            )
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise TemplateValidationError(None, [f"Unreadable bundle {path}: {e}"]) from e

        return self.import_bundle(bundle)

    def import_bundle(self, bundle: Mapping[str, Any]) -> ImportResult:
        """Register the templates of a bundle as organization templates.

        Invalid records are reported as errors, ids already in the catalog
        are reported as skipped; neither stops the rest of the bundle.

        Raises:
            TemplateValidationError: ``bundle`` has no ``templates`` list.
        """
        records = bundle.get("templates") if isinstance(bundle, Mapping) else None
        if not isinstance(records, list):
            raise TemplateValidationError(None, ["Bundle must contain a 'templates' list"])

        result = ImportResult()
        for record in records:
            template_id = (
                str(record.get("id") or "(unnamed)")
                if isinstance(record, Mapping)
                else "(unnamed)"
            )
            if not isinstance(record, Mapping):
                result.errors.append(ItemError(template_id, "Template record must be a mapping"))
                continue

            validation = validate_template(record)
            if not validation.is_valid:
                result.errors.append(ItemError(template_id, ", ".join(validation.errors)))
                continue

            try:
                template = Template.model_validate(record)
            except ValidationError as e:
                result.errors.append(ItemError(template_id, str(e)))
                continue
            template.category = TemplateCategory.ORGANIZATION

            with self._lock.write():
                if template.id in self._templates:
                    result.skipped.append(ItemError(template.id, "Template already exists"))
                    continue
                if self._organization_dir is None:
                    result.errors.append(
                        ItemError(template.id, "Organization templates path not configured")
                    )
                    continue
                try:
                    path = persistence.write_template(self._organization_dir, template)
                except TemplateStorageError as e:
                    result.errors.append(ItemError(template.id, e.message))
                    continue
                self._templates[template.id] = template
                self._origins[template.id] = path

            result.imported.append(template.id)

        result.success = not result.errors
        logger.info(
            "templates_imported",
            imported=len(result.imported),
            skipped=len(result.skipped),
            errors=len(result.errors),
        )
        return result
