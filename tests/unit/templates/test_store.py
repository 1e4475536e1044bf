"""Tests for weaver.templates.store.TemplateStore."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from weaver.exceptions import (
    DuplicateTemplateError,
    ForbiddenTemplateError,
    TemplateNotFoundError,
    TemplateValidationError,
)
from weaver.templates import (
    BUNDLE_VERSION,
    TemplateCategory,
    TemplateCustomization,
    TemplateFilter,
    TemplateStore,
    WorkflowType,
)
from tests.fixtures.templates import (
    CI_CONTENT,
    RELEASE_CONTENT,
    TemplateDirs,
    make_record,
    write_record,
)


class TestLoad:
    """Tests for TemplateStore.load."""

    def test_counts_per_category(self, seeded_dirs: TemplateDirs) -> None:
        store = seeded_dirs.store()
        report = store.load()

        assert report.loaded == {"built-in": 2, "organization": 1, "custom": 1}
        assert report.total == 4
        assert report.warnings == ()
        assert report.skipped == ()
        assert len(store) == 4

    def test_category_comes_from_the_source(self, template_dirs: TemplateDirs) -> None:
        write_record(template_dirs.custom, make_record("t", category="built-in"))
        store = template_dirs.store()
        store.load()

        assert store.get("t").category is TemplateCategory.CUSTOM

    def test_first_source_wins_on_duplicate_id(self, seeded_dirs: TemplateDirs) -> None:
        write_record(seeded_dirs.custom, make_record("ci-basic", name="Shadow"))
        store = seeded_dirs.store()

        report = store.load()

        assert store.get("ci-basic").category is TemplateCategory.BUILTIN
        assert store.get("ci-basic").name == "Ci Basic"
        assert len(report.warnings) == 1
        assert "Duplicate template id 'ci-basic'" in report.warnings[0]

    def test_malformed_records_are_skipped(self, template_dirs: TemplateDirs) -> None:
        (template_dirs.custom / "broken.json").write_text("{not json")
        (template_dirs.custom / "shape.json").write_text('{"id": "shape"}')
        write_record(template_dirs.custom, make_record("good"))
        store = template_dirs.store()

        report = store.load()

        assert store.ids() == ["good"]
        kinds = {s.file_path.name: s.error_type for s in report.skipped}
        assert kinds == {"broken.json": "parse_error", "shape.json": "schema_error"}

    def test_missing_source_is_a_warning(self, temp_dir: Path) -> None:
        store = TemplateStore(
            builtin_dir=temp_dir / "nope",
            custom_dir=temp_dir / "custom",
        )

        report = store.load()

        assert report.total == 0
        assert len(report.warnings) == 2
        assert all("is not available" in w for w in report.warnings)

    def test_include_builtin_false(self, seeded_dirs: TemplateDirs) -> None:
        store = seeded_dirs.store(include_builtin=False)
        store.load()

        assert "ci-basic" not in store
        assert "my-ci" in store

    def test_packaged_library_is_the_default_builtin_source(self, temp_dir: Path) -> None:
        store = TemplateStore(custom_dir=temp_dir / "custom")
        report = store.load()

        assert report.loaded["built-in"] >= 5
        assert store.get("ci-basic").category is TemplateCategory.BUILTIN

    def test_corrupt_customizations_file_is_a_warning(
        self, seeded_dirs: TemplateDirs
    ) -> None:
        (seeded_dirs.custom / "customizations.json").write_text("{}")
        store = seeded_dirs.store()

        report = store.load()

        assert report.total == 4
        assert any("Could not load customizations" in w for w in report.warnings)

    def test_reload_replaces_catalog(self, seeded_dirs: TemplateDirs) -> None:
        store = seeded_dirs.store()
        store.load()
        (seeded_dirs.custom / "my-ci.json").unlink()

        store.load()

        assert "my-ci" not in store


class TestReads:
    """Tests for list/get/has."""

    def test_list_order(self, store: TemplateStore) -> None:
        assert [t.id for t in store.list()] == [
            "ci-basic",
            "release-basic",
            "org-security",
            "my-ci",
        ]

    def test_list_orders_by_usage_within_category(self, store: TemplateStore) -> None:
        store.record_usage("release-basic")
        assert [t.id for t in store.list()][:2] == ["release-basic", "ci-basic"]

    def test_list_with_filter(self, store: TemplateStore) -> None:
        found = store.list(TemplateFilter(type=WorkflowType.CI))
        assert {t.id for t in found} == {"ci-basic", "my-ci"}

        found = store.list(TemplateFilter(tags=("fast",)))
        assert [t.id for t in found] == ["my-ci"]

    def test_get_returns_a_copy(self, store: TemplateStore) -> None:
        template = store.get("my-ci")
        template.name = "Changed"
        template.metadata.usage = 99

        assert store.get("my-ci").name == "My Ci"
        assert store.usage("my-ci") == 5

    def test_get_unknown(self, store: TemplateStore) -> None:
        with pytest.raises(TemplateNotFoundError) as exc_info:
            store.get("missing")
        assert exc_info.value.template_id == "missing"
        assert "missing" in exc_info.value.message

    def test_has_and_contains(self, store: TemplateStore) -> None:
        assert store.has("ci-basic")
        assert "ci-basic" in store
        assert "missing" not in store
        assert 42 not in store

    def test_record_usage(self, store: TemplateStore) -> None:
        assert store.record_usage("my-ci") == 6
        assert store.usage("my-ci") == 6

    def test_record_usage_unknown(self, store: TemplateStore) -> None:
        with pytest.raises(TemplateNotFoundError):
            store.record_usage("missing")


class TestCreate:
    """Tests for TemplateStore.create."""

    def test_creates_custom_template(
        self, store: TemplateStore, seeded_dirs: TemplateDirs
    ) -> None:
        template = store.create(
            "Node CI",
            CI_CONTENT,
            WorkflowType.CI,
            description="Node pipeline",
            frameworks=["nodejs"],
            tags=["node"],
        )

        assert template.id == "node-ci"
        assert template.category is TemplateCategory.CUSTOM
        assert [v.name for v in template.variables] == ["projectName", "frameworks"]
        assert template.dependencies == ["actions/checkout"]
        assert template.metadata.created == template.metadata.modified
        assert store.get("node-ci").name == "Node CI"

        on_disk = json.loads((seeded_dirs.custom / "node-ci.json").read_text())
        assert on_disk["type"] == "ci"
        assert on_disk["frameworks"] == ["nodejs"]

    def test_accepts_type_as_string(self, store: TemplateStore) -> None:
        template = store.create("Rel", RELEASE_CONTENT, "release")
        assert template.type is WorkflowType.RELEASE

    def test_duplicate_id(self, store: TemplateStore) -> None:
        with pytest.raises(DuplicateTemplateError) as exc_info:
            store.create("CI Basic", CI_CONTENT, WorkflowType.CI)
        assert exc_info.value.template_id == "ci-basic"

    def test_invalid_content_is_not_written(
        self, store: TemplateStore, seeded_dirs: TemplateDirs
    ) -> None:
        with pytest.raises(TemplateValidationError) as exc_info:
            store.create("Broken", "name: Broken\n", WorkflowType.CI)

        assert "Template must include jobs section" in exc_info.value.errors
        assert "broken" not in store
        assert not (seeded_dirs.custom / "broken.json").exists()

    def test_name_without_id_characters(self, store: TemplateStore) -> None:
        with pytest.raises(TemplateValidationError):
            store.create("???", CI_CONTENT, WorkflowType.CI)


class TestUpdate:
    """Tests for TemplateStore.update."""

    def test_updates_custom_template(
        self, store: TemplateStore, seeded_dirs: TemplateDirs
    ) -> None:
        before = store.get("my-ci")

        updated = store.update("my-ci", description="new", content=RELEASE_CONTENT)

        assert updated.description == "new"
        assert updated.dependencies == [
            "actions/checkout",
            "softprops/action-gh-release",
        ]
        assert updated.metadata.modified > before.metadata.modified
        assert updated.metadata.usage == 5
        on_disk = json.loads((seeded_dirs.custom / "my-ci.json").read_text())
        assert on_disk["description"] == "new"

    @pytest.mark.parametrize("template_id", ["ci-basic", "org-security"])
    def test_read_only_categories_are_forbidden(
        self, store: TemplateStore, template_id: str
    ) -> None:
        before = store.get(template_id)

        with pytest.raises(ForbiddenTemplateError) as exc_info:
            store.update(template_id, description="hacked")

        assert exc_info.value.operation == "update"
        assert store.get(template_id) == before

    @pytest.mark.parametrize("field", ["id", "category", "metadata"])
    def test_immutable_fields(self, store: TemplateStore, field: str) -> None:
        with pytest.raises(ValueError, match=field):
            store.update("my-ci", **{field: "x"})

    def test_unknown_field(self, store: TemplateStore) -> None:
        with pytest.raises(ValueError, match="colour"):
            store.update("my-ci", colour="blue")

    def test_unknown_template(self, store: TemplateStore) -> None:
        with pytest.raises(TemplateNotFoundError):
            store.update("missing", description="x")

    @pytest.mark.parametrize(
        ("content", "error"),
        [
            ("name: Broken\non: push\n", "Template must include jobs section"),
            ("just a string", "Template content must be a YAML mapping"),
        ],
    )
    def test_invalid_update_changes_nothing(
        self,
        store: TemplateStore,
        seeded_dirs: TemplateDirs,
        content: str,
        error: str,
    ) -> None:
        before = store.get("my-ci")
        path = seeded_dirs.custom / "my-ci.json"
        on_disk = path.read_text()

        with pytest.raises(TemplateValidationError) as exc_info:
            store.update("my-ci", content=content)

        assert exc_info.value.template_id == "my-ci"
        assert error in exc_info.value.errors
        assert store.get("my-ci") == before
        assert path.read_text() == on_disk

    def test_new_content_refreshes_variables(self, store: TemplateStore) -> None:
        store.update(
            "my-ci",
            variables=[
                {"name": "projectName", "defaultValue": "demo"},
                {"name": "frameworks"},
            ],
        )
        content = CI_CONTENT.replace("{{frameworks}}", "{{region}}")

        updated = store.update("my-ci", content=content)

        assert [v.name for v in updated.variables] == ["projectName", "region"]
        project, region = updated.variables
        assert project.default_value == "demo"
        assert project.required is False
        assert region.required is True
        assert store.get("my-ci").variables == updated.variables

    def test_explicit_variables_are_kept(self, store: TemplateStore) -> None:
        updated = store.update(
            "my-ci", content=RELEASE_CONTENT, variables=[{"name": "unused"}]
        )
        assert [v.name for v in updated.variables] == ["unused"]


class TestDelete:
    """Tests for TemplateStore.delete."""

    def test_deletes_custom_template_and_customization(
        self, store: TemplateStore, seeded_dirs: TemplateDirs
    ) -> None:
        store.save_customization(
            TemplateCustomization(template_id="my-ci", customizations={"env": "x"})
        )

        store.delete("my-ci")

        assert "my-ci" not in store
        assert not (seeded_dirs.custom / "my-ci.json").exists()
        assert store.get_customization("my-ci") is None
        saved = json.loads((seeded_dirs.custom / "customizations.json").read_text())
        assert saved == []

    def test_builtin_delete_is_forbidden(
        self, store: TemplateStore, seeded_dirs: TemplateDirs
    ) -> None:
        ids_before = store.ids()

        with pytest.raises(ForbiddenTemplateError) as exc_info:
            store.delete("ci-basic")

        assert exc_info.value.category == "built-in"
        assert store.ids() == ids_before
        assert (seeded_dirs.builtin / "ci-basic.json").exists()

    def test_unknown_template(self, store: TemplateStore) -> None:
        with pytest.raises(TemplateNotFoundError):
            store.delete("missing")


class TestCustomizations:
    """Tests for saved customizations."""

    def test_save_and_reload(self, store: TemplateStore, seeded_dirs: TemplateDirs) -> None:
        store.save_customization(
            TemplateCustomization(
                template_id="ci-basic",
                customizations={"env": "staging"},
                preserve_on_update=["env"],
            )
        )

        reloaded = seeded_dirs.store()
        reloaded.load()
        saved = reloaded.get_customization("ci-basic")

        assert saved is not None
        assert saved.customizations == {"env": "staging"}
        assert [c.template_id for c in reloaded.list_customizations()] == ["ci-basic"]

    def test_replaces_previous_record(self, store: TemplateStore) -> None:
        for value in ("one", "two"):
            store.save_customization(
                TemplateCustomization(template_id="my-ci", customizations={"env": value})
            )

        saved = store.get_customization("my-ci")
        assert saved is not None
        assert saved.customizations == {"env": "two"}
        assert len(store.list_customizations()) == 1

    def test_unknown_template(self, store: TemplateStore) -> None:
        with pytest.raises(TemplateNotFoundError):
            store.save_customization(TemplateCustomization(template_id="missing"))


class TestExport:
    """Tests for TemplateStore.export_templates."""

    def test_exports_shareable_templates(self, store: TemplateStore, temp_dir: Path) -> None:
        destination = temp_dir / "out" / "bundle.json"

        result = store.export_templates(["my-ci", "org-security"], destination)

        assert result.success
        assert result.exported == ["my-ci", "org-security"]
        assert result.errors == []
        bundle = json.loads(destination.read_text())
        assert bundle["version"] == BUNDLE_VERSION
        assert "exportedAt" in bundle
        assert [t["id"] for t in bundle["templates"]] == ["my-ci", "org-security"]

    def test_reports_unknown_and_builtin_ids(
        self, store: TemplateStore, temp_dir: Path
    ) -> None:
        result = store.export_templates(
            ["missing", "ci-basic", "my-ci"], temp_dir / "bundle.json"
        )

        assert result.exported == ["my-ci"]
        errors = {e.template_id: e.error for e in result.errors}
        assert errors == {
            "missing": "Template not found",
            "ci-basic": "Cannot export built-in templates",
        }
        assert result.to_dict()["errors"][0] == {
            "templateId": "missing",
            "error": "Template not found",
        }


class TestImport:
    """Tests for TemplateStore.import_bundle and import_file."""

    def test_imports_as_organization(
        self, store: TemplateStore, seeded_dirs: TemplateDirs
    ) -> None:
        bundle = {"version": "1.0.0", "templates": [make_record("shared-ci")]}

        result = store.import_bundle(bundle)

        assert result.success
        assert result.imported == ["shared-ci"]
        assert store.get("shared-ci").category is TemplateCategory.ORGANIZATION
        assert (seeded_dirs.organization / "shared-ci.json").exists()

    def test_existing_ids_are_skipped(self, store: TemplateStore) -> None:
        result = store.import_bundle({"templates": [make_record("ci-basic")]})

        assert result.success
        assert result.imported == []
        assert [(s.template_id, s.error) for s in result.skipped] == [
            ("ci-basic", "Template already exists")
        ]

    def test_invalid_records_are_errors(self, store: TemplateStore) -> None:
        bundle = {
            "templates": [
                make_record("bad", content="name: Bad\n"),
                make_record("good"),
            ]
        }

        result = store.import_bundle(bundle)

        assert not result.success
        assert result.imported == ["good"]
        assert result.errors[0].template_id == "bad"
        assert "Template must include trigger events (on:)" in result.errors[0].error

    @pytest.mark.parametrize("template_id", ["../escaped", "nested/ci", ".hidden"])
    def test_ids_that_are_not_file_names_are_errors(
        self, store: TemplateStore, seeded_dirs: TemplateDirs, template_id: str
    ) -> None:
        result = store.import_bundle({"templates": [make_record(template_id)]})

        assert not result.success
        assert result.imported == []
        assert [e.template_id for e in result.errors] == [template_id]
        assert "may only contain letters, digits" in result.errors[0].error
        assert template_id not in store
        assert not (seeded_dirs.organization.parent / "escaped.json").exists()
        assert sorted(p.name for p in seeded_dirs.organization.iterdir()) == [
            "org-security.json"
        ]

    def test_without_organization_dir(self, temp_dir: Path) -> None:
        store = TemplateStore(builtin_dir=temp_dir / "b", custom_dir=temp_dir / "c")
        store.load()

        result = store.import_bundle({"templates": [make_record("shared")]})

        assert not result.success
        assert result.errors[0].error == "Organization templates path not configured"
        assert "shared" not in store

    def test_bundle_without_templates_list(self, store: TemplateStore) -> None:
        with pytest.raises(TemplateValidationError):
            store.import_bundle({"templates": "nope"})

    def test_import_yaml_file(self, store: TemplateStore, temp_dir: Path) -> None:
        path = temp_dir / "bundle.yaml"
        path.write_text(yaml.safe_dump({"templates": [make_record("from-yaml")]}))

        result = store.import_file(path)

        assert result.imported == ["from-yaml"]

    def test_export_then_import_into_another_store(
        self, store: TemplateStore, temp_dir: Path
    ) -> None:
        destination = temp_dir / "bundle.json"
        store.export_templates(["my-ci"], destination)
        other = TemplateStore(
            builtin_dir=temp_dir / "other-builtin",
            custom_dir=temp_dir / "other-custom",
            organization_dir=temp_dir / "other-org",
        )
        other.load()

        result = other.import_file(destination)

        assert result.imported == ["my-ci"]
        assert other.get("my-ci").category is TemplateCategory.ORGANIZATION
