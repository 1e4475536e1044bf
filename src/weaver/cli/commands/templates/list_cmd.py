"""``weaver templates list``."""

from __future__ import annotations

import click

from weaver.cli.common import cli_error_handler, get_store
from weaver.cli.output import format_json, format_table, format_yaml
from weaver.templates import TemplateCategory, TemplateFilter, WorkflowType

from ._group import templates


@templates.command("list")
@click.option(
    "--type",
    "workflow_type",
    type=click.Choice([t.value for t in WorkflowType]),
    default=None,
    help="Only templates of this workflow type.",
)
@click.option(
    "--category",
    type=click.Choice([c.value for c in TemplateCategory]),
    default=None,
    help="Only templates of this category.",
)
@click.option(
    "--framework",
    "frameworks",
    multiple=True,
    help="Only templates supporting one of these frameworks (repeatable).",
)
@click.option("--tag", "tags", multiple=True, help="Only templates with one of these tags.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="Output format.",
)
@click.pass_context
def templates_list(
    ctx: click.Context,
    workflow_type: str | None,
    category: str | None,
    frameworks: tuple[str, ...],
    tags: tuple[str, ...],
    fmt: str,
) -> None:
    """List catalog templates, best ranked first.

    Examples:
        weaver templates list
        weaver templates list --type ci --framework python
        weaver templates list --category custom --format json
    """
    with cli_error_handler():
        store = get_store(ctx)
        query = TemplateFilter(
            type=WorkflowType(workflow_type) if workflow_type else None,
            category=TemplateCategory(category) if category else None,
            frameworks=frameworks,
            tags=tags,
        )
        found = store.list(query)

        if fmt in ("json", "yaml"):
            entries = [
                {
                    "id": t.id,
                    "name": t.name,
                    "type": t.type.value,
                    "category": t.category.value,
                    "version": t.version,
                    "frameworks": list(t.frameworks),
                    "tags": list(t.tags),
                    "usage": t.usage,
                }
                for t in found
            ]
            click.echo(format_json(entries) if fmt == "json" else format_yaml(entries))
            return

        if not found:
            click.echo("No templates found")
            return

        rows = [
            [
                t.id,
                t.type.value,
                t.category.value,
                ", ".join(t.frameworks) or "-",
                str(t.usage),
                t.name[:40],
            ]
            for t in found
        ]
        click.echo(format_table(["ID", "Type", "Category", "Frameworks", "Usage", "Name"], rows))
        click.echo()
        click.echo(f"{len(found)} template(s)")
