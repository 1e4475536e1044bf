"""``weaver templates create``."""

from __future__ import annotations

from pathlib import Path

import click

from weaver.cli.common import cli_error_handler, get_store
from weaver.cli.output import format_success
from weaver.templates import WorkflowType

from ._group import templates


@templates.command("create")
@click.argument("name")
@click.option(
    "--type",
    "workflow_type",
    type=click.Choice([t.value for t in WorkflowType]),
    required=True,
    help="Workflow type the template produces.",
)
@click.option(
    "--file",
    "content_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Workflow YAML body; {{name}} placeholders become variables.",
)
@click.option("--description", default="", help="Short description.")
@click.option("--framework", "frameworks", multiple=True, help="Supported framework.")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.option("--author", default=None, help="Author recorded on the template.")
@click.pass_context
def templates_create(
    ctx: click.Context,
    name: str,
    workflow_type: str,
    content_file: Path,
    description: str,
    frameworks: tuple[str, ...],
    tags: tuple[str, ...],
    author: str | None,
) -> None:
    """Create a custom template from a workflow file.

    The template id is derived from NAME.

    Examples:
        weaver templates create "Node CI" --type ci --file ci.yml --framework nodejs
    """
    with cli_error_handler():
        content = content_file.read_text(encoding="utf-8")
        template = get_store(ctx).create(
            name,
            content,
            WorkflowType(workflow_type),
            description=description,
            frameworks=frameworks,
            tags=tags,
            author=author,
        )
        click.echo(format_success(f"Created template '{template.id}'"))
        if template.variables:
            names = ", ".join(v.name for v in template.variables)
            click.echo(f"Variables: {names}")
