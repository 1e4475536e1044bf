"""``weaver templates show``."""

from __future__ import annotations

import click
from rich.syntax import Syntax

from weaver.cli.common import cli_error_handler, get_store
from weaver.cli.console import console
from weaver.cli.output import format_json, format_yaml

from ._group import templates


@templates.command("show")
@click.argument("template_id")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "yaml", "json"]),
    default="text",
    help="Output format (yaml and json print the stored record).",
)
@click.pass_context
def templates_show(ctx: click.Context, template_id: str, fmt: str) -> None:
    """Display one template with its variables and body.

    Examples:
        weaver templates show ci-basic
        weaver templates show ci-basic --format json
    """
    with cli_error_handler():
        template = get_store(ctx).get(template_id)

        if fmt == "json":
            click.echo(format_json(template.to_record()))
            return
        if fmt == "yaml":
            click.echo(format_yaml(template.to_record()))
            return

        click.echo(f"Template: {template.name} ({template.id})")
        click.echo(f"Type: {template.type.value}")
        click.echo(f"Category: {template.category.value}")
        click.echo(f"Version: {template.version}")
        if template.author:
            click.echo(f"Author: {template.author}")
        if template.description:
            click.echo(f"Description: {template.description}")
        if template.frameworks:
            click.echo(f"Frameworks: {', '.join(template.frameworks)}")
        if template.tags:
            click.echo(f"Tags: {', '.join(template.tags)}")
        click.echo(f"Usage: {template.usage}")

        if template.variables:
            click.echo()
            click.echo("Variables:")
            for variable in template.variables:
                marker = " (required)" if variable.required else ""
                default = (
                    f" [default: {variable.default_value}]"
                    if variable.default_value is not None
                    else ""
                )
                click.echo(f"  {variable.name}: {variable.type}{marker}{default}")

        if template.dependencies:
            click.echo()
            click.echo("Actions:")
            for action in template.dependencies:
                click.echo(f"  - {action}")

        click.echo()
        console.print(Syntax(template.content, "yaml", theme="ansi_dark", word_wrap=True))
