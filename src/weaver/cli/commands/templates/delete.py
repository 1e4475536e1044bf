"""``weaver templates delete``."""

from __future__ import annotations

import click

from weaver.cli.common import cli_error_handler, get_store
from weaver.cli.output import format_success

from ._group import templates


@templates.command("delete")
@click.argument("template_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def templates_delete(ctx: click.Context, template_id: str, yes: bool) -> None:
    """Delete a custom template and its saved customization.

    Built-in and organization templates cannot be deleted.
    """
    with cli_error_handler():
        store = get_store(ctx)
        if not yes:
            click.confirm(f"Delete template '{template_id}'?", abort=True)
        store.delete(template_id)
        click.echo(format_success(f"Deleted template '{template_id}'"))
