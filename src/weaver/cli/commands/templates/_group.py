"""``weaver templates`` group definition."""

from __future__ import annotations

import click


@click.group()
@click.pass_context
def templates(ctx: click.Context) -> None:
    """Browse, author and share workflow templates."""
    ctx.ensure_object(dict)
