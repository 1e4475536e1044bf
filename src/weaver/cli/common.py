from __future__ import annotations

import contextlib
import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import click
import yaml

from weaver.cli.context import CLIContext, ExitCode
from weaver.cli.output import format_error, format_warning
from weaver.exceptions import (
    ConfigError,
    TemplateStorageError,
    TemplateValidationError,
    WeaverError,
)
from weaver.logging import get_logger
from weaver.templates import TemplateStore

__all__ = ["cli_error_handler", "get_store", "read_structured_file"]


@contextlib.contextmanager
def cli_error_handler() -> Generator[None, None, None]:
    """Translate Weaver exceptions into a message on stderr and an exit code.

    Example:
        >>> with cli_error_handler():
        ...     store.delete(template_id)
    """
    logger = get_logger(__name__)

    try:
        yield
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user.", err=True)
        raise SystemExit(ExitCode.INTERRUPTED) from None
    except TemplateValidationError as e:
        label = e.template_id or "template"
        click.echo(
            format_error(f"Validation failed for {label}", details=list(e.errors)),
            err=True,
        )
        raise SystemExit(ExitCode.FAILURE) from e
    except TemplateStorageError as e:
        click.echo(
            format_error(e.message, details=[f"Path: {e.path}", f"Operation: {e.operation}"]),
            err=True,
        )
        raise SystemExit(ExitCode.FAILURE) from e
    except ConfigError as e:
        details = []
        if e.field:
            details.append(f"Field: {e.field}")
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except WeaverError as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        logger.exception("unexpected_command_error")
        click.echo(format_error(str(e)), err=True)
        raise SystemExit(ExitCode.FAILURE) from e


def get_store(ctx: click.Context) -> TemplateStore:
    """Return the loaded template catalog, loading it on first use.

    Load warnings are echoed to stderr unless ``--quiet`` was given.
    """
    if "store" not in ctx.obj:
        cli_ctx: CLIContext = ctx.obj["cli_ctx"]
        store = TemplateStore.from_config(cli_ctx.config.templates)
        report = store.load()
        if not cli_ctx.quiet:
            for warning in report.warnings:
                click.echo(format_warning(warning), err=True)
            for skipped in report.skipped:
                click.echo(
                    format_warning(f"Skipped {skipped.file_path}: {skipped.error_message}"),
                    err=True,
                )
        ctx.obj["store"] = store
    result: TemplateStore = ctx.obj["store"]
    return result


def read_structured_file(path: Path) -> Any:
    """Parse a ``.json`` file as JSON and anything else as YAML.

    Raises:
        click.BadParameter: The file does not parse.
    """
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise click.BadParameter(f"{path} could not be parsed: {e}") from e
