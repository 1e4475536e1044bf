"""CLI context and exit codes for Weaver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from weaver.config import WeaverConfig

__all__ = ["CLIContext", "ExitCode"]


class ExitCode(IntEnum):
    """Process exit codes.

    ``PARTIAL`` is used when a batch produced some workflows but not all.
    """

    SUCCESS = 0
    FAILURE = 1
    PARTIAL = 2
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global options shared by every subcommand.

    Attributes:
        config: Loaded configuration.
        config_path: Project config file given with ``--config``.
        verbosity: 0 = config default, 1 = INFO, 2+ = DEBUG.
        quiet: Only errors are logged.
    """

    config: WeaverConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False
