from __future__ import annotations

from typing import Any

from weaver.exceptions.base import WeaverError


class ConfigError(WeaverError):
    """Configuration could not be read or did not validate.

    Attributes:
        message: What went wrong.
        field: Dotted path of the offending setting, if known
            (e.g. ``templates.custom_dir``).
        value: The rejected value, if known.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)
