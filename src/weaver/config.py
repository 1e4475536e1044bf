from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from weaver.exceptions import ConfigError
from weaver.logging import get_logger

__all__ = [
    "GenerationConfig",
    "TemplateSourcesConfig",
    "WeaverConfig",
    "get_project_config_path",
    "get_user_config_path",
    "get_user_templates_path",
    "load_config",
]

logger = get_logger(__name__)

PROJECT_CONFIG_FILENAME = "weaver.yaml"


def get_user_config_path() -> Path:
    """Return ``~/.config/weaver/config.yaml``."""
    return Path.home() / ".config" / "weaver" / "config.yaml"


def get_user_templates_path() -> Path:
    """Return ``~/.config/weaver/templates``, the custom template directory."""
    return Path.home() / ".config" / "weaver" / "templates"


def get_project_config_path() -> Path:
    return Path.cwd() / PROJECT_CONFIG_FILENAME


class TemplateSourcesConfig(BaseModel):
    """Where the template catalog is loaded from.

    Attributes:
        builtin_dir: Directory of built-in records. None uses the templates
            packaged with Weaver.
        custom_dir: Directory for locally authored templates and the
            customizations file.
        organization_dir: Directory of organization templates, if any.
            Imported bundles are written here.
        include_builtin: Load built-in templates at all.
    """

    builtin_dir: Path | None = None
    custom_dir: Path = Field(default_factory=get_user_templates_path)
    organization_dir: Path | None = None
    include_builtin: bool = True

    @field_validator("builtin_dir", "custom_dir", "organization_dir")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None


class GenerationConfig(BaseModel):
    """Defaults for ``weaver generate``."""

    output_directory: Path = Path(".github/workflows")
    input_path: Path = Path("README.md")


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by one YAML file (absent file means empty)."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._data: dict[str, Any] = {}
        if yaml_file is None or not yaml_file.exists():
            return
        try:
            loaded = yaml.safe_load(yaml_file.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {yaml_file}: {e}") from e

        if loaded is None:
            logger.warning("config_file_empty", path=str(yaml_file))
        elif not isinstance(loaded, dict):
            raise ConfigError(
                f"Config file {yaml_file} must contain a mapping",
                value=type(loaded).__name__,
            )
        else:
            self._data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._data


class WeaverConfig(BaseSettings):
    """Root configuration object."""

    model_config = SettingsConfigDict(
        env_prefix="WEAVER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    templates: TemplateSourcesConfig = Field(default_factory=TemplateSourcesConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority, highest first: init kwargs, WEAVER_* env, project
        ``weaver.yaml`` (or the file passed to :func:`load_config`), user
        ``~/.config/weaver/config.yaml``.
        """
        project_path = _project_config_path.get() or get_project_config_path()
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


# Set for the duration of one load_config() call.
_project_config_path: ContextVar[Path | None] = ContextVar(
    "weaver_project_config_path", default=None
)


def load_config(config_path: Path | None = None) -> WeaverConfig:
    """Load configuration: defaults < user file < project file < environment.

    Args:
        config_path: Project config file to use instead of ``./weaver.yaml``.

    Raises:
        ConfigError: A config file is malformed or a value is invalid.
    """
    path = config_path or get_project_config_path()
    if not path.exists():
        logger.debug("project_config_missing", path=str(path))

    token = _project_config_path.set(path)
    try:
        return WeaverConfig()
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"])
        raise ConfigError(
            f"Invalid configuration: {first['msg']}",
            field=field,
            value=first.get("input"),
        ) from e
    finally:
        _project_config_path.reset(token)
