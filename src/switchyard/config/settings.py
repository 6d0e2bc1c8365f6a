"""Settings for the composition root and the inspection CLI.

Sources, highest priority first:

1. Keyword overrides, usually CLI flags.
2. ``SWITCHYARD_*`` environment variables (``__`` separates nested keys,
   e.g. ``SWITCHYARD_PERFORMANCE__SLOW_REQUEST_THRESHOLD_MS=250``).
3. The config file found by :func:`switchyard.config.discovery.find_config`.
4. Defaults declared on the section models.
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from switchyard.config.discovery import find_config, read_config
from switchyard.config.models import (
    CacheConfig,
    PerformanceConfig,
    PipelineConfig,
    PluginsConfig,
)

# Table read by ``SwitchyardSettings.load`` for the construction in progress.
_file_data: ContextVar[dict[str, Any] | None] = ContextVar("_file_data", default=None)


class FileSettingsSource(PydanticBaseSettingsSource):
    """Feed an already-parsed config table into pydantic-settings."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


class SwitchyardSettings(BaseSettings):
    """Frozen view of everything that shapes the assembled mediator.

    Attributes:
        project_root: Directory relative plugin paths resolve against. The
            config file's directory when one was found, else the CWD.
        config_path: The file the settings were read from, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SWITCHYARD_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            FileSettingsSource(settings_cls, _file_data.get() or {}),
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: str | Path | None = None,
        project_root: Path | None = None,
        **overrides: Any,
    ) -> SwitchyardSettings:
        """Build settings for *project_root* (default: discovered or CWD).

        An explicit *config_path* must exist. Without one, the file is
        discovered by walking up from *project_root*.
        """
        path: Path | None
        if config_path:
            path = Path(config_path)
            if not path.is_file():
                msg = f"Config file not found: {path}"
                raise click.ClickException(msg)
        else:
            path = find_config(project_root)

        if project_root is None:
            project_root = path.parent if path is not None else Path.cwd()

        token = _file_data.set(read_config(path) if path is not None else {})
        try:
            return cls(project_root=project_root, config_path=path, **overrides)
        finally:
            _file_data.reset(token)

    @property
    def plugin_dir(self) -> Path:
        """Directory scanned for single-file local plugins."""
        local = Path(self.plugins.local_dir)
        return local if local.is_absolute() else self.project_root / local
