"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``switchyard.toml`` only holds
overrides. An empty file (or none at all) gives a working pipeline.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

BUILTIN_BEHAVIORS = ("performance", "validation", "caching")


class PipelineConfig(BaseModel):
    """[pipeline] section — built-in behaviors in execution order."""

    model_config = {"frozen": True}

    behaviors: list[str] = Field(default_factory=lambda: list(BUILTIN_BEHAVIORS))

    @field_validator("behaviors")
    @classmethod
    def _no_duplicates(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            msg = "pipeline.behaviors must not list a behavior twice"
            raise ValueError(msg)
        return value


class PerformanceConfig(BaseModel):
    """[performance] section."""

    model_config = {"frozen": True}

    slow_request_threshold_ms: float = Field(default=500.0, gt=0)


class CacheConfig(BaseModel):
    """[cache] section."""

    model_config = {"frozen": True}

    namespace: str = "Switchyard:Cache"
    max_entries: int | None = Field(default=None, ge=1)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".switchyard/plugins"
