# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Configuration for errata.

Settings are read from ``ERRATA_*`` environment variables using
pydantic-settings. They are read once, when first needed; the registry
capacity in particular is fixed when ``errata.registry`` is imported.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ErrataSettings(BaseSettings):
    """
    Settings for error construction and the bounded error registry.
    Loads from environment variables using Pydantic v2's env support.
    """

    model_config = SettingsConfigDict(
        env_prefix="ERRATA_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    registry_capacity: int = Field(
        default=100,
        gt=0,
        description="Number of recently constructed errors kept for recovery",
    )
    stack_limit: int = Field(
        default=64, gt=0, description="Maximum number of frames captured per error"
    )
    embed_marker: bool = Field(
        default=True,
        description="Append an invisible registry marker to each error's text",
    )
    log_level: str = Field(default="WARNING", description="Level for errata's logger")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: Any) -> str:
        """Validate that the level is a valid log level."""
        if not isinstance(v, str):
            raise ValueError(f"Log level must be a string, got {type(v).__name__}")
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> ErrataSettings:
    """Return the process-wide settings, loading them on first use."""
    return ErrataSettings()


def reload_settings() -> ErrataSettings:
    """Discard cached settings and read the environment again."""
    get_settings.cache_clear()
    return get_settings()
