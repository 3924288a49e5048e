"""Configuration settings using Pydantic Settings.

Provides typed defaults for the registry and builder decorators with
environment variable support.

Usage:
    from macrokit.config import MacroSettings

    # Load from environment variables (MACROKIT_*)
    settings = MacroSettings()

    # Or override with explicit values
    settings = MacroSettings(default_cache_ttl=60, thread_safe=False)
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MacroSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for macro registries and builders.

    Attributes:
        default_cache_ttl: TTL in seconds used by cached() when none is given
            (0 caches forever).
        default_log_level: Level name used by logged() when none is given.
        thread_safe: Guard the default registry's store with a re-entrant lock.
        call_logger: Logger name that logged() macros write to.

    Environment Variables:
        MACROKIT_DEFAULT_CACHE_TTL
        MACROKIT_DEFAULT_LOG_LEVEL
        MACROKIT_THREAD_SAFE
        MACROKIT_CALL_LOGGER
    """

    model_config = SettingsConfigDict(
        env_prefix="MACROKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_cache_ttl: int = Field(default=300, ge=0)
    default_log_level: str = "debug"
    thread_safe: bool = True
    call_logger: str = "macrokit.calls"

    @field_validator("default_log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"Unknown log level: {value}")
        return value.lower()


@lru_cache(maxsize=1)
def get_settings() -> MacroSettings:
    """Load settings once per process.

    Returns:
        Cached MacroSettings instance. Call ``get_settings.cache_clear()``
        to reload from the environment.
    """
    return MacroSettings()
