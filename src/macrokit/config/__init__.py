"""Configuration module using Pydantic Settings.

Usage:
    from macrokit.config import MacroSettings

    settings = MacroSettings(default_cache_ttl=60)
"""

from macrokit.config.settings import MacroSettings, get_settings

__all__ = [
    "MacroSettings",
    "get_settings",
]
