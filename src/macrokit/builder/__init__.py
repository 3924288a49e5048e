"""Fluent macro builder and its wrapper decorators."""

from macrokit.builder.builder import MacroBuilder
from macrokit.builder.decorators import TTLCache, cache_key, make_cached, make_chainable, make_logged

__all__ = [
    "MacroBuilder",
    "TTLCache",
    "cache_key",
    "make_cached",
    "make_chainable",
    "make_logged",
]
