"""Stateful macro registry: store and resolution engine."""

from macrokit.registry.manager import MacroRegistry, get_registry, set_registry
from macrokit.registry.store import RegistryStore

__all__ = [
    "MacroRegistry",
    "RegistryStore",
    "get_registry",
    "set_registry",
]
