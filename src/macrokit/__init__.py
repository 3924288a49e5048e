"""macrokit: runtime macro registry for Python hosts.

Usage:
    from macrokit import Macroable, MacroRegistry

    registry = MacroRegistry()
    registry.register("Greeter", "shout", lambda text: text.upper() + "!")
    registry.call("Greeter", "shout", ["hi"])  # "HI!"

    class Greeter(Macroable):
        pass

    Greeter.register_macro("shout", lambda text: text.upper() + "!")
    Greeter().shout("hi")  # "HI!"

    (
        registry.builder("Api", "purge")
        .implement(lambda: "purged")
        .in_namespace("admin")
        .register()
    )
    registry.call_namespaced("admin", "Api", "purge")
"""

__version__ = "0.1.0"

# Builder
from macrokit.builder import MacroBuilder

# Configuration
from macrokit.config import MacroSettings, get_settings

# Core primitives
from macrokit.core import (
    ConditionalMacro,
    GlobalMacro,
    InvalidMacroError,
    MacroDefinition,
    MacroError,
    MacroKey,
    MacroNotFoundError,
    MacroProvider,
    MacroScope,
    MacroStatistics,
    NamespacedMacro,
    host_id,
)

# Host trait
from macrokit.host import Macroable, MacroableMeta

# Registry
from macrokit.registry import MacroRegistry, RegistryStore, get_registry, set_registry

# Tracing
from macrokit.tracing import CallRecord, CallRecorder, InMemoryCallRecorder

__all__ = [
    # Version
    "__version__",
    # Core
    "ConditionalMacro",
    "GlobalMacro",
    "MacroDefinition",
    "MacroKey",
    "MacroProvider",
    "MacroScope",
    "MacroStatistics",
    "NamespacedMacro",
    "host_id",
    "MacroError",
    "InvalidMacroError",
    "MacroNotFoundError",
    # Registry
    "MacroRegistry",
    "RegistryStore",
    "get_registry",
    "set_registry",
    # Builder
    "MacroBuilder",
    # Host
    "Macroable",
    "MacroableMeta",
    # Configuration
    "MacroSettings",
    "get_settings",
    # Tracing
    "CallRecord",
    "CallRecorder",
    "InMemoryCallRecorder",
]
