"""Core primitives: stateless models, errors and the invocation binder.

Architecture Note:
    core/ holds pure building blocks with no runtime state. The stateful
    registry lives in registry/, construction helpers in builder/.
"""

from macrokit.core.binding import accepts_context, bind, invoke
from macrokit.core.errors import InvalidMacroError, MacroError, MacroNotFoundError
from macrokit.core.mixins import collect_macros
from macrokit.core.models import (
    Condition,
    ConditionalMacro,
    GlobalMacro,
    Host,
    MacroCallable,
    MacroDefinition,
    MacroEntry,
    MacroKey,
    MacroProvider,
    MacroScope,
    MacroStatistics,
    NamespacedMacro,
    ValidationRule,
    host_id,
)

__all__ = [
    # Models
    "Condition",
    "ConditionalMacro",
    "GlobalMacro",
    "Host",
    "MacroCallable",
    "MacroDefinition",
    "MacroEntry",
    "MacroKey",
    "MacroProvider",
    "MacroScope",
    "MacroStatistics",
    "NamespacedMacro",
    "ValidationRule",
    "host_id",
    # Errors
    "MacroError",
    "InvalidMacroError",
    "MacroNotFoundError",
    # Binding
    "accepts_context",
    "bind",
    "invoke",
    # Mixins
    "collect_macros",
]
