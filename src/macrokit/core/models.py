"""Macro models: scopes, keys, entries and registry statistics.

Entries come in three independent scopes. A host/name pair can hold at most
one entry per scope, and the scopes never collide:

    GlobalMacro       always resolvable once registered (unless disabled)
    ConditionalMacro  resolvable only while its condition(params) holds
    NamespacedMacro   resolvable only when looked up under its namespace
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

MacroCallable = Callable[..., Any]
"""Macro implementation. Receives call parameters positionally."""

Condition = Callable[[list[Any]], bool]
"""Predicate evaluated against the call-time parameter list."""

ValidationRule = Callable[[Any], bool]
"""Predicate for a single named parameter."""

Host = str | type
"""Host identifier: an opaque string or a class (converted with host_id)."""


class MacroScope(Enum):
    """Independent macro keyspaces."""

    GLOBAL = "global"
    CONDITIONAL = "conditional"
    NAMESPACED = "namespaced"


def host_id(host: Host) -> str:
    """Normalize a host to its string identifier.

    Classes are identified by their fully qualified name so the same class
    maps to the same host across registries.

    Args:
        host: Host string or class.

    Returns:
        Host identifier string (may be empty; validation happens on write).
    """
    if isinstance(host, type):
        return f"{host.__module__}.{host.__qualname__}"
    return host


@dataclass(frozen=True, slots=True)
class MacroKey:
    """Composite identity of a macro, optionally qualified by a namespace."""

    host: str
    name: str
    namespace: str | None = None

    def __str__(self) -> str:
        if self.namespace is None:
            return f"{self.host}::{self.name}"
        return f"{self.namespace}::{self.host}::{self.name}"


@dataclass(slots=True)
class GlobalMacro:
    """Unconditional macro."""

    implementation: MacroCallable

    @property
    def scope(self) -> MacroScope:
        return MacroScope.GLOBAL


@dataclass(slots=True)
class ConditionalMacro:
    """Macro gated by a predicate over the call parameters."""

    implementation: MacroCallable
    condition: Condition

    @property
    def scope(self) -> MacroScope:
        return MacroScope.CONDITIONAL

    def applies(self, params: list[Any] | None = None) -> bool:
        """Evaluate the condition against call parameters (default: none).

        A condition that looks up a missing parameter (IndexError, KeyError)
        does not apply. Other exceptions propagate.
        """
        try:
            return bool(self.condition(list(params) if params is not None else []))
        except LookupError:
            return False


@dataclass(slots=True)
class NamespacedMacro:
    """Macro visible only under its namespace."""

    implementation: MacroCallable
    namespace: str

    @property
    def scope(self) -> MacroScope:
        return MacroScope.NAMESPACED


MacroEntry = GlobalMacro | ConditionalMacro | NamespacedMacro


@dataclass(slots=True, frozen=True)
class MacroStatistics:
    """Entry counts per scope.

    Disabled flags are reported but not part of total, which counts
    registered entries across the three scopes.
    """

    global_count: int = 0
    conditional: int = 0
    namespaced: int = 0
    disabled: int = 0

    @property
    def total(self) -> int:
        return self.global_count + self.conditional + self.namespaced

    def to_dict(self) -> dict[str, int]:
        """Convert to a plain dict keyed by scope name."""
        return {
            "global": self.global_count,
            "conditional": self.conditional,
            "namespaced": self.namespaced,
            "disabled": self.disabled,
            "total": self.total,
        }


@dataclass(slots=True, frozen=True)
class MacroDefinition:
    """Snapshot of a committed builder draft.

    Attributes:
        host: Host identifier the macro was registered on.
        name: Macro name.
        scope: Scope the macro was committed into.
        namespace: Namespace for namespaced macros, None otherwise.
        description: Free-form description.
        tags: Tags in the order they were added (duplicates removed).
        priority: Ordering hint for tag queries (higher first).
        metadata: Arbitrary metadata.
        validation_rules: Parameter name -> predicate.
    """

    host: str
    name: str
    scope: MacroScope
    namespace: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    priority: int = 0
    metadata: Mapping[str, Any] = field(default_factory=dict)
    validation_rules: Mapping[str, ValidationRule] = field(default_factory=dict)

    @property
    def key(self) -> MacroKey:
        return MacroKey(self.host, self.name, self.namespace)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


@runtime_checkable
class MacroProvider(Protocol):
    """Object exporting named macros for mixin registration."""

    def exports_macros(self) -> Mapping[str, MacroCallable]: ...
