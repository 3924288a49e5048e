"""In-memory registry store.

Simple dict-based storage for macro entries, one keyspace per scope.

Structure:
    _global[host][name] = GlobalMacro
    _conditional[host][name] = ConditionalMacro
    _namespaced[namespace][host][name] = NamespacedMacro
    _disabled[host] = {name, ...}

Nothing is evicted implicitly; every removal goes through remove/flush.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, nullcontext
from typing import Any

from macrokit.core.errors import InvalidMacroError
from macrokit.core.models import (
    ConditionalMacro,
    GlobalMacro,
    MacroDefinition,
    MacroEntry,
    MacroScope,
    MacroStatistics,
    NamespacedMacro,
)

_DefinitionKey = tuple[MacroScope, str | None, str, str]


def _require(value: str, what: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidMacroError(f"{what} cannot be empty")


class RegistryStore:
    """Holds macro entries, disabled flags and builder definitions.

    Args:
        thread_safe: Guard every operation with a re-entrant lock. Conditions
            are evaluated outside the lock.
    """

    def __init__(self, thread_safe: bool = False) -> None:
        self._lock: AbstractContextManager[Any] = threading.RLock() if thread_safe else nullcontext()
        self._global: dict[str, dict[str, GlobalMacro]] = {}
        self._conditional: dict[str, dict[str, ConditionalMacro]] = {}
        self._namespaced: dict[str, dict[str, dict[str, NamespacedMacro]]] = {}
        self._disabled: dict[str, set[str]] = {}
        self._definitions: dict[_DefinitionKey, MacroDefinition] = {}

    @property
    def thread_safe(self) -> bool:
        return not isinstance(self._lock, nullcontext)

    def _table(self, scope: MacroScope, namespace: str | None) -> dict[str, dict[str, Any]] | None:
        """Host -> name -> entry table for a scope (None if namespace unknown)."""
        if scope is MacroScope.GLOBAL:
            return self._global
        if scope is MacroScope.CONDITIONAL:
            return self._conditional
        if namespace is None:
            return None
        return self._namespaced.get(namespace)

    # --- Writes ---

    def put(self, host: str, name: str, entry: MacroEntry) -> None:
        """Insert or overwrite an entry in the entry's scope.

        Args:
            host: Host identifier.
            name: Macro name.
            entry: Entry to store; its type selects the scope.

        Raises:
            InvalidMacroError: If host, name or namespace is empty, or the
                implementation/condition is not callable.
        """
        _require(host, "Host name")
        _require(name, "Macro name")
        if not callable(entry.implementation):
            raise InvalidMacroError(f"Macro '{name}' implementation must be callable")

        with self._lock:
            if isinstance(entry, NamespacedMacro):
                _require(entry.namespace, "Namespace")
                self._namespaced.setdefault(entry.namespace, {}).setdefault(host, {})[name] = entry
            elif isinstance(entry, ConditionalMacro):
                if not callable(entry.condition):
                    raise InvalidMacroError(f"Macro '{name}' condition must be callable")
                self._conditional.setdefault(host, {})[name] = entry
            else:
                self._global.setdefault(host, {})[name] = entry
            namespace = entry.namespace if isinstance(entry, NamespacedMacro) else None
            self._definitions.pop((entry.scope, namespace, host, name), None)

    def remove(self, scope: MacroScope, host: str, name: str, namespace: str | None = None) -> bool:
        """Remove one entry. Returns True if it existed."""
        with self._lock:
            table = self._table(scope, namespace)
            if table is None or name not in table.get(host, {}):
                return False
            del table[host][name]
            if not table[host]:
                del table[host]
            if scope is MacroScope.NAMESPACED and namespace is not None and not self._namespaced[namespace]:
                del self._namespaced[namespace]
            self._definitions.pop((scope, namespace, host, name), None)
            return True

    def remove_namespace(self, namespace: str) -> int:
        """Remove every entry under a namespace. Returns the number removed."""
        with self._lock:
            hosts = self._namespaced.pop(namespace, {})
            for key in [k for k in self._definitions if k[0] is MacroScope.NAMESPACED and k[1] == namespace]:
                del self._definitions[key]
            return sum(len(names) for names in hosts.values())

    def flush(self, host: str | None = None) -> None:
        """Clear one host across every scope, or the entire store.

        Args:
            host: Host to clear. None clears everything, disabled flags included.
        """
        with self._lock:
            if host is None:
                self._global.clear()
                self._conditional.clear()
                self._namespaced.clear()
                self._disabled.clear()
                self._definitions.clear()
                return

            self._global.pop(host, None)
            self._conditional.pop(host, None)
            self._disabled.pop(host, None)
            for namespace in list(self._namespaced):
                self._namespaced[namespace].pop(host, None)
                if not self._namespaced[namespace]:
                    del self._namespaced[namespace]
            for key in [k for k in self._definitions if k[2] == host]:
                del self._definitions[key]

    # --- Disabled flags ---

    def disable(self, host: str, name: str) -> None:
        with self._lock:
            self._disabled.setdefault(host, set()).add(name)

    def enable(self, host: str, name: str) -> None:
        with self._lock:
            names = self._disabled.get(host)
            if names is None:
                return
            names.discard(name)
            if not names:
                del self._disabled[host]

    def is_disabled(self, host: str, name: str) -> bool:
        with self._lock:
            return name in self._disabled.get(host, ())

    # --- Reads ---

    def get(
        self, scope: MacroScope, host: str, name: str, namespace: str | None = None
    ) -> MacroEntry | None:
        """Get an entry regardless of disabled state. Never raises."""
        with self._lock:
            table = self._table(scope, namespace)
            if table is None:
                return None
            return table.get(host, {}).get(name)

    def contains(self, scope: MacroScope, host: str, name: str, namespace: str | None = None) -> bool:
        """Raw key presence, ignoring disabled flags and conditions."""
        return self.get(scope, host, name, namespace) is not None

    def exists(
        self,
        scope: MacroScope,
        host: str,
        name: str,
        params: list[Any] | None = None,
        namespace: str | None = None,
    ) -> bool:
        """Check that an entry is present, enabled and (if conditional) applies.

        For the conditional scope the stored condition is evaluated against
        ``params`` (default: no parameters), so the answer can differ per call.
        """
        with self._lock:
            entry = self.get(scope, host, name, namespace)
            if entry is None or self.is_disabled(host, name):
                return False
        if isinstance(entry, ConditionalMacro):
            return entry.applies(params)
        return True

    def entries(self, scope: MacroScope, host: str, namespace: str | None = None) -> dict[str, MacroEntry]:
        """Copy of name -> entry for one host in one scope."""
        with self._lock:
            table = self._table(scope, namespace)
            if table is None:
                return {}
            return dict(table.get(host, {}))

    def namespaces(self) -> list[str]:
        with self._lock:
            return list(self._namespaced)

    def hosts(self) -> list[str]:
        """Hosts with at least one global, conditional or namespaced entry."""
        with self._lock:
            seen = dict.fromkeys(self._global)
            seen.update(dict.fromkeys(self._conditional))
            for hosts in self._namespaced.values():
                seen.update(dict.fromkeys(hosts))
            return list(seen)

    def statistics(self) -> MacroStatistics:
        """Count entries per scope plus disabled flags."""
        with self._lock:
            return MacroStatistics(
                global_count=sum(len(names) for names in self._global.values()),
                conditional=sum(len(names) for names in self._conditional.values()),
                namespaced=sum(
                    len(names) for hosts in self._namespaced.values() for names in hosts.values()
                ),
                disabled=sum(len(names) for names in self._disabled.values()),
            )

    # --- Builder definitions ---

    def put_definition(self, definition: MacroDefinition) -> None:
        with self._lock:
            key = (definition.scope, definition.namespace, definition.host, definition.name)
            self._definitions[key] = definition

    def get_definition(
        self, scope: MacroScope, host: str, name: str, namespace: str | None = None
    ) -> MacroDefinition | None:
        with self._lock:
            return self._definitions.get((scope, namespace, host, name))

    def definitions(self) -> Iterator[MacroDefinition]:
        """Iterate over a snapshot of stored definitions."""
        with self._lock:
            snapshot = list(self._definitions.values())
        yield from snapshot
