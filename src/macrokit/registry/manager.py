"""Macro registry: registration, resolution and invocation.

Usage:
    registry = MacroRegistry()
    registry.register("Greeter", "shout", lambda text: text.upper() + "!")
    registry.call("Greeter", "shout", ["hi"])  # "HI!"

    registry.register_namespaced("admin", "Api", "purge", purge)
    registry.call_namespaced("admin", "Api", "purge")

    registry.register_conditional("App", "beta", beta, lambda params: params[0] == "beta-user")
    registry.call("App", "beta", ["beta-user"])

Resolution order for plain calls: a disabled name never resolves; otherwise the
global entry wins, and the conditional entry is used only when no global entry
exists and its condition holds for the call parameters. Namespaced entries are
only reachable through the namespaced calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from macrokit.config import MacroSettings, get_settings
from macrokit.core.binding import invoke
from macrokit.core.errors import MacroNotFoundError
from macrokit.core.mixins import collect_macros
from macrokit.core.models import (
    Condition,
    ConditionalMacro,
    GlobalMacro,
    Host,
    MacroCallable,
    MacroDefinition,
    MacroScope,
    MacroStatistics,
    NamespacedMacro,
    host_id,
)
from macrokit.registry.store import RegistryStore

if TYPE_CHECKING:
    from macrokit.builder import MacroBuilder

logger = logging.getLogger(__name__)


class MacroRegistry:
    """Process-level registry of macros keyed by (host, name).

    Hosts are strings or classes; classes are keyed by their fully qualified
    name. Create one per application (or per test) and inject it where needed,
    or use the process default from get_registry().

    Args:
        store: Backing store. Defaults to a new RegistryStore.
        settings: Settings used for the default store and for builders.
    """

    def __init__(self, store: RegistryStore | None = None, settings: MacroSettings | None = None) -> None:
        self._settings = settings if settings is not None else get_settings()
        self._store = store if store is not None else RegistryStore(thread_safe=self._settings.thread_safe)

    @property
    def store(self) -> RegistryStore:
        return self._store

    @property
    def settings(self) -> MacroSettings:
        return self._settings

    # --- Registration ---

    def register(self, host: Host, name: str, macro: MacroCallable) -> None:
        """Register a global macro, replacing any existing one.

        Raises:
            InvalidMacroError: If host or name is empty.
        """
        hid = host_id(host)
        self._store.put(hid, name, GlobalMacro(macro))
        logger.debug("Registered global macro %s::%s", hid, name)

    def register_conditional(self, host: Host, name: str, macro: MacroCallable, condition: Condition) -> None:
        """Register a macro that resolves only while condition(params) is true."""
        hid = host_id(host)
        self._store.put(hid, name, ConditionalMacro(macro, condition))
        logger.debug("Registered conditional macro %s::%s", hid, name)

    def register_namespaced(self, namespace: str, host: Host, name: str, macro: MacroCallable) -> None:
        """Register a macro visible only under a namespace.

        Raises:
            InvalidMacroError: If namespace, host or name is empty.
        """
        hid = host_id(host)
        self._store.put(hid, name, NamespacedMacro(macro, namespace))
        logger.debug("Registered namespaced macro %s::%s::%s", namespace, hid, name)

    def mixin(self, host: Host, source: object, replace: bool = True) -> list[str]:
        """Register every macro exported by a mixin source as a global macro.

        Args:
            host: Host to register on.
            source: MacroProvider, or an object whose zero-argument methods
                return callables.
            replace: When False, names that already have a global macro are skipped.

        Returns:
            Names that were registered.
        """
        hid = host_id(host)
        skip = None if replace else (lambda name: self._store.contains(MacroScope.GLOBAL, hid, name))
        macros = collect_macros(source, skip=skip)
        for name, macro in macros.items():
            self.register(hid, name, macro)
        return list(macros)

    # --- Presence checks ---

    def has_global_macro(self, host: Host, name: str) -> bool:
        return self._store.exists(MacroScope.GLOBAL, host_id(host), name)

    def has_conditional_macro(self, host: Host, name: str, params: list[Any] | None = None) -> bool:
        """Check a conditional macro exists, is enabled and applies to params."""
        return self._store.exists(MacroScope.CONDITIONAL, host_id(host), name, params)

    def has_namespaced_macro(self, namespace: str, host: Host, name: str) -> bool:
        return self._store.exists(MacroScope.NAMESPACED, host_id(host), name, namespace=namespace)

    # --- Raw access ---

    def get_global_macro(self, host: Host, name: str) -> MacroCallable | None:
        entry = self._store.get(MacroScope.GLOBAL, host_id(host), name)
        return entry.implementation if entry is not None else None

    def get_conditional_macro(self, host: Host, name: str) -> MacroCallable | None:
        entry = self._store.get(MacroScope.CONDITIONAL, host_id(host), name)
        return entry.implementation if entry is not None else None

    def get_namespaced_macro(self, namespace: str, host: Host, name: str) -> MacroCallable | None:
        entry = self._store.get(MacroScope.NAMESPACED, host_id(host), name, namespace)
        return entry.implementation if entry is not None else None

    def get_all_macros(self, host: Host) -> dict[str, dict[str, MacroCallable]]:
        """Enabled global and conditional macros of a host, keyed by scope."""
        hid = host_id(host)
        return {
            scope.value: {
                name: entry.implementation
                for name, entry in self._store.entries(scope, hid).items()
                if not self._store.is_disabled(hid, name)
            }
            for scope in (MacroScope.GLOBAL, MacroScope.CONDITIONAL)
        }

    def get_all_namespaced_macros(self, namespace: str, host: Host) -> dict[str, MacroCallable]:
        """Enabled macros of a host under one namespace."""
        hid = host_id(host)
        return {
            name: entry.implementation
            for name, entry in self._store.entries(MacroScope.NAMESPACED, hid, namespace).items()
            if not self._store.is_disabled(hid, name)
        }

    def get_namespaces(self) -> list[str]:
        return self._store.namespaces()

    # --- Resolution ---

    def resolve(self, host: Host, name: str, params: list[Any] | None = None) -> MacroCallable | None:
        """Find the callable for a plain (non-namespaced) call.

        Args:
            host: Host to resolve on.
            name: Macro name.
            params: Call parameters, used to evaluate conditional macros.

        Returns:
            The implementation, or None when nothing resolves. Never raises
            for missing macros.
        """
        hid = host_id(host)
        if self._store.is_disabled(hid, name):
            return None
        entry = self._store.get(MacroScope.GLOBAL, hid, name)
        if entry is not None:
            return entry.implementation
        return self.resolve_conditional(hid, name, params)

    def resolve_global(self, host: Host, name: str) -> MacroCallable | None:
        """Resolve only the global entry (None if absent or disabled)."""
        hid = host_id(host)
        if self._store.is_disabled(hid, name):
            return None
        return self.get_global_macro(hid, name)

    def resolve_conditional(self, host: Host, name: str, params: list[Any] | None = None) -> MacroCallable | None:
        """Resolve only the conditional entry, if its condition holds for params."""
        hid = host_id(host)
        if not self._store.exists(MacroScope.CONDITIONAL, hid, name, params):
            return None
        return self.get_conditional_macro(hid, name)

    def resolve_namespaced(self, namespace: str, host: Host, name: str) -> MacroCallable | None:
        """Resolve a namespaced entry (None if absent or disabled)."""
        hid = host_id(host)
        if not self._store.exists(MacroScope.NAMESPACED, hid, name, namespace=namespace):
            return None
        return self.get_namespaced_macro(namespace, hid, name)

    # --- Invocation ---

    def call(self, host: Host, name: str, params: list[Any] | None = None, instance: Any = None) -> Any:
        """Resolve and invoke a macro.

        Args:
            host: Host to call on.
            name: Macro name.
            params: Positional call parameters.
            instance: Calling instance; the host is the context when omitted.

        Returns:
            The macro's return value.

        Raises:
            MacroNotFoundError: If no macro resolves.
        """
        macro = self.resolve(host, name, params)
        if macro is None:
            raise MacroNotFoundError.for_method(host_id(host), name)
        return invoke(macro, params, instance if instance is not None else host)

    def call_namespaced(
        self,
        namespace: str,
        host: Host,
        name: str,
        params: list[Any] | None = None,
        instance: Any = None,
    ) -> Any:
        """Resolve and invoke a namespaced macro.

        Raises:
            MacroNotFoundError: If the namespaced macro is absent or disabled.
        """
        macro = self.resolve_namespaced(namespace, host, name)
        if macro is None:
            raise MacroNotFoundError.for_namespaced(namespace, host_id(host), name)
        return invoke(macro, params, instance if instance is not None else host)

    # --- Disabled flags ---

    def disable(self, host: Host, name: str) -> None:
        """Stop (host, name) from resolving in every scope until enabled."""
        hid = host_id(host)
        self._store.disable(hid, name)
        logger.debug("Disabled macro %s::%s", hid, name)

    def enable(self, host: Host, name: str) -> None:
        hid = host_id(host)
        self._store.enable(hid, name)
        logger.debug("Enabled macro %s::%s", hid, name)

    def is_disabled(self, host: Host, name: str) -> bool:
        return self._store.is_disabled(host_id(host), name)

    # --- Removal ---

    def remove(self, host: Host, name: str) -> None:
        """Remove the global and conditional entries and the disabled flag."""
        hid = host_id(host)
        self._store.remove(MacroScope.GLOBAL, hid, name)
        self._store.remove(MacroScope.CONDITIONAL, hid, name)
        self._store.enable(hid, name)
        logger.debug("Removed macro %s::%s", hid, name)

    def remove_conditional(self, host: Host, name: str) -> None:
        self._store.remove(MacroScope.CONDITIONAL, host_id(host), name)

    def remove_namespaced(self, namespace: str, host: Host, name: str) -> None:
        self._store.remove(MacroScope.NAMESPACED, host_id(host), name, namespace)

    def flush(self, host: Host | None = None) -> None:
        """Clear one host's macros in every scope, or the whole registry."""
        if host is None:
            self._store.flush()
            logger.debug("Flushed all macros")
            return
        hid = host_id(host)
        self._store.flush(hid)
        logger.debug("Flushed macros for %s", hid)

    def flush_for_host(self, host: Host) -> None:
        self.flush(host)

    def flush_namespace(self, namespace: str) -> None:
        removed = self._store.remove_namespace(namespace)
        logger.debug("Flushed namespace %s (%d macros)", namespace, removed)

    # --- Introspection ---

    def get_statistics(self) -> MacroStatistics:
        return self._store.statistics()

    def get_definition(
        self,
        host: Host,
        name: str,
        scope: MacroScope = MacroScope.GLOBAL,
        namespace: str | None = None,
    ) -> MacroDefinition | None:
        """Get the builder definition a macro was registered with, if any."""
        return self._store.get_definition(scope, host_id(host), name, namespace)

    def find_by_tag(self, tag: str) -> list[MacroDefinition]:
        """Builder definitions carrying a tag, highest priority first."""
        matches = [d for d in self._store.definitions() if d.has_tag(tag)]
        return sorted(matches, key=lambda d: (-d.priority, d.host, d.name))

    def builder(self, host: Host, name: str) -> MacroBuilder:
        """Start a fluent macro definition bound to this registry."""
        # Late import to avoid circular dependency
        from macrokit.builder import MacroBuilder

        return MacroBuilder(host, name, registry=self)


# Module-level registry instance, created on first use
_registry: MacroRegistry | None = None


def get_registry() -> MacroRegistry:
    """Access the process default registry.

    Returns:
        The default MacroRegistry, created from settings on first access.
    """
    global _registry
    if _registry is None:
        _registry = MacroRegistry()
    return _registry


def set_registry(registry: MacroRegistry | None) -> MacroRegistry | None:
    """Replace the process default registry.

    Args:
        registry: New default, or None to recreate lazily on next access.

    Returns:
        The previous default (None if none was created yet).
    """
    global _registry
    previous = _registry
    _registry = registry
    return previous
