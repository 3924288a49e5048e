"""Fluent macro construction.

Usage:
    (
        registry.builder("Api", "purge")
        .implement(purge)
        .in_namespace("admin")
        .describe("Drop cached responses")
        .tag("maintenance")
        .register()
    )

    # Decorated implementations (last decorator call wins, they do not stack)
    registry.builder("Geo", "lookup").cached(lookup, ttl=60).register()
    registry.builder("Geo", "resolve").logged(resolve, level="info").register()
"""

from __future__ import annotations

import logging
import time
from typing import Any, Self

from macrokit.builder.decorators import Clock, TTLCache, make_cached, make_chainable, make_logged
from macrokit.config import MacroSettings
from macrokit.core.errors import InvalidMacroError
from macrokit.core.models import (
    Condition,
    Host,
    MacroCallable,
    MacroDefinition,
    MacroScope,
    ValidationRule,
    host_id,
)
from macrokit.registry import MacroRegistry, get_registry
from macrokit.tracing import CallRecorder


def _require_callable(value: Any, what: str) -> None:
    if not callable(value):
        raise InvalidMacroError(f"{what} must be callable, got {type(value).__name__}")


class MacroBuilder:
    """Mutable draft of one macro, committed once by register().

    Args:
        host: Host (string or class) the macro is for.
        name: Macro name.
        registry: Registry to commit into. Defaults to the process registry.
        settings: Defaults for cached()/logged(). Defaults to the registry's.
        clock: Time source for cached() expiry.
    """

    def __init__(
        self,
        host: Host,
        name: str,
        registry: MacroRegistry | None = None,
        settings: MacroSettings | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._registry = registry if registry is not None else get_registry()
        self._settings = settings if settings is not None else self._registry.settings
        self._clock = clock
        self._host = host_id(host)
        self._name = name
        self._implementation: MacroCallable | None = None
        self._condition: Condition | None = None
        self._namespace: str | None = None
        self._overwrite = False
        self._metadata: dict[str, Any] = {}
        self._validation_rules: dict[str, ValidationRule] = {}
        self._description: str | None = None
        self._tags: list[str] = []
        self._priority = 0
        self._registered = False

    @property
    def host(self) -> str:
        return self._host

    @property
    def name(self) -> str:
        return self._name

    @property
    def implementation(self) -> MacroCallable | None:
        return self._implementation

    @property
    def scope(self) -> MacroScope:
        """Scope register() will commit into."""
        if self._condition is not None:
            return MacroScope.CONDITIONAL
        if self._namespace is not None:
            return MacroScope.NAMESPACED
        return MacroScope.GLOBAL

    # --- Fluent setters ---

    def implement(self, callback: MacroCallable) -> Self:
        _require_callable(callback, "Implementation")
        self._implementation = callback
        return self

    def when(self, condition: Condition) -> Self:
        """Make the macro conditional on condition(params)."""
        _require_callable(condition, "Condition")
        self._condition = condition
        return self

    def with_metadata(self, metadata: dict[str, Any]) -> Self:
        self._metadata.update(metadata)
        return self

    def add_metadata(self, key: str, value: Any) -> Self:
        self._metadata[key] = value
        return self

    def overwrite(self, overwrite: bool = True) -> Self:
        self._overwrite = overwrite
        return self

    def in_namespace(self, namespace: str) -> Self:
        if not namespace:
            raise InvalidMacroError("Namespace cannot be empty")
        self._namespace = namespace
        return self

    def validate_with(self, rules: dict[str, ValidationRule]) -> Self:
        for rule in rules.values():
            _require_callable(rule, "Validation rule")
        self._validation_rules.update(rules)
        return self

    def validate_parameter(self, parameter: str, rule: ValidationRule) -> Self:
        _require_callable(rule, "Validation rule")
        self._validation_rules[parameter] = rule
        return self

    def describe(self, description: str) -> Self:
        self._description = description
        return self

    def tag(self, *tags: str) -> Self:
        self._tags.extend(tags)
        return self

    def priority(self, priority: int) -> Self:
        self._priority = priority
        return self

    # --- Decorators: each replaces the implementation ---

    def chainable(self, callback: MacroCallable) -> Self:
        """Use callback, returning this builder whenever it returns None."""
        _require_callable(callback, "Implementation")
        self._implementation = make_chainable(callback, self)
        return self

    def cached(self, callback: MacroCallable, ttl: int | None = None) -> Self:
        """Use callback memoized per JSON-encoded parameters.

        Args:
            callback: Implementation to memoize.
            ttl: Seconds a result stays cached; 0 caches forever. Defaults to
                settings.default_cache_ttl.
        """
        _require_callable(callback, "Implementation")
        cache = TTLCache(self._settings.default_cache_ttl if ttl is None else ttl, clock=self._clock)
        self._implementation = make_cached(callback, cache)
        return self

    def logged(
        self,
        callback: MacroCallable,
        level: str | None = None,
        recorder: CallRecorder | None = None,
    ) -> Self:
        """Use callback, logging each execution.

        Args:
            callback: Implementation to log.
            level: Level name for the start/success records. Defaults to
                settings.default_log_level. Failures always log at ERROR.
            recorder: Optional CallRecorder receiving a CallRecord per call.
        """
        _require_callable(callback, "Implementation")
        self._implementation = make_logged(
            callback,
            host=self._host,
            name=self._name,
            level=level if level is not None else self._settings.default_log_level,
            logger=logging.getLogger(self._settings.call_logger),
            recorder=recorder,
        )
        return self

    # --- Terminal ---

    def _existing_conflict(self) -> str | None:
        store = self._registry.store
        scope = self.scope
        if not store.contains(scope, self._host, self._name, self._namespace):
            return None
        if scope is MacroScope.CONDITIONAL:
            return f"Conditional macro '{self._name}' already exists for class '{self._host}'"
        if scope is MacroScope.NAMESPACED:
            return (
                f"Namespaced macro '{self._name}' already exists for class '{self._host}' "
                f"in namespace '{self._namespace}'"
            )
        return f"Macro '{self._name}' already exists for class '{self._host}'"

    def register(self) -> MacroDefinition:
        """Commit the draft into the registry.

        Returns:
            Snapshot of the registered definition.

        Raises:
            InvalidMacroError: If no implementation was set, the draft was
                already registered, or the macro exists in the target scope
                and overwrite() was not enabled.
        """
        if self._registered:
            raise InvalidMacroError(f"Macro '{self._name}' has already been registered by this builder")
        if self._implementation is None:
            raise InvalidMacroError(f"Macro '{self._name}' must have an implementation")
        if not self._overwrite:
            conflict = self._existing_conflict()
            if conflict is not None:
                raise InvalidMacroError(conflict)

        if self._condition is not None:
            self._registry.register_conditional(self._host, self._name, self._implementation, self._condition)
        elif self._namespace is not None:
            self._registry.register_namespaced(self._namespace, self._host, self._name, self._implementation)
        else:
            self._registry.register(self._host, self._name, self._implementation)

        definition = MacroDefinition(
            host=self._host,
            name=self._name,
            scope=self.scope,
            namespace=self._namespace if self.scope is MacroScope.NAMESPACED else None,
            description=self._description,
            tags=tuple(dict.fromkeys(self._tags)),
            priority=self._priority,
            metadata=dict(self._metadata),
            validation_rules=dict(self._validation_rules),
        )
        self._registry.store.put_definition(definition)
        self._registered = True
        return definition

    def __repr__(self) -> str:
        return f"MacroBuilder(host={self._host!r}, name={self._name!r}, scope={self.scope.value})"
