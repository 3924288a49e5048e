"""Macroable host classes.

Usage:
    class Greeter(Macroable):
        def __init__(self, name: str) -> None:
            self.name = name

    Greeter.register_macro("shout", lambda text: text.upper() + "!")
    Greeter.shout("hi")  # "HI!"

    @Greeter.macro("greet")
    def greet(self, greeting: str) -> str:
        return f"{greeting}, {self.name}"

    Greeter("Ada").greet("Hello")  # "Hello, Ada"

Macros are inherited: lookups walk the MRO and resolve each class in turn
(global entry first, then a conditional entry whose condition holds for the
call parameters). The first class that resolves wins, so a subclass macro
shadows its parent's. A class whose macro is disabled is skipped, letting an
ancestor's macro show through.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, ClassVar, overload

from macrokit.core.binding import invoke
from macrokit.core.errors import MacroNotFoundError
from macrokit.core.mixins import collect_macros
from macrokit.core.models import MacroCallable, MacroScope, host_id
from macrokit.registry import MacroRegistry, get_registry


def _not_found(cls: type, name: str) -> MacroNotFoundError:
    return MacroNotFoundError(
        f"Method '{name}' does not exist on {cls.__qualname__}",
        host=host_id(cls),
        name=name,
    )


def _dispatcher(owner: Any, name: str, instance: Any) -> Callable[..., Any]:
    """Callable resolving name against the parameters it is called with."""

    def dispatch(*params: Any) -> Any:
        return owner.call_macro(name, list(params), instance)

    dispatch.__name__ = name
    dispatch.__qualname__ = f"{owner.__qualname__}.{name}"
    return dispatch


class MacroableMeta(type):
    """Metaclass routing unknown class attributes to macros (static calls)."""

    def __getattr__(cls, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        if not cls.has_macro(name):  # type: ignore[attr-defined]
            raise _not_found(cls, name)
        return _dispatcher(cls, name, None)


class Macroable(metaclass=MacroableMeta):
    """Base class for hosts that accept macros at runtime.

    Macros live in a MacroRegistry under the class's fully qualified name,
    in the global or conditional scope. Set ``__macro_registry__`` on a
    subclass to use a specific registry; otherwise the process default is used.
    """

    __macro_registry__: ClassVar[MacroRegistry | None] = None

    @classmethod
    def macro_registry(cls) -> MacroRegistry:
        registry = cls.__macro_registry__
        return registry if registry is not None else get_registry()

    @classmethod
    def register_macro(cls, name: str, macro: MacroCallable) -> None:
        """Register a macro on this exact class."""
        cls.macro_registry().register(cls, name, macro)

    @overload
    @classmethod
    def macro(cls, name: str, macro: MacroCallable) -> MacroCallable: ...

    @overload
    @classmethod
    def macro(cls, name: str, macro: None = None) -> Callable[[MacroCallable], MacroCallable]: ...

    @classmethod
    def macro(
        cls, name: str, macro: MacroCallable | None = None
    ) -> MacroCallable | Callable[[MacroCallable], MacroCallable]:
        """Register a macro directly or as a decorator.

        Supports two forms:
            Greeter.macro("shout", shout)
            @Greeter.macro("shout")
        """

        def decorator(fn: MacroCallable) -> MacroCallable:
            cls.register_macro(name, fn)
            return fn

        if macro is None:
            return decorator
        return decorator(macro)

    @classmethod
    def _macro_hosts(cls, name: str) -> Iterator[type]:
        """Macroable classes in the MRO where name is not disabled."""
        registry = cls.macro_registry()
        for klass in cls.__mro__:
            if isinstance(klass, MacroableMeta) and not registry.is_disabled(klass, name):
                yield klass

    @classmethod
    def get_macro(cls, name: str, params: list[Any] | None = None) -> MacroCallable | None:
        """Resolve a macro along the MRO for the given call parameters.

        Args:
            name: Macro name.
            params: Call parameters, used to evaluate conditional macros.

        Returns:
            The first implementation that resolves, or None.
        """
        registry = cls.macro_registry()
        for klass in cls._macro_hosts(name):
            macro = registry.resolve(klass, name, params)
            if macro is not None:
                return macro
        return None

    @classmethod
    def has_macro(cls, name: str, params: list[Any] | None = None) -> bool:
        """Check that some class in the MRO provides an enabled macro.

        Without params a conditional macro counts whatever its condition
        would decide; with params it must apply to them.
        """
        if params is not None:
            return cls.get_macro(name, params) is not None
        store = cls.macro_registry().store
        return any(
            store.contains(scope, host_id(klass), name)
            for klass in cls._macro_hosts(name)
            for scope in (MacroScope.GLOBAL, MacroScope.CONDITIONAL)
        )

    @classmethod
    def get_macros(cls) -> dict[str, MacroCallable]:
        """Enabled global macros registered on this exact class."""
        return cls.macro_registry().get_all_macros(cls)[MacroScope.GLOBAL.value]

    @classmethod
    def call_macro(cls, name: str, params: list[Any] | None = None, instance: Any = None) -> Any:
        """Invoke a macro with the instance (or this class) as context.

        Raises:
            MacroNotFoundError: If no class in the MRO resolves the macro for params.
        """
        macro = cls.get_macro(name, params)
        if macro is None:
            raise _not_found(cls, name)
        return invoke(macro, params, instance if instance is not None else cls)

    @classmethod
    def mixin(cls, source: object, replace: bool = True) -> list[str]:
        """Register the macros exported by source on this class.

        Args:
            source: MacroProvider, or an object whose zero-argument methods
                return callables.
            replace: When False, names this class already provides are
                skipped without calling their exporting method.

        Returns:
            Names that were registered.
        """
        macros = collect_macros(source, skip=None if replace else cls.has_macro)
        for name, macro in macros.items():
            cls.register_macro(name, macro)
        return list(macros)

    @classmethod
    def flush_macros(cls) -> None:
        """Remove every macro of this exact class (ancestors keep theirs)."""
        cls.macro_registry().flush(cls)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        if not type(self).has_macro(name):
            raise _not_found(type(self), name)
        return _dispatcher(type(self), name, self)
