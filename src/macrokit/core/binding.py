"""Invocation binder: attach a calling context to a macro and invoke it.

Macros receive their context explicitly. A callable opts in by declaring a
leading positional parameter named ``self`` or ``cls``, the same way a method
spells its receiver:

    registry.register("Greeter", "shout", lambda text: text.upper() + "!")
    registry.register("Greeter", "whoami", lambda self: self)

For instance calls the context is the instance; for static calls it is the
host (class or host id string).
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Sequence
from typing import Any

_RECEIVER_NAMES = frozenset({"self", "cls"})
_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def accepts_context(fn: Callable[..., Any]) -> bool:
    """Check whether a callable takes the binding context as first argument.

    Wrappers built with functools.wraps are inspected through ``__wrapped__``,
    so decorated macros report what the wrapped callback expects.

    Args:
        fn: Callable to inspect.

    Returns:
        True if the first positional parameter is named self or cls.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures never take a context
        return False

    for parameter in signature.parameters.values():
        if parameter.kind in _POSITIONAL:
            return parameter.name in _RECEIVER_NAMES
        return False
    return False


def invoke(fn: Callable[..., Any], params: Sequence[Any] | None = None, context: Any = None) -> Any:
    """Invoke a macro with positional parameters and an optional context.

    Exceptions raised by the macro propagate unchanged.

    Args:
        fn: Resolved macro implementation.
        params: Ordered call parameters.
        context: Calling instance, or the host for static calls.

    Returns:
        Whatever the macro returns.
    """
    args = list(params) if params is not None else []
    if accepts_context(fn):
        return fn(context, *args)
    return fn(*args)


def bind(fn: Callable[..., Any], context: Any) -> Callable[..., Any]:
    """Return a callable with the context pre-applied where the macro wants it."""
    if accepts_context(fn):
        return functools.partial(fn, context)
    return fn
