"""Collect macros exported by a mixin source object."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from types import FunctionType
from typing import Any

from macrokit.core.models import MacroCallable, MacroProvider


def _is_zero_arg(method: Any) -> bool:
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in signature.parameters.values()
    )


def collect_macros(
    source: object, skip: Callable[[str], bool] | None = None
) -> dict[str, MacroCallable]:
    """Gather (name, callable) pairs from a mixin source.

    Sources implementing MacroProvider are asked via ``exports_macros()``.
    Any other object is inspected: each public or single-underscore method
    that takes no arguments is called, and its result is kept when callable.
    Name-mangled (``__name``) methods and properties are never touched.

    Args:
        source: Mixin object.
        skip: Names for which this returns True are left out. Their
            exporting methods are not called.

    Returns:
        Mapping of macro name to implementation.
    """
    if isinstance(source, MacroProvider):
        return {
            name: macro
            for name, macro in source.exports_macros().items()
            if skip is None or not skip(name)
        }

    cls = type(source)
    # Dunders and name-mangled privates are never exported
    hidden = ("__", *(f"_{klass.__name__.lstrip('_')}__" for klass in cls.__mro__))
    macros: dict[str, MacroCallable] = {}
    for name in dir(cls):
        if name.startswith(hidden) or (skip is not None and skip(name)):
            continue
        if not isinstance(inspect.getattr_static(cls, name), (FunctionType, classmethod)):
            continue
        member = getattr(source, name)
        if not _is_zero_arg(member):
            continue
        result = member()
        if callable(result):
            macros[name] = result
    return macros
