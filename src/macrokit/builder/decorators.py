"""Wrapper factories behind MacroBuilder.chainable/cached/logged.

Each factory returns a functools.wraps wrapper, so the binder sees the
callback's own signature and passes the calling context only when the
callback asks for it. Context is never part of cache keys or log params.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from macrokit.core.binding import accepts_context
from macrokit.core.errors import InvalidMacroError
from macrokit.core.models import MacroCallable
from macrokit.tracing import CallRecord, CallRecorder

Clock = Callable[[], float]


def _split_context(takes_context: bool, args: tuple[Any, ...]) -> list[Any]:
    return list(args[1:] if takes_context and args else args)


def level_number(level: str) -> int:
    """Translate a level name ("debug", "INFO", ...) to its logging number.

    Raises:
        InvalidMacroError: If the name is not a known logging level.
    """
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise InvalidMacroError(f"Unknown log level: {level}")
    return number


def make_chainable(callback: MacroCallable, fallback: Any) -> MacroCallable:
    """Return ``fallback`` whenever the callback returns None."""

    @functools.wraps(callback)
    def chainable(*args: Any) -> Any:
        result = callback(*args)
        if result is None:
            return fallback
        return result

    return chainable


def cache_key(params: Sequence[Any]) -> str:
    """SHA-256 digest of the JSON-encoded parameters.

    Raises:
        TypeError: If a parameter is not JSON serializable.
    """
    payload = json.dumps(list(params))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class TTLCache:
    """Dict cache with per-entry expiry checked on access.

    Args:
        ttl: Seconds an entry stays valid; 0 keeps entries forever.
        clock: Time source in seconds.
    """

    def __init__(self, ttl: int, clock: Clock = time.time) -> None:
        if ttl < 0:
            raise InvalidMacroError(f"Cache TTL must be >= 0, got {ttl}")
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[Any, float | None]] = {}

    @property
    def ttl(self) -> int:
        return self._ttl

    def lookup(self, key: str) -> tuple[bool, Any]:
        """Return (hit, value); expired entries count as misses."""
        cached = self._entries.get(key)
        if cached is None:
            return False, None
        value, expires_at = cached
        if expires_at is not None and expires_at <= self._clock():
            return False, None
        return True, value

    def store(self, key: str, value: Any) -> None:
        expires_at = None if self._ttl == 0 else self._clock() + self._ttl
        self._entries[key] = (value, expires_at)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def make_cached(callback: MacroCallable, cache: TTLCache) -> MacroCallable:
    """Memoize the callback per parameter list in a private TTL cache."""
    takes_context = accepts_context(callback)

    @functools.wraps(callback)
    def cached(*args: Any) -> Any:
        key = cache_key(_split_context(takes_context, args))
        hit, value = cache.lookup(key)
        if hit:
            return value
        result = callback(*args)
        cache.store(key, result)
        return result

    cached.cache = cache  # type: ignore[attr-defined]
    return cached


def make_logged(
    callback: MacroCallable,
    *,
    host: str,
    name: str,
    level: str,
    logger: logging.Logger,
    recorder: CallRecorder | None = None,
) -> MacroCallable:
    """Log every call of the callback before and after it runs.

    Success emits two records at ``level``: one before the call (params,
    start timestamp) and one after (elapsed seconds, result type). Failure
    emits an error record with the traceback and re-raises the exception.
    Structured fields are attached through ``extra`` with a ``macro_`` prefix.

    Raises:
        InvalidMacroError: If ``level`` is not a logging level name.
    """
    levelno = level_number(level)
    takes_context = accepts_context(callback)

    @functools.wraps(callback)
    def logged(*args: Any) -> Any:
        params = _split_context(takes_context, args)
        started_at = time.time()
        start = time.perf_counter()
        logger.log(
            levelno,
            "Executing macro '%s' on '%s'",
            name,
            host,
            extra={
                "macro_host": host,
                "macro_name": name,
                "macro_level": level,
                "macro_params": params,
                "macro_started_at": started_at,
            },
        )
        record = CallRecord(host=host, name=name, level=level, params=params, started_at=started_at)

        try:
            result = callback(*args)
        except Exception as e:
            record.elapsed = time.perf_counter() - start
            record.error = f"{e.__class__.__name__}: {e}"
            logger.error(
                "Macro '%s' execution failed: %s",
                name,
                e,
                exc_info=True,
                extra={"macro_host": host, "macro_name": name, "macro_elapsed": record.elapsed},
            )
            if recorder is not None:
                recorder.record(record)
            raise

        record.elapsed = time.perf_counter() - start
        record.result_type = type(result).__name__
        logger.log(
            levelno,
            "Macro '%s' executed successfully",
            name,
            extra={
                "macro_host": host,
                "macro_name": name,
                "macro_elapsed": record.elapsed,
                "macro_result_type": record.result_type,
            },
        )
        if recorder is not None:
            recorder.record(record)
        return result

    return logged
