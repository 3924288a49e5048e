"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from macrokit import MacroRegistry, MacroSettings, set_registry


@pytest.fixture
def settings():
    """Explicit settings so tests don't depend on MACROKIT_* variables."""
    return MacroSettings(default_cache_ttl=300, default_log_level="debug", thread_safe=True)


@pytest.fixture
def registry(settings):
    """Fresh MacroRegistry instance."""
    return MacroRegistry(settings=settings)


@pytest.fixture(autouse=True)
def default_registry(settings):
    """Isolate the process default registry per test."""
    fresh = MacroRegistry(settings=settings)
    previous = set_registry(fresh)
    yield fresh
    set_registry(previous)


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
