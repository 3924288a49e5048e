"""Tracing infrastructure for logged macro calls.

Usage:
    from macrokit.tracing import InMemoryCallRecorder

    recorder = InMemoryCallRecorder()
    registry.builder("Greeter", "shout").logged(shout, recorder=recorder).register()
"""

from macrokit.tracing.memory import InMemoryCallRecorder
from macrokit.tracing.models import CallRecord
from macrokit.tracing.protocol import CallRecorder

__all__ = [
    "CallRecord",
    "CallRecorder",
    "InMemoryCallRecorder",
]
