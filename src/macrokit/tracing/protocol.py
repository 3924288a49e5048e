"""Protocols for macro call tracing.

These protocols define the interface for recorder backends, allowing
different implementations (in-memory, file, database).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from macrokit.tracing.models import CallRecord


@runtime_checkable
class CallRecorder(Protocol):
    """Protocol for storing records of logged macro calls.

    Usage:
        recorder = InMemoryCallRecorder(max_records=100)

        registry.builder(Greeter, "shout").logged(shout, recorder=recorder).register()
        Greeter.shout("hi")

        [record] = recorder.records()
    """

    def record(self, record: CallRecord) -> None:
        """Store a call record.

        Note:
            Implementations may be bounded and evict the oldest records.
        """
        ...

    def records(self) -> list[CallRecord]:
        """Return stored records, oldest first."""
        ...

    def clear(self) -> None:
        """Drop all stored records."""
        ...

    @property
    def record_count(self) -> int:
        """Number of records currently stored."""
        ...
