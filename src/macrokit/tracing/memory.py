"""Bounded in-memory call recorder."""

from __future__ import annotations

from collections import deque

from macrokit.tracing.models import CallRecord


class InMemoryCallRecorder:
    """Keeps the most recent call records in memory.

    Args:
        max_records: Maximum records kept; older ones are evicted first.
    """

    def __init__(self, max_records: int = 1000) -> None:
        if max_records < 1:
            raise ValueError(f"max_records must be at least 1, got {max_records}")
        self._records: deque[CallRecord] = deque(maxlen=max_records)

    def record(self, record: CallRecord) -> None:
        self._records.append(record)

    def records(self) -> list[CallRecord]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    @property
    def record_count(self) -> int:
        return len(self._records)

    def failures(self) -> list[CallRecord]:
        """Records of calls that raised."""
        return [r for r in self._records if not r.succeeded]
