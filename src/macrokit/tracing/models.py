"""Data models for macro call tracing.

Records are plain data so any recorder backend can keep them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class CallRecord:
    """Record of a single logged macro invocation.

    Attributes:
        host: Host identifier the macro is registered on.
        name: Macro name.
        level: Log level name used for the call records.
        params: Call parameters (context excluded).
        started_at: Unix timestamp when the call started.
        elapsed: Execution time in seconds.
        result_type: Type name of the returned value, None on failure.
        error: "ExceptionType: message" on failure, None on success.

    Example:
        record = CallRecord(
            host="Greeter",
            name="shout",
            level="debug",
            params=["hi"],
            started_at=1704067200.0,
            elapsed=0.0004,
            result_type="str",
        )
    """

    host: str
    name: str
    level: str
    params: list[Any] = field(default_factory=list)
    started_at: float = 0.0
    elapsed: float = 0.0
    result_type: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "host": self.host,
            "name": self.name,
            "level": self.level,
            "params": self.params,
            "started_at": self.started_at,
            "elapsed": self.elapsed,
        }
        if self.result_type is not None:
            result["result_type"] = self.result_type
        if self.error is not None:
            result["error"] = self.error
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CallRecord:
        """Create from dictionary."""
        return cls(
            host=data["host"],
            name=data["name"],
            level=data["level"],
            params=data.get("params", []),
            started_at=data.get("started_at", 0.0),
            elapsed=data.get("elapsed", 0.0),
            result_type=data.get("result_type"),
            error=data.get("error"),
        )
