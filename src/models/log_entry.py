# src/models/log_entry.py

"""Structured event log entries exposed to callers."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class LogLevel(str, Enum):
    """Severity of an event log entry."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class LogEntry:
    """A single immutable event recorded during an aggregation."""

    timestamp: str
    level: LogLevel
    message: str
    source: str
    metadata: dict[str, Any] | None = None

    @classmethod
    def create(
        cls,
        level: LogLevel,
        message: str,
        source: str,
        metadata: dict[str, Any] | None = None,
    ) -> "LogEntry":
        """Build an entry stamped with the current UTC time."""
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            message=str(message),
            source=source,
            metadata=dict(metadata) if metadata is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-shaped dict."""
        data: dict[str, Any] = {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "message": self.message,
            "source": self.source,
        }
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass
class LogSummary:
    """Counts per level plus the first and last timestamps."""

    total: int = 0
    info: int = 0
    warn: int = 0
    error: int = 0
    start: str | None = None
    end: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-shaped dict."""
        return {
            "total": self.total,
            "info": self.info,
            "warn": self.warn,
            "error": self.error,
            "time_range": {"start": self.start, "end": self.end},
        }
