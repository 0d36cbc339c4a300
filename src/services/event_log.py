# src/services/event_log.py

"""Append-only structured event log shared by aggregation requests."""

import json
import logging
import threading
from collections.abc import Iterable
from typing import Any

from src.config.settings import Settings
from src.models.log_entry import LogEntry, LogLevel, LogSummary

logger = logging.getLogger("product_compare.events")

_PY_LEVELS: dict[LogLevel, int] = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class EventLog:
    """Thread-safe, append-only sequence of :class:`LogEntry` records.

    Each aggregation request writes to its own ``EventLog``; finished
    requests are flushed into a shared sink with :meth:`extend`.  Readers
    only ever receive tuples or new lists, never the underlying buffer.
    """

    def __init__(self, source: str | None = None) -> None:
        self.source = source or Settings.LOG_SOURCE
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    # ── Writers ──────────────────────────────────────────

    def info(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
        source: str | None = None,
    ) -> LogEntry:
        """Record an ``info`` entry."""
        return self._add(LogLevel.INFO, message, metadata, source)

    def warn(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
        source: str | None = None,
    ) -> LogEntry:
        """Record a ``warn`` entry."""
        return self._add(LogLevel.WARN, message, metadata, source)

    def error(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
        source: str | None = None,
    ) -> LogEntry:
        """Record an ``error`` entry."""
        return self._add(LogLevel.ERROR, message, metadata, source)

    def append(self, entry: LogEntry) -> None:
        """Append an existing entry (no mirroring to ``logging``)."""
        with self._lock:
            self._entries.append(entry)

    def extend(self, entries: Iterable[LogEntry]) -> None:
        """Append a batch of entries atomically, preserving their order."""
        batch = list(entries)
        with self._lock:
            self._entries.extend(batch)

    def clear(self) -> int:
        """Explicitly reset the log.

        Returns the number of entries that were removed.
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug("Event log cleared (%d entries removed)", count)
        return count

    def _add(
        self,
        level: LogLevel,
        message: str,
        metadata: dict[str, Any] | None,
        source: str | None,
    ) -> LogEntry:
        entry = LogEntry.create(
            level, message, source or self.source, metadata
        )
        self.append(entry)
        logger.log(
            _PY_LEVELS[level],
            "(%s) %s%s",
            entry.source,
            entry.message,
            f" {entry.metadata}" if entry.metadata else "",
        )
        return entry

    # ── Read projections ─────────────────────────────────

    def entries(self) -> tuple[LogEntry, ...]:
        """Return every entry in append order."""
        with self._lock:
            return tuple(self._entries)

    def by_level(self, level: LogLevel | str) -> list[LogEntry]:
        """Return the entries at *level* in append order."""
        wanted = LogLevel(level)
        return [e for e in self.entries() if e.level is wanted]

    def recent(
        self, limit: int = Settings.RECENT_LOGS_LIMIT,
    ) -> list[LogEntry]:
        """Return the *limit* most recent entries in append order."""
        if limit <= 0:
            return []
        return list(self.entries()[-limit:])

    def summary(self) -> LogSummary:
        """Count entries per level and report the first/last timestamps."""
        snapshot = self.entries()
        result = LogSummary(total=len(snapshot))
        for entry in snapshot:
            if entry.level is LogLevel.INFO:
                result.info += 1
            elif entry.level is LogLevel.WARN:
                result.warn += 1
            else:
                result.error += 1
        if snapshot:
            result.start = snapshot[0].timestamp
            result.end = snapshot[-1].timestamp
        return result

    def export_json(self) -> str:
        """Serialise all entries to a pretty-printed JSON array."""
        return json.dumps(
            [e.to_dict() for e in self.entries()],
            ensure_ascii=False,
            indent=2,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
