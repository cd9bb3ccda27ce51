"""In-process log capture for the engine.

A ``logging.Handler`` feeds a bounded ring buffer of recent records from
the ``vizengine`` logger hierarchy. Each captured record is also published
as an ``engine_log`` event when an EventBus is supplied, so a host can
show engine diagnostics next to the chart.

Design goals:
 - Headless (no Qt dependency)
 - Filtering by level name or logger name substring
 - JSON Lines export
"""

from __future__ import annotations

import json
import logging
import os
from collections import deque
from dataclasses import asdict, dataclass
from threading import RLock
from typing import Deque, List, Optional

from .event_bus import ChartEvent, EventBus

__all__ = ["LogEntry", "LoggingService"]

ENGINE_LOGGER = "vizengine"


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float
    lineno: int


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "LoggingService") -> None:
        super().__init__(level=logging.DEBUG)
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        try:
            self._svc._ingest(record)
        except Exception:  # noqa: BLE001
            self.handleError(record)


class LoggingService:
    def __init__(self, capacity: int = 500, *, bus: EventBus | None = None) -> None:
        self._lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._handler = _RingBufferHandler(self)
        self._bus = bus
        self._attached: Optional[logging.Logger] = None
        self._publishing = False

    # Lifecycle --------------------------------------------------------
    def attach(self, logger_name: str = ENGINE_LOGGER, *, level: int = logging.DEBUG) -> None:
        if self._attached is not None:
            return
        logger = logging.getLogger(logger_name)
        logger.addHandler(self._handler)
        if logger.level == logging.NOTSET or logger.level > level:
            logger.setLevel(level)
        self._attached = logger

    def detach(self) -> None:
        if self._attached is None:
            return
        self._attached.removeHandler(self._handler)
        self._attached = None

    @property
    def attached(self) -> bool:
        return self._attached is not None

    # Ingestion --------------------------------------------------------
    def _ingest(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
            lineno=record.lineno,
        )
        with self._lock:
            self._entries.append(entry)
        if self._bus is None or self._publishing:
            return
        # warnings raised by engine_log handlers are captured, not re-published
        self._publishing = True
        try:
            self._bus.publish(
                ChartEvent.ENGINE_LOG,
                {"level": entry.level, "name": entry.name, "message": entry.message[:120]},
            )
        finally:
            self._publishing = False

    # Query ------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._lock:
            data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def filter(self, *, level: str | None = None, name_contains: str | None = None) -> List[LogEntry]:
        return [
            e
            for e in self.recent()
            if (not level or e.level == level) and (not name_contains or name_contains in e.name)
        ]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # Export ------------------------------------------------------------
    def export_jsonl(
        self,
        path: str | None = None,
        *,
        level: str | None = None,
        name_contains: str | None = None,
        append: bool = False,
    ) -> int:
        """Write filtered entries as JSON Lines; returns the number of lines."""
        entries = self.filter(level=level, name_contains=name_contains)
        file_path = path or os.path.join(os.getcwd(), "vizengine-log.jsonl")
        with open(file_path, "a" if append else "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), sort_keys=True) + "\n")
        return len(entries)
