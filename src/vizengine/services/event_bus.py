"""EventBus: synchronous publish/subscribe for chart events.

The interaction layer publishes pointer events here; tooltips, host
applications and the logging service subscribe. Dispatch is synchronous,
in subscription order, on the caller's thread.

Design:
 - Handler failures are isolated: the exception is recorded in ``errors``
   and logged, remaining handlers still run.
 - One-shot (``once``) subscriptions and cancellable ``Subscription``
   handles.
 - Optional tracing ring buffer of recent events (name, timestamp, short
   payload summary) for debugging interaction sequences.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Deque, Dict, List, Protocol, Tuple

__all__ = [
    "ChartEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
    "TraceEntry",
]

log = logging.getLogger(__name__)


class ChartEvent(str, Enum):
    HOVER_ENTER = "hoverEnter"
    HOVER_MOVE = "hoverMove"
    HOVER_LEAVE = "hoverLeave"
    CLICK = "click"
    DATA_REPLACED = "dataReplaced"
    TRANSITION_COMPLETE = "transitionComplete"
    ENGINE_LOG = "engine_log"


@dataclass
class Event:
    name: str  # ChartEvent value or custom string
    payload: Any
    timestamp: float


class EventHandler(Protocol):  # noqa: D401
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


@dataclass(frozen=True)
class TraceEntry:
    name: str
    timestamp: float
    summary: str


def _key(name: str | ChartEvent) -> str:
    return name.value if isinstance(name, ChartEvent) else name


def _summarize(payload: Any) -> str:
    if payload is None:
        return "-"
    text = str(payload)
    return text if len(text) <= 40 else text[:37] + "..."


class EventBus:
    """Synchronous event dispatcher with optional tracing.

    Subscriber lists are copied under a re-entrant lock and handlers run with
    the lock released, so a handler may subscribe, unsubscribe or publish
    recursively.
    """

    DEFAULT_TRACE_CAPACITY = 50

    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, Exception]] = []
        self._tracing_enabled = False
        self._traces: Deque[Tuple[str, float, str]] = deque(maxlen=self.DEFAULT_TRACE_CAPACITY)

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------
    def subscribe(
        self, name: str | ChartEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        with self._lock:
            self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event)
            if bucket:
                self._subs[sub.event] = [s for s in bucket if s is not sub]
                if not self._subs[sub.event]:
                    self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()
            self._errors.clear()

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------
    def publish(self, name: str | ChartEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(key, ()))
            if self._tracing_enabled:
                self._traces.append((key, evt.timestamp, _summarize(payload)))
        spent: List[Subscription] = []
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                log.warning("Handler for %s failed: %s", key, exc)
                with self._lock:
                    self._errors.append((evt, exc))
            if sub.once:
                spent.append(sub)
        for sub in spent:
            self.unsubscribe(sub)
        return evt

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def subscriber_count(self, name: str | ChartEvent) -> int:
        with self._lock:
            return len(self._subs.get(_key(name), ()))

    def list_events(self) -> list[str]:
        with self._lock:
            return list(self._subs.keys())

    @property
    def errors(self) -> list[tuple[Event, Exception]]:
        with self._lock:
            return list(self._errors)

    # ------------------------------------------------------------------
    # Tracing
    # ------------------------------------------------------------------
    def enable_tracing(self, enabled: bool = True, *, capacity: int | None = None) -> None:
        with self._lock:
            self._tracing_enabled = enabled
            if capacity is not None and capacity != self._traces.maxlen:
                self._traces = deque(self._traces, maxlen=capacity)

    def recent_trace_entries(self) -> list[TraceEntry]:
        with self._lock:
            return [TraceEntry(name=n, timestamp=ts, summary=s) for (n, ts, s) in self._traces]

    def clear_traces(self) -> None:
        with self._lock:
            self._traces.clear()

    @property
    def tracing_enabled(self) -> bool:
        with self._lock:
            return self._tracing_enabled
