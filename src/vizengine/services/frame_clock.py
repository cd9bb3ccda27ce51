"""Frame clocks driving the transition scheduler.

``ManualClock`` is advanced explicitly and is what tests and offline
renders (export after the reveal settled) use. ``QtFrameClock`` fires a
callback every frame from a ``QTimer`` inside a running Qt event loop and
reports a monotonic millisecond timestamp.

Both expose ``now_ms()`` so they can be injected into the scheduler and
the interaction controller as their time source.
"""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Callable, Optional

try:  # pragma: no cover - import guarded
    from PyQt6.QtCore import QElapsedTimer, QTimer

    _QT_AVAILABLE = True
except ImportError:  # pragma: no cover - headless environments
    _QT_AVAILABLE = False

__all__ = ["ManualClock", "QtFrameClock", "monotonic_ms"]

log = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


def monotonic_ms() -> float:
    return perf_counter() * 1000.0


class ManualClock:
    """Deterministic clock: time only moves when ``advance``/``set`` is called."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)

    def now_ms(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        if ms < 0:
            raise ValueError("cannot move a clock backwards")
        self._now += ms
        return self._now

    def set(self, now_ms: float) -> None:
        if now_ms < self._now:
            raise ValueError("cannot move a clock backwards")
        self._now = float(now_ms)

    __call__ = now_ms


class QtFrameClock:
    """Per-frame callback driven by a ``QTimer`` (default ~60 fps).

    Requires PyQt6 and a running ``QCoreApplication``/``QApplication``.
    """

    def __init__(self, callback: FrameCallback, *, interval_ms: int = 16, parent=None) -> None:
        if not _QT_AVAILABLE:
            raise RuntimeError("QtFrameClock requires PyQt6")
        self._callback = callback
        self._elapsed = QElapsedTimer()
        self._elapsed.start()
        self._timer: Optional[QTimer] = QTimer(parent)
        self._timer.setInterval(max(1, int(interval_ms)))
        self._timer.timeout.connect(self._on_frame)  # type: ignore[attr-defined]
        self.frames = 0

    def now_ms(self) -> float:
        return float(self._elapsed.elapsed())

    __call__ = now_ms

    def start(self) -> None:
        if self._timer is not None and not self._timer.isActive():
            self._timer.start()

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def _on_frame(self) -> None:
        self.frames += 1
        try:
            self._callback(self.now_ms())
        except Exception:  # noqa: BLE001 - keep the timer alive
            log.exception("frame callback failed")
