"""Reduced motion preference for chart reveals.

Single source of truth for whether chart animations should collapse to
their final frame (users preferring reduced motion, kiosk screenshots,
deterministic snapshot tests).

- ``VIZENGINE_PREFER_REDUCED_MOTION=1`` (or true/yes/on) enables the
  preference at import time.
- ``effective_timing(delay_ms, duration_ms)`` is what the transition
  scheduler calls: with reduced motion on, both collapse to 0 so the first
  tick after scheduling lands every task on ``t = 1``.
- ``temporarily_reduced_motion`` is a context manager restoring the prior
  state on exit, exceptions included.
"""

from __future__ import annotations

import contextlib
import os
from typing import Iterator, Tuple

__all__ = [
    "set_reduced_motion",
    "is_reduced_motion",
    "effective_timing",
    "temporarily_reduced_motion",
]

_reduced_motion_enabled: bool = (
    os.getenv("VIZENGINE_PREFER_REDUCED_MOTION", "").strip().lower() in {"1", "true", "yes", "on"}
)


def set_reduced_motion(enabled: bool) -> None:
    global _reduced_motion_enabled
    _reduced_motion_enabled = bool(enabled)


def is_reduced_motion() -> bool:
    return _reduced_motion_enabled


def effective_timing(delay_ms: float, duration_ms: float) -> Tuple[float, float]:
    """Return ``(delay, duration)`` adjusted for the reduced motion preference.

    Negative inputs are treated as 0 before adjustment.
    """
    delay_ms = max(0.0, float(delay_ms))
    duration_ms = max(0.0, float(duration_ms))
    if _reduced_motion_enabled:
        return 0.0, 0.0
    return delay_ms, duration_ms


@contextlib.contextmanager
def temporarily_reduced_motion(force: bool = True) -> Iterator[None]:
    prev = _reduced_motion_enabled
    try:
        set_reduced_motion(force)
        yield
    finally:
        set_reduced_motion(prev)
