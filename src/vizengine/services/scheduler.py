"""TransitionScheduler: cooperative, frame driven property tweening.

One ``tick(now_ms)`` per frame advances every active ``AnimationTask``:

 - tasks still inside their delay window are skipped (no setter call);
 - ``t = clamp((elapsed - delay) / duration, 0, 1)`` (``duration == 0``
   jumps straight to ``t = 1``);
 - the setter receives ``interpolate(from, to, easing(t))``, and exactly
   ``to_value`` on the final frame;
 - a task is removed right after its ``t = 1`` setter call, so that call
   happens exactly once.

At most one task exists per ``(element_id, property)``: scheduling a new
one replaces the old task without a further setter call on it. Stagger is
simply a per-task delay. Timing passes through the reduced motion switch
(``vizengine.design.reduced_motion``), which collapses delay and duration
to zero.

Setter exceptions are isolated: the failing task is dropped, the error is
recorded on ``errors`` and logged, other tasks keep running.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..config import DEFAULT_ANIMATION_DURATION_MS, DEFAULT_EASING
from ..design.color_mixing import interpolate_rgb, parse_hex
from ..design.motion import Easing, resolve_easing
from ..design.reduced_motion import effective_timing
from .frame_clock import monotonic_ms

__all__ = ["AnimationTask", "TransitionScheduler", "interpolate_value"]

log = logging.getLogger(__name__)

Setter = Callable[[Any], None]
Interpolator = Callable[[Any, Any, float], Any]
TaskKey = Tuple[str, str]


def _is_color(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parse_hex(value)
    except ValueError:
        return False
    return True


def interpolate_value(a: Any, b: Any, t: float) -> Any:
    """Generic interpolation between two values of the same shape.

    Numbers lerp, hex colors mix in RGB, tuples/lists and mappings recurse
    element-wise and dataclass instances recurse over their fields.
    Anything else snaps to ``b`` once ``t`` reaches 1 and stays ``a`` before.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return b if t >= 1 else a
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a + (b - a) * t
    if _is_color(a) and _is_color(b):
        return interpolate_rgb(a, b, t)
    if isinstance(a, (tuple, list)) and isinstance(b, (tuple, list)) and len(a) == len(b):
        return type(b)(interpolate_value(x, y, t) for x, y in zip(a, b))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return {k: interpolate_value(a.get(k, v), v, t) for k, v in b.items()}
    if dataclasses.is_dataclass(a) and type(a) is type(b) and not isinstance(a, type):
        changes = {
            f.name: interpolate_value(getattr(a, f.name), getattr(b, f.name), t)
            for f in dataclasses.fields(a)
            if f.init
        }
        return dataclasses.replace(b, **changes)
    return b if t >= 1 else a


@dataclass(eq=False)
class AnimationTask:
    element_id: str
    property: str
    from_value: Any
    to_value: Any
    delay_ms: float
    duration_ms: float
    easing: Easing
    setter: Setter
    start_ms: float
    interpolate: Interpolator = interpolate_value
    on_complete: List[Callable[["AnimationTask"], None]] = field(default_factory=list)
    last_t: Optional[float] = None
    cancelled: bool = False

    @property
    def key(self) -> TaskKey:
        return (self.element_id, self.property)

    def progress(self, now_ms: float) -> Optional[float]:
        """``None`` inside the delay window, else clamped linear progress."""
        elapsed = now_ms - self.start_ms
        if elapsed < self.delay_ms:
            return None
        if self.duration_ms <= 0:
            return 1.0
        return min(1.0, max(0.0, (elapsed - self.delay_ms) / self.duration_ms))


class TransitionScheduler:
    """Owns every ``AnimationTask``; single threaded, driven by ``tick``.

    ``clock`` is any zero-argument callable returning milliseconds; it fixes
    a task's start time when the task is scheduled without an explicit
    ``now_ms``.
    """

    def __init__(
        self,
        clock: Callable[[], float] | None = None,
        *,
        default_duration_ms: float = DEFAULT_ANIMATION_DURATION_MS,
        default_easing: Union[str, Easing, None] = DEFAULT_EASING,
    ) -> None:
        self._clock = clock or monotonic_ms
        self._tasks: Dict[TaskKey, AnimationTask] = {}
        self._errors: List[Tuple[AnimationTask, Exception]] = []
        self.default_duration_ms = default_duration_ms
        self.default_easing = resolve_easing(default_easing)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def schedule(
        self,
        element_id: str,
        property: str,
        from_value: Any,
        to_value: Any,
        setter: Setter,
        *,
        delay_ms: float = 0.0,
        duration_ms: float | None = None,
        easing: Union[str, Easing, None] = None,
        interpolate: Interpolator | None = None,
        on_complete: Callable[[AnimationTask], None] | None = None,
        now_ms: float | None = None,
    ) -> AnimationTask:
        delay, duration = effective_timing(
            delay_ms, self.default_duration_ms if duration_ms is None else duration_ms
        )
        task = AnimationTask(
            element_id=element_id,
            property=property,
            from_value=from_value,
            to_value=to_value,
            delay_ms=delay,
            duration_ms=duration,
            easing=self.default_easing if easing is None else resolve_easing(easing),
            setter=setter,
            start_ms=self._clock() if now_ms is None else float(now_ms),
            interpolate=interpolate or interpolate_value,
        )
        if on_complete is not None:
            task.on_complete.append(on_complete)
        previous = self._tasks.pop(task.key, None)
        if previous is not None:
            previous.cancelled = True
            log.debug("replaced task %s/%s", element_id, property)
        self._tasks[task.key] = task
        return task

    def cancel(self, element_id: str, property: str) -> bool:
        task = self._tasks.pop((element_id, property), None)
        if task is None:
            return False
        task.cancelled = True
        return True

    def cancel_element(self, element_id: str) -> int:
        keys = [k for k in self._tasks if k[0] == element_id]
        for k in keys:
            self.cancel(*k)
        return len(keys)

    def cancel_all(self) -> int:
        count = len(self._tasks)
        for task in self._tasks.values():
            task.cancelled = True
        self._tasks.clear()
        return count

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------
    def tick(self, now_ms: float | None = None) -> int:
        """Advance all tasks to ``now_ms``; returns how many setters ran."""
        now = self._clock() if now_ms is None else float(now_ms)
        advanced = 0
        for task in list(self._tasks.values()):
            if task.cancelled:
                continue
            t = task.progress(now)
            if t is None:
                continue
            try:
                if t >= 1.0:
                    value = task.to_value
                else:
                    value = task.interpolate(task.from_value, task.to_value, task.easing(t))
                task.setter(value)
            except Exception as exc:  # noqa: BLE001 - isolate per task
                log.warning("setter for %s/%s failed: %s", task.element_id, task.property, exc)
                self._errors.append((task, exc))
                self._drop(task)
                continue
            task.last_t = t
            advanced += 1
            if t >= 1.0:
                self._drop(task)
                for cb in task.on_complete:
                    try:
                        cb(task)
                    except Exception as exc:  # noqa: BLE001
                        log.warning("completion callback failed: %s", exc)
                        self._errors.append((task, exc))
        return advanced

    def _drop(self, task: AnimationTask) -> None:
        # A setter may have replaced the task meanwhile; only drop this one.
        if self._tasks.get(task.key) is task:
            del self._tasks[task.key]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def get(self, element_id: str, property: str) -> AnimationTask | None:
        return self._tasks.get((element_id, property))

    def tasks_for(self, element_id: str) -> List[AnimationTask]:
        return [t for k, t in self._tasks.items() if k[0] == element_id]

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def idle(self) -> bool:
        return not self._tasks

    @property
    def errors(self) -> List[Tuple[AnimationTask, Exception]]:
        return list(self._errors)

    def settle_time(self) -> float:
        """Latest end time of the pending tasks (``-inf`` when idle)."""
        return max(
            (t.start_ms + t.delay_ms + t.duration_ms for t in self._tasks.values()),
            default=-math.inf,
        )
