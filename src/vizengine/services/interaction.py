"""InteractionController: pointer -> nearest datum -> hover state.

Single writer of ``HoverState``. Pointer moves resolve the nearest target
by bisection over the sorted target keys, comparing the two bracketing
candidates (an exact tie goes to the lower index). Resolutions are rate
limited: a move arriving within ``rate_limit_ms`` of the previous
resolution is dropped.

Hover enter marks one element active and dims its siblings in the scene
map; hover leave only takes effect after the grace window, and is
cancelled when the pointer re-enters first. Grace expiry is evaluated in
``poll(now)``, which the renderer calls once per frame.

Every transition is published on the EventBus as
``{"type", "datum", "screen_position"}``.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from ..config import DEFAULT_HIGHLIGHT_TRANSITION_MS, ChartOptions
from .event_bus import ChartEvent, EventBus
from .frame_clock import monotonic_ms
from .scene_state import SceneStateMap
from .scheduler import TransitionScheduler

__all__ = ["HoverTarget", "HoverState", "InteractionController", "nearest_index"]

log = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class HoverTarget:
    element_id: str
    key: float  # position along the resolution axis
    datum: Mapping[str, Any] = field(default_factory=dict)
    anchor: Optional[Point] = None  # screen position for tooltips


@dataclass
class HoverState:
    active_id: Optional[str] = None
    pointer: Optional[Point] = None
    locked_until: Optional[float] = None  # pending clear deadline (grace window)


def nearest_index(keys: Sequence[float], x: float) -> Optional[int]:
    """Index of the key closest to ``x`` in ascending ``keys``; ties -> lower index."""
    n = len(keys)
    if n == 0:
        return None
    i = bisect_left(keys, x)
    if i <= 0:
        return 0
    if i >= n:
        return n - 1
    lo, hi = i - 1, i
    return lo if x - keys[lo] <= keys[hi] - x else hi


class InteractionController:
    def __init__(
        self,
        scene: SceneStateMap,
        bus: EventBus,
        *,
        options: ChartOptions | None = None,
        clock: Callable[[], float] | None = None,
        scheduler: TransitionScheduler | None = None,
    ) -> None:
        self._scene = scene
        self._bus = bus
        self._options = options or ChartOptions()
        self._clock = clock or monotonic_ms
        self._scheduler = scheduler
        self._targets: List[HoverTarget] = []
        self._keys: List[float] = []
        self._invert: Callable[[float], float] = float
        self._last_resolution: Optional[float] = None
        self.state = HoverState()
        self.dropped_moves = 0
        self._current: Optional[HoverTarget] = None

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------
    def set_targets(
        self, targets: Sequence[HoverTarget], *, invert: Callable[[float], float] | None = None
    ) -> None:
        """Replace the hoverable targets.

        ``invert`` maps pointer x into key space (e.g. a scale's ``invert``);
        by default keys are compared to the raw pointer x. Targets are sorted
        by key with a stable sort, so equal keys keep their given order.
        """
        ordered = sorted(targets, key=lambda t: t.key)
        self._targets = ordered
        self._keys = [t.key for t in ordered]
        self._invert = invert or float

    @property
    def targets(self) -> List[HoverTarget]:
        return list(self._targets)

    def resolve(self, x: float) -> Optional[HoverTarget]:
        idx = nearest_index(self._keys, self._invert(x))
        return None if idx is None else self._targets[idx]

    def _now(self, now_ms: float | None) -> float:
        return self._clock() if now_ms is None else float(now_ms)

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def pointer_move(self, x: float, y: float, now_ms: float | None = None) -> Optional[HoverTarget]:
        now = self._now(now_ms)
        if self._last_resolution is not None and now - self._last_resolution < self._options.rate_limit_ms:
            self.dropped_moves += 1
            return None
        self._last_resolution = now
        self.state.pointer = (x, y)
        target = self.resolve(x)
        if target is None:
            self.hover_leave(now)
            return None
        if target.element_id == self.state.active_id:
            self.state.locked_until = None
            self._publish(ChartEvent.HOVER_MOVE, target)
        else:
            self.hover_enter(target, now)
        return target

    def pointer_leave(self, now_ms: float | None = None) -> None:
        self.hover_leave(self._now(now_ms))

    def click(self, x: float, y: float) -> Optional[HoverTarget]:
        target = self.resolve(x)
        if target is not None:
            self._publish(ChartEvent.CLICK, target)
        return target

    # ------------------------------------------------------------------
    # Hover transitions
    # ------------------------------------------------------------------
    def hover_enter(self, target: HoverTarget, now_ms: float | None = None) -> None:
        active = self.state.active_id
        if active == target.element_id:
            self.state.locked_until = None
            return
        now = self._now(now_ms)
        if active is not None:
            self._clear(now)
        self.state.active_id = target.element_id
        self.state.locked_until = None
        self._current = target
        if target.element_id in self._scene:
            siblings = self._scene.siblings(target.element_id)
            self._fade(siblings, lambda _s: self._options.dim_opacity, now)
            self._fade([target.element_id], lambda s: s.base_opacity, now)
            self._scene.set_highlight([target.element_id], True)
        self._publish(ChartEvent.HOVER_ENTER, target)

    def hover_leave(self, now_ms: float | None = None) -> None:
        if self.state.active_id is None or self.state.locked_until is not None:
            return
        self.state.locked_until = self._now(now_ms) + self._options.hover_grace_ms

    def poll(self, now_ms: float | None = None) -> bool:
        """Apply a pending hover clear once the grace window has elapsed."""
        deadline = self.state.locked_until
        now = self._now(now_ms)
        if deadline is None or now < deadline:
            return False
        self._clear(now)
        return True

    def reset(self, now_ms: float | None = None) -> None:
        """Clear hover immediately (data replacement, teardown)."""
        if self.state.active_id is not None:
            self._clear(self._now(now_ms))
        self.state = HoverState()
        self._last_resolution = None

    @property
    def pending_clear(self) -> bool:
        return self.state.locked_until is not None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _clear(self, now: float) -> None:
        target = self._current
        self._fade(self._scene.ids(), lambda s: s.base_opacity, now)
        self._scene.set_highlight(self._scene.ids(), False)
        self.state.active_id = None
        self.state.locked_until = None
        self._current = None
        if target is not None:
            self._publish(ChartEvent.HOVER_LEAVE, target)

    def _fade(self, element_ids: Sequence[str], opacity_for, now: float) -> None:
        for eid in element_ids:
            state = self._scene.get(eid)
            goal = float(opacity_for(state))
            if self._scheduler is None:
                state.opacity = goal
                continue
            self._scheduler.schedule(
                eid,
                "opacity",
                state.opacity,
                goal,
                self._scene.opacity_setter(eid),
                duration_ms=DEFAULT_HIGHLIGHT_TRANSITION_MS,
                easing="cubic-out",
                now_ms=now,
            )

    def _publish(self, kind: ChartEvent, target: HoverTarget) -> None:
        position = target.anchor if target.anchor is not None else self.state.pointer
        payload = {
            "type": kind.value,
            "element_id": target.element_id,
            "datum": dict(target.datum),
            "screen_position": position,
        }
        log.debug("%s %s", kind.value, target.element_id)
        self._bus.publish(kind, payload)
