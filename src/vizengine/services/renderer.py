"""ChartRenderer: data -> geometry snapshot -> scene state -> animated frames.

Wires the registry, the scene state map, the transition scheduler, the
interaction controller and the tooltip together for one chart type.

``render(data)`` is idempotent: when the built snapshot has the same
fingerprint as the one on screen nothing is cancelled or rescheduled.
Otherwise hover and tooltip are reset, tasks tied to superseded elements
are cancelled, the scene map is replaced and every element gets a
staggered reveal. Kinds listed in ``GROW_SEEDS`` tween their params from a
collapsed seed (arcs from a zero-angle wedge, bars from their baseline);
everything else fades in from transparent.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional

from ..charting.common import resolve_options
from ..charting.registry import ChartRegistry, chart_registry
from ..charting.shapes import arc_from_params, bar_from_params
from ..charting.types import ChartRequest, ChartResult, GeometrySnapshot, ShapeState
from .event_bus import ChartEvent, EventBus
from .frame_clock import monotonic_ms
from .interaction import HoverTarget, InteractionController
from .scene_state import SceneStateMap
from .scheduler import TransitionScheduler
from .tooltip import TooltipStateMachine

__all__ = ["ChartRenderer", "GROW_SEEDS"]

log = logging.getLogger(__name__)

GROW_SEEDS: Mapping[str, Callable[[Mapping[str, float]], dict]] = {
    "arc": lambda p: {**p, "end_angle": p["start_angle"]},
    "bar": lambda p: {**p, "top": p["baseline"]},
}


def _targets_from_meta(meta: Mapping[str, Any]) -> List[HoverTarget]:
    out = []
    for raw in meta.get("hover_targets", ()):
        anchor = raw.get("anchor")
        out.append(
            HoverTarget(
                element_id=raw["element_id"],
                key=float(raw["key"]),
                datum=dict(raw.get("datum", {})),
                anchor=tuple(anchor) if anchor is not None else None,
            )
        )
    return out


class ChartRenderer:
    def __init__(
        self,
        chart_type: str,
        options: Any = None,
        *,
        registry: ChartRegistry | None = None,
        clock: Callable[[], float] | None = None,
        bus: EventBus | None = None,
        scheduler: TransitionScheduler | None = None,
    ) -> None:
        self.chart_type = chart_type
        self.options = resolve_options(options)
        # builders distinguish options the caller set from defaults
        self._request_options = options if isinstance(options, Mapping) else self.options
        self._registry = registry or chart_registry
        self._registry.get(chart_type)  # fail fast on unknown types
        self._clock = clock or monotonic_ms
        self.bus = bus or EventBus()
        self.scheduler = scheduler or TransitionScheduler(
            self._clock,
            default_duration_ms=self.options.animation_duration_ms,
            default_easing=self.options.easing_fn,
        )
        self.scene = SceneStateMap()
        self.scene.register_params_renderer("arc", arc_from_params)
        self.scene.register_params_renderer("bar", bar_from_params)
        self.interaction = InteractionController(
            self.scene, self.bus, options=self.options, clock=self._clock, scheduler=self.scheduler
        )
        self.tooltip = TooltipStateMachine(self.options)
        self.tooltip.bind(self.bus)
        self.result: Optional[ChartResult] = None
        self._fingerprint: Optional[str] = None
        self.render_count = 0

    @property
    def snapshot(self) -> Optional[GeometrySnapshot]:
        return None if self.result is None else self.result.snapshot

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self, data: Any) -> GeometrySnapshot:
        result = self._registry.build(ChartRequest(self.chart_type, data, self._request_options))
        snapshot = result.snapshot
        fingerprint = snapshot.fingerprint()
        if fingerprint == self._fingerprint:
            log.debug("%s: identical geometry, nothing rescheduled", self.chart_type)
            return snapshot
        now = self._clock()
        self.interaction.reset()
        self.tooltip.reset()
        # teardown unbinds the tooltip; a later render rebinds it
        self.tooltip.bind(self.bus)
        for element_id in self.scene.ids():
            self.scheduler.cancel_element(element_id)
        superseded = self.scene.replace(snapshot, initial_opacity=0.0)
        self.result = result
        self._fingerprint = fingerprint
        self.render_count += 1
        scheduled = self._schedule_reveal(snapshot, now)
        self.interaction.set_targets(_targets_from_meta(snapshot.meta))
        log.debug(
            "%s: %d elements (%d superseded, %d reveal tasks)",
            self.chart_type, len(snapshot.elements), len(superseded), scheduled,
        )
        self.bus.publish(
            ChartEvent.DATA_REPLACED,
            {"chart_type": self.chart_type, "elements": snapshot.ids(), "superseded": superseded},
        )
        return snapshot

    def _schedule_reveal(self, snapshot: GeometrySnapshot, now: float) -> int:
        stagger = self.options.stagger_ms
        for index, shape in enumerate(snapshot.elements):
            element_id = shape.element_id
            delay = index * stagger
            grow = GROW_SEEDS.get(shape.kind)
            if grow is not None and shape.params:
                final = dict(shape.params)
                seed = grow(final)
                state = self.scene.get(element_id)
                state.opacity = state.base_opacity
                state.params = dict(seed)
                self.scheduler.schedule(
                    element_id, "params", seed, final, self.scene.params_setter(element_id),
                    delay_ms=delay, now_ms=now,
                )
            else:
                self.scheduler.schedule(
                    element_id, "opacity", 0.0, shape.opacity, self.scene.opacity_setter(element_id),
                    delay_ms=delay, now_ms=now,
                )
        return len(snapshot.elements)

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------
    def tick(self, now_ms: float | None = None) -> int:
        now = self._clock() if now_ms is None else float(now_ms)
        advanced = self.scheduler.tick(now)
        if self.interaction.poll(now):
            # the clear may have scheduled restore fades starting now
            advanced += self.scheduler.tick(now)
        if advanced and self.scheduler.idle:
            self.bus.publish(ChartEvent.TRANSITION_COMPLETE, {"chart_type": self.chart_type})
        return advanced

    def frame(self) -> List[ShapeState]:
        return self.scene.frame()

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def pointer_move(self, x: float, y: float, now_ms: float | None = None) -> Optional[HoverTarget]:
        return self.interaction.pointer_move(x, y, now_ms)

    def pointer_leave(self, now_ms: float | None = None) -> None:
        self.interaction.pointer_leave(now_ms)

    def hover_element(self, element_id: str, now_ms: float | None = None) -> HoverTarget:
        """Hover an element directly (pie slices, ribbons, nodes).

        The tooltip attaches to the element's anchor.
        """
        shape = self.scene.get(element_id).shape
        target = HoverTarget(element_id=element_id, key=0.0, datum=dict(shape.datum), anchor=shape.anchor)
        self.interaction.hover_enter(target, now_ms)
        return target

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    def teardown(self) -> None:
        self.interaction.reset()
        self.tooltip.reset()
        cancelled = self.scheduler.cancel_all()
        self.tooltip.unbind(self.bus)
        self.scene.clear()
        self.interaction.set_targets([])
        self.result = None
        self._fingerprint = None
        log.debug("%s: teardown (%d tasks cancelled)", self.chart_type, cancelled)
