"""Tooltip state machine.

    HIDDEN  --hover_enter-->  VISIBLE
    VISIBLE --hover_move--->  VISIBLE   (content/position updated in place)
    VISIBLE --hover_leave-->  HIDDEN

Leave events already arrive after the interaction grace window, so the
machine itself has no timers. Position is the datum's screen position plus
the configured offset; content comes from ``ChartOptions.format_tooltip``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from ..config import ChartOptions
from .event_bus import ChartEvent, Event, EventBus, Subscription

__all__ = ["TooltipPhase", "Tooltip", "TooltipStateMachine"]

log = logging.getLogger(__name__)


class TooltipPhase(str, Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"


@dataclass(frozen=True)
class Tooltip:
    visible: bool = False
    content: str = ""
    position: Optional[Tuple[float, float]] = None
    element_id: Optional[str] = None


class TooltipStateMachine:
    def __init__(self, options: ChartOptions | None = None) -> None:
        self._options = options or ChartOptions()
        self.phase = TooltipPhase.HIDDEN
        self.tooltip = Tooltip()
        self._subs: List[Subscription] = []

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def hover_enter(self, payload: Mapping[str, Any]) -> Tooltip:
        self.phase = TooltipPhase.VISIBLE
        self.tooltip = self._build(payload)
        return self.tooltip

    def hover_move(self, payload: Mapping[str, Any]) -> Tooltip:
        if self.phase is TooltipPhase.HIDDEN:
            log.debug("hover_move while hidden ignored")
            return self.tooltip
        self.tooltip = self._build(payload)
        return self.tooltip

    def hover_leave(self, payload: Mapping[str, Any] | None = None) -> Tooltip:
        self.phase = TooltipPhase.HIDDEN
        self.tooltip = Tooltip()
        return self.tooltip

    reset = hover_leave

    @property
    def visible(self) -> bool:
        return self.phase is TooltipPhase.VISIBLE

    def _build(self, payload: Mapping[str, Any]) -> Tooltip:
        datum = payload.get("datum", {})
        anchor = payload.get("screen_position")
        position = None
        if anchor is not None:
            dx, dy = self._options.tooltip_offset
            position = (anchor[0] + dx, anchor[1] + dy)
        return Tooltip(
            visible=True,
            content=self._options.format_tooltip(datum),
            position=position,
            element_id=payload.get("element_id"),
        )

    # ------------------------------------------------------------------
    # EventBus wiring
    # ------------------------------------------------------------------
    def bind(self, bus: EventBus) -> None:
        self.unbind(bus)
        self._subs = [
            bus.subscribe(ChartEvent.HOVER_ENTER, self._on(self.hover_enter)),
            bus.subscribe(ChartEvent.HOVER_MOVE, self._on(self.hover_move)),
            bus.subscribe(ChartEvent.HOVER_LEAVE, self._on(self.hover_leave)),
        ]

    def unbind(self, bus: EventBus) -> None:
        for sub in self._subs:
            bus.unsubscribe(sub)
        self._subs = []

    @staticmethod
    def _on(fn):
        def handler(evt: Event) -> None:
            fn(evt.payload or {})

        return handler
