"""Runtime services: events, logging, clocks, transitions, interaction.

Responsibilities:
 - EventBus publish/subscribe core (hover, click, data replacement events)
 - TransitionScheduler driven by a frame clock
 - SceneStateMap as the single mutable view of drawn elements
 - InteractionController / TooltipStateMachine for pointer handling
 - ChartRenderer wiring all of the above for one chart type
"""

from .event_bus import ChartEvent, Event, EventBus, Subscription  # noqa: F401
from .logging_service import LogEntry, LoggingService  # noqa: F401
from .frame_clock import ManualClock, QtFrameClock, monotonic_ms  # noqa: F401
from .scheduler import AnimationTask, TransitionScheduler, interpolate_value  # noqa: F401
from .scene_state import DrawState, SceneStateMap  # noqa: F401
from .interaction import HoverState, HoverTarget, InteractionController, nearest_index  # noqa: F401
from .tooltip import Tooltip, TooltipPhase, TooltipStateMachine  # noqa: F401
from .renderer import ChartRenderer  # noqa: F401

__all__ = [
    "ChartEvent",
    "Event",
    "EventBus",
    "Subscription",
    "LogEntry",
    "LoggingService",
    "ManualClock",
    "QtFrameClock",
    "monotonic_ms",
    "AnimationTask",
    "TransitionScheduler",
    "interpolate_value",
    "DrawState",
    "SceneStateMap",
    "HoverState",
    "HoverTarget",
    "InteractionController",
    "nearest_index",
    "Tooltip",
    "TooltipPhase",
    "TooltipStateMachine",
    "ChartRenderer",
]
