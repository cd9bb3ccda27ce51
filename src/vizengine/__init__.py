"""vizengine: declarative chart geometry with animated, interactive rendering.

Pipeline: data -> scales -> layouts -> shapes -> GeometrySnapshot, then a
``ChartRenderer`` animates the snapshot through the transition scheduler
and routes pointer input to hover highlighting and tooltips.
"""

from .config import ChartOptions  # noqa: F401
from .errors import ConfigurationError, EngineError, InvalidDataError, UnknownCategoryError  # noqa: F401
from .charting import (  # noqa: F401
    ChartRequest,
    ChartResult,
    DataPoint,
    DataSeries,
    GeometrySnapshot,
    SampleDataGenerator,
    ShapeState,
    chart_registry,
)
from .services import ChartRenderer, EventBus, ManualClock, TransitionScheduler  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "ChartOptions",
    "ConfigurationError",
    "EngineError",
    "InvalidDataError",
    "UnknownCategoryError",
    "ChartRequest",
    "ChartResult",
    "DataPoint",
    "DataSeries",
    "GeometrySnapshot",
    "SampleDataGenerator",
    "ShapeState",
    "chart_registry",
    "ChartRenderer",
    "EventBus",
    "ManualClock",
    "TransitionScheduler",
]
