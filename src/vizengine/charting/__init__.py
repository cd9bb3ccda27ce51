"""Charting layer: scales, shapes, layouts and the chart type registry.

Chart builders turn a ``ChartRequest`` into a ``GeometrySnapshot`` (ordered
``ShapeState`` per element id) without touching any drawing toolkit. The
matplotlib backend and the export helpers consume snapshots afterwards, so
geometry stays testable headless.

Importing this package registers the built-in chart types.
"""

from .backends import MatplotlibChartBackend  # noqa: F401
from .registry import chart_registry, register_chart_plugin, register_chart_type  # noqa: F401
from .types import ChartRequest, ChartResult, DataPoint, DataSeries, GeometrySnapshot, ShapeState  # noqa: F401
from .export import export_snapshot, snapshot_to_svg  # noqa: F401
from .sample_data import SampleDataGenerator  # noqa: F401
from . import series_charts  # noqa: F401  # registers line/area/stream/horizon
from . import proportional_charts  # noqa: F401  # registers pie/donut/radar
from . import distribution_charts  # noqa: F401  # registers violin
from . import flow_charts  # noqa: F401  # registers sankey/chord
from . import categorical_charts  # noqa: F401  # registers bar
from . import calendar_charts  # noqa: F401  # registers calendar_heatmap
