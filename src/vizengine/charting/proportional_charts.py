"""Part-of-whole and profile chart builders: pie, donut, radar.

Pie/donut input: ``{label: value}``, a list of ``{label|category|key,
value}`` records, or a ``DataSeries`` (category, else key, is the label).
Radar input: ``{"axes": [...], "series": {name: [value per axis]}}``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Tuple

from ..config import ChartOptions
from .common import labelled_values, palette_for, placeholder_snapshot, unique_ids
from .layouts.pie import pie
from .layouts.radar import radar_layout
from .path import PathBuilder
from .registry import register_chart_type
from .shapes import ArcDatum, arc_centroid, arc_params, arc_path, radial_point, radial_polygon, translate
from .types import ChartRequest, ChartResult, DataSeries, GeometrySnapshot, ShapeState

log = logging.getLogger(__name__)

_MARGIN = 4.0


def _arc_chart(chart_type: str, req: ChartRequest, options: ChartOptions, inner_ratio: float) -> ChartResult:
    data = req.data.points if isinstance(req.data, DataSeries) else req.data
    items = labelled_values(data)
    if not items:
        return ChartResult(placeholder_snapshot(chart_type, options, "no data"), {"status": "empty"})
    labels = [label for label, _ in items]
    layout = pie([v for _, v in items], pad_angle=options.pad_angle, sort=options.sort_order)
    palette = palette_for(labels, options)
    cx, cy = options.width / 2, options.height / 2
    outer = max(0.0, min(options.width, options.height) / 2 - _MARGIN)
    inner = outer * inner_ratio

    elements: List[ShapeState] = []
    for element_id, label, sl in zip(unique_ids("slice", labels), labels, layout.slices):
        datum = ArcDatum(inner, outer, sl.start_angle, sl.end_angle, options.corner_radius)
        ax, ay = arc_centroid(datum)
        elements.append(
            ShapeState(
                element_id=element_id,
                kind="arc",
                commands=translate(arc_path(datum), cx, cy),
                fill=palette.color_for(label),
                stroke="#ffffff",
                group="slices",
                datum={
                    "label": label,
                    "value": sl.value,
                    "index": sl.index,
                    "share": sl.value / layout.total if layout.total > 0 else 0.0,
                },
                anchor=(cx + ax, cy + ay),
                params=arc_params(datum, cx, cy),
            )
        )
    snapshot = GeometrySnapshot(
        chart_type, tuple(elements), options.width, options.height,
        meta={"empty": layout.empty, "total": layout.total, "inner_radius": inner, "outer_radius": outer},
    )
    return ChartResult(snapshot, {"status": "empty" if layout.empty else "ok", "slices": len(elements)})


def _pie_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    return _arc_chart("pie", req, options, 0.0)


def _donut_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    return _arc_chart("donut", req, options, options.inner_radius_ratio)


# ----------------------------------------------------------------------
# Radar
# ----------------------------------------------------------------------


def _radar_series(raw: Any) -> List[Tuple[str, List[Any]]]:
    if isinstance(raw, Mapping):
        return [(str(k), list(v)) for k, v in raw.items()]
    return [(str(item["name"]), list(item["values"])) for item in raw or ()]


def _radar_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    data = req.data if isinstance(req.data, Mapping) else {}
    axes = [str(a) for a in data.get("axes", ())]
    series = _radar_series(data.get("series"))
    if not axes or not series:
        return ChartResult(placeholder_snapshot("radar", options, "no axes or series"), {"status": "empty"})
    cx, cy = options.width / 2, options.height / 2
    radius = max(0.0, min(options.width, options.height) / 2 - 20.0)
    layout = radar_layout(
        axes, [values for _, values in series], radius=radius, levels=options.levels,
        max_value=data.get("max_value"),
    )
    palette = palette_for([name for name, _ in series], options)

    elements: List[ShapeState] = []
    for i, r in enumerate(layout.levels):
        elements.append(
            ShapeState(
                element_id=f"grid:{i}",
                kind="grid",
                commands=translate(radial_polygon([(a.angle, r) for a in layout.axes]), cx, cy),
                stroke="#d1d5db",
                group="grid",
                datum={"level": i, "value": layout.max_value * (i + 1) / options.levels},
            )
        )
    for axis in layout.axes:
        x, y = radial_point(axis.angle, radius)
        elements.append(
            ShapeState(
                element_id=f"axis:{axis.name}",
                kind="axis",
                commands=PathBuilder().move_to(cx, cy).line_to(cx + x, cy + y).commands,
                stroke="#9ca3af",
                group="grid",
                datum={"axis": axis.name},
            )
        )
    for (name, values), points in zip(series, layout.series):
        vertices = [radial_point(a, r) for a, r in points]
        centroid = (
            cx + sum(v[0] for v in vertices) / len(vertices),
            cy + sum(v[1] for v in vertices) / len(vertices),
        ) if vertices else (cx, cy)
        color = palette.color_for(name)
        elements.append(
            ShapeState(
                element_id=f"radar:{name}",
                kind="polygon",
                commands=translate(radial_polygon(points), cx, cy),
                fill=color,
                stroke=color,
                opacity=0.75,
                group="series",
                datum={"label": name, "values": dict(zip(axes, values))},
                anchor=centroid,
            )
        )
    snapshot = GeometrySnapshot(
        "radar", tuple(elements), options.width, options.height,
        meta={"empty": False, "max_value": layout.max_value, "axes": axes},
    )
    return ChartResult(snapshot, {"status": "ok", "series": len(series)})


register_chart_type("pie", _pie_builder, "Pie chart (padded, rounded arcs)")
register_chart_type("donut", _donut_builder, "Donut chart (inner radius from innerRadiusRatio)")
register_chart_type("radar", _radar_builder, "Radar chart with level rings")
