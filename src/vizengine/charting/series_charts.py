"""Time/sequence chart builders: line, stacked area, streamgraph, horizon.

Input is any shape accepted by ``coerce_series_list``: one or several
series of ``{key|date, value}`` records. Keys may be numbers, dates or
category labels (labels are laid out on a band scale in order of first
appearance).

Every builder attaches ``hover_targets`` to the snapshot meta (one per
datum) so the interaction controller can resolve the nearest point along
x.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple

from ..config import ChartOptions
from ..design.chart_palette import band_ramps
from ..errors import InvalidDataError
from .common import coerce_series_list, finite, hover_target, numeric_key, palette_for, placeholder_snapshot
from .layouts.horizon import horizon
from .layouts.stack import stack
from .registry import register_chart_type
from .scales import band, linear, time
from .shapes import area_path, line_path
from .types import ChartRequest, ChartResult, DataSeries, Domain, GeometrySnapshot, ShapeState

log = logging.getLogger(__name__)

XMapper = Callable[[Any], float]


def _x_mapper(keys: Sequence[Any], width: float) -> XMapper:
    if keys and all(isinstance(k, str) for k in keys):
        scale = band(list(dict.fromkeys(keys)), (0.0, width), 0.1)
        return scale.center
    if keys and all(isinstance(k, date) for k in keys):
        return time((min(keys, key=numeric_key), max(keys, key=numeric_key)), (0.0, width))
    try:
        positions = [numeric_key(k) for k in keys]
    except (TypeError, ValueError) as e:
        raise InvalidDataError("series keys must be all numeric/dates or all labels") from e
    scale = linear(Domain.from_values(positions), (0.0, width))
    return lambda k: scale(numeric_key(k))


def _ordered_keys(series_list: Sequence[DataSeries]) -> List[Any]:
    keys: List[Any] = []
    seen = set()
    for s in series_list:
        for k in s.keys():
            if k not in seen:
                seen.add(k)
                keys.append(k)
    if keys and not all(isinstance(k, str) for k in keys):
        keys.sort(key=numeric_key)
    return keys


def _is_empty(series_list: Sequence[DataSeries]) -> bool:
    # points without a finite value draw nothing
    return not any(finite(s.values()) for s in series_list)


# ----------------------------------------------------------------------
# Line
# ----------------------------------------------------------------------


def _line_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    series_list = coerce_series_list(req.data)
    if _is_empty(series_list):
        return ChartResult(placeholder_snapshot("line", options, "no data"), {"status": "empty"})
    keys = _ordered_keys(series_list)
    x_of = _x_mapper(keys, options.width)
    values = finite(v for s in series_list for v in s.values())
    y = linear(Domain.from_values(values), (options.height, 0.0), True)
    palette = palette_for([s.name for s in series_list], options)

    elements: List[ShapeState] = []
    targets: List[Dict[str, Any]] = []
    for s in series_list:
        element_id = f"line:{s.name}"
        pts = []
        for p in s.sorted_by_key() if not isinstance(keys[0], str) else s:
            if not math.isfinite(p.value):
                continue
            xy = (x_of(p.key), y(p.value))
            pts.append(xy)
            targets.append(hover_target(element_id, xy[0], xy, {"label": s.name, "key": p.key, "value": p.value}))
        if not pts:
            continue
        elements.append(
            ShapeState(
                element_id=element_id,
                kind="line",
                commands=line_path(pts, options.curve_type),
                stroke=palette.color_for(s.name),
                group="series",
                datum={"series": s.name, "count": len(pts)},
                anchor=pts[-1] if pts else None,
            )
        )
    snapshot = GeometrySnapshot(
        "line", tuple(elements), options.width, options.height,
        meta={"empty": False, "y_domain": [y.domain.min, y.domain.max], "hover_targets": targets},
    )
    return ChartResult(snapshot, {"status": "ok", "series": len(series_list)})


# ----------------------------------------------------------------------
# Stacked area / stream
# ----------------------------------------------------------------------


def _aligned(series_list: Sequence[DataSeries], keys: Sequence[Any]) -> List[List[float]]:
    rows = []
    for s in series_list:
        by_key: Dict[Any, float] = {p.key: p.value for p in s}
        rows.append([by_key.get(k, 0.0) for k in keys])
    return rows


def _stacked(chart_type: str, req: ChartRequest, options: ChartOptions, order: str, offset: str) -> ChartResult:
    series_list = coerce_series_list(req.data)
    if _is_empty(series_list):
        return ChartResult(placeholder_snapshot(chart_type, options, "no data"), {"status": "empty"})
    keys = _ordered_keys(series_list)
    x_of = _x_mapper(keys, options.width)
    layout = stack(_aligned(series_list, keys), order=order, offset=offset)
    lo, hi = layout.extent()
    if offset == "none":
        lo, hi = min(lo, 0.0), max(hi, 0.0)
    y = linear((lo, hi), (options.height, 0.0), offset == "none")
    palette = palette_for([s.name for s in series_list], options)
    xs = [x_of(k) for k in keys]

    elements: List[ShapeState] = []
    targets: List[Dict[str, Any]] = []
    # draw order follows the stacking order (bottom layer first)
    for k in layout.order:
        s = series_list[k]
        bands = layout.layers[k]
        element_id = f"{chart_type}:{s.name}"
        top = [(x, y(b[1])) for x, b in zip(xs, bands)]
        bottom = [(x, y(b[0])) for x, b in zip(xs, bands)]
        for key, x, b in zip(keys, xs, bands):
            anchor = (x, y((b[0] + b[1]) / 2))
            targets.append(hover_target(element_id, x, anchor, {"label": s.name, "key": key, "value": b[1] - b[0]}))
        elements.append(
            ShapeState(
                element_id=element_id,
                kind="area",
                commands=area_path(top, bottom, options.curve_type),
                fill=palette.color_for(s.name),
                group="series",
                datum={"series": s.name, "total": sum(b[1] - b[0] for b in bands)},
                anchor=top[len(top) // 2] if top else None,
            )
        )
    snapshot = GeometrySnapshot(
        chart_type, tuple(elements), options.width, options.height,
        meta={"empty": False, "order": list(layout.order), "offset": offset, "hover_targets": targets},
    )
    return ChartResult(snapshot, {"status": "ok", "series": len(series_list)})


def _area_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    return _stacked("area", req, options, options.stack_order, options.stack_offset)


def _explicit(req: ChartRequest, camel: str, snake: str) -> bool:
    raw = req.options
    if isinstance(raw, ChartOptions):
        return getattr(raw, snake) != getattr(ChartOptions(), snake)
    return isinstance(raw, Mapping) and (camel in raw or snake in raw)


def _stream_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    # streamgraph defaults unless the caller chose strategies explicitly
    order = options.stack_order if _explicit(req, "stackOrder", "stack_order") else "inside-out"
    offset = options.stack_offset if _explicit(req, "stackOffset", "stack_offset") else "wiggle"
    return _stacked("stream", req, options, order, offset)


# ----------------------------------------------------------------------
# Horizon
# ----------------------------------------------------------------------


def _horizon_colors(options: ChartOptions) -> Tuple[str, str]:
    palette = options.color_palette
    if isinstance(palette, Mapping):
        if "positive" in palette and "negative" in palette:
            return palette["positive"], palette["negative"]
        colors = list(palette.values())
    else:
        colors = list(palette or ())
    positive = colors[0] if colors else "#2563eb"
    negative = colors[1] if len(colors) > 1 else "#dc2626"
    return positive, negative


def _horizon_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    series_list = coerce_series_list(req.data)
    if _is_empty(series_list):
        return ChartResult(placeholder_snapshot("horizon", options, "no data"), {"status": "empty"})
    s = next(x for x in series_list if finite(x.values()))
    if not isinstance(s.keys()[0], str):
        s = s.sorted_by_key()
    keys = s.keys()
    x_of = _x_mapper(keys, options.width)
    layout = horizon(s.values(), options.band_count)
    pos_colors, neg_colors = band_ramps(*_horizon_colors(options), options.band_count)
    h = options.height
    w = layout.band_width

    def y_of(v: float) -> float:
        return h - (v / w) * h if w > 0 else h

    xs = [x_of(k) for k in keys]
    baseline = [(x, h) for x in xs]
    elements: List[ShapeState] = []
    for i in range(options.band_count):
        for sign, values, colors in (("pos", layout.positive(i), pos_colors), ("neg", layout.negative(i), neg_colors)):
            elements.append(
                ShapeState(
                    element_id=f"band:{sign}:{i}",
                    kind="area",
                    commands=area_path([(x, y_of(v)) for x, v in zip(xs, values)], baseline, options.curve_type),
                    fill=colors[i],
                    group="horizon",
                    datum={"band": i, "sign": sign},
                )
            )
    targets = [
        hover_target(
            "band:pos:0" if p.value >= 0 else "band:neg:0", x, (x, h / 2), {"key": p.key, "value": p.value}
        )
        for x, p in zip(xs, s)
    ]
    snapshot = GeometrySnapshot(
        "horizon", tuple(elements), options.width, options.height,
        meta={
            "empty": False,
            "band_width": layout.band_width,
            "max_abs": layout.max_abs,
            "hover_targets": targets,
        },
    )
    return ChartResult(snapshot, {"status": "ok", "bands": options.band_count})


register_chart_type("line", _line_builder, "Multi-series line chart")
register_chart_type("area", _area_builder, "Stacked area chart (configurable order/offset)")
register_chart_type("stream", _stream_builder, "Streamgraph (inside-out order, wiggle offset)")
register_chart_type("horizon", _horizon_builder, "Horizon chart with folded positive/negative bands")
