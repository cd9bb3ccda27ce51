"""Categorical chart builders: bar.

Input: ``{label: value}``, a list of ``{label|category|key, value}``
records, or a ``DataSeries`` (category, else key, is the label).

Bars sit on a band scale along x (``options.bar_padding`` between and
around the bands) and a nice linear scale along y that always includes
zero, so negative values hang below the baseline. ``options.sort_order``
reorders the bands. Each bar carries ``bar_params`` so the renderer can
grow it from the baseline.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import ChartOptions
from .common import finite, hover_target, labelled_values, palette_for, placeholder_snapshot, unique_ids
from .layouts.pie import placement_order
from .registry import register_chart_type
from .scales import OrdinalScale, band, linear
from .shapes import bar_params, bar_path
from .types import ChartRequest, ChartResult, DataSeries, Domain, GeometrySnapshot, ShapeState

log = logging.getLogger(__name__)


def _bar_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    data = req.data.points if isinstance(req.data, DataSeries) else req.data
    items = []
    for label, value in labelled_values(data):
        v = finite([value])
        if v:
            items.append((label, v[0]))
    if not items:
        return ChartResult(placeholder_snapshot("bar", options, "no data"), {"status": "empty"})
    dropped = len(labelled_values(data)) - len(items)
    if dropped:
        log.debug("bar: %d non-finite values skipped", dropped)

    ids = unique_ids("bar", [label for label, _ in items])
    order = placement_order([v for _, v in items], options.sort_order)
    x = band([ids[i] for i in order], (0.0, options.width), options.bar_padding)
    domain = Domain.from_values([v for _, v in items], include_zero=True)
    if domain.is_degenerate:
        domain = Domain(domain.min, domain.min + 1.0)
    y = linear(domain, (options.height, 0.0), True)
    color = OrdinalScale(palette_for([label for label, _ in items], options))
    baseline = y(0.0)
    total = sum(abs(v) for _, v in items)

    elements: List[ShapeState] = []
    targets: List[Dict[str, Any]] = []
    for rank, i in enumerate(order):
        element_id = ids[i]
        label, value = items[i]
        x0 = x(element_id)
        params = bar_params(x0, x0 + x.bandwidth, baseline, y(value))
        center = x0 + x.bandwidth / 2
        anchor = (center, min(params["top"], baseline))
        datum = {
            "label": label,
            "value": value,
            "index": i,
            "rank": rank,
            "share": abs(value) / total if total > 0 else 0.0,
        }
        elements.append(
            ShapeState(
                element_id=element_id,
                kind="bar",
                commands=bar_path(params),
                fill=color(label),
                group="bars",
                datum=datum,
                anchor=anchor,
                params=params,
            )
        )
        targets.append(hover_target(element_id, center, anchor, datum))
    snapshot = GeometrySnapshot(
        "bar", tuple(elements), options.width, options.height,
        meta={
            "empty": False,
            "y_domain": [y.domain.min, y.domain.max],
            "y_ticks": y.ticks(5),
            "baseline": baseline,
            "bandwidth": x.bandwidth,
            "order": [items[i][0] for i in order],
            "hover_targets": targets,
        },
    )
    return ChartResult(snapshot, {"status": "ok", "bars": len(elements)})


register_chart_type("bar", _bar_builder, "Band-scale bars growing from a zero baseline")
