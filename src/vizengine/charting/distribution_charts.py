"""Violin chart builder (kernel density per group).

Input: ``{group: [samples]}``, ``{"groups": {...}}`` or a list of
``{category, value}`` records. Each group gets an Epanechnikov density on
``grid_size`` points; ``bandwidth`` defaults to Silverman's rule per group.
Outlines are mirrored around the group centre and drawn with the curve
evaluated along y. Empty or zero-spread groups render a flat placeholder
tick instead of a spike.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from ..config import ChartOptions
from .common import finite, hover_target, palette_for, placeholder_snapshot
from .layouts.density import estimate_density
from .path import PathBuilder
from .registry import register_chart_type
from .scales import band, linear
from .shapes import area_path
from .types import ChartRequest, ChartResult, DataPoint, Domain, GeometrySnapshot, ShapeState

log = logging.getLogger(__name__)


def _groups(data: Any) -> Dict[str, List[float]]:
    if isinstance(data, Mapping) and "groups" in data:
        data = data["groups"]
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return {str(k): finite(v) for k, v in data.items()}
    groups: Dict[str, List[float]] = {}
    for rec in data:
        if isinstance(rec, DataPoint):
            key, value = rec.category, rec.value
        else:
            key, value = rec.get("category", rec.get("key")), rec.get("value")
        groups.setdefault(str(key), []).extend(finite([value]))
    return groups


def _violin_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    groups = _groups(req.data)
    if not any(groups.values()):
        return ChartResult(placeholder_snapshot("violin", options, "no groups"), {"status": "empty"})
    names = list(groups)
    x = band(names, (0.0, options.width), 0.2)
    estimates = {
        g: estimate_density(samples, bandwidth=options.bandwidth, grid_size=options.grid_size)
        for g, samples in groups.items()
    }
    extent: List[float] = []
    for g, est in estimates.items():
        extent.extend(est.grid if not est.degenerate else groups[g])
    y = linear(Domain.from_values(extent), (options.height, 0.0), True)
    peak = max((est.peak for est in estimates.values() if not est.degenerate), default=0.0)
    half_width = x.bandwidth / 2
    palette = palette_for(names, options)

    elements: List[ShapeState] = []
    targets = []
    for g in names:
        est = estimates[g]
        c = x.center(g)
        q1, median, q3 = est.quartiles
        datum = {"label": g, "n": len(groups[g]), "median": median, "q1": q1, "q3": q3}
        if est.degenerate:
            level = y(groups[g][0]) if groups[g] else options.height / 2
            elements.append(
                ShapeState(
                    element_id=f"violin:{g}",
                    kind="placeholder",
                    commands=PathBuilder().move_to(c - half_width / 2, level).line_to(c + half_width / 2, level).commands,
                    stroke=palette.color_for(g),
                    group="violins",
                    datum={**datum, "degenerate": True},
                    anchor=(c, level),
                )
            )
            targets.append(hover_target(f"violin:{g}", c, (c, level), datum))
            continue
        scale = half_width / peak if peak > 0 else 0.0
        right = [(c + d * scale, y(v)) for v, d in zip(est.grid, est.density)]
        left = [(c - d * scale, y(v)) for v, d in zip(est.grid, est.density)]
        ym = y(median)
        elements.append(
            ShapeState(
                element_id=f"violin:{g}",
                kind="area",
                commands=area_path(right, left, options.curve_type, orientation="y"),
                fill=palette.color_for(g),
                group="violins",
                datum={**datum, "bandwidth": est.bandwidth},
                anchor=(c, ym),
            )
        )
        elements.append(
            ShapeState(
                element_id=f"median:{g}",
                kind="line",
                commands=PathBuilder().move_to(c - half_width / 2, ym).line_to(c + half_width / 2, ym).commands,
                stroke="#111827",
                group="medians",
                datum={"label": g, "median": median},
            )
        )
        targets.append(hover_target(f"violin:{g}", c, (c, ym), datum))
    snapshot = GeometrySnapshot(
        "violin", tuple(elements), options.width, options.height,
        meta={"empty": False, "y_domain": [y.domain.min, y.domain.max], "hover_targets": targets},
    )
    return ChartResult(snapshot, {"status": "ok", "groups": len(names)})


register_chart_type("violin", _violin_builder, "Violin plot (Epanechnikov KDE per group)")
