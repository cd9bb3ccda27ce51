"""Flow chart builders: two-column sankey and chord diagram.

Sankey input: a list of ``(source, target, value)`` tuples or
``{source, target, value}`` mappings (optionally under ``"links"``).
Chord input: ``{"names": [...], "matrix": [[...]]}`` with
``matrix[i][j]`` the flow from ``names[i]`` to ``names[j]``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

from ..config import ChartOptions
from ..errors import InvalidDataError
from .common import palette_for, placeholder_snapshot, rect_commands
from .layouts.chord import chord_layout
from .layouts.flow import flow_layout
from .registry import register_chart_type
from .shapes import ArcDatum, arc_centroid, arc_params, arc_path, chord_ribbon, flow_ribbon, translate
from .types import ChartRequest, ChartResult, GeometrySnapshot, ShapeState

log = logging.getLogger(__name__)


def _sankey_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    raw = req.data["links"] if isinstance(req.data, Mapping) else req.data
    layout = flow_layout(
        raw or (),
        width=options.width,
        height=options.height,
        node_width=options.node_width,
        node_gap=options.node_gap,
        min_flow_threshold=options.min_flow_threshold,
    )
    if not layout.links:
        return ChartResult(placeholder_snapshot("sankey", options, "no flows"), {"status": "empty"})
    sources = [n.name for n in layout.nodes if n.column == 0]
    palette = palette_for(list(dict.fromkeys(sources + [n.name for n in layout.nodes])), options)

    elements: List[ShapeState] = []
    for link in layout.links:
        src = layout.node(link.source)
        tgt = layout.node(link.target)
        mid_y = (link.source_span[0] + link.source_span[1] + link.target_span[0] + link.target_span[1]) / 4
        elements.append(
            ShapeState(
                element_id=f"link:{link.index}",
                kind="ribbon",
                commands=flow_ribbon(src.x1, link.source_span, tgt.x0, link.target_span),
                fill=palette.color_for(src.name),
                opacity=0.5,
                group="links",
                datum={"source": src.name, "target": tgt.name, "value": link.value},
                anchor=((src.x1 + tgt.x0) / 2, mid_y),
            )
        )
    for node in layout.nodes:
        elements.append(
            ShapeState(
                element_id=node.node_id,
                kind="rect",
                commands=rect_commands(node.x0, node.y0, node.x1, node.y1),
                fill=palette.color_for(node.name),
                group="nodes",
                datum={"label": node.name, "value": node.value, "column": node.column},
                anchor=((node.x0 + node.x1) / 2, (node.y0 + node.y1) / 2),
            )
        )
    snapshot = GeometrySnapshot(
        "sankey", tuple(elements), options.width, options.height,
        meta={"empty": False, "scale": layout.scale, "links": len(layout.links)},
    )
    return ChartResult(snapshot, {"status": "ok", "nodes": len(layout.nodes), "links": len(layout.links)})


def _chord_input(data: Any):
    if not isinstance(data, Mapping) or "matrix" not in data:
        raise InvalidDataError("chord chart expects {'names': [...], 'matrix': [[...]]}")
    matrix = data["matrix"]
    names = [str(n) for n in data.get("names", range(len(matrix)))]
    if len(names) != len(matrix):
        raise InvalidDataError(
            "chord names must match matrix size", context={"names": len(names), "rows": len(matrix)}
        )
    return names, matrix


def _chord_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    names, matrix = _chord_input(req.data)
    layout = chord_layout(matrix, pad_angle=options.pad_angle)
    if layout.empty:
        return ChartResult(placeholder_snapshot("chord", options, "no flows"), {"status": "empty"})
    cx, cy = options.width / 2, options.height / 2
    outer = max(0.0, min(options.width, options.height) / 2 - 4.0)
    inner = outer * 0.92
    palette = palette_for(names, options)

    elements: List[ShapeState] = []
    for group in layout.groups:
        name = names[group.index]
        datum = ArcDatum(inner, outer, group.start_angle, group.end_angle, 0.0)
        ax, ay = arc_centroid(datum)
        elements.append(
            ShapeState(
                element_id=f"group:{name}",
                kind="arc",
                commands=translate(arc_path(datum), cx, cy),
                fill=palette.color_for(name),
                group="groups",
                datum={"label": name, "value": group.value},
                anchor=(cx + ax, cy + ay),
                params=arc_params(datum, cx, cy),
            )
        )
    for ch in layout.chords:
        src, tgt = names[ch.source], names[ch.target]
        mid = ArcDatum(0.0, inner, ch.source_span[0], ch.source_span[1])
        ax, ay = arc_centroid(mid)
        elements.append(
            ShapeState(
                element_id=f"chord:{src}->{tgt}",
                kind="ribbon",
                commands=translate(chord_ribbon(ch.source_span, ch.target_span, inner), cx, cy),
                fill=palette.color_for(src),
                opacity=0.65,
                group="chords",
                datum={"source": src, "target": tgt, "value": ch.value},
                anchor=(cx + ax, cy + ay),
            )
        )
    snapshot = GeometrySnapshot(
        "chord", tuple(elements), options.width, options.height,
        meta={"empty": False, "total": layout.total, "inner_radius": inner, "outer_radius": outer},
    )
    return ChartResult(snapshot, {"status": "ok", "groups": len(layout.groups), "chords": len(layout.chords)})


register_chart_type("sankey", _sankey_builder, "Two-column flow (sankey) diagram")
register_chart_type("chord", _chord_builder, "Chord diagram over a square flow matrix")
