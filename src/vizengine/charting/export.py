"""Snapshot export helpers.

``export_snapshot`` renders through the matplotlib backend and writes PNG
or SVG to disk. ``snapshot_to_svg`` serializes the path data directly into
a standalone SVG document string (no matplotlib involved), element ids
preserved, which is handy for golden-file comparisons.
"""
from __future__ import annotations

import logging
from typing import List, Sequence
from xml.sax.saxutils import quoteattr

from .backends import MatplotlibChartBackend
from .types import GeometrySnapshot, ShapeState, canonical

__all__ = ["export_snapshot", "snapshot_to_svg"]

log = logging.getLogger(__name__)


def export_snapshot(
    snapshot: GeometrySnapshot,
    path: str,
    *,
    format: str = "png",
    dpi: int = 120,
    shapes: Sequence[ShapeState] | None = None,
) -> None:
    """Write a snapshot (or an animation frame of it) to ``path``.

    Args:
        snapshot: Geometry to draw; supplies the canvas size.
        path: Destination file path (existing directory required).
        format: 'png' or 'svg'.
        dpi: Raster resolution for PNG.
        shapes: Optional frame (e.g. ``ChartRenderer.frame()``) drawn instead
            of the snapshot's final elements.
    """
    fmt = format.lower()
    if fmt not in {"png", "svg"}:
        raise ValueError("format must be 'png' or 'svg'")
    backend = MatplotlibChartBackend()
    fig = backend.render(snapshot, shapes=shapes)
    backend.export_figure(fig, path, format=fmt, dpi=dpi)
    log.info("exported %s chart to %s", snapshot.chart_type, path)


def snapshot_to_svg(snapshot: GeometrySnapshot, shapes: Sequence[ShapeState] | None = None) -> str:
    width = canonical(float(snapshot.width))
    height = canonical(float(snapshot.height))
    lines: List[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
    ]
    for shape in snapshot.elements if shapes is None else shapes:
        if not shape.commands:
            continue
        attrs = [
            f"id={quoteattr(shape.element_id)}",
            f"d={quoteattr(shape.path)}",
            f"fill={quoteattr(shape.fill or 'none')}",
            f"stroke={quoteattr(shape.stroke or 'none')}",
        ]
        if shape.opacity != 1.0:
            attrs.append(f'opacity="{canonical(shape.opacity)}"')
        lines.append(f"  <path {' '.join(attrs)}/>")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"
