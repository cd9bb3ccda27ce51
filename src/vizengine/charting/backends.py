"""Matplotlib backend: replay a GeometrySnapshot onto a ``Figure``.

Every element becomes one ``PathPatch``. Quadratic and cubic segments map
onto matplotlib's ``CURVE3``/``CURVE4`` codes; arcs are sampled into line
segments. The axes use the screen convention (y grows downward) so
coordinates are drawn exactly as computed.

The Qt canvas is optional: ``create_canvas`` needs PyQt6 and raises
``RuntimeError`` without it. Everything else runs headless.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from matplotlib.figure import Figure
from matplotlib.patches import PathPatch
from matplotlib.path import Path as MplPath

try:  # pragma: no cover - import guarded
    from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg

    _QT_AVAILABLE = True
except ImportError:  # pragma: no cover - headless environments
    _QT_AVAILABLE = False

from .path import PathCommand, arc_points
from .types import GeometrySnapshot, ShapeState

__all__ = ["MatplotlibChartBackend", "commands_to_mpl_path"]

log = logging.getLogger(__name__)


def commands_to_mpl_path(commands: Sequence[PathCommand]) -> Optional[MplPath]:
    """Convert path commands to a matplotlib ``Path`` (``None`` when empty)."""
    verts: List[Tuple[float, float]] = []
    codes: List[int] = []
    start: Optional[Tuple[float, float]] = None
    for cmd in commands:
        code = cmd[0]
        if code == "M":
            start = (cmd[1], cmd[2])
            verts.append(start)
            codes.append(MplPath.MOVETO)
        elif code == "L":
            verts.append((cmd[1], cmd[2]))
            codes.append(MplPath.LINETO)
        elif code == "Q":
            verts.extend([(cmd[1], cmd[2]), (cmd[3], cmd[4])])
            codes.extend([MplPath.CURVE3] * 2)
        elif code == "C":
            verts.extend([(cmd[1], cmd[2]), (cmd[3], cmd[4]), (cmd[5], cmd[6])])
            codes.extend([MplPath.CURVE4] * 3)
        elif code == "A":
            for pt in arc_points(cmd):
                verts.append(pt)
                codes.append(MplPath.LINETO)
        elif code == "Z" and start is not None:
            verts.append(start)
            codes.append(MplPath.CLOSEPOLY)
    if not verts:
        return None
    return MplPath(verts, codes)


class MatplotlibChartBackend:
    def __init__(self, *, dpi: int = 100) -> None:
        self.dpi = dpi

    def _patch(self, shape: ShapeState) -> Optional[PathPatch]:
        path = commands_to_mpl_path(shape.commands)
        if path is None:
            return None
        return PathPatch(
            path,
            facecolor=shape.fill or "none",
            edgecolor=shape.stroke or "none",
            linewidth=1.5 if shape.fill is None else 0.8,
            alpha=max(0.0, min(1.0, shape.opacity)),
        )

    def render(
        self,
        snapshot: GeometrySnapshot,
        *,
        shapes: Sequence[ShapeState] | None = None,
        figure: Figure | None = None,
        title: str | None = None,
    ) -> Figure:
        """Draw ``shapes`` (default: the snapshot's elements) on a figure.

        Passing ``shapes`` lets a caller draw an animation frame (the
        renderer's ``frame()``) with the snapshot's canvas size.
        """
        fig = figure or Figure(figsize=(snapshot.width / self.dpi, snapshot.height / self.dpi), dpi=self.dpi)
        fig.clear()
        ax = fig.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, snapshot.width)
        ax.set_ylim(snapshot.height, 0)
        ax.set_aspect("equal", adjustable="box")
        ax.axis("off")
        drawn = 0
        for shape in snapshot.elements if shapes is None else shapes:
            patch = self._patch(shape)
            if patch is None:
                continue
            patch.set_gid(shape.element_id)
            ax.add_patch(patch)
            drawn += 1
        if title:
            ax.set_title(title)
        log.debug("rendered %d/%d elements", drawn, len(snapshot.elements))
        return fig

    def create_canvas(self, figure: Figure):  # pragma: no cover - needs a Qt application
        if not _QT_AVAILABLE:
            raise RuntimeError("Qt canvas requires PyQt6")
        return FigureCanvasQTAgg(figure)

    def export_figure(self, figure: Figure, path: str, *, format: str = "png", dpi: int = 120) -> None:
        fmt = format.lower()
        if fmt not in {"png", "svg"}:
            raise ValueError("format must be 'png' or 'svg'")
        figure.savefig(path, format=fmt, dpi=dpi if fmt == "png" else None)
