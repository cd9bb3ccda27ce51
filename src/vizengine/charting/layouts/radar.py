"""Radar layout: one axis per dimension, values mapped to radii."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..path import TAU
from ..scales import linear

__all__ = ["RadarAxis", "RadarLayout", "radar_layout"]


@dataclass(frozen=True)
class RadarAxis:
    name: str
    angle: float


@dataclass(frozen=True)
class RadarLayout:
    axes: Tuple[RadarAxis, ...]
    series: Tuple[Tuple[Tuple[float, float], ...], ...]  # per series: (angle, radius)
    levels: Tuple[float, ...]  # grid ring radii, innermost first
    max_value: float


def radar_layout(
    axes: Sequence[str],
    series: Sequence[Sequence[float]],
    *,
    radius: float,
    levels: int = 5,
    max_value: Optional[float] = None,
) -> RadarLayout:
    """Axis ``i`` sits at ``i * 2pi / N`` from 12 o'clock.

    Values scale linearly from 0 at the centre to ``max_value`` (default: the
    largest value, nicely rounded) at ``radius``; negative values clamp to
    the centre.
    """
    n = len(axes)
    step = TAU / n if n else 0.0
    axis_list = tuple(RadarAxis(str(name), i * step) for i, name in enumerate(axes))
    finite = [float(v) for s in series for v in s if v is not None and math.isfinite(float(v))]
    if max_value is None:
        peak = max(finite, default=0.0)
        max_value = linear((0.0, peak), (0.0, radius), True).domain.max if peak > 0 else 0.0
    scale = linear((0.0, max_value), (0.0, radius))
    placed: List[Tuple[Tuple[float, float], ...]] = []
    for values in series:
        pts = []
        for axis, v in zip(axis_list, values):
            v = float(v) if v is not None and math.isfinite(float(v)) else 0.0
            r = scale(max(0.0, v)) if max_value > 0 else 0.0
            pts.append((axis.angle, r))
        placed.append(tuple(pts))
    rings = tuple(radius * (i + 1) / levels for i in range(levels))
    return RadarLayout(axes=axis_list, series=tuple(placed), levels=rings, max_value=float(max_value))
