"""Curve interpolators turning point lists into path commands.

Supported ``curve_type`` values:

 - ``linear``: straight segments.
 - ``monotone``: Steffen's monotonicity preserving cubic Hermite spline
   (monotone in x). Tangents are limited by the neighbouring secant slopes
   and forced to 0 at local extrema, which keeps every Bezier control point
   inside the y-range of its segment: the curve never overshoots a
   measured value.
 - ``step``: horizontal/vertical steps switching at the x midpoint.
 - ``basis``: uniform cubic B-spline (smooth, does not pass through interior
   points).

``draw_curve(builder, points, curve_type, join=..., orientation=...)`` is
the single entry point. ``join=True`` continues the current sub-path with a
line to the first point instead of starting a new one (used for the lower
edge of areas). ``orientation="y"`` evaluates the curve along y, which is
what vertical outlines such as violins need.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence, Tuple

from ..config import CURVE_TYPES
from ..errors import ConfigurationError
from .path import PathBuilder

__all__ = ["draw_curve", "monotone_tangents"]

Point = Tuple[float, float]


def _start(b: PathBuilder, x: float, y: float, join: bool) -> None:
    if join:
        b.line_to(x, y)
    else:
        b.move_to(x, y)


def _linear(b: PathBuilder, pts: Sequence[Point], join: bool) -> None:
    for i, (x, y) in enumerate(pts):
        if i == 0:
            _start(b, x, y, join)
        else:
            b.line_to(x, y)


def _step(b: PathBuilder, pts: Sequence[Point], join: bool) -> None:
    px = py = 0.0
    for i, (x, y) in enumerate(pts):
        if i == 0:
            _start(b, x, y, join)
        else:
            xm = (px + x) / 2
            b.line_to(xm, py)
            b.line_to(xm, y)
        px, py = x, y
    if len(pts) >= 2:
        b.line_to(px, py)


def _basis(b: PathBuilder, pts: Sequence[Point], join: bool) -> None:
    def segment(x0: float, y0: float, x1: float, y1: float, x: float, y: float) -> None:
        b.bezier_curve_to(
            (2 * x0 + x1) / 3,
            (2 * y0 + y1) / 3,
            (x0 + 2 * x1) / 3,
            (y0 + 2 * y1) / 3,
            (x0 + 4 * x1 + x) / 6,
            (y0 + 4 * y1 + y) / 6,
        )

    n = len(pts)
    if n == 0:
        return
    _start(b, pts[0][0], pts[0][1], join)
    if n == 1:
        return
    if n == 2:
        b.line_to(pts[1][0], pts[1][1])
        return
    (x0, y0), (x1, y1) = pts[0], pts[1]
    b.line_to((5 * x0 + x1) / 6, (5 * y0 + y1) / 6)
    for x, y in pts[2:]:
        segment(x0, y0, x1, y1, x, y)
        x0, y0, x1, y1 = x1, y1, x, y
    segment(x0, y0, x1, y1, x1, y1)
    b.line_to(x1, y1)


def _sign(v: float) -> int:
    return -1 if v < 0 else 1


def monotone_tangents(pts: Sequence[Point]) -> List[float]:
    """Return the Steffen tangent (dy/dx) at every point.

    Interior tangents use ``(sign(s0) + sign(s1)) * min(|s0|, |s1|, |p| / 2)``
    where ``s0``/``s1`` are the adjacent secant slopes and ``p`` the slope of
    the parabola through the three points. End tangents use the one-sided
    parabola estimate. Zero-width intervals yield a flat tangent.
    """
    n = len(pts)
    if n < 2:
        return [0.0] * n
    h = [pts[i + 1][0] - pts[i][0] for i in range(n - 1)]
    s = [(pts[i + 1][1] - pts[i][1]) / h[i] if h[i] else 0.0 for i in range(n - 1)]
    m = [0.0] * n
    for i in range(1, n - 1):
        h0, h1 = h[i - 1], h[i]
        if not h0 or not h1 or h0 + h1 == 0:
            continue
        s0, s1 = s[i - 1], s[i]
        p = (s0 * h1 + s1 * h0) / (h0 + h1)
        m[i] = (_sign(s0) + _sign(s1)) * min(abs(s0), abs(s1), 0.5 * abs(p))
    if n == 2:
        m[0] = m[1] = s[0]
        return m
    m[0] = (3 * s[0] - m[1]) / 2 if h[0] else m[1]
    m[-1] = (3 * s[-1] - m[-2]) / 2 if h[-1] else m[-2]
    return m


def _dedupe(pts: Sequence[Point]) -> List[Point]:
    out: List[Point] = []
    for p in pts:
        if out and out[-1][0] == p[0] and out[-1][1] == p[1]:
            continue  # coincident points carry no direction
        out.append((p[0], p[1]))
    return out


def _monotone(b: PathBuilder, pts: Sequence[Point], join: bool) -> None:
    pts = _dedupe(pts)
    n = len(pts)
    if n == 0:
        return
    _start(b, pts[0][0], pts[0][1], join)
    if n == 1:
        return
    if n == 2:
        b.line_to(pts[1][0], pts[1][1])
        return
    m = monotone_tangents(pts)
    for i in range(n - 1):
        (x0, y0), (x1, y1) = pts[i], pts[i + 1]
        dx = (x1 - x0) / 3
        b.bezier_curve_to(x0 + dx, y0 + dx * m[i], x1 - dx, y1 - dx * m[i + 1], x1, y1)


_CURVES: Dict[str, Callable[[PathBuilder, Sequence[Point], bool], None]] = {
    "linear": _linear,
    "monotone": _monotone,
    "step": _step,
    "basis": _basis,
}


def _swap(cmd: tuple) -> tuple:
    code = cmd[0]
    if code == "Z":
        return cmd
    coords = cmd[1:]
    swapped: list = []
    for i in range(0, len(coords), 2):
        swapped.extend((coords[i + 1], coords[i]))
    return (code, *swapped)


def draw_curve(
    b: PathBuilder,
    points: Sequence[Point],
    curve_type: str = "linear",
    *,
    join: bool = False,
    orientation: str = "x",
) -> PathBuilder:
    """Append ``points`` to ``b`` using the requested interpolation."""
    fn = _CURVES.get(curve_type)
    if fn is None:
        raise ConfigurationError(
            f"Unknown curve type: {curve_type} (expected one of {sorted(CURVE_TYPES)})"
        )
    if orientation == "x":
        fn(b, points, join)
        return b
    if orientation != "y":
        raise ConfigurationError(f"orientation must be 'x' or 'y', got {orientation!r}")
    scratch = PathBuilder()
    fn(scratch, [(y, x) for x, y in points], False)
    for i, cmd in enumerate(scratch.commands):
        code, *coords = _swap(cmd)
        if code == "M":
            if i == 0:
                _start(b, coords[0], coords[1], join)
            else:
                b.move_to(*coords)
        elif code == "L":
            b.line_to(*coords)
        elif code == "C":
            b.bezier_curve_to(*coords)
    return b
