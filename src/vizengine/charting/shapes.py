"""ShapeGenerator: arcs, lines, areas, radial polygons and ribbons.

Angular shapes (arcs, radial polygons, chord ribbons) measure angles from
12 o'clock, clockwise, and are centred on the origin; callers translate
the resulting commands (see ``translate``) to place them on the canvas.

Arc corner rounding follows the tangent-circle construction: each corner
is replaced by a circle of radius ``rc`` tangent to the radial edge and to
the inner/outer ring, with ``rc`` clamped to half the ring thickness and,
for narrow wedges, to what fits between the two radial edges.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Sequence, Tuple

from .curves import draw_curve
from .path import EPSILON, TAU, PathBuilder, PathCommand
from .types import ShapeState

__all__ = [
    "ArcDatum",
    "arc_path",
    "arc_centroid",
    "interpolate_arc",
    "line_path",
    "area_path",
    "radial_point",
    "radial_polygon",
    "chord_ribbon",
    "flow_ribbon",
    "translate",
    "arc_params",
    "arc_from_params",
    "bar_params",
    "bar_path",
    "bar_from_params",
]

HALF_PI = math.pi / 2


@dataclass(frozen=True)
class ArcDatum:
    inner_radius: float
    outer_radius: float
    start_angle: float
    end_angle: float
    corner_radius: float = 0.0


def interpolate_arc(seed: ArcDatum, final: ArcDatum, t: float) -> ArcDatum:
    """Linearly tween start/end angles from ``seed`` to ``final``.

    With a zero-angle seed this is the grow-from-centre reveal; radii and
    corner radius are taken from ``final``.
    """
    return replace(
        final,
        start_angle=seed.start_angle + (final.start_angle - seed.start_angle) * t,
        end_angle=seed.end_angle + (final.end_angle - seed.end_angle) * t,
    )


def _intersect(x0, y0, x1, y1, x2, y2, x3, y3) -> Optional[Tuple[float, float]]:
    x10, y10 = x1 - x0, y1 - y0
    x32, y32 = x3 - x2, y3 - y2
    t = y32 * x10 - x32 * y10
    if t * t < EPSILON:
        return None
    t = (x32 * (y0 - y2) - y32 * (x0 - x2)) / t
    return x0 + t * x10, y0 + t * y10


def _corner_tangents(x0, y0, x1, y1, r1, rc, cw):
    """Centre and tangent points of the corner circle between a radial edge and a ring."""
    x01, y01 = x0 - x1, y0 - y1
    lo = (rc if cw else -rc) / math.sqrt(x01 * x01 + y01 * y01)
    ox, oy = lo * y01, -lo * x01
    x11, y11 = x0 + ox, y0 + oy
    x10, y10 = x1 + ox, y1 + oy
    x00, y00 = (x11 + x10) / 2, (y11 + y10) / 2
    dx, dy = x10 - x11, y10 - y11
    d2 = dx * dx + dy * dy
    r = r1 - rc
    big_d = x11 * y10 - x10 * y11
    d = (-1 if dy < 0 else 1) * math.sqrt(max(0.0, r * r * d2 - big_d * big_d))
    cx0 = (big_d * dy - dx * d) / d2
    cy0 = (-big_d * dx - dy * d) / d2
    cx1 = (big_d * dy + dx * d) / d2
    cy1 = (-big_d * dx + dy * d) / d2
    dx0, dy0 = cx0 - x00, cy0 - y00
    dx1, dy1 = cx1 - x00, cy1 - y00
    if dx0 * dx0 + dy0 * dy0 > dx1 * dx1 + dy1 * dy1:
        cx0, cy0 = cx1, cy1
    return {
        "cx": cx0,
        "cy": cy0,
        "x01": -ox,
        "y01": -oy,
        "x11": cx0 * (r1 / r - 1),
        "y11": cy0 * (r1 / r - 1),
    }


def _rounded_edge(b: PathBuilder, t0: dict, t1: dict, radius: float, rc: float, rc_max: float,
                  cw: bool, ring_ccw: bool) -> None:
    if rc < rc_max:
        # Corners overlap: a single circle joins the two radial edges.
        b.arc(t0["cx"], t0["cy"], rc, math.atan2(t0["y01"], t0["x01"]),
              math.atan2(t1["y01"], t1["x01"]), not cw)
        return
    b.arc(t0["cx"], t0["cy"], rc, math.atan2(t0["y01"], t0["x01"]),
          math.atan2(t0["y11"], t0["x11"]), not cw)
    b.arc(0, 0, radius, math.atan2(t0["cy"] + t0["y11"], t0["cx"] + t0["x11"]),
          math.atan2(t1["cy"] + t1["y11"], t1["cx"] + t1["x11"]), ring_ccw)
    b.arc(t1["cx"], t1["cy"], rc, math.atan2(t1["y11"], t1["x11"]),
          math.atan2(t1["y01"], t1["x01"]), not cw)


def arc_path(datum: ArcDatum) -> Tuple[PathCommand, ...]:
    """Closed annular wedge for ``datum`` centred on the origin."""
    b = PathBuilder()
    r0, r1 = datum.inner_radius, datum.outer_radius
    if r1 < r0:
        r0, r1 = r1, r0
    a0 = datum.start_angle - HALF_PI
    a1 = datum.end_angle - HALF_PI
    da = abs(a1 - a0)
    cw = a1 > a0

    if not r1 > EPSILON:
        b.move_to(0, 0)
    elif da > TAU - EPSILON:
        # Full ring
        b.move_to(r1 * math.cos(a0), r1 * math.sin(a0))
        b.arc(0, 0, r1, a0, a1, not cw)
        if r0 > EPSILON:
            b.move_to(r0 * math.cos(a1), r0 * math.sin(a1))
            b.arc(0, 0, r0, a1, a0, cw)
    else:
        rc = min(abs(r1 - r0) / 2, datum.corner_radius)
        rc0 = rc1 = rc
        x01, y01 = r1 * math.cos(a0), r1 * math.sin(a0)
        x10, y10 = r0 * math.cos(a1), r0 * math.sin(a1)
        x11, y11 = r1 * math.cos(a1), r1 * math.sin(a1)
        x00, y00 = r0 * math.cos(a0), r0 * math.sin(a0)

        if rc > EPSILON and da < math.pi:
            oc = _intersect(x01, y01, x00, y00, x11, y11, x10, y10)
            if oc is not None:
                ax, ay = x01 - oc[0], y01 - oc[1]
                bx, by = x11 - oc[0], y11 - oc[1]
                cos_theta = (ax * bx + ay * by) / (
                    math.sqrt(ax * ax + ay * ay) * math.sqrt(bx * bx + by * by)
                )
                half = math.sin(math.acos(max(-1.0, min(1.0, cos_theta))) / 2)
                if half < EPSILON:
                    rc0 = rc1 = 0.0
                else:
                    kc = 1 / half
                    lc = math.sqrt(oc[0] * oc[0] + oc[1] * oc[1])
                    if kc - 1 > EPSILON:
                        rc0 = min(rc, (r0 - lc) / (kc - 1))
                    else:
                        rc0 = rc if r0 > lc else 0.0
                    rc1 = min(rc, (r1 - lc) / (kc + 1))
            else:
                rc0 = rc1 = 0.0

        # Outer ring
        if not da > EPSILON:
            b.move_to(x01, y01)
        elif rc1 > EPSILON:
            t0 = _corner_tangents(x00, y00, x01, y01, r1, rc1, cw)
            t1 = _corner_tangents(x11, y11, x10, y10, r1, rc1, cw)
            b.move_to(t0["cx"] + t0["x01"], t0["cy"] + t0["y01"])
            _rounded_edge(b, t0, t1, r1, rc1, rc, cw, not cw)
        else:
            b.move_to(x01, y01)
            b.arc(0, 0, r1, a0, a1, not cw)

        # Inner ring (or apex)
        if not (r0 > EPSILON) or not (da > EPSILON):
            b.line_to(x10, y10)
        elif rc0 > EPSILON:
            t0 = _corner_tangents(x10, y10, x11, y11, r0, -rc0, cw)
            t1 = _corner_tangents(x01, y01, x00, y00, r0, -rc0, cw)
            b.line_to(t0["cx"] + t0["x01"], t0["cy"] + t0["y01"])
            _rounded_edge(b, t0, t1, r0, rc0, rc, cw, cw)
        else:
            b.arc(0, 0, r0, a1, a0, cw)
    b.close_path()
    return b.commands


def arc_centroid(datum: ArcDatum) -> Tuple[float, float]:
    """Midpoint of the wedge (mid angle, mid radius); tooltip/label anchor."""
    r = (datum.inner_radius + datum.outer_radius) / 2
    a = (datum.start_angle + datum.end_angle) / 2 - HALF_PI
    return math.cos(a) * r, math.sin(a) * r


def line_path(points: Sequence[Tuple[float, float]], curve_type: str = "linear") -> Tuple[PathCommand, ...]:
    return draw_curve(PathBuilder(), points, curve_type).commands


def area_path(
    top: Sequence[Tuple[float, float]],
    bottom: Sequence[Tuple[float, float]],
    curve_type: str = "linear",
    *,
    orientation: str = "x",
) -> Tuple[PathCommand, ...]:
    """Region between ``top`` and ``bottom`` (same ordering), closed.

    The upper edge runs forward, the lower edge runs backward with the same
    interpolation, so the enclosed area is the band between both curves.
    """
    b = PathBuilder()
    if not top:
        return b.commands
    draw_curve(b, top, curve_type, orientation=orientation)
    draw_curve(b, list(reversed(bottom)), curve_type, join=True, orientation=orientation)
    b.close_path()
    return b.commands


def radial_point(angle: float, radius: float) -> Tuple[float, float]:
    return radius * math.sin(angle), -radius * math.cos(angle)


def radial_polygon(points: Sequence[Tuple[float, float]]) -> Tuple[PathCommand, ...]:
    """Closed polygon through ``(angle, radius)`` points; last joins first."""
    b = PathBuilder()
    for i, (angle, radius) in enumerate(points):
        x, y = radial_point(angle, radius)
        if i == 0:
            b.move_to(x, y)
        else:
            b.line_to(x, y)
    if points:
        b.close_path()
    return b.commands


def chord_ribbon(
    source: Tuple[float, float], target: Tuple[float, float], radius: float
) -> Tuple[PathCommand, ...]:
    """Ribbon between two angular sub-arcs ``(start_angle, end_angle)`` on a circle.

    The sides are quadratic Beziers pulled through the centre.
    """
    b = PathBuilder()
    sa0, sa1 = source[0] - HALF_PI, source[1] - HALF_PI
    ta0, ta1 = target[0] - HALF_PI, target[1] - HALF_PI
    b.move_to(radius * math.cos(sa0), radius * math.sin(sa0))
    b.arc(0, 0, radius, sa0, sa1)
    if sa0 != ta0 or sa1 != ta1:
        b.quadratic_curve_to(0, 0, radius * math.cos(ta0), radius * math.sin(ta0))
        b.arc(0, 0, radius, ta0, ta1)
    b.quadratic_curve_to(0, 0, radius * math.cos(sa0), radius * math.sin(sa0))
    b.close_path()
    return b.commands


def flow_ribbon(
    x0: float, source: Tuple[float, float], x1: float, target: Tuple[float, float]
) -> Tuple[PathCommand, ...]:
    """Ribbon from the vertical edge segment ``source=(top, bottom)`` at ``x0``
    to ``target=(top, bottom)`` at ``x1``.

    Both sides are cubic Beziers with horizontal tangents at the endpoints
    (control points at the horizontal midpoint).
    """
    b = PathBuilder()
    xm = (x0 + x1) / 2
    b.move_to(x0, source[0])
    b.bezier_curve_to(xm, source[0], xm, target[0], x1, target[0])
    b.line_to(x1, target[1])
    b.bezier_curve_to(xm, target[1], xm, source[1], x0, source[1])
    b.close_path()
    return b.commands


def translate(commands: Sequence[PathCommand], dx: float, dy: float) -> Tuple[PathCommand, ...]:
    """Shift every coordinate (arc centres included) by ``(dx, dy)``."""
    out = []
    for cmd in commands:
        code = cmd[0]
        if code == "Z":
            out.append(cmd)
        elif code == "A":
            r, large, sweep, x, y, cx, cy, a0, a1 = cmd[1:]
            out.append(("A", r, large, sweep, x + dx, y + dy, cx + dx, cy + dy, a0, a1))
        else:
            coords = list(cmd[1:])
            for i in range(0, len(coords), 2):
                coords[i] += dx
                coords[i + 1] += dy
            out.append((code, *coords))
    return tuple(out)


def arc_params(datum: ArcDatum, cx: float, cy: float) -> dict:
    """Tweenable parameters of an arc placed at ``(cx, cy)``."""
    return {
        "inner_radius": datum.inner_radius,
        "outer_radius": datum.outer_radius,
        "start_angle": datum.start_angle,
        "end_angle": datum.end_angle,
        "corner_radius": datum.corner_radius,
        "cx": cx,
        "cy": cy,
    }


def arc_from_params(shape: ShapeState, params: Mapping[str, float]) -> ShapeState:
    """Rebuild an arc element's commands from (possibly animated) params."""
    datum = ArcDatum(
        inner_radius=params["inner_radius"],
        outer_radius=params["outer_radius"],
        start_angle=params["start_angle"],
        end_angle=params["end_angle"],
        corner_radius=params.get("corner_radius", 0.0),
    )
    commands = translate(arc_path(datum), params.get("cx", 0.0), params.get("cy", 0.0))
    return replace(shape, commands=commands, params=dict(params))


def bar_params(x0: float, x1: float, baseline: float, top: float) -> dict:
    """Tweenable parameters of a bar spanning ``x0..x1`` from ``baseline`` to ``top``."""
    return {"x0": x0, "x1": x1, "baseline": baseline, "top": top}


def bar_path(params: Mapping[str, float]) -> Tuple[PathCommand, ...]:
    x0, x1 = params["x0"], params["x1"]
    y0, y1 = params["baseline"], params["top"]
    b = PathBuilder().move_to(x0, y0).line_to(x1, y0).line_to(x1, y1).line_to(x0, y1).close_path()
    return b.commands


def bar_from_params(shape: ShapeState, params: Mapping[str, float]) -> ShapeState:
    return replace(shape, commands=bar_path(params), params=dict(params))
