"""Path command builder and SVG path-data formatting.

Shapes are recorded as a tuple of command tuples rather than a string so
that tests can inspect control points and non-SVG backends (matplotlib)
can replay them:

    ("M", x, y)                      move
    ("L", x, y)                      line
    ("Q", x1, y1, x, y)              quadratic Bezier
    ("C", x1, y1, x2, y2, x, y)      cubic Bezier
    ("A", r, large, sweep, x, y, cx, cy, a0, a1)
                                     circular arc ending at (x, y); centre
                                     and angles kept for sampling
    ("Z",)                           close sub-path

Angles passed to ``PathBuilder.arc`` follow the canvas convention:
0 points along +x and positive angles turn clockwise on a y-down screen.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Tuple

__all__ = ["PathBuilder", "PathCommand", "format_commands", "arc_points"]

PathCommand = Tuple[Any, ...]

TAU = 2 * math.pi
EPSILON = 1e-6
TAU_EPSILON = TAU - EPSILON


def _fmt(v: float, precision: int) -> str:
    r = round(v, precision)
    if r == 0:
        return "0"
    s = f"{r:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def format_commands(commands: Sequence[PathCommand], precision: int = 3) -> str:
    """Format commands as SVG path data with fixed precision (deterministic)."""
    out: List[str] = []
    for cmd in commands:
        code = cmd[0]
        if code == "Z":
            out.append("Z")
        elif code == "A":
            r, large, sweep, x, y = cmd[1:6]
            rs = _fmt(r, precision)
            out.append(
                f"A{rs},{rs},0,{int(large)},{int(sweep)},{_fmt(x, precision)},{_fmt(y, precision)}"
            )
        else:
            out.append(code + ",".join(_fmt(v, precision) for v in cmd[1:]))
    return "".join(out)


def arc_points(cmd: PathCommand, steps_per_radian: float = 8.0) -> List[Tuple[float, float]]:
    """Sample an ``A`` command into points (start point excluded, end included)."""
    _, r, _large, sweep, x, y, cx, cy, a0, a1 = cmd
    da = (a1 - a0) % TAU if sweep else -((a0 - a1) % TAU)
    steps = max(2, int(math.ceil(abs(da) * steps_per_radian)))
    pts = []
    for i in range(1, steps):
        a = a0 + da * i / steps
        pts.append((cx + r * math.cos(a), cy + r * math.sin(a)))
    pts.append((x, y))
    return pts


class PathBuilder:
    """Accumulates path commands (same operations as a canvas 2D context)."""

    def __init__(self) -> None:
        self._commands: List[PathCommand] = []
        self._x0: Optional[float] = None  # start of current sub-path
        self._y0: Optional[float] = None
        self._x1: Optional[float] = None  # current point
        self._y1: Optional[float] = None

    @property
    def commands(self) -> Tuple[PathCommand, ...]:
        return tuple(self._commands)

    @property
    def current_point(self) -> Optional[Tuple[float, float]]:
        if self._x1 is None or self._y1 is None:
            return None
        return self._x1, self._y1

    def __str__(self) -> str:
        return format_commands(self._commands)

    def move_to(self, x: float, y: float) -> "PathBuilder":
        self._commands.append(("M", x, y))
        self._x0 = self._x1 = x
        self._y0 = self._y1 = y
        return self

    def line_to(self, x: float, y: float) -> "PathBuilder":
        self._commands.append(("L", x, y))
        self._x1, self._y1 = x, y
        return self

    def quadratic_curve_to(self, x1: float, y1: float, x: float, y: float) -> "PathBuilder":
        self._commands.append(("Q", x1, y1, x, y))
        self._x1, self._y1 = x, y
        return self

    def bezier_curve_to(
        self, x1: float, y1: float, x2: float, y2: float, x: float, y: float
    ) -> "PathBuilder":
        self._commands.append(("C", x1, y1, x2, y2, x, y))
        self._x1, self._y1 = x, y
        return self

    def close_path(self) -> "PathBuilder":
        if self._x1 is not None:
            self._x1, self._y1 = self._x0, self._y0
            self._commands.append(("Z",))
        return self

    def arc(
        self, cx: float, cy: float, r: float, a0: float, a1: float, ccw: bool = False
    ) -> "PathBuilder":
        """Append a circular arc, joining from the current point with a line if needed."""
        if r < 0:
            raise ValueError(f"negative radius: {r}")
        dx = r * math.cos(a0)
        dy = r * math.sin(a0)
        x0 = cx + dx
        y0 = cy + dy
        sweep = 0 if ccw else 1
        da = a0 - a1 if ccw else a1 - a0

        if self._x1 is None:
            self.move_to(x0, y0)
        elif abs(self._x1 - x0) > EPSILON or abs(self._y1 - y0) > EPSILON:
            self.line_to(x0, y0)

        if not r:
            return self
        if da < 0:
            da = da % TAU + TAU
        if da > TAU_EPSILON:
            # Full circle: two half arcs through the antipode.
            mid = a0 + (-math.pi if ccw else math.pi)
            self._commands.append(("A", r, 1, sweep, cx - dx, cy - dy, cx, cy, a0, mid))
            self._commands.append(("A", r, 1, sweep, x0, y0, cx, cy, mid, a0))
            self._x1, self._y1 = x0, y0
        elif da > EPSILON:
            x = cx + r * math.cos(a1)
            y = cy + r * math.sin(a1)
            self._commands.append(("A", r, int(da >= math.pi), sweep, x, y, cx, cy, a0, a1))
            self._x1, self._y1 = x, y
        return self
