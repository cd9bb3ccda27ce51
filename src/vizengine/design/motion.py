"""Motion utilities: easing functions and cubic-bezier parsing.

Easing functions map normalized animation progress ``t`` in ``[0, 1]`` to
eased progress in ``[0, 1]`` with ``e(0) == 0`` and ``e(1) == 1``. Only
monotonic curves are provided (no elastic/bounce), so eased values never
leave the interpolation interval.

Easings can be referenced three ways wherever the engine accepts one:
 - a registered name (``"cubic-out"``, ``"linear"``...)
 - a CSS-like ``"cubic-bezier(x1, y1, x2, y2)"`` string
 - any callable ``float -> float``

No Qt imports; the scheduler drives these directly.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Tuple, Union

__all__ = [
    "CubicBezier",
    "Easing",
    "parse_cubic_bezier",
    "cubic_bezier_easing",
    "get_easing",
    "list_easings",
    "register_easing",
    "resolve_easing",
]

CubicBezier = Tuple[float, float, float, float]
Easing = Callable[[float], float]


def _clamp01(t: float) -> float:
    return 0.0 if t <= 0.0 else 1.0 if t >= 1.0 else t


def linear(t: float) -> float:
    return _clamp01(t)


def quad_in(t: float) -> float:
    t = _clamp01(t)
    return t * t


def quad_out(t: float) -> float:
    t = _clamp01(t)
    return t * (2 - t)


def quad_in_out(t: float) -> float:
    t = _clamp01(t) * 2
    return (t * t if t <= 1 else (t - 1) * (3 - t) + 1) / 2


def cubic_in(t: float) -> float:
    t = _clamp01(t)
    return t * t * t


def cubic_out(t: float) -> float:
    t = _clamp01(t) - 1
    return t * t * t + 1


def cubic_in_out(t: float) -> float:
    t = _clamp01(t) * 2
    return (t * t * t if t <= 1 else (t - 2) * (t - 2) * (t - 2) + 2) / 2


def sin_in_out(t: float) -> float:
    return (1 - math.cos(math.pi * _clamp01(t))) / 2


def exp_out(t: float) -> float:
    t = _clamp01(t)
    if t == 1.0:
        return 1.0
    # Rescaled so that exp_out(0) == 0 exactly.
    return (1 - 2 ** (-10 * t)) / (1 - 2**-10)


def parse_cubic_bezier(spec: str) -> CubicBezier:
    """Parse a CSS-like cubic-bezier string into numeric tuple.

    Expected format: 'cubic-bezier(x1, y1, x2, y2)'. Whitespace tolerated.
    Values are converted to float; x components must lie in [0, 1].
    """
    s = spec.strip().lower()
    if not s.startswith("cubic-bezier(") or not s.endswith(")"):
        raise ValueError(f"Invalid cubic-bezier format: {spec}")
    inner = s[len("cubic-bezier(") : -1]
    parts = [p.strip() for p in inner.split(",")]
    if len(parts) != 4:
        raise ValueError(f"cubic-bezier requires 4 components, got {len(parts)}: {spec}")
    try:
        x1, y1, x2, y2 = (float(p) for p in parts)
    except ValueError as e:
        raise ValueError(f"Non-numeric cubic-bezier value in {spec}") from e
    if not (0 <= x1 <= 1 and 0 <= x2 <= 1):
        raise ValueError(f"cubic-bezier x components must be within [0, 1]: {spec}")
    return x1, y1, x2, y2


def cubic_bezier_easing(x1: float, y1: float, x2: float, y2: float) -> Easing:
    """Return an easing function for the given control points.

    Solves ``x(s) = t`` for the curve parameter with a few Newton steps and
    falls back to bisection when the derivative is too flat.
    """

    def _coord(s: float, a: float, b: float) -> float:
        return 3 * a * (1 - s) ** 2 * s + 3 * b * (1 - s) * s * s + s**3

    def _slope(s: float, a: float, b: float) -> float:
        return 3 * a * (1 - s) ** 2 + 6 * (b - a) * (1 - s) * s + 3 * (1 - b) * s * s

    def ease(t: float) -> float:
        t = _clamp01(t)
        if t in (0.0, 1.0):
            return t
        s = t
        for _ in range(8):
            err = _coord(s, x1, x2) - t
            if abs(err) < 1e-7:
                return _coord(s, y1, y2)
            d = _slope(s, x1, x2)
            if abs(d) < 1e-6:
                break
            s -= err / d
        lo, hi = 0.0, 1.0
        s = t
        for _ in range(40):
            x = _coord(s, x1, x2)
            if abs(x - t) < 1e-7:
                break
            if x < t:
                lo = s
            else:
                hi = s
            s = (lo + hi) / 2
        return _coord(s, y1, y2)

    return ease


_REGISTRY: Dict[str, Easing] = {}


def register_easing(name: str, fn: Easing) -> None:
    if name in _REGISTRY:
        raise ValueError(f"Easing already registered: {name}")
    _REGISTRY[name] = fn


register_easing("linear", linear)
register_easing("quad-in", quad_in)
register_easing("quad-out", quad_out)
register_easing("quad-in-out", quad_in_out)
register_easing("cubic-in", cubic_in)
register_easing("cubic-out", cubic_out)
register_easing("cubic-in-out", cubic_in_out)
register_easing("sin-in-out", sin_in_out)
register_easing("exp-out", exp_out)
# CSS / material motion curves
register_easing("standard", cubic_bezier_easing(0.4, 0.0, 0.2, 1.0))
register_easing("decelerate", cubic_bezier_easing(0.0, 0.0, 0.2, 1.0))
register_easing("accelerate", cubic_bezier_easing(0.4, 0.0, 1.0, 1.0))


def get_easing(name: str) -> Easing:
    """Lookup a registered easing by name.

    Raises
    ------
    KeyError
        If the name is not registered.
    """
    fn = _REGISTRY.get(name)
    if fn is None:
        raise KeyError(f"Unknown easing token: {name}")
    return fn


def list_easings() -> list[str]:
    return sorted(_REGISTRY)


def resolve_easing(spec: Union[str, Easing, None]) -> Easing:
    """Resolve a name, cubic-bezier string or callable into an easing function."""
    if spec is None:
        return linear
    if callable(spec):
        return spec
    if spec.strip().lower().startswith("cubic-bezier("):
        return cubic_bezier_easing(*parse_cubic_bezier(spec))
    return get_easing(spec)
