"""Stack layout: per-series ``(y0, y1)`` bands over shared timestamps.

``values[k][t]`` is series ``k`` at timestamp ``t``. The layout applies two
independent strategies:

order (which series sits at the bottom)
    ``none`` input order, ``reverse``, ``ascending`` / ``descending`` by
    series total, and ``inside-out``: series sorted by total (largest first,
    ties by input order) are dealt alternately below and above the centre,
    always onto the lighter side, so the heaviest streams end up in the
    middle of the stack.

offset (where the baseline sits)
    ``none`` zero baseline, ``silhouette`` centred on zero, ``wiggle``
    Byron-Wattenberg baseline minimising the weighted slope of all layers
    (the classic streamgraph).

Whatever the strategies, the top of the highest layer minus the bottom of
the lowest equals the column sum: offsets move the baseline only. Missing
(``None``/NaN) values stack as zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from ...config import STACK_OFFSETS, STACK_ORDERS
from ...errors import ConfigurationError, InvalidDataError

__all__ = ["StackLayout", "stack", "stack_order", "ORDER_STRATEGIES", "OFFSET_STRATEGIES"]

Band = Tuple[float, float]


@dataclass(frozen=True)
class StackLayout:
    """``layers[k][t] = (y0, y1)`` in input series order."""

    layers: Tuple[Tuple[Band, ...], ...]
    order: Tuple[int, ...]

    def extent(self) -> Tuple[float, float]:
        lows = [b[0] for layer in self.layers for b in layer]
        highs = [b[1] for layer in self.layers for b in layer]
        if not lows:
            return 0.0, 0.0
        return min(lows + highs), max(lows + highs)


def _v(x) -> float:
    if x is None:
        return 0.0
    x = float(x)
    return x if math.isfinite(x) else 0.0


def _order_none(values: List[List[float]]) -> List[int]:
    return list(range(len(values)))


def _order_reverse(values: List[List[float]]) -> List[int]:
    return list(reversed(range(len(values))))


def _order_ascending(values: List[List[float]]) -> List[int]:
    sums = [sum(s) for s in values]
    return sorted(range(len(values)), key=lambda k: sums[k])


def _order_descending(values: List[List[float]]) -> List[int]:
    sums = [sum(s) for s in values]
    return sorted(range(len(values)), key=lambda k: -sums[k])


def _order_inside_out(values: List[List[float]]) -> List[int]:
    sums = [sum(s) for s in values]
    top = bottom = 0.0
    tops: List[int] = []
    bottoms: List[int] = []
    for k in sorted(range(len(values)), key=lambda k: -sums[k]):
        if top < bottom:
            top += sums[k]
            tops.append(k)
        else:
            bottom += sums[k]
            bottoms.append(k)
    return list(reversed(bottoms)) + tops


ORDER_STRATEGIES: Dict[str, Callable[[List[List[float]]], List[int]]] = {
    "none": _order_none,
    "reverse": _order_reverse,
    "ascending": _order_ascending,
    "descending": _order_descending,
    "inside-out": _order_inside_out,
}


def _offset_none(values: List[List[float]], order: List[int], m: int) -> List[float]:
    return [0.0] * m


def _offset_silhouette(values: List[List[float]], order: List[int], m: int) -> List[float]:
    return [-sum(values[k][t] for k in order) / 2 for t in range(m)]


def _offset_wiggle(values: List[List[float]], order: List[int], m: int) -> List[float]:
    baseline = [0.0] * m
    y = 0.0
    for t in range(1, m):
        s1 = s2 = 0.0
        below = 0.0  # slope sum of the layers under the current one
        for k in order:
            d = values[k][t] - values[k][t - 1]
            s3 = d / 2 + below
            below += d
            s1 += values[k][t]
            s2 += s3 * values[k][t]
        if s1:
            y -= s2 / s1
        baseline[t] = y
    return baseline


OFFSET_STRATEGIES: Dict[str, Callable[[List[List[float]], List[int], int], List[float]]] = {
    "none": _offset_none,
    "silhouette": _offset_silhouette,
    "wiggle": _offset_wiggle,
}


def stack_order(values: Sequence[Sequence[float]], order: str = "none") -> List[int]:
    """Return series indices bottom-to-top for ``order``."""
    try:
        fn = ORDER_STRATEGIES[order]
    except KeyError:
        raise ConfigurationError(f"stack order must be one of {sorted(STACK_ORDERS)}") from None
    return fn([[_v(x) for x in s] for s in values])


def stack(
    values: Sequence[Sequence[float]], *, order: str = "none", offset: str = "none"
) -> StackLayout:
    """Stack ``values`` (series x timestamps) with the given strategies.

    Raises
    ------
    InvalidDataError
        Series of different lengths.
    ConfigurationError
        Unknown order or offset name.
    """
    if offset not in OFFSET_STRATEGIES:
        raise ConfigurationError(f"stack offset must be one of {sorted(STACK_OFFSETS)}")
    clean = [[_v(x) for x in s] for s in values]
    if not clean:
        return StackLayout(layers=(), order=())
    m = len(clean[0])
    if any(len(s) != m for s in clean):
        raise InvalidDataError(
            "all stacked series must have the same length",
            context={"lengths": [len(s) for s in clean]},
        )
    ordering = stack_order(clean, order)
    baseline = OFFSET_STRATEGIES[offset](clean, ordering, m)
    layers: List[Tuple[Band, ...]] = [()] * len(clean)
    lower = list(baseline)
    for k in ordering:
        bands = []
        for t in range(m):
            y0 = lower[t]
            y1 = y0 + clean[k][t]
            bands.append((y0, y1))
            lower[t] = y1
        layers[k] = tuple(bands)
    return StackLayout(layers=tuple(layers), order=tuple(ordering))
