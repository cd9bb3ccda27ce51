"""Pie layout: values -> angular slices.

Each slice receives ``value / total * (span - N * pad_angle)`` radians, so
the slice angles (pads excluded) always add up to ``span`` minus the pads.
Slices come back in input order; ``sort`` only changes where they sit
around the circle. Sorting is stable, equal values keep input order.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from ...config import SORT_ORDERS
from ...errors import ConfigurationError
from ..path import TAU

__all__ = ["PieSlice", "PieLayout", "pie", "placement_order"]

log = logging.getLogger(__name__)

SortRule = Union[str, Callable[[int, float], object], None]


@dataclass(frozen=True)
class PieSlice:
    index: int
    value: float
    start_angle: float
    end_angle: float
    pad_angle: float = 0.0

    @property
    def angle(self) -> float:
        return self.end_angle - self.start_angle


@dataclass(frozen=True)
class PieLayout:
    slices: tuple
    total: float
    empty: bool = False


def _clean(value: float) -> float:
    v = float(value) if value is not None else 0.0
    if not math.isfinite(v) or v < 0:
        return 0.0
    return v


def placement_order(values: Sequence[float], sort: SortRule) -> List[int]:
    idx = list(range(len(values)))
    if sort is None or sort == "none":
        return idx
    if callable(sort):
        return sorted(idx, key=lambda i: sort(i, values[i]))
    if sort not in SORT_ORDERS:
        raise ConfigurationError(f"sort must be one of {sorted(SORT_ORDERS)} or a callable")
    if sort == "ascending":
        return sorted(idx, key=lambda i: values[i])
    return sorted(idx, key=lambda i: -values[i])


def pie(
    values: Sequence[float],
    *,
    start_angle: float = 0.0,
    end_angle: float = TAU,
    pad_angle: float = 0.0,
    sort: SortRule = None,
) -> PieLayout:
    """Compute slice angles for ``values``.

    Negative and non-finite values count as zero. With a zero total every
    slice collapses to a zero-width wedge at ``start_angle`` and the layout
    is flagged ``empty``.
    """
    raw = list(values)
    cleaned = [_clean(v) for v in raw]
    if any(c != v for c, v in zip(cleaned, raw)):
        log.debug("pie: negative or non-finite values treated as zero")
    n = len(cleaned)
    total = sum(cleaned)
    span = end_angle - start_angle
    if n == 0 or total <= 0:
        slices = tuple(PieSlice(i, cleaned[i], start_angle, start_angle, 0.0) for i in range(n))
        return PieLayout(slices=slices, total=total, empty=True)

    pad = min(abs(span) / n, max(0.0, pad_angle))
    pad_signed = pad if span >= 0 else -pad
    k = (span - n * pad_signed) / total
    out: List[Optional[PieSlice]] = [None] * n
    a0 = start_angle
    for i in placement_order(cleaned, sort):
        a1 = a0 + cleaned[i] * k + pad_signed
        out[i] = PieSlice(
            index=i,
            value=cleaned[i],
            start_angle=a0 + pad_signed / 2,
            end_angle=a1 - pad_signed / 2,
            pad_angle=pad,
        )
        a0 = a1
    return PieLayout(slices=tuple(out), total=total, empty=False)
