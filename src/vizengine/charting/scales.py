"""ScaleEngine: map data domains onto pixel, angle or color ranges.

Factories:
 - ``linear(domain, range, niceness=None)``
 - ``time(domain, range)``
 - ``band(categories, range, padding)``
 - ``ordinal(categories, palette)``
 - ``sequential(domain, color_a, color_b)``
 - ``build_scale(spec, domain_or_categories)`` dispatching on ``ScaleSpec.type``

Degenerate continuous domains (``min >= max`` or non-finite bounds) never
raise: every input maps to the middle of the range. Band and ordinal
scales have no notion of degeneracy.

Nice rounding follows the usual 1/2/5 x 10^k tick increments: the domain is
widened outward until both ends sit on a multiple of the chosen step.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Mapping, Sequence, Tuple, Union

from ..design.chart_palette import CategoryPalette, build_category_palette
from ..design.color_mixing import interpolate_rgb, parse_hex
from ..errors import ConfigurationError, UnknownCategoryError
from .types import Domain, ScaleSpec

__all__ = [
    "LinearScale",
    "TimeScale",
    "BandScale",
    "OrdinalScale",
    "SequentialScale",
    "linear",
    "time",
    "band",
    "ordinal",
    "sequential",
    "build_scale",
    "nice_domain",
    "tick_increment",
    "ticks",
    "to_seconds",
]

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)

_EPOCH_NAIVE = datetime(1970, 1, 1)
_EPOCH_AWARE = datetime(1970, 1, 1, tzinfo=timezone.utc)

DomainLike = Union[Domain, Tuple[Any, Any], Sequence[Any]]


def _as_domain(domain: DomainLike) -> Domain:
    if isinstance(domain, Domain):
        return domain
    lo, hi = domain
    return Domain(float(lo), float(hi))


def tick_increment(start: float, stop: float, count: int) -> float:
    """Return a 1/2/5 x 10^k step; negative values encode ``1 / step`` for sub-unit steps."""
    step = (stop - start) / max(0, count)
    if step <= 0 or not math.isfinite(step):
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10**power
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power >= 0:
        return factor * 10**power
    return -(10**-power) / factor


def nice_domain(lo: float, hi: float, count: int = 10) -> Tuple[float, float]:
    """Extend ``[lo, hi]`` outward to round tick multiples."""
    if not (math.isfinite(lo) and math.isfinite(hi)) or lo >= hi or count <= 0:
        return lo, hi
    prestep = None
    for _ in range(10):
        step = tick_increment(lo, hi, count)
        if step == prestep or step == 0:
            break
        if step > 0:
            lo = math.floor(lo / step) * step
            hi = math.ceil(hi / step) * step
        else:
            lo = math.ceil(lo * step) / step
            hi = math.floor(hi * step) / step
        prestep = step
    return lo, hi


def ticks(lo: float, hi: float, count: int = 10) -> List[float]:
    """Return round tick values within ``[lo, hi]``."""
    if not (math.isfinite(lo) and math.isfinite(hi)) or count <= 0:
        return []
    if lo == hi:
        return [lo]
    reverse = hi < lo
    if reverse:
        lo, hi = hi, lo
    step = tick_increment(lo, hi, count)
    if step == 0:
        return []
    if step > 0:
        i0, i1 = math.ceil(lo / step), math.floor(hi / step)
        out = [(i0 + i) * step for i in range(int(i1 - i0) + 1)]
    else:
        inv = -step
        i0, i1 = math.ceil(lo * inv), math.floor(hi * inv)
        out = [(i0 + i) / inv for i in range(int(i1 - i0) + 1)]
    return out[::-1] if reverse else out


def to_seconds(value: Any) -> float:
    """Convert a date/datetime/number into seconds on a common axis."""
    if isinstance(value, datetime):
        epoch = _EPOCH_AWARE if value.tzinfo is not None else _EPOCH_NAIVE
        return (value - epoch).total_seconds()
    if isinstance(value, date):
        return (datetime(value.year, value.month, value.day) - _EPOCH_NAIVE).total_seconds()
    return float(value)


# ----------------------------------------------------------------------
# Continuous scales
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class LinearScale:
    domain: Domain
    range: Tuple[float, float]
    clamp: bool = False

    @property
    def is_degenerate(self) -> bool:
        return self.domain.is_degenerate

    def __call__(self, value: float) -> float:
        r0, r1 = self.range
        if self.is_degenerate:
            return (r0 + r1) / 2
        t = (float(value) - self.domain.min) / self.domain.span
        if self.clamp:
            t = min(1.0, max(0.0, t))
        return r0 + (r1 - r0) * t

    def invert(self, pixel: float) -> float:
        r0, r1 = self.range
        if self.is_degenerate or r0 == r1:
            return (self.domain.min + self.domain.max) / 2
        t = (pixel - r0) / (r1 - r0)
        if self.clamp:
            t = min(1.0, max(0.0, t))
        return self.domain.min + self.domain.span * t

    def ticks(self, count: int = 10) -> List[float]:
        return ticks(self.domain.min, self.domain.max, count)

    def nice(self, count: int = 10) -> "LinearScale":
        lo, hi = nice_domain(self.domain.min, self.domain.max, count)
        return LinearScale(Domain(lo, hi), self.range, self.clamp)


@dataclass(frozen=True)
class TimeScale:
    """Linear mapping over dates/datetimes (converted to seconds)."""

    start: Any
    stop: Any
    range: Tuple[float, float]

    @property
    def _inner(self) -> LinearScale:
        return LinearScale(Domain(to_seconds(self.start), to_seconds(self.stop)), self.range)

    @property
    def is_degenerate(self) -> bool:
        return self._inner.is_degenerate

    def __call__(self, value: Any) -> float:
        return self._inner(to_seconds(value))

    def invert(self, pixel: float) -> datetime:
        seconds = self._inner.invert(pixel)
        aware = isinstance(self.start, datetime) and self.start.tzinfo is not None
        epoch = _EPOCH_AWARE if aware else _EPOCH_NAIVE
        return epoch + timedelta(seconds=seconds)


@dataclass(frozen=True)
class SequentialScale:
    domain: Domain
    color_a: str
    color_b: str

    def __call__(self, value: float) -> str:
        if self.domain.is_degenerate:
            t = 0.5
        else:
            t = (float(value) - self.domain.min) / self.domain.span
            t = min(1.0, max(0.0, t))
        return interpolate_rgb(self.color_a, self.color_b, t)


# ----------------------------------------------------------------------
# Categorical scales
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class BandScale:
    """Equal-width slots with symmetric fractional padding.

    Inner and outer padding both equal ``padding``; leftover space is split
    evenly on both sides of the band run.
    """

    categories: Tuple[str, ...]
    range: Tuple[float, float]
    padding: float = 0.0

    @property
    def step(self) -> float:
        n = len(self.categories)
        r0, r1 = self.range
        return (r1 - r0) / max(1.0, n - self.padding + 2 * self.padding)

    @property
    def bandwidth(self) -> float:
        if not self.categories:
            return 0.0
        return self.step * (1 - self.padding)

    def _start(self) -> float:
        n = len(self.categories)
        r0, r1 = self.range
        return r0 + ((r1 - r0) - self.step * (n - self.padding)) / 2

    def __call__(self, category: str) -> float:
        try:
            idx = self.categories.index(category)
        except ValueError:
            raise UnknownCategoryError(
                f"Unknown band category: {category!r}", context={"known": list(self.categories)}
            ) from None
        return self._start() + self.step * idx

    def center(self, category: str) -> float:
        return self(category) + self.bandwidth / 2


@dataclass(frozen=True)
class OrdinalScale:
    palette: CategoryPalette

    @property
    def categories(self) -> Tuple[str, ...]:
        return self.palette.categories

    def __call__(self, category: str) -> str:
        return self.palette.color_for(category)


# ----------------------------------------------------------------------
# Factories
# ----------------------------------------------------------------------


def linear(
    domain: DomainLike, range: Tuple[float, float], niceness: Union[bool, int, None] = None
) -> LinearScale:
    scale = LinearScale(_as_domain(domain), (float(range[0]), float(range[1])))
    if niceness:
        scale = scale.nice(10 if niceness is True else int(niceness))
    return scale


def time(domain: Tuple[Any, Any], range: Tuple[float, float]) -> TimeScale:
    start, stop = domain
    return TimeScale(start, stop, (float(range[0]), float(range[1])))


def band(categories: Sequence[str], range: Tuple[float, float], padding: float = 0.0) -> BandScale:
    if not (0 <= padding < 1):
        raise ConfigurationError("band padding must be within [0, 1)")
    return BandScale(tuple(dict.fromkeys(categories)), (float(range[0]), float(range[1])), padding)


def ordinal(
    categories: Sequence[str], palette: Union[Sequence[str], Mapping[str, str]]
) -> OrdinalScale:
    return OrdinalScale(build_category_palette(categories, palette))


def sequential(domain: DomainLike, color_a: str, color_b: str) -> SequentialScale:
    for color in (color_a, color_b):
        try:
            parse_hex(color)
        except ValueError as e:
            raise ConfigurationError(f"Malformed sequential color: {color!r}") from e
    return SequentialScale(_as_domain(domain), color_a, color_b)


def build_scale(spec: ScaleSpec, source: Any) -> Any:
    """Create a scale from ``spec``.

    ``source`` is a domain (continuous types), a ``(start, stop)`` pair of
    dates (time) or a category list (band/ordinal).
    """
    kind = spec.type
    if kind == "linear":
        return linear(source, spec.range, spec.nice)
    if kind == "time":
        return time(source, spec.range)
    if kind == "band":
        return band(source, spec.range, spec.padding)
    if kind == "ordinal":
        if spec.palette is None:
            raise ConfigurationError("ordinal scale requires a palette")
        return ordinal(source, spec.palette)
    if kind == "sequential":
        return sequential(source, spec.range[0], spec.range[1])
    raise ConfigurationError(f"Unknown scale type: {kind}")

