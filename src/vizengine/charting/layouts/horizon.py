"""Horizon banding: fold a signed series into ``B`` stacked bands.

With ``w = max_abs / B`` band ``i`` holds ``clamp(|d| - i w, 0, w)``,
signed like ``d``. Summing the bands gives back ``min(|d|, max_abs)`` with
the sign of ``d``; values beyond ``max_abs`` saturate the top band.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ...errors import ConfigurationError

__all__ = ["HorizonLayout", "horizon"]


@dataclass(frozen=True)
class HorizonLayout:
    """``bands[i][t]`` is the signed contribution of band ``i`` at ``t``."""

    band_width: float
    max_abs: float
    bands: Tuple[Tuple[float, ...], ...]

    def positive(self, band: int) -> Tuple[float, ...]:
        return tuple(max(0.0, v) for v in self.bands[band])

    def negative(self, band: int) -> Tuple[float, ...]:
        return tuple(max(0.0, -v) for v in self.bands[band])

    def reconstruct(self) -> Tuple[float, ...]:
        if not self.bands:
            return ()
        return tuple(sum(col) for col in zip(*self.bands))


def horizon(values: Sequence[float], band_count: int, *, max_abs: Optional[float] = None) -> HorizonLayout:
    """Split ``values`` into ``band_count`` horizon bands.

    ``max_abs`` defaults to the largest absolute finite value. A zero
    ``max_abs`` (flat or empty series) yields all-zero bands.

    Raises
    ------
    ConfigurationError
        ``band_count`` < 1 or negative ``max_abs``.
    """
    if not isinstance(band_count, int) or band_count < 1:
        raise ConfigurationError(f"band_count must be an integer >= 1, got {band_count!r}")
    data = [float(v) if v is not None and math.isfinite(float(v)) else 0.0 for v in values]
    if max_abs is None:
        max_abs = max((abs(v) for v in data), default=0.0)
    if max_abs < 0:
        raise ConfigurationError("max_abs must be >= 0")
    if max_abs == 0:
        zeros = tuple(0.0 for _ in data)
        return HorizonLayout(band_width=0.0, max_abs=0.0, bands=tuple(zeros for _ in range(band_count)))
    w = max_abs / band_count
    bands = []
    for i in range(band_count):
        row = []
        for d in data:
            part = min(w, max(0.0, abs(d) - i * w))
            row.append(part if d >= 0 else -part)
        bands.append(tuple(row))
    return HorizonLayout(band_width=w, max_abs=float(max_abs), bands=tuple(bands))
