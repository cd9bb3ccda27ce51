"""Seeded demo datasets for every chart type.

All randomness flows through an injected ``random.Random`` so identical
seeds give identical data (and therefore byte-identical geometry):

    gen = SampleDataGenerator(seed=7)
    chart_registry.build(ChartRequest("stream", gen.stacked_series(4)))

Values are rounded to two decimals like the dashboards these demos stand
in for.
"""

from __future__ import annotations

import math
import random
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from .types import DataPoint, DataSeries

__all__ = ["SampleDataGenerator", "DEFAULT_REGIONS"]

DEFAULT_REGIONS = ("North", "City", "Central", "South", "Border")


class SampleDataGenerator:
    def __init__(self, seed: int = 0, *, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random(seed)

    # ------------------------------------------------------------------
    # Time series
    # ------------------------------------------------------------------
    def time_series(
        self,
        name: str = "metric",
        *,
        days: int = 90,
        start: date = date(2023, 1, 1),
        base: float = 100.0,
        volatility: float = 10.0,
        trend: float = 0.0,
    ) -> DataSeries:
        """Random walk with trend and a 30-day seasonal wave."""
        points: List[DataPoint] = []
        value = base
        for i in range(days):
            value += trend
            value += (self.rng.random() - 0.5) * volatility
            value += math.sin(i / 30) * volatility * 0.5
            points.append(DataPoint(key=start + timedelta(days=i), value=round(value, 2)))
        return DataSeries(tuple(points), name)

    def stacked_series(self, count: int = 3, *, days: int = 60) -> Dict[str, DataSeries]:
        """Non-negative series over shared dates (area/stream input)."""
        out: Dict[str, DataSeries] = {}
        for i in range(count):
            name = f"series-{i}"
            raw = self.time_series(name, days=days, base=20.0 + 10 * i, volatility=4.0)
            out[name] = DataSeries(tuple(DataPoint(p.key, max(0.0, p.value)) for p in raw), name)
        return out

    def signed_series(self, *, days: int = 120, amplitude: float = 50.0) -> DataSeries:
        """Series oscillating around zero (horizon input)."""
        start = date(2023, 1, 1)
        points = []
        for i in range(days):
            wave = math.sin(i / 12) * amplitude
            noise = (self.rng.random() - 0.5) * amplitude * 0.4
            points.append(DataPoint(start + timedelta(days=i), round(wave + noise, 2)))
        return DataSeries(tuple(points), "deviation")

    def daily_counts(self, *, days: int = 180, start: date = date(2023, 1, 1)) -> Dict[date, float]:
        """Integer counts per day with occasional spikes (calendar heatmap input)."""
        out: Dict[date, float] = {}
        for i in range(days):
            value = self.rng.randint(0, 30)
            if self.rng.random() > 0.85:
                value += self.rng.randint(0, 40)
            out[start + timedelta(days=i)] = float(value)
        return out

    # ------------------------------------------------------------------
    # Part-of-whole / distributions
    # ------------------------------------------------------------------
    def shares(self, labels: Sequence[str] = DEFAULT_REGIONS, *, total: float = 1000.0) -> Dict[str, float]:
        weights = [self.rng.uniform(1.0, 10.0) for _ in labels]
        scale = total / sum(weights) if weights else 0.0
        return {label: round(w * scale, 2) for label, w in zip(labels, weights)}

    def violin_samples(
        self, groups: Sequence[str] = ("A", "B", "C"), *, n: int = 200
    ) -> Dict[str, List[float]]:
        out: Dict[str, List[float]] = {}
        for i, g in enumerate(groups):
            mu = 10.0 + 5.0 * i
            sigma = 1.0 + i * 0.5
            out[g] = [round(self.rng.gauss(mu, sigma), 2) for _ in range(n)]
        return out

    def radar(self, axes: Sequence[str] = ("food", "water", "shelter", "health", "power"), *, series: int = 2):
        return {
            "axes": list(axes),
            "series": {
                f"profile-{i}": [round(self.rng.uniform(10, 100), 1) for _ in axes] for i in range(series)
            },
        }

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------
    def flow_links(
        self,
        sources: Sequence[str] = DEFAULT_REGIONS[:3],
        targets: Sequence[str] = ("Shelter", "Host family", "Camp"),
        *,
        density: float = 0.7,
    ) -> List[Dict[str, object]]:
        links = []
        for s in sources:
            for t in targets:
                if self.rng.random() <= density:
                    links.append({"source": s, "target": t, "value": self.rng.randint(1000, 50000)})
        if not links and sources and targets:
            links.append({"source": sources[0], "target": targets[0], "value": 1000})
        return links

    def chord_matrix(self, names: Sequence[str] = DEFAULT_REGIONS[:4], *, max_flow: int = 100):
        matrix = [
            [0 if i == j else self.rng.randint(0, max_flow) for j in range(len(names))]
            for i in range(len(names))
        ]
        return {"names": list(names), "matrix": matrix}
