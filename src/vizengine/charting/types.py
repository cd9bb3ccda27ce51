"""Core charting types: data series, domains, shape snapshots, requests."""

from __future__ import annotations

import hashlib
import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .path import PathCommand, format_commands

__all__ = [
    "DataPoint",
    "DataSeries",
    "Domain",
    "ScaleSpec",
    "ShapeState",
    "GeometrySnapshot",
    "ChartRequest",
    "ChartResult",
    "canonical",
]


@dataclass(frozen=True)
class DataPoint:
    key: Any  # number, category label, date or datetime
    value: float
    category: Optional[str] = None


@dataclass(frozen=True)
class DataSeries:
    """Ordered, immutable sequence of points.

    Insertion order is meaningful (tie-breaks). Built from caller records
    with ``from_records``; the caller's objects are never modified.
    """

    points: Tuple[DataPoint, ...] = ()
    name: Optional[str] = None

    @classmethod
    def from_records(cls, records: Iterable[Any], *, name: str | None = None) -> "DataSeries":
        """Accept ``DataPoint`` objects or mappings with ``key``/``date``, ``value``, ``category``."""
        points = []
        for rec in records:
            if isinstance(rec, DataPoint):
                points.append(rec)
                continue
            key = rec.get("key", rec.get("date"))
            value = rec.get("value")
            points.append(
                DataPoint(
                    key=key,
                    value=float(value) if value is not None else math.nan,
                    category=rec.get("category"),
                )
            )
        return cls(points=tuple(points), name=name)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, index: int) -> DataPoint:
        return self.points[index]

    def keys(self) -> list[Any]:
        return [p.key for p in self.points]

    def values(self) -> list[float]:
        return [p.value for p in self.points]

    def sorted_by_key(self) -> "DataSeries":
        # sorted() is stable: equal keys keep insertion order
        return DataSeries(points=tuple(sorted(self.points, key=lambda p: p.key)), name=self.name)


@dataclass(frozen=True)
class Domain:
    min: float
    max: float

    @classmethod
    def from_values(cls, values: Iterable[float], *, include_zero: bool = False) -> "Domain":
        finite = [float(v) for v in values if v is not None and math.isfinite(float(v))]
        if include_zero:
            finite.append(0.0)
        if not finite:
            return cls(0.0, 0.0)
        return cls(min(finite), max(finite))

    @property
    def is_degenerate(self) -> bool:
        return not (math.isfinite(self.min) and math.isfinite(self.max)) or self.min >= self.max

    @property
    def span(self) -> float:
        return self.max - self.min


@dataclass(frozen=True)
class ScaleSpec:
    """Scale configuration: ``type`` in linear|time|band|ordinal|sequential.

    ``range`` is a pixel/angle pair for positional scales and a color pair
    for sequential scales; ordinal scales read ``palette`` instead.
    """

    type: str
    range: Tuple[Any, Any] = (0.0, 1.0)
    padding: float = 0.0
    palette: Optional[Sequence[str] | Mapping[str, str]] = None
    nice: Optional[bool | int] = None


def _num(v: float) -> float:
    if not math.isfinite(v):
        return v
    r = round(v, 6)
    return 0.0 if r == 0 else r


def canonical(value: Any) -> Any:
    """Reduce a value to a JSON friendly, precision-stable structure."""
    if isinstance(value, bool) or value is None or isinstance(value, (int, str)):
        return value
    if isinstance(value, float):
        return _num(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [canonical(v) for v in value]
    return str(value)


@dataclass(frozen=True)
class ShapeState:
    """Immutable geometry of one visual element, keyed by ``element_id``.

    ``params`` holds the numeric inputs a transition may tween (e.g. arc
    angles/radii); ``anchor`` is the screen position tooltips attach to.
    """

    element_id: str
    kind: str
    commands: Tuple[PathCommand, ...] = ()
    fill: Optional[str] = None
    stroke: Optional[str] = None
    opacity: float = 1.0
    group: Optional[str] = None
    datum: Mapping[str, Any] = field(default_factory=dict)
    anchor: Optional[Tuple[float, float]] = None
    params: Mapping[str, float] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return format_commands(self.commands)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.element_id,
            "kind": self.kind,
            "group": self.group,
            "path": self.path,
            "fill": self.fill,
            "stroke": self.stroke,
            "opacity": canonical(self.opacity),
            "datum": canonical(self.datum),
            "anchor": canonical(self.anchor),
            "params": canonical(self.params),
        }


@dataclass(frozen=True)
class GeometrySnapshot:
    """Ordered element geometry for one chart render."""

    chart_type: str
    elements: Tuple[ShapeState, ...]
    width: float
    height: float
    meta: Mapping[str, Any] = field(default_factory=dict)

    def ids(self) -> list[str]:
        return [e.element_id for e in self.elements]

    def element(self, element_id: str) -> ShapeState:
        for e in self.elements:
            if e.element_id == element_id:
                return e
        raise KeyError(f"Unknown element: {element_id}")

    @property
    def is_empty(self) -> bool:
        return bool(self.meta.get("empty", False))

    def to_json(self) -> str:
        payload = {
            "chart_type": self.chart_type,
            "width": canonical(float(self.width)),
            "height": canonical(float(self.height)),
            "meta": canonical(self.meta),
            "elements": [e.to_dict() for e in self.elements],
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    def fingerprint(self) -> str:
        return hashlib.sha256(self.to_json().encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ChartRequest:
    """Represents a logical chart request.

    Attributes:
        chart_type: Identifier registered in the chart registry (e.g. 'pie').
        data: Payload understood by the chart builder (series, rows, matrix...).
        options: ``ChartOptions`` or a plain mapping of recognized options.
    """

    chart_type: str
    data: Any
    options: Any = None


@dataclass
class ChartResult:
    """Outcome of building a chart: geometry plus build metadata."""

    snapshot: GeometrySnapshot
    meta: Dict[str, Any]
