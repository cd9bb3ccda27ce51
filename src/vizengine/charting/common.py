"""Helpers shared by the chart builders.

Option resolution, palette construction, input coercion and the
placeholder geometry emitted for empty or degenerate datasets.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config import SERIES_FALLBACK, ChartOptions
from ..design.chart_palette import CategoryPalette, build_category_palette
from .path import PathBuilder
from .scales import to_seconds
from .types import DataPoint, DataSeries, GeometrySnapshot, ShapeState

__all__ = [
    "resolve_options",
    "palette_for",
    "placeholder_snapshot",
    "coerce_series_list",
    "numeric_key",
    "finite",
    "hover_target",
    "rect_commands",
    "labelled_values",
    "unique_ids",
]

log = logging.getLogger(__name__)


def resolve_options(raw: Any) -> ChartOptions:
    """Accept ``None``, a plain mapping (camelCase or snake_case) or ``ChartOptions``."""
    if raw is None:
        return ChartOptions()
    if isinstance(raw, ChartOptions):
        raw.validate()
        return raw
    if isinstance(raw, Mapping):
        return ChartOptions.from_mapping(raw)
    raise TypeError(f"Unsupported options type: {type(raw).__name__}")


def palette_for(categories: Sequence[str], options: ChartOptions) -> CategoryPalette:
    """Validated palette for the categories a chart draws.

    When ``options.categories`` is set it is the enumeration; drawing a
    category outside it raises ``UnknownCategoryError`` at lookup time.
    """
    cats = list(options.categories) if options.categories is not None else list(categories)
    return build_category_palette(cats, options.color_palette or SERIES_FALLBACK)


def placeholder_snapshot(chart_type: str, options: ChartOptions, reason: str) -> GeometrySnapshot:
    """Single flat baseline element flagged ``empty`` in meta."""
    log.debug("%s: placeholder geometry (%s)", chart_type, reason)
    mid = options.height / 2
    b = PathBuilder().move_to(0, mid).line_to(options.width, mid)
    shape = ShapeState(
        element_id="placeholder",
        kind="placeholder",
        commands=b.commands,
        stroke="#9ca3af",
        opacity=1.0,
        datum={"reason": reason},
    )
    return GeometrySnapshot(
        chart_type=chart_type,
        elements=(shape,),
        width=options.width,
        height=options.height,
        meta={"empty": True, "reason": reason},
    )


def _series(item: Any, name: Optional[str]) -> DataSeries:
    if isinstance(item, DataSeries):
        return item if item.name is not None or name is None else DataSeries(item.points, name)
    return DataSeries.from_records(item, name=name)


def coerce_series_list(data: Any) -> List[DataSeries]:
    """Normalize chart input into named series.

    Accepts a ``DataSeries``, a list of records, a list of ``DataSeries``,
    a ``{name: records}`` mapping or ``{"series": ...}`` wrapping any of
    these. Unnamed series are called ``series-<n>``.
    """
    if isinstance(data, Mapping) and "series" in data:
        data = data["series"]
    if data is None:
        return []
    if isinstance(data, DataSeries):
        items: List[Tuple[Optional[str], Any]] = [(data.name, data)]
    elif isinstance(data, Mapping):
        items = [(str(k), v) for k, v in data.items()]
    else:
        data = list(data)
        if data and all(isinstance(d, DataSeries) for d in data):
            items = [(d.name, d) for d in data]
        else:
            items = [(None, data)]
    out = []
    for i, (name, item) in enumerate(items):
        s = _series(item, name)
        out.append(s if s.name is not None else DataSeries(s.points, f"series-{i}"))
    return out


def numeric_key(key: Any) -> float:
    """Position of a key on a continuous axis (dates as epoch seconds)."""
    return to_seconds(key)


def finite(values: Iterable[Any]) -> List[float]:
    out = []
    for v in values:
        if v is None:
            continue
        v = float(v)
        if math.isfinite(v):
            out.append(v)
    return out


def hover_target(element_id: str, key: float, anchor: Tuple[float, float], datum: Mapping[str, Any]) -> Dict[str, Any]:
    return {"element_id": element_id, "key": key, "anchor": list(anchor), "datum": dict(datum)}


def rect_commands(x0: float, y0: float, x1: float, y1: float) -> Tuple:
    b = PathBuilder().move_to(x0, y0).line_to(x1, y0).line_to(x1, y1).line_to(x0, y1).close_path()
    return b.commands


def labelled_values(data: Any) -> List[Tuple[str, Any]]:
    if isinstance(data, Mapping) and "values" in data:
        data = data["values"]
    if data is None:
        return []
    if isinstance(data, Mapping):
        return [(str(k), v) for k, v in data.items()]
    out = []
    for rec in data:
        if isinstance(rec, DataPoint):
            out.append((str(rec.category if rec.category is not None else rec.key), rec.value))
        elif isinstance(rec, Mapping):
            label = rec.get("label", rec.get("category", rec.get("key")))
            out.append((str(label), rec.get("value")))
        else:
            label, value = rec
            out.append((str(label), value))
    return out


def unique_ids(prefix: str, labels: List[str]) -> List[str]:
    seen: Dict[str, int] = {}
    ids = []
    for label in labels:
        n = seen.get(label, 0)
        seen[label] = n + 1
        ids.append(f"{prefix}:{label}" if n == 0 else f"{prefix}:{label}#{n}")
    return ids
