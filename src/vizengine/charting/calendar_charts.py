"""Calendar heatmap builder.

Input: ``{day: value}``, a list of ``{key|date, value}`` records, or a
``DataSeries``. Days are ``date``/``datetime`` objects or ISO date strings;
values landing on the same day are summed.

The grid has one column per week (weeks start on Sunday) and one row per
weekday, covering every day from the first to the last dated entry. Days
with a positive value are coloured on a sequential scale from zero to the
busiest day; the rest use the empty colour. A list ``color_palette``
supplies the low/high ends of the ramp (first and last colour).
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, Tuple

from ..config import ChartOptions
from ..errors import InvalidDataError
from .common import finite, placeholder_snapshot, rect_commands
from .registry import register_chart_type
from .scales import sequential
from .types import ChartRequest, ChartResult, DataSeries, Domain, GeometrySnapshot, ShapeState

log = logging.getLogger(__name__)

EMPTY_COLOR = "#f1f5f9"
LOW_COLOR = "#e2e8f0"
HIGH_COLOR = "#334155"


def _day(key: Any) -> date:
    if isinstance(key, datetime):
        return key.date()
    if isinstance(key, date):
        return key
    if isinstance(key, str):
        try:
            return date.fromisoformat(key[:10])
        except ValueError as e:
            raise InvalidDataError(f"Not an ISO date: {key!r}", context={"key": key}) from e
    raise InvalidDataError(f"Calendar keys must be dates, got {key!r}", context={"key": repr(key)})


def _weekday(day: date) -> int:
    # Sunday = 0
    return (day.weekday() + 1) % 7


def daily_values(data: Any) -> Dict[date, float]:
    """Sum finite values per calendar day."""
    if data is None:
        return {}
    if isinstance(data, DataSeries):
        pairs: List[Tuple[Any, Any]] = [(p.key, p.value) for p in data]
    elif isinstance(data, Mapping):
        pairs = list(data.items())
    else:
        pairs = [(p.key, p.value) for p in DataSeries.from_records(data)]
    out: Dict[date, float] = {}
    for key, value in pairs:
        v = finite([value])
        if not v:
            continue
        day = _day(key)
        out[day] = out.get(day, 0.0) + v[0]
    return out


def _ramp(options: ChartOptions) -> Tuple[str, str]:
    palette = options.color_palette
    if palette is None or isinstance(palette, Mapping):
        return LOW_COLOR, HIGH_COLOR
    colors = list(palette)
    return colors[0], colors[-1]


def _calendar_builder(req: ChartRequest, options: ChartOptions) -> ChartResult:
    values = daily_values(req.data)
    if not values:
        return ChartResult(placeholder_snapshot("calendar_heatmap", options, "no data"), {"status": "empty"})
    first, last = min(values), max(values)
    start = first - timedelta(days=_weekday(first))
    weeks = (last - start).days // 7 + 1
    cell = min(options.width / weeks, options.height / 7)
    gap = min(1.0, cell / 4)
    peak = max(values.values())
    low, high = _ramp(options)
    color = sequential(Domain(0.0, max(peak, 0.0)), low, high)

    elements: List[ShapeState] = []
    day = first
    while day <= last:
        week, row = (day - start).days // 7, _weekday(day)
        x0, y0 = week * cell + gap, row * cell + gap
        x1, y1 = (week + 1) * cell - gap, (row + 1) * cell - gap
        value = values.get(day)
        elements.append(
            ShapeState(
                element_id=f"cell:{day.isoformat()}",
                kind="rect",
                commands=rect_commands(x0, y0, x1, y1),
                fill=color(value) if value is not None and value > 0 else EMPTY_COLOR,
                group="cells",
                datum={"label": day.isoformat(), "value": value, "week": week, "weekday": row},
                anchor=((x0 + x1) / 2, (y0 + y1) / 2),
            )
        )
        day += timedelta(days=1)
    log.debug("calendar_heatmap: %d days over %d weeks", len(elements), weeks)
    snapshot = GeometrySnapshot(
        "calendar_heatmap", tuple(elements), options.width, options.height,
        meta={
            "empty": False,
            "weeks": weeks,
            "cell_size": cell,
            "max_value": peak,
            "start": start.isoformat(),
        },
    )
    return ChartResult(snapshot, {"status": "ok", "days": len(elements)})


register_chart_type("calendar_heatmap", _calendar_builder, "Week-by-weekday grid on a sequential colour scale")
