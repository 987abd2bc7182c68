"""Date-bucketed trend series for one or more metrics on a shared axis."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from ..models.domain import DateRangeScope, MetricSample, TimeSeriesPoint, TripRow
from .fulfillment import fulfillment_percentage
from .rates import DEFAULT_RATE_TABLE, RateTable
from .scope import clear, contains, overlaps_month, to_local_naive


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


Reducer = Literal["sum", "mean"]

_MONTHS = {
    name: index
    for index, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}
_MONTH_LABEL = re.compile(r"^([A-Za-z]{3})[A-Za-z]*\s*['\-/ ]\s*(\d{2}|\d{4})$")
_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{1,2})$")


@dataclass(slots=True, frozen=True)
class MetricSeries:
    name: str
    samples: Sequence[MetricSample]
    reducer: Reducer = "sum"


def _parse_month_label(text: str) -> Optional[date]:
    match = _MONTH_LABEL.match(text)
    if match:
        month = _MONTHS.get(match.group(1).lower())
        if month is None:
            return None
        year = int(match.group(2))
        if year < 100:
            year += 2000
        return date(year, month, 1)
    match = _YEAR_MONTH.match(text)
    if match and 1 <= int(match.group(2)) <= 12:
        return date(int(match.group(1)), int(match.group(2)), 1)
    return None


def _parse(value: object) -> Tuple[Optional[date], bool]:
    """Return the sample's calendar day and whether it only names a month."""

    if isinstance(value, datetime):
        return to_local_naive(value).date(), False
    if isinstance(value, date):
        return value, False
    if not isinstance(value, str):
        return None, False

    text = value.strip()
    if not text:
        return None, False
    # "0ct" (zero for O) shows up in hand-typed month columns
    text = re.sub(r"^0ct", "Oct", text, flags=re.IGNORECASE)

    month_start = _parse_month_label(text)
    if month_start is not None:
        return month_start, True

    try:
        if len(text) > 10:
            return to_local_naive(datetime.fromisoformat(text.replace("Z", "+00:00"))).date(), False
        return date.fromisoformat(text), False
    except ValueError:
        return None, False


def parse_sample_date(value: object) -> Optional[date]:
    """Parse ISO dates/datetimes and month labels such as ``Jan'25``.

    Two-digit years always land in the 2000s.
    """

    parsed, _ = _parse(value)
    return parsed


def date_key(day: date, granularity: Granularity | str) -> str:
    granularity = Granularity(granularity)
    if granularity is Granularity.MONTHLY:
        return f"{day.year:04d}-{day.month:02d}"
    if granularity is Granularity.WEEKLY:
        day = day - timedelta(days=day.weekday())
    return day.isoformat()


def parse_date_key(key: str) -> date:
    if len(key) == 7:
        year, month = key.split("-")
        return date(int(year), int(month), 1)
    return date.fromisoformat(key)


def _sample_key(day: date, month_only: bool, granularity: Granularity) -> str:
    """Month-only samples stay on the 1st of their month below monthly granularity."""
    if month_only and granularity is not Granularity.MONTHLY:
        return day.isoformat()
    return date_key(day, granularity)


def _in_scope(scope: DateRangeScope, day: date, month_only: bool) -> bool:
    if month_only:
        return overlaps_month(scope, day.year, day.month)
    return contains(scope, day)


def _reduce(values: List[float], reducer: Reducer) -> float:
    if not values:
        return 0.0
    if reducer == "mean":
        return sum(values) / len(values)
    return sum(values)


def build_trend(
    series: Iterable[MetricSeries],
    granularity: Granularity | str,
    scope: Optional[DateRangeScope] = None,
) -> tuple[TimeSeriesPoint, ...]:
    """Merge metric series on a common, calendar-ordered date axis.

    Every key seen by any metric appears in the output; metrics without a
    sample on that key read 0.
    """

    granularity = Granularity(granularity)
    scope = scope or clear()

    buckets: Dict[str, Dict[str, List[float]]] = {}
    reducers: Dict[str, Reducer] = {}
    skipped = 0
    for metric in series:
        reducers[metric.name] = metric.reducer
        grouped = buckets.setdefault(metric.name, defaultdict(list))
        for sample in metric.samples:
            day, month_only = _parse(sample.date)
            if day is None:
                skipped += 1
                continue
            if not _in_scope(scope, day, month_only):
                continue
            grouped[_sample_key(day, month_only, granularity)].append(float(sample.value))

    if skipped:
        logging.warning(f"Skipped {skipped} trend samples with unparseable dates")

    all_keys = set()
    for grouped in buckets.values():
        all_keys.update(grouped)

    points: list[TimeSeriesPoint] = []
    for key in sorted(all_keys, key=parse_date_key):
        metrics = {
            name: _reduce(grouped.get(key, []), reducers[name])
            for name, grouped in buckets.items()
        }
        points.append(TimeSeriesPoint(date_key=key, metrics=metrics))
    return tuple(points)


def _row_revenue(row: TripRow, rate_table: RateTable) -> float:
    rate = rate_table.rate_for(row.distance_range)
    return row.bucket_count * rate.primary_rate + row.barrel_count * rate.secondary_rate


def _is_billable(row: TripRow) -> bool:
    return row.distance_range.is_rated and not row.is_duplicate


ROW_METRICS: Dict[str, Tuple[Callable[[TripRow, RateTable], Optional[float]], Reducer]] = {
    "revenue": (lambda row, rates: _row_revenue(row, rates) if _is_billable(row) else None, "sum"),
    "cost": (lambda row, rates: row.cost if _is_billable(row) else None, "sum"),
    "profitLoss": (
        lambda row, rates: _row_revenue(row, rates) - row.cost if _is_billable(row) else None,
        "sum",
    ),
    "load": (lambda row, rates: row.load_kg, "sum"),
    "indents": (lambda row, rates: 1.0, "sum"),
    "fulfillment": (
        lambda row, rates: fulfillment_percentage(row) if not row.is_duplicate else None,
        "mean",
    ),
}


def trend_from_rows(
    rows: Iterable[TripRow],
    granularity: Granularity | str,
    scope: Optional[DateRangeScope] = None,
    *,
    metrics: Sequence[str] = ("revenue", "cost"),
    rate_table: RateTable = DEFAULT_RATE_TABLE,
) -> tuple[TimeSeriesPoint, ...]:
    """Build a trend straight from trip rows for the named row metrics."""

    unknown = [name for name in metrics if name not in ROW_METRICS]
    if unknown:
        raise ValueError(f"Unknown trend metrics: {', '.join(unknown)}")

    dated = [row for row in rows if row.trip_date is not None]
    series: list[MetricSeries] = []
    for name in metrics:
        extract, reducer = ROW_METRICS[name]
        samples: list[MetricSample] = []
        for row in dated:
            value = extract(row, rate_table)
            if value is not None:
                samples.append(MetricSample(date=row.trip_date, value=value))
        series.append(MetricSeries(name=name, samples=tuple(samples), reducer=reducer))
    return build_trend(series, granularity, scope)
