"""Range-wise aggregation of trip rows."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..models.domain import DateRangeScope, DistanceRange, RangeAggregate, RangeSummary, TripRow
from .scope import clear, contains

PERCENTAGE_TOLERANCE = 0.01


@dataclass(slots=True)
class _RangeAccumulator:
    indent_count: int = 0
    trip_ids: Set[str] = field(default_factory=set)
    load: float = 0.0
    buckets: float = 0.0
    barrels: float = 0.0
    cost: float = 0.0
    vehicle_cost: float = 0.0
    remaining_cost: float = 0.0
    km: float = 0.0

    def add(self, row: TripRow) -> None:
        self.indent_count += 1
        trip_id = (row.trip_id or "").strip()
        if trip_id:
            self.trip_ids.add(trip_id)
        self.load += row.load_kg
        self.buckets += row.bucket_count
        self.barrels += row.barrel_count
        self.cost += row.cost
        self.vehicle_cost += row.vehicle_cost
        self.remaining_cost += row.remaining_cost
        self.km += row.total_km


def filter_rows(rows: Iterable[TripRow], scope: DateRangeScope) -> List[TripRow]:
    return [row for row in rows if contains(scope, row.trip_date)]


def count_unique_trips(rows: Iterable[TripRow]) -> int:
    return len({row.trip_id.strip() for row in rows if row.trip_id and row.trip_id.strip()})


def partition_key(row: TripRow) -> DistanceRange:
    if row.is_duplicate:
        return DistanceRange.DUPLICATE_INDENT
    return row.distance_range


def percentage_display_total(aggregates: Sequence[RangeAggregate]) -> float:
    """Total of per-range percentages as shown on the summary row.

    Rounding noise around 100 collapses to exactly 100.0.
    """

    raw_total = sum(item.percentage for item in aggregates)
    if abs(raw_total - 100.0) <= PERCENTAGE_TOLERANCE + 1e-9:
        return 100.0
    return round(raw_total, 2)


def aggregate_ranges(
    rows: Iterable[TripRow],
    scope: Optional[DateRangeScope] = None,
    *,
    total_unique_indents: Optional[int] = None,
) -> RangeSummary:
    """Aggregate scoped trip rows per distance range.

    ``total_unique_indents`` is the globally unique indent count reported by
    the data source. When omitted it is counted over every scoped row, so
    duplicate-flagged rows never inflate the denominator.
    """

    scoped = filter_rows(rows, scope or clear())
    partitions: Dict[DistanceRange, _RangeAccumulator] = defaultdict(_RangeAccumulator)
    for row in scoped:
        partitions[partition_key(row)].add(row)

    denominator = total_unique_indents if total_unique_indents is not None else count_unique_trips(scoped)

    aggregates: list[RangeAggregate] = []
    for distance_range in sorted(partitions, key=lambda item: item.order):
        bucket = partitions[distance_range]
        unique_count = len(bucket.trip_ids)
        percentage = 0.0
        if denominator > 0:
            percentage = round((unique_count / denominator) * 100, 2)
        aggregates.append(
            RangeAggregate(
                range=distance_range,
                indent_count=bucket.indent_count,
                unique_trip_count=unique_count,
                total_load_kg=bucket.load,
                bucket_count=bucket.buckets,
                barrel_count=bucket.barrels,
                percentage=percentage,
                total_cost=bucket.cost,
                total_vehicle_cost=bucket.vehicle_cost,
                total_remaining_cost=bucket.remaining_cost,
                total_km=bucket.km,
            )
        )

    rated = [item for item in aggregates if item.range.is_rated]
    logging.debug(
        f"Aggregated {len(scoped)} scoped rows into {len(aggregates)} ranges (denominator={denominator})"
    )
    return RangeSummary(
        aggregates=tuple(aggregates),
        total_load=sum(row.load_kg for row in scoped),
        total_buckets=sum(item.bucket_count for item in rated),
        total_barrels=sum(item.barrel_count for item in rated),
        total_cost=sum(row.cost for row in scoped),
        total_vehicle_cost=sum(row.vehicle_cost for row in scoped),
        total_remaining_cost=sum(row.remaining_cost for row in scoped),
        total_km=sum(row.total_km for row in scoped),
        total_unique_indents=denominator,
        total_rows=len(scoped),
        percentage_total=percentage_display_total(aggregates),
    )


def mark_cross_range_duplicates(rows: Sequence[TripRow]) -> tuple[TripRow, ...]:
    """Flag every row of an indent that shows up under more than one range."""

    ranges_by_trip: Dict[str, Set[DistanceRange]] = defaultdict(set)
    for row in rows:
        trip_id = (row.trip_id or "").strip()
        if trip_id:
            ranges_by_trip[trip_id].add(row.distance_range)

    duplicated = {trip_id for trip_id, seen in ranges_by_trip.items() if len(seen) > 1}
    if duplicated:
        logging.info(f"Found {len(duplicated)} indents appearing in multiple ranges")

    return tuple(
        replace(row, is_duplicate=True)
        if not row.is_duplicate and (row.trip_id or "").strip() in duplicated
        else row
        for row in rows
    )
