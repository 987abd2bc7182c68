"""Truck fulfillment bands based on bucket equivalents per indent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..config import settings
from ..models.domain import DateRangeScope, TripRow
from .rates import BARREL_TO_BUCKET_RATIO
from .scope import clear, contains

@dataclass(slots=True, frozen=True)
class FulfillmentBand:
    label: str
    upper_bound: Optional[float]


FULFILLMENT_BANDS: tuple[FulfillmentBand, ...] = (
    FulfillmentBand("0 - 150", 150),
    FulfillmentBand("151 - 200", 200),
    FulfillmentBand("201 - 250", 250),
    FulfillmentBand("251 - 300", 300),
    FulfillmentBand("300+", None),
)


@dataclass(slots=True, frozen=True)
class FulfillmentBandCount:
    label: str
    indent_count: int
    unique_indent_count: int


@dataclass(slots=True, frozen=True)
class FulfillmentSummary:
    bands: tuple[FulfillmentBandCount, ...]
    total_trips: int


def bucket_equivalent(row: TripRow) -> float:
    return row.bucket_count + row.barrel_count * BARREL_TO_BUCKET_RATIO


def classify(equivalent: float) -> str:
    for band in FULFILLMENT_BANDS:
        if band.upper_bound is None or equivalent <= band.upper_bound:
            return band.label
    return FULFILLMENT_BANDS[-1].label


def fulfillment_percentage(row: TripRow, capacity_buckets: Optional[float] = None) -> float:
    """Load carried as a percentage of a full truck (configured capacity by default)."""
    if capacity_buckets is None:
        capacity_buckets = settings.truck_capacity_buckets
    if capacity_buckets <= 0:
        return 0.0
    return (bucket_equivalent(row) / capacity_buckets) * 100


def summarize_fulfillment(rows: Iterable[TripRow], scope: Optional[DateRangeScope] = None) -> FulfillmentSummary:
    """Count scoped, non-duplicate indents per fulfillment band (all bands always listed)."""

    scope = scope or clear()
    counts = {band.label: 0 for band in FULFILLMENT_BANDS}
    unique_ids: dict[str, set[str]] = {band.label: set() for band in FULFILLMENT_BANDS}

    for row in rows:
        if row.is_duplicate or not contains(scope, row.trip_date):
            continue
        label = classify(bucket_equivalent(row))
        counts[label] += 1
        trip_id = (row.trip_id or "").strip()
        if trip_id:
            unique_ids[label].add(trip_id)

    bands = tuple(
        FulfillmentBandCount(
            label=band.label,
            indent_count=counts[band.label],
            unique_indent_count=len(unique_ids[band.label]),
        )
        for band in FULFILLMENT_BANDS
    )
    return FulfillmentSummary(bands=bands, total_trips=sum(item.indent_count for item in bands))
