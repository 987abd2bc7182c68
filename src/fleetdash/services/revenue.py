"""Rate-based revenue per distance range."""

from __future__ import annotations

from typing import Iterable

from ..models.domain import RangeAggregate, RevenueLine, RevenueReport
from .rates import BARREL_TO_BUCKET_RATIO, DEFAULT_RATE_TABLE, RateTable


def calculate_revenue(
    aggregates: Iterable[RangeAggregate],
    rate_table: RateTable = DEFAULT_RATE_TABLE,
) -> RevenueReport:
    """Price bucket and barrel counts with the tariff of their range.

    Unrated ranges (Other, Duplicate Indents) are left out entirely rather
    than reported as zero lines.
    """

    lines: list[RevenueLine] = []
    for aggregate in sorted(aggregates, key=lambda item: item.range.order):
        if not aggregate.range.is_rated:
            continue
        rate = rate_table.rate_for(aggregate.range)
        revenue = aggregate.bucket_count * rate.primary_rate + aggregate.barrel_count * rate.secondary_rate
        lines.append(
            RevenueLine(
                range=aggregate.range,
                primary_rate=rate.primary_rate,
                secondary_rate=rate.secondary_rate,
                primary_count=aggregate.bucket_count,
                secondary_count=aggregate.barrel_count,
                revenue=revenue,
            )
        )
    return RevenueReport(lines=tuple(lines), total_revenue=sum(line.revenue for line in lines))


def average_per_trip(total_buckets: float, total_barrels: float, total_unique_trips: int) -> float:
    """Average bucket equivalents carried per unique trip."""

    if total_unique_trips <= 0:
        return 0.0
    return (total_buckets + total_barrels * BARREL_TO_BUCKET_RATIO) / total_unique_trips
