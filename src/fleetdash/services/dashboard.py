"""Compose the pure analytics steps over the active trip rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..data.trips_repository import load_trip_rows
from ..models.domain import (
    DateRangeScope,
    ProfitLossReport,
    RangeSummary,
    RevenueReport,
    TimeSeriesPoint,
    TripRow,
)
from .fulfillment import FulfillmentSummary, summarize_fulfillment
from .profit_loss import costs_from_aggregates, reconcile, revenue_discrepancy
from .rates import DEFAULT_RATE_TABLE, RateTable
from .ranges import aggregate_ranges, count_unique_trips, filter_rows, mark_cross_range_duplicates
from .revenue import average_per_trip, calculate_revenue
from .scope import clear
from .session import FetchOutcome, ScopeSession
from .trends import Granularity, trend_from_rows
from .vehicle_cost import VehicleCost, calculate_vehicle_costs


@dataclass(slots=True, frozen=True)
class DashboardSnapshot:
    scope: DateRangeScope
    ranges: RangeSummary
    revenue: RevenueReport
    profit_loss: ProfitLossReport
    avg_buckets_per_trip: float
    revenue_gap: Optional[float]


def scoped_rows(scope: Optional[DateRangeScope] = None, rows: Optional[Sequence[TripRow]] = None) -> tuple[TripRow, ...]:
    """Rows inside the scope, with cross-range duplicates flagged."""

    source = load_trip_rows() if rows is None else rows
    return mark_cross_range_duplicates(filter_rows(source, scope or clear()))


def build_snapshot(
    scope: Optional[DateRangeScope] = None,
    rows: Optional[Sequence[TripRow]] = None,
    *,
    rate_table: RateTable = DEFAULT_RATE_TABLE,
) -> DashboardSnapshot:
    scope = scope or clear()
    in_scope = scoped_rows(scope, rows)

    ranges = aggregate_ranges(in_scope, scope, total_unique_indents=count_unique_trips(in_scope))
    revenue = calculate_revenue(ranges.aggregates, rate_table)
    profit_loss = reconcile(revenue.lines, costs_from_aggregates(ranges.aggregates))

    revenue_gap: Optional[float] = None
    billable = [row for row in in_scope if row.distance_range.is_rated and not row.is_duplicate]
    if any(row.reported_profit_loss for row in billable):
        revenue_gap = revenue_discrepancy(
            revenue.total_revenue,
            sum(row.cost for row in billable),
            sum(row.reported_profit_loss for row in billable),
        )

    return DashboardSnapshot(
        scope=scope,
        ranges=ranges,
        revenue=revenue,
        profit_loss=profit_loss,
        avg_buckets_per_trip=average_per_trip(
            ranges.total_buckets, ranges.total_barrels, ranges.total_unique_indents
        ),
        revenue_gap=revenue_gap,
    )


def build_trends(
    scope: Optional[DateRangeScope],
    granularity: Granularity | str,
    metrics: Sequence[str],
    rows: Optional[Sequence[TripRow]] = None,
    *,
    rate_table: RateTable = DEFAULT_RATE_TABLE,
) -> tuple[TimeSeriesPoint, ...]:
    return trend_from_rows(scoped_rows(scope, rows), granularity, scope, metrics=metrics, rate_table=rate_table)


def build_fulfillment(scope: Optional[DateRangeScope] = None, rows: Optional[Sequence[TripRow]] = None) -> FulfillmentSummary:
    return summarize_fulfillment(scoped_rows(scope, rows), scope)


def build_vehicle_costs(scope: Optional[DateRangeScope] = None, rows: Optional[Sequence[TripRow]] = None) -> tuple[VehicleCost, ...]:
    source = load_trip_rows() if rows is None else rows
    return calculate_vehicle_costs(source, scope)


def refresh_session(
    session: ScopeSession[DashboardSnapshot],
    rows: Optional[Sequence[TripRow]] = None,
    *,
    now: Optional[float] = None,
    rate_table: RateTable = DEFAULT_RATE_TABLE,
) -> Optional[FetchOutcome[DashboardSnapshot]]:
    """Recompute the snapshot for the session's scope once scope edits settle.

    Returns None while the debounce window is still open or when the scope
    changed again before the result could be applied.
    """

    if not session.debouncer.consume(now):
        return None
    ticket = session.current_ticket()
    outcome = session.fetch(lambda scope: build_snapshot(scope, rows, rate_table=rate_table), ticket)
    return session.apply(outcome)
