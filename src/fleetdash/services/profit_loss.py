"""Reconcile rate-based revenue against supplied cost figures."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from ..models.domain import (
    DistanceRange,
    ProfitLossReport,
    ProfitLossResult,
    RangeAggregate,
    RevenueLine,
)


def profit_loss_percentage(profit_loss: float, cost: float) -> Optional[float]:
    if cost <= 0:
        return None
    return profit_loss * 100 / cost


def reconcile_line(distance_range: Optional[DistanceRange], revenue: float, cost: float) -> ProfitLossResult:
    profit_loss = revenue - cost
    return ProfitLossResult(
        range=distance_range,
        revenue=revenue,
        cost=cost,
        profit_loss=profit_loss,
        profit_loss_percentage=profit_loss_percentage(profit_loss, cost),
    )


def reconcile(
    revenue_lines: Iterable[RevenueLine],
    costs: Mapping[DistanceRange, float],
) -> ProfitLossReport:
    """Produce per-range and total profit/loss.

    The total percentage comes from summed revenue and summed cost; per-range
    percentages are never averaged.
    """

    revenue_by_range: dict[DistanceRange, float] = {}
    for line in revenue_lines:
        revenue_by_range[line.range] = revenue_by_range.get(line.range, 0.0) + line.revenue

    ranges = set(revenue_by_range)
    ranges.update(key for key in costs if key.is_rated)

    lines = tuple(
        reconcile_line(distance_range, revenue_by_range.get(distance_range, 0.0), costs.get(distance_range, 0.0))
        for distance_range in sorted(ranges, key=lambda item: item.order)
    )
    total = reconcile_line(
        None,
        sum(line.revenue for line in lines),
        sum(line.cost for line in lines),
    )
    return ProfitLossReport(lines=lines, total=total)


def costs_from_aggregates(aggregates: Iterable[RangeAggregate]) -> dict[DistanceRange, float]:
    return {aggregate.range: aggregate.total_cost for aggregate in aggregates}


def implied_revenue(cost: float, profit_loss: float) -> float:
    """Revenue implied by ``cost + profit`` as stored on the source rows."""

    return cost + profit_loss


def revenue_discrepancy(rate_based_revenue: float, cost: float, profit_loss: float) -> float:
    """Gap between the authoritative rate-based revenue and the implied one.

    A non-zero gap is logged; the rate-based figure is always the one reported.
    """

    gap = rate_based_revenue - implied_revenue(cost, profit_loss)
    if abs(gap) > 0.005:
        logging.warning(
            f"Rate-based revenue {rate_based_revenue:.2f} differs from cost+profit revenue "
            f"{implied_revenue(cost, profit_loss):.2f} by {gap:.2f}"
        )
    return gap
