"""Domain models."""

from .domain import (
    DateRangeScope,
    DistanceRange,
    MetricSample,
    ProfitLossReport,
    ProfitLossResult,
    RangeAggregate,
    RangeSummary,
    Rate,
    RevenueLine,
    RevenueReport,
    TimeSeriesPoint,
    TripRow,
)

__all__ = [
    "DistanceRange",
    "TripRow",
    "DateRangeScope",
    "RangeAggregate",
    "RangeSummary",
    "Rate",
    "RevenueLine",
    "RevenueReport",
    "ProfitLossResult",
    "ProfitLossReport",
    "MetricSample",
    "TimeSeriesPoint",
]
