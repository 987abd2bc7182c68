"""Analytics API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from ..models.domain import DateRangeScope, ProfitLossResult, RangeAggregate, RevenueLine, TimeSeriesPoint
from ..services.dashboard import DashboardSnapshot
from ..services.fulfillment import FulfillmentSummary
from ..services.rates import RateTable
from ..services.scope import is_active
from ..services.vehicle_cost import VehicleCost


class ScopeModel(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    active: bool

    @classmethod
    def from_scope(cls, scope: DateRangeScope) -> "ScopeModel":
        return cls(start=scope.start, end=scope.end, active=is_active(scope))


class RangeAggregateModel(BaseModel):
    range: str
    rated: bool
    indentCount: int
    uniqueTripCount: int
    totalLoadKg: float
    bucketCount: float
    barrelCount: float
    percentage: float
    totalCost: float
    totalVehicleCost: float
    totalRemainingCost: float
    totalKm: float

    @classmethod
    def from_aggregate(cls, item: RangeAggregate) -> "RangeAggregateModel":
        return cls(
            range=item.range.value,
            rated=item.range.is_rated,
            indentCount=item.indent_count,
            uniqueTripCount=item.unique_trip_count,
            totalLoadKg=item.total_load_kg,
            bucketCount=item.bucket_count,
            barrelCount=item.barrel_count,
            percentage=item.percentage,
            totalCost=item.total_cost,
            totalVehicleCost=item.total_vehicle_cost,
            totalRemainingCost=item.total_remaining_cost,
            totalKm=item.total_km,
        )


class RangeWiseResponse(BaseModel):
    scope: ScopeModel
    rangeData: List[RangeAggregateModel]
    percentageTotal: float
    totalUniqueIndents: int
    totalRows: int
    totalLoad: float
    totalBuckets: float
    totalBarrels: float
    totalCost: float
    totalVehicleCost: float
    totalRemainingCost: float
    totalKm: float


class RateModel(BaseModel):
    range: str
    primaryRate: float
    secondaryRate: float


class RevenueLineModel(BaseModel):
    range: str
    primaryRate: float
    secondaryRate: float
    primaryCount: float
    secondaryCount: float
    revenue: float

    @classmethod
    def from_line(cls, line: RevenueLine) -> "RevenueLineModel":
        return cls(
            range=line.range.value,
            primaryRate=line.primary_rate,
            secondaryRate=line.secondary_rate,
            primaryCount=line.primary_count,
            secondaryCount=line.secondary_count,
            revenue=line.revenue,
        )


class RevenueResponse(BaseModel):
    scope: ScopeModel
    revenueByRange: List[RevenueLineModel]
    totalRevenue: float
    rates: List[RateModel]


class ProfitLossModel(BaseModel):
    range: Optional[str] = None
    revenue: float
    cost: float
    profitLoss: float
    profitLossPercentage: Optional[float] = None
    isProfit: bool

    @classmethod
    def from_result(cls, result: ProfitLossResult) -> "ProfitLossModel":
        return cls(
            range=result.range.value if result.range is not None else None,
            revenue=result.revenue,
            cost=result.cost,
            profitLoss=result.profit_loss,
            profitLossPercentage=result.profit_loss_percentage,
            isProfit=result.is_profit,
        )


class ProfitLossResponse(BaseModel):
    scope: ScopeModel
    profitLossByRange: List[ProfitLossModel]
    total: ProfitLossModel


class SummaryResponse(BaseModel):
    scope: ScopeModel
    totalTrips: int
    totalRows: int
    totalLoad: float
    totalBuckets: float
    totalBarrels: float
    avgBucketsPerTrip: float
    totalCost: float
    totalVehicleCost: float
    totalRemainingCost: float
    totalRevenue: float
    profitLoss: ProfitLossModel
    revenueGap: Optional[float] = None


class TimeSeriesPointModel(BaseModel):
    date: str
    metrics: dict[str, float]

    @classmethod
    def from_point(cls, point: TimeSeriesPoint) -> "TimeSeriesPointModel":
        return cls(date=point.date_key, metrics=dict(point.metrics))


class TrendResponse(BaseModel):
    scope: ScopeModel
    granularity: str
    metrics: List[str]
    points: List[TimeSeriesPointModel]


class FulfillmentBandModel(BaseModel):
    range: str
    indentCount: int
    uniqueIndentCount: int


class FulfillmentResponse(BaseModel):
    scope: ScopeModel
    fulfillmentData: List[FulfillmentBandModel]
    totalTrips: int


class VehicleCostModel(BaseModel):
    vehicleNumber: str
    fixedKm: float
    actualKm: float
    remainingKm: float
    costForRemainingKm: float
    extraCost: float


def range_wise_response(snapshot: DashboardSnapshot) -> RangeWiseResponse:
    ranges = snapshot.ranges
    return RangeWiseResponse(
        scope=ScopeModel.from_scope(snapshot.scope),
        rangeData=[RangeAggregateModel.from_aggregate(item) for item in ranges.aggregates],
        percentageTotal=ranges.percentage_total,
        totalUniqueIndents=ranges.total_unique_indents,
        totalRows=ranges.total_rows,
        totalLoad=ranges.total_load,
        totalBuckets=ranges.total_buckets,
        totalBarrels=ranges.total_barrels,
        totalCost=ranges.total_cost,
        totalVehicleCost=ranges.total_vehicle_cost,
        totalRemainingCost=ranges.total_remaining_cost,
        totalKm=ranges.total_km,
    )


def revenue_response(snapshot: DashboardSnapshot, rate_table: RateTable) -> RevenueResponse:
    return RevenueResponse(
        scope=ScopeModel.from_scope(snapshot.scope),
        revenueByRange=[RevenueLineModel.from_line(line) for line in snapshot.revenue.lines],
        totalRevenue=snapshot.revenue.total_revenue,
        rates=[
            RateModel(range=distance_range.value, primaryRate=rate.primary_rate, secondaryRate=rate.secondary_rate)
            for distance_range, rate in rate_table.items()
        ],
    )


def profit_loss_response(snapshot: DashboardSnapshot) -> ProfitLossResponse:
    return ProfitLossResponse(
        scope=ScopeModel.from_scope(snapshot.scope),
        profitLossByRange=[ProfitLossModel.from_result(item) for item in snapshot.profit_loss.lines],
        total=ProfitLossModel.from_result(snapshot.profit_loss.total),
    )


def summary_response(snapshot: DashboardSnapshot) -> SummaryResponse:
    ranges = snapshot.ranges
    return SummaryResponse(
        scope=ScopeModel.from_scope(snapshot.scope),
        totalTrips=ranges.total_unique_indents,
        totalRows=ranges.total_rows,
        totalLoad=ranges.total_load,
        totalBuckets=ranges.total_buckets,
        totalBarrels=ranges.total_barrels,
        avgBucketsPerTrip=snapshot.avg_buckets_per_trip,
        totalCost=ranges.total_cost,
        totalVehicleCost=ranges.total_vehicle_cost,
        totalRemainingCost=ranges.total_remaining_cost,
        totalRevenue=snapshot.revenue.total_revenue,
        profitLoss=ProfitLossModel.from_result(snapshot.profit_loss.total),
        revenueGap=snapshot.revenue_gap,
    )


def fulfillment_response(summary: FulfillmentSummary, scope: DateRangeScope) -> FulfillmentResponse:
    return FulfillmentResponse(
        scope=ScopeModel.from_scope(scope),
        fulfillmentData=[
            FulfillmentBandModel(
                range=band.label,
                indentCount=band.indent_count,
                uniqueIndentCount=band.unique_indent_count,
            )
            for band in summary.bands
        ],
        totalTrips=summary.total_trips,
    )


def vehicle_cost_models(costs: tuple[VehicleCost, ...]) -> List[VehicleCostModel]:
    return [
        VehicleCostModel(
            vehicleNumber=item.vehicle_number,
            fixedKm=item.fixed_km,
            actualKm=item.actual_km,
            remainingKm=item.remaining_km,
            costForRemainingKm=item.cost_for_remaining_km,
            extraCost=item.extra_cost,
        )
        for item in costs
    ]
