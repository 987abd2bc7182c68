"""Fleet analytics endpoints."""

from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from ...config import settings
from ...data.trips_repository import TripSourceError
from ...models.domain import DateRangeScope
from ...schemas.analytics import (
    FulfillmentResponse,
    ProfitLossResponse,
    RangeWiseResponse,
    RevenueResponse,
    ScopeModel,
    SummaryResponse,
    TimeSeriesPointModel,
    TrendResponse,
    VehicleCostModel,
    fulfillment_response,
    profit_loss_response,
    range_wise_response,
    revenue_response,
    summary_response,
    vehicle_cost_models,
)
from ...services.dashboard import (
    DashboardSnapshot,
    build_fulfillment,
    build_snapshot,
    build_trends,
    build_vehicle_costs,
)
from ...services.rates import DEFAULT_RATE_TABLE
from ...services.scope import scope_from_query
from ...services.trends import ROW_METRICS, Granularity

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _scope(start: date | None, end: date | None, month: str | None) -> DateRangeScope:
    try:
        return scope_from_query(start, end, month)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


def _snapshot(scope: DateRangeScope) -> DashboardSnapshot:
    try:
        return build_snapshot(scope, rate_table=DEFAULT_RATE_TABLE)
    except TripSourceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.get("/range-wise", response_model=RangeWiseResponse, status_code=status.HTTP_200_OK)
def get_range_wise(
    start: date | None = Query(default=None, alias="from", description="First day of the window"),
    end: date | None = Query(default=None, alias="to", description="Last day of the window"),
    month: str | None = Query(default=None, description="Whole month shortcut (yyyy-MM)"),
) -> RangeWiseResponse:
    return range_wise_response(_snapshot(_scope(start, end, month)))


@router.get("/summary", response_model=SummaryResponse, status_code=status.HTTP_200_OK)
def get_summary(
    start: date | None = Query(default=None, alias="from"),
    end: date | None = Query(default=None, alias="to"),
    month: str | None = Query(default=None),
) -> SummaryResponse:
    return summary_response(_snapshot(_scope(start, end, month)))


@router.get("/revenue", response_model=RevenueResponse, status_code=status.HTTP_200_OK)
def get_revenue(
    start: date | None = Query(default=None, alias="from"),
    end: date | None = Query(default=None, alias="to"),
    month: str | None = Query(default=None),
) -> RevenueResponse:
    return revenue_response(_snapshot(_scope(start, end, month)), DEFAULT_RATE_TABLE)


@router.get("/profit-loss", response_model=ProfitLossResponse, status_code=status.HTTP_200_OK)
def get_profit_loss(
    start: date | None = Query(default=None, alias="from"),
    end: date | None = Query(default=None, alias="to"),
    month: str | None = Query(default=None),
) -> ProfitLossResponse:
    return profit_loss_response(_snapshot(_scope(start, end, month)))


@router.get("/trends", response_model=TrendResponse, status_code=status.HTTP_200_OK)
def get_trends(
    granularity: Granularity = Query(default=Granularity.MONTHLY),
    metrics: str = Query(default="revenue,cost", description="Comma-separated metric names"),
    start: date | None = Query(default=None, alias="from"),
    end: date | None = Query(default=None, alias="to"),
    month: str | None = Query(default=None),
) -> TrendResponse:
    names: List[str] = [name.strip() for name in metrics.split(",") if name.strip()]
    unknown = [name for name in names if name not in ROW_METRICS]
    if not names or unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"metrics must be a comma-separated subset of: {', '.join(ROW_METRICS)}",
        )

    scope = _scope(start, end, month)
    try:
        points = build_trends(scope, granularity, names, rate_table=DEFAULT_RATE_TABLE)
    except TripSourceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return TrendResponse(
        scope=ScopeModel.from_scope(scope),
        granularity=granularity.value,
        metrics=names,
        points=[TimeSeriesPointModel.from_point(point) for point in points],
    )


@router.get("/fulfillment", response_model=FulfillmentResponse, status_code=status.HTTP_200_OK)
def get_fulfillment(
    start: date | None = Query(default=None, alias="from"),
    end: date | None = Query(default=None, alias="to"),
    month: str | None = Query(default=None),
) -> FulfillmentResponse:
    scope = _scope(start, end, month)
    try:
        summary = build_fulfillment(scope)
    except TripSourceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return fulfillment_response(summary, scope)


@router.get("/vehicle-cost", response_model=List[VehicleCostModel], status_code=status.HTTP_200_OK)
def get_vehicle_cost(
    start: date | None = Query(default=None, alias="from"),
    end: date | None = Query(default=None, alias="to"),
    month: str | None = Query(default=None),
) -> List[VehicleCostModel]:
    scope = _scope(start, end, month)
    try:
        costs = build_vehicle_costs(scope)
    except TripSourceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return vehicle_cost_models(costs)


@router.get("/config", status_code=status.HTTP_200_OK)
def get_client_config() -> dict:
    """Client-side timing hints for scope changes."""
    return {"scopeDebounceMs": settings.scope_debounce_ms}
