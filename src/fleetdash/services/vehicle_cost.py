"""Fixed-vehicle km allowance versus actual running."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..config import settings
from ..models.domain import DateRangeScope, TripRow
from .scope import clear, contains


@dataclass(slots=True, frozen=True)
class VehicleCost:
    vehicle_number: str
    fixed_km: float
    actual_km: float
    remaining_km: float
    cost_for_remaining_km: float
    extra_cost: float


def _normalize_vehicle(value: Optional[str]) -> str:
    return " ".join(str(value or "").split()).upper()


def calculate_vehicle_costs(
    rows: Iterable[TripRow],
    scope: Optional[DateRangeScope] = None,
    *,
    vehicles: Optional[Sequence[str]] = None,
    fixed_km: Optional[float] = None,
    km_cost_rate: Optional[float] = None,
    total_budget: Optional[float] = None,
) -> tuple[VehicleCost, ...]:
    scope = scope or clear()
    vehicles = settings.fixed_vehicles if vehicles is None else vehicles
    fixed_km = settings.vehicle_fixed_km if fixed_km is None else fixed_km
    km_cost_rate = settings.vehicle_km_cost_rate if km_cost_rate is None else km_cost_rate
    total_budget = settings.vehicle_total_budget if total_budget is None else total_budget

    km_by_vehicle: dict[str, float] = {}
    for row in rows:
        if not contains(scope, row.trip_date):
            continue
        key = _normalize_vehicle(row.vehicle_number)
        if key:
            km_by_vehicle[key] = km_by_vehicle.get(key, 0.0) + row.total_km

    results: list[VehicleCost] = []
    for vehicle_number in vehicles:
        actual_km = km_by_vehicle.get(_normalize_vehicle(vehicle_number), 0.0)
        remaining_km = fixed_km - actual_km
        cost_for_remaining_km = remaining_km * km_cost_rate
        results.append(
            VehicleCost(
                vehicle_number=vehicle_number,
                fixed_km=fixed_km,
                actual_km=actual_km,
                remaining_km=remaining_km,
                cost_for_remaining_km=cost_for_remaining_km,
                extra_cost=total_budget - cost_for_remaining_km,
            )
        )
    return tuple(results)
