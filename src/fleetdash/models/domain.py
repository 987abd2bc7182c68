"""Domain models for trip rows and the analytics values derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union


class DistanceRange(Enum):
    """Delivery distance band measured from the hub.

    Declaration order is the display order used by every report.
    """

    KM_0_100 = "0-100Km"
    KM_101_250 = "101-250Km"
    KM_251_400 = "251-400Km"
    KM_401_600 = "401-600Km"
    OTHER = "Other"
    DUPLICATE_INDENT = "Duplicate Indents"

    @property
    def is_rated(self) -> bool:
        return self not in (DistanceRange.OTHER, DistanceRange.DUPLICATE_INDENT)

    @property
    def order(self) -> int:
        return _RANGE_ORDER[self]

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["DistanceRange"]:
        """Map a source label to a range; unknown non-empty labels become OTHER.

        Returns None for blank labels (cancelled indents carry no range).
        """
        if label is None:
            return None
        text = str(label).strip()
        if not text:
            return None
        return _LABEL_LOOKUP.get(_label_key(text), cls.OTHER)


def _label_key(text: str) -> str:
    return "".join(text.lower().split())


_RANGE_ORDER = {member: index for index, member in enumerate(DistanceRange)}
_LABEL_LOOKUP = {_label_key(member.value): member for member in DistanceRange}
_LABEL_LOOKUP.update(
    {
        "duplicateindent": DistanceRange.DUPLICATE_INDENT,
        "duplicate": DistanceRange.DUPLICATE_INDENT,
        "0-100": DistanceRange.KM_0_100,
        "101-250": DistanceRange.KM_101_250,
        "251-400": DistanceRange.KM_251_400,
        "401-600": DistanceRange.KM_401_600,
    }
)


@dataclass(slots=True, frozen=True)
class TripRow:
    """A single indent row, already tagged with its distance range upstream."""

    trip_id: str
    distance_range: DistanceRange
    trip_date: Optional[datetime] = None
    is_duplicate: bool = False
    load_kg: float = 0.0
    bucket_count: float = 0.0
    barrel_count: float = 0.0
    cost: float = 0.0
    vehicle_cost: float = 0.0
    remaining_cost: float = 0.0
    total_km: float = 0.0
    vehicle_number: Optional[str] = None
    reported_profit_loss: float = 0.0


@dataclass(slots=True, frozen=True)
class DateRangeScope:
    """Active date window. ``None`` on a side means no bound on that side."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class RangeAggregate:
    range: DistanceRange
    indent_count: int
    unique_trip_count: int
    total_load_kg: float
    bucket_count: float
    barrel_count: float
    percentage: float
    total_cost: float
    total_vehicle_cost: float
    total_remaining_cost: float
    total_km: float


@dataclass(slots=True, frozen=True)
class RangeSummary:
    aggregates: tuple[RangeAggregate, ...]
    total_load: float
    total_buckets: float
    total_barrels: float
    total_cost: float
    total_vehicle_cost: float
    total_remaining_cost: float
    total_km: float
    total_unique_indents: int
    total_rows: int
    percentage_total: float


@dataclass(slots=True, frozen=True)
class Rate:
    primary_rate: float = 0.0
    secondary_rate: float = 0.0


@dataclass(slots=True, frozen=True)
class RevenueLine:
    range: DistanceRange
    primary_rate: float
    secondary_rate: float
    primary_count: float
    secondary_count: float
    revenue: float


@dataclass(slots=True, frozen=True)
class RevenueReport:
    lines: tuple[RevenueLine, ...]
    total_revenue: float


@dataclass(slots=True, frozen=True)
class ProfitLossResult:
    """Revenue reconciled against cost. ``range`` is None on the total row."""

    range: Optional[DistanceRange]
    revenue: float
    cost: float
    profit_loss: float
    profit_loss_percentage: Optional[float]

    @property
    def is_profit(self) -> bool:
        return self.profit_loss >= 0


@dataclass(slots=True, frozen=True)
class ProfitLossReport:
    lines: tuple[ProfitLossResult, ...]
    total: ProfitLossResult


SampleDate = Union[date, datetime, str]


@dataclass(slots=True, frozen=True)
class MetricSample:
    date: SampleDate
    value: float


@dataclass(slots=True, frozen=True)
class TimeSeriesPoint:
    date_key: str
    metrics: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.metrics, MappingProxyType):
            object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))
