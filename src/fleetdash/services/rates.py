"""Per-range tariff for 20L buckets (primary) and 210L barrels (secondary)."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..models.domain import DistanceRange, Rate

BARREL_TO_BUCKET_RATIO = 10.5

_ZERO_RATE = Rate()


@dataclass(slots=True, frozen=True)
class RateTable:
    rates: Mapping[DistanceRange, Rate] = field(default_factory=dict)

    def __post_init__(self) -> None:
        rated = {key: value for key, value in self.rates.items() if key.is_rated}
        object.__setattr__(self, "rates", MappingProxyType(rated))

    def rate_for(self, distance_range: DistanceRange) -> Rate:
        return self.rates.get(distance_range, _ZERO_RATE)

    def items(self) -> list[tuple[DistanceRange, Rate]]:
        return sorted(self.rates.items(), key=lambda item: item[0].order)


DEFAULT_RATE_TABLE = RateTable(
    {
        DistanceRange.KM_0_100: Rate(primary_rate=21.0, secondary_rate=220.5),
        DistanceRange.KM_101_250: Rate(primary_rate=40.0, secondary_rate=420.0),
        DistanceRange.KM_251_400: Rate(primary_rate=68.0, secondary_rate=714.0),
        DistanceRange.KM_401_600: Rate(primary_rate=105.0, secondary_rate=1081.5),
    }
)
