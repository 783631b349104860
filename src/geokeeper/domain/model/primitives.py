"""Domain primitives: scalar aliases + small value objects.

Scalar aliases may be promoted to proper value objects later without changing imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

type CacheCode = str
type Acode = str
type LanguageCode = str

HALF_POINT_RATINGS: frozenset[Decimal] = frozenset(
    Decimal(step) / 2 for step in range(2, 11)
)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    @property
    def latitude_in_range(self) -> bool:
        return -90 <= self.latitude <= 90  # noqa: PLR2004

    @property
    def longitude_in_range(self) -> bool:
        return -180 <= self.longitude <= 180  # noqa: PLR2004

    @property
    def is_null_island(self) -> bool:
        return self.latitude == 0 and self.longitude == 0

    def __str__(self) -> str:
        return f"{self.latitude}|{self.longitude}"
