from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geo import GeoPoint


class FacilityType(str, Enum):
    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    TERTIARY = "Tertiary"


@dataclass(frozen=True, slots=True)
class Facility:
    """Healthcare location used for nearest-neighbour search.

    `type` is kept as a plain string: facilities built from OSM carry a
    FacilityType value, other sources may declare their own labels.
    """

    id: str
    name: str
    type: str
    location: GeoPoint
    specialties: tuple[str, ...] = ()
    emergency: bool = False
    address: str = ""
    phone: str = ""
    wheelchair: str | None = None
    beds: int | None = None
    rating: float | None = None
    opening_hours: str | None = None


@dataclass(frozen=True, slots=True)
class FacilityMatch:
    facility: Facility
    distance_km: float


@dataclass(frozen=True, slots=True)
class FacilityStats:
    total: int
    by_type: dict[str, int]
    specialties: tuple[str, ...]
    emergency: int
    wheelchair: int
