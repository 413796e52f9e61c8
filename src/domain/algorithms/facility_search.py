from __future__ import annotations

from typing import Iterable, Literal

from src.domain.algorithms.geo_utils import haversine_distance_km
from src.domain.models import (
    Facility,
    FacilityMatch,
    FacilityStats,
    FacilityType,
    GeoPoint,
)

SortBy = Literal["distance", "emergency", "rating"]


def find_nearest_facilities(
    point: GeoPoint,
    facilities: Iterable[Facility],
    *,
    max_distance_km: float = 20.0,
    limit: int = 10,
    filter_by_type: str | None = None,
    sort_by: SortBy = "distance",
) -> list[FacilityMatch]:
    """Facilities within `max_distance_km` of `point`, best first.

    Sorting is stable: facilities that compare equal keep their input order.
    """

    if sort_by not in ("distance", "emergency", "rating"):
        raise ValueError(f"Unsupported sort_by: {sort_by!r}")

    matches = [
        FacilityMatch(facility=f, distance_km=haversine_distance_km(point, f.location))
        for f in facilities
    ]
    matches = [m for m in matches if m.distance_km <= max_distance_km]

    if filter_by_type:
        matches = [m for m in matches if m.facility.type == filter_by_type]

    if sort_by == "distance":
        matches.sort(key=lambda m: m.distance_km)
    elif sort_by == "emergency":
        matches.sort(key=lambda m: (not m.facility.emergency, m.distance_km))
    else:
        matches.sort(key=lambda m: -(m.facility.rating or 0.0))

    return matches[: max(0, int(limit))]


def calculate_facility_stats(facilities: Iterable[Facility]) -> FacilityStats:
    by_type = {t.value: 0 for t in FacilityType}
    specialties: set[str] = set()
    total = emergency = wheelchair = 0

    for f in facilities:
        total += 1
        by_type[f.type] = by_type.get(f.type, 0) + 1
        specialties.update(f.specialties)
        if f.emergency:
            emergency += 1
        if (f.wheelchair or "").strip().lower() == "yes":
            wheelchair += 1

    return FacilityStats(
        total=total,
        by_type=by_type,
        specialties=tuple(sorted(specialties)),
        emergency=emergency,
        wheelchair=wheelchair,
    )
