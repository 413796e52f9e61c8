from __future__ import annotations

from dataclasses import dataclass

from src.app.ports.output import IFacilityRepository
from src.domain.algorithms.facility_search import (
    SortBy,
    calculate_facility_stats,
    find_nearest_facilities,
)
from src.domain.models import Facility, FacilityMatch, FacilityStats, GeoPoint


@dataclass(slots=True)
class FacilityService:
    """Facility lookups over the repository's reference data."""

    repository: IFacilityRepository

    async def list_facilities(self) -> tuple[Facility, ...]:
        return await self.repository.list_facilities()

    async def nearest(
        self,
        *,
        point: GeoPoint,
        max_distance_km: float = 20.0,
        limit: int = 10,
        filter_by_type: str | None = None,
        sort_by: SortBy = "distance",
    ) -> list[FacilityMatch]:
        facilities = await self.repository.list_facilities()
        return find_nearest_facilities(
            point,
            facilities,
            max_distance_km=max_distance_km,
            limit=limit,
            filter_by_type=filter_by_type,
            sort_by=sort_by,
        )

    async def stats(self) -> FacilityStats:
        return calculate_facility_stats(await self.repository.list_facilities())
