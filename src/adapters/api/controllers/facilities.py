from __future__ import annotations

from fastapi import APIRouter, Depends

from src.adapters.api.dependencies import get_facility_service
from src.adapters.api.schemas.facilities import (
    FacilityMatchSchema,
    FacilitySchema,
    FacilityStatsSchema,
    NearestFacilitiesRequestSchema,
)
from src.adapters.api.schemas.routes import GeoPointSchema
from src.app.services.facility_service import FacilityService
from src.domain.models import Facility, GeoPoint

router = APIRouter(prefix="/facilities", tags=["facilities"])


def _facility_to_schema(f: Facility) -> FacilitySchema:
    return FacilitySchema(
        id=f.id,
        name=f.name,
        type=f.type,
        location=GeoPointSchema(lat=f.location.lat, lon=f.location.lon),
        specialties=list(f.specialties),
        emergency=f.emergency,
        address=f.address,
        phone=f.phone,
        wheelchair=f.wheelchair,
        beds=f.beds,
        rating=f.rating,
        opening_hours=f.opening_hours,
    )


@router.get("", response_model=list[FacilitySchema])
async def list_facilities(
    service: FacilityService = Depends(get_facility_service),
) -> list[FacilitySchema]:
    return [_facility_to_schema(f) for f in await service.list_facilities()]


@router.get("/stats", response_model=FacilityStatsSchema)
async def facility_stats(
    service: FacilityService = Depends(get_facility_service),
) -> FacilityStatsSchema:
    stats = await service.stats()
    return FacilityStatsSchema(
        total=stats.total,
        by_type=dict(stats.by_type),
        specialties=list(stats.specialties),
        emergency=stats.emergency,
        wheelchair=stats.wheelchair,
    )


@router.post("/nearest", response_model=list[FacilityMatchSchema])
async def nearest_facilities(
    req: NearestFacilitiesRequestSchema,
    service: FacilityService = Depends(get_facility_service),
) -> list[FacilityMatchSchema]:
    matches = await service.nearest(
        point=GeoPoint(lat=req.point.lat, lon=req.point.lon),
        max_distance_km=req.max_distance_km,
        limit=req.limit,
        filter_by_type=req.filter_by_type,
        sort_by=req.sort_by,
    )
    return [
        FacilityMatchSchema(facility=_facility_to_schema(m.facility), distance_km=m.distance_km)
        for m in matches
    ]
