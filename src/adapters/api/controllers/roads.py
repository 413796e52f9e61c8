from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.api.dependencies import get_road_snapping_service
from src.adapters.api.schemas.roads import RoadSchema, RoadSnapRequestSchema, RoadSnapSchema
from src.adapters.api.schemas.routes import GeoPointSchema
from src.app.services.road_snapping_service import RoadSnappingService
from src.domain.models import GeoPoint

router = APIRouter(prefix="/roads", tags=["roads"])


@router.post("/snap", response_model=RoadSnapSchema)
async def snap_to_road(
    req: RoadSnapRequestSchema,
    service: RoadSnappingService = Depends(get_road_snapping_service),
) -> RoadSnapSchema:
    snap = await service.find_nearest_road_point(
        GeoPoint(lat=req.point.lat, lon=req.point.lon)
    )
    if snap is None:
        raise HTTPException(status_code=404, detail="No road found near point")

    road = snap.road
    return RoadSnapSchema(
        point=GeoPointSchema(lat=snap.point.lat, lon=snap.point.lon),
        distance_m=snap.distance_km * 1000.0,
        source=snap.source,
        road=(
            RoadSchema(
                id=road.id,
                name=road.name,
                ref=road.ref,
                highway=road.highway,
                type=road.kind,
                importance=road.importance,
            )
            if road
            else None
        ),
    )
