from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.api.dependencies import get_route_resolver, get_superseding_resolver
from src.adapters.api.schemas.routes import (
    GeoPointSchema,
    RouteAlternativeSchema,
    RouteLegSchema,
    RouteRequestSchema,
    RouteResultSchema,
    RouteStepSchema,
)
from src.app.services.route_resolver import RouteResolver
from src.app.services.superseding_route_resolver import SupersedingRouteResolver
from src.domain.exceptions import RouteRequestSuperseded
from src.domain.models import GeoPoint, RouteOptions, RouteResult, TransportProfile

router = APIRouter(tags=["routes"])


def _points(points) -> list[GeoPointSchema]:
    return [GeoPointSchema(lat=p.lat, lon=p.lon) for p in points]


def _result_to_schema(result: RouteResult) -> RouteResultSchema:
    return RouteResultSchema(
        success=result.success,
        method=result.method.value,
        geometry=_points(result.geometry),
        distance_km=result.distance_km,
        duration_s=result.duration_s,
        is_direct=result.is_direct,
        alternatives=[
            RouteAlternativeSchema(
                geometry=_points(alt.geometry),
                distance_km=alt.distance_km,
                duration_s=alt.duration_s,
            )
            for alt in result.alternatives
        ],
        legs=[
            RouteLegSchema(
                distance_m=leg.distance_m,
                duration_s=leg.duration_s,
                steps=[
                    RouteStepSchema(
                        distance_m=s.distance_m,
                        duration_s=s.duration_s,
                        instruction=s.instruction,
                        name=s.name,
                        type=s.type,
                    )
                    for s in leg.steps
                ],
            )
            for leg in result.legs
        ],
        is_mountainous=result.is_mountainous,
        ascent_m=result.ascent_m,
        descent_m=result.descent_m,
        error=result.error,
    )


@router.post("/routes", response_model=RouteResultSchema)
async def resolve_route(
    req: RouteRequestSchema,
    resolver: RouteResolver = Depends(get_route_resolver),
    superseding: SupersedingRouteResolver = Depends(get_superseding_resolver),
) -> RouteResultSchema:
    start = GeoPoint(lat=req.start.lat, lon=req.start.lon) if req.start else None
    end = GeoPoint(lat=req.end.lat, lon=req.end.lon) if req.end else None
    options = RouteOptions(
        profile=TransportProfile(req.profile),
        alternatives=req.alternatives,
        is_mountainous=req.is_mountainous,
        preference=req.preference,
        language=req.language,
    )

    if req.session_id:
        try:
            result = await superseding.resolve(
                key=req.session_id, start=start, end=end, options=options
            )
        except RouteRequestSuperseded as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
    else:
        result = await resolver.resolve_route(start, end, options)

    return _result_to_schema(result)
