from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.maps.osmnx_road_network_provider import OSMnxRoadNetworkProvider
from src.adapters.maps.s3_cached_road_network_provider import (
    S3CachedRoadNetworkProvider,
)
from src.adapters.overpass.overpass_facility_repository import (
    OverpassFacilityRepository,
)
from src.adapters.overpass.overpass_road_network_provider import (
    OverpassRoadNetworkProvider,
)
from src.adapters.routing.ors_route_provider import OrsRouteProvider
from src.adapters.routing.osrm_route_provider import OsrmRouteProvider
from src.app.ports.output import IRoadNetworkProvider
from src.app.services.facility_service import FacilityService
from src.app.services.road_snapping_service import (
    RoadNetworkCache,
    RoadSnappingService,
)
from src.app.services.route_resolver import RouteResolver
from src.app.services.superseding_route_resolver import SupersedingRouteResolver

# Factories are cached: the resolver tracks in-flight requests and the
# facility/road caches are per-process.


@lru_cache(maxsize=1)
def get_route_resolver() -> RouteResolver:
    resolver = RouteResolver(providers=(OrsRouteProvider(), OsrmRouteProvider()))

    # Direct-route speeds are tunable per deployment.
    if os.getenv("DIRECT_SPEED_KMH"):
        resolver.direct_speed_kmh = float(os.environ["DIRECT_SPEED_KMH"])
    if os.getenv("DIRECT_MOUNTAIN_SPEED_KMH"):
        resolver.mountain_speed_kmh = float(os.environ["DIRECT_MOUNTAIN_SPEED_KMH"])

    return resolver


@lru_cache(maxsize=1)
def get_superseding_resolver() -> SupersedingRouteResolver:
    return SupersedingRouteResolver(resolver=get_route_resolver())


@lru_cache(maxsize=1)
def get_facility_service() -> FacilityService:
    return FacilityService(repository=OverpassFacilityRepository())


@lru_cache(maxsize=1)
def get_road_snapping_service() -> RoadSnappingService:
    around_provider = OverpassRoadNetworkProvider()

    source = (os.getenv("ROAD_NETWORK_SOURCE") or "overpass").strip().lower()
    regional: IRoadNetworkProvider
    if source == "osmnx":
        regional = OSMnxRoadNetworkProvider()
    elif source == "overpass":
        regional = around_provider
    else:
        raise RuntimeError(f"Unsupported ROAD_NETWORK_SOURCE: {source}")

    if os.getenv("ROAD_NETWORK_BUCKET"):
        regional = S3CachedRoadNetworkProvider(upstream=regional)

    return RoadSnappingService(
        cache=RoadNetworkCache(provider=regional), provider=around_provider
    )
