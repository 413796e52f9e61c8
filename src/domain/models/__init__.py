from .facility import Facility, FacilityMatch, FacilityStats, FacilityType
from .geo import (
    DEFAULT_REGION,
    BoundingBox,
    GeoPoint,
    coerce_point,
    from_lon_lat,
    to_lon_lat,
)
from .road import RoadNetwork, RoadSegment, RoadSnap
from .route import (
    RouteAlternative,
    RouteLeg,
    RouteOptions,
    RouteResult,
    RouteStep,
    RoutingMethod,
    TransportProfile,
)

__all__ = [
    "BoundingBox",
    "DEFAULT_REGION",
    "Facility",
    "FacilityMatch",
    "FacilityStats",
    "FacilityType",
    "GeoPoint",
    "RoadNetwork",
    "RoadSegment",
    "RoadSnap",
    "RouteAlternative",
    "RouteLeg",
    "RouteOptions",
    "RouteResult",
    "RouteStep",
    "RoutingMethod",
    "TransportProfile",
    "coerce_point",
    "from_lon_lat",
    "to_lon_lat",
]
