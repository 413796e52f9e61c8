from .facility_repository import IFacilityRepository
from .road_network_provider import IRoadNetworkProvider
from .route_provider import IRouteProvider

__all__ = [
    "IFacilityRepository",
    "IRoadNetworkProvider",
    "IRouteProvider",
]
