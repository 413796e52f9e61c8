from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import BoundingBox, GeoPoint, RoadNetwork


class IRoadNetworkProvider(ABC):
    """Port for fetching major-road geometry."""

    @abstractmethod
    async def fetch_major_roads(self, *, bounds: BoundingBox) -> RoadNetwork:
        """Return the major roads (trunk..tertiary, NH/SH) inside `bounds`."""

    async def roads_near(self, *, center: GeoPoint, radius_m: int) -> RoadNetwork:
        """Return major roads within `radius_m` of `center`."""

        raise NotImplementedError(
            f"{type(self).__name__} does not support radius queries"
        )
