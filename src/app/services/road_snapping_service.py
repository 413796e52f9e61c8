from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from src.app.ports.output import IRoadNetworkProvider
from src.domain.algorithms.road_snapping import find_nearest_road_point_locally
from src.domain.models import (
    DEFAULT_REGION,
    BoundingBox,
    GeoPoint,
    RoadNetwork,
    RoadSnap,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RoadNetworkCache:
    """Session-scoped road network cache keyed by bounding box.

    There is no eviction: entries live as long as the cache object. Empty
    networks are not stored so a failed fetch is retried next time.
    """

    provider: IRoadNetworkProvider

    _networks: dict[BoundingBox, RoadNetwork] = field(
        default_factory=dict, init=False, repr=False
    )
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def get(self, bounds: BoundingBox) -> RoadNetwork:
        cached = self._networks.get(bounds)
        if cached is not None:
            return cached

        async with self._lock:
            cached = self._networks.get(bounds)
            if cached is not None:
                return cached

            try:
                network = await self.provider.fetch_major_roads(bounds=bounds)
            except Exception:
                logger.exception("Failed to fetch road network for %s", bounds)
                return RoadNetwork()

            if len(network):
                self._networks[bounds] = network
            return network

    def peek(self, bounds: BoundingBox) -> RoadNetwork | None:
        return self._networks.get(bounds)

    def clear(self) -> None:
        self._networks.clear()


@dataclass(slots=True)
class RoadSnappingService:
    """Finds the nearest major-road point to a coordinate.

    Tries the cached regional network first, then widens an on-demand
    radius search around the point.
    """

    cache: RoadNetworkCache
    provider: IRoadNetworkProvider
    region: BoundingBox = DEFAULT_REGION

    max_distance_km: float = 20.0
    initial_radius_m: int = 1000
    max_radius_m: int = 20000

    async def find_nearest_road_point(self, point: GeoPoint) -> RoadSnap | None:
        if self.region.contains(point):
            network = await self.cache.get(self.region)
            snap = find_nearest_road_point_locally(
                point, network, max_distance_km=self.max_distance_km
            )
            if snap is not None:
                return snap
            logger.info("No cached road near %s; searching around the point", point)

        return await self.find_nearest_major_road(point)

    async def find_nearest_major_road(self, point: GeoPoint) -> RoadSnap | None:
        radius = int(self.initial_radius_m)
        while radius <= self.max_radius_m:
            try:
                network = await self.provider.roads_near(center=point, radius_m=radius)
            except Exception as exc:
                logger.warning(
                    "Major road search failed at radius %sm: %s", radius, exc
                )
                radius *= 2
                continue

            # The radius query already bounds the search; accept any hit.
            snap = find_nearest_road_point_locally(
                point, network, max_distance_km=float("inf")
            )
            if snap is not None:
                return RoadSnap(
                    point=snap.point,
                    distance_km=snap.distance_km,
                    source="major_road",
                    road=snap.road,
                )

            radius *= 2

        return None
