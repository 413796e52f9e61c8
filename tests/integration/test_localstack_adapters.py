from __future__ import annotations

import asyncio

import pytest

from src.adapters.maps.s3_cached_road_network_provider import (
    S3CachedRoadNetworkProvider,
)
from src.domain.models import BoundingBox, GeoPoint, RoadNetwork, RoadSegment


class _FakeUpstream:
    def __init__(self) -> None:
        self.calls = 0

    async def fetch_major_roads(self, *, bounds: BoundingBox) -> RoadNetwork:
        self.calls += 1
        return RoadNetwork.from_segments(
            [
                RoadSegment(
                    id="nh5",
                    path=(
                        GeoPoint(lat=bounds.south, lon=bounds.west),
                        GeoPoint(lat=bounds.north, lon=bounds.east),
                    ),
                    highway="trunk",
                    name="NH5",
                    ref="NH5",
                )
            ]
        )

    async def roads_near(self, *, center: GeoPoint, radius_m: int) -> RoadNetwork:
        return RoadNetwork()


@pytest.mark.integration
def test_s3_cached_road_network_provider_caches_network(road_network_bucket: str) -> None:
    upstream = _FakeUpstream()
    cached = S3CachedRoadNetworkProvider(upstream=upstream)
    bounds = BoundingBox(south=31.0, west=77.0, north=31.5, east=77.5)

    n1 = asyncio.run(cached.fetch_major_roads(bounds=bounds))
    assert upstream.calls == 1
    assert [s.id for s in n1.segments] == ["nh5"]

    # Second call should come from S3; simulate upstream failure.
    async def _boom(*args, **kwargs):
        raise RuntimeError("should not be called")

    upstream.fetch_major_roads = _boom  # type: ignore[assignment]
    n2 = asyncio.run(cached.fetch_major_roads(bounds=bounds))
    assert n2 == n1


@pytest.mark.integration
def test_s3_cached_road_network_provider_passes_radius_queries_through(
    require_localstack: str,
) -> None:
    upstream = _FakeUpstream()
    cached = S3CachedRoadNetworkProvider(upstream=upstream, bucket="unused")

    network = asyncio.run(
        cached.roads_near(center=GeoPoint(lat=31.1, lon=77.1), radius_m=1000)
    )

    assert len(network) == 0
    assert upstream.calls == 0
