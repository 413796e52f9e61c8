from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from src.adapters.overpass.client import OverpassClient
from src.app.ports.output import IRoadNetworkProvider
from src.domain.models import BoundingBox, GeoPoint, RoadNetwork, RoadSegment

logger = logging.getLogger(__name__)

MAJOR_ROADS_QUERY = """
[out:json][timeout:90];
(
  way["highway"="trunk"]({bbox});
  way["highway"="primary"]({bbox});
  way["highway"="secondary"]({bbox});
  way["highway"="tertiary"]({bbox});
  way["ref"~"^NH"]({bbox});
  way["ref"~"^SH"]({bbox});
);
(._;>;);
out body;
"""

ROADS_AROUND_QUERY = """
[out:json][timeout:25];
(
  way(around:{radius},{lat},{lon})["highway"~"^(motorway|trunk|primary|secondary)$"];
  way(around:{radius},{lat},{lon})["ref"~"^(NH|SH)"];
);
(._;>;);
out body;
"""


def road_network_from_overpass(data: dict[str, Any]) -> RoadNetwork:
    """Build segments from `out body` ways plus their recursed nodes."""

    nodes: dict[Any, GeoPoint] = {}
    ways: list[dict[str, Any]] = []
    for el in data.get("elements") or ():
        if not isinstance(el, dict):
            continue
        if el.get("type") == "node":
            try:
                nodes[el["id"]] = GeoPoint(lat=float(el["lat"]), lon=float(el["lon"]))
            except (KeyError, TypeError, ValueError):
                continue
        elif el.get("type") == "way":
            ways.append(el)

    segments: list[RoadSegment] = []
    for way in ways:
        path = tuple(nodes[n] for n in way.get("nodes") or () if n in nodes)
        if len(path) < 2:
            continue
        tags = way.get("tags") or {}
        segments.append(
            RoadSegment(
                id=str(way.get("id")),
                path=path,
                highway=tags.get("highway") or "unknown",
                name=tags.get("name") or tags.get("ref") or "Unnamed Road",
                ref=tags.get("ref") or "",
            )
        )

    return RoadNetwork.from_segments(segments)


@dataclass(slots=True)
class OverpassRoadNetworkProvider(IRoadNetworkProvider):
    """Major-road geometry straight from Overpass QL."""

    client: OverpassClient = field(default_factory=OverpassClient)

    async def fetch_major_roads(self, *, bounds: BoundingBox) -> RoadNetwork:
        bbox = f"{bounds.south},{bounds.west},{bounds.north},{bounds.east}"
        data = await self.client.query(MAJOR_ROADS_QUERY.format(bbox=bbox))
        network = road_network_from_overpass(data)
        logger.info("Fetched %d major road segments for %s", len(network), bounds)
        return network

    async def roads_near(self, *, center: GeoPoint, radius_m: int) -> RoadNetwork:
        logger.debug("Searching for major roads within %sm of %s", radius_m, center)
        data = await self.client.query(
            ROADS_AROUND_QUERY.format(radius=int(radius_m), lat=center.lat, lon=center.lon)
        )
        return road_network_from_overpass(data)
