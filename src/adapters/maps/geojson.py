from __future__ import annotations

from typing import Any

from src.domain.models import RoadNetwork, RoadSegment, from_lon_lat, to_lon_lat


def road_network_to_geojson(network: RoadNetwork) -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {
                    "id": seg.id,
                    "highway": seg.highway,
                    "name": seg.name,
                    "ref": seg.ref,
                    "type": seg.kind,
                    "importance": seg.importance,
                },
                "geometry": {
                    "type": "LineString",
                    "coordinates": [list(to_lon_lat(p)) for p in seg.path],
                },
            }
            for seg in network.segments
        ],
    }


def road_network_from_geojson(data: dict[str, Any]) -> RoadNetwork:
    segments: list[RoadSegment] = []
    for feature in data.get("features") or ():
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "LineString":
            continue
        props = feature.get("properties") or {}
        segments.append(
            RoadSegment(
                id=str(props.get("id", "")),
                path=tuple(from_lon_lat(c) for c in geometry.get("coordinates") or ()),
                highway=props.get("highway") or "unknown",
                name=props.get("name") or "Unnamed Road",
                ref=props.get("ref") or "",
            )
        )
    return RoadNetwork.from_segments(segments)
