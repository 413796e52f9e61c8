from __future__ import annotations

from src.domain.algorithms.geo_utils import closest_point_on_polyline
from src.domain.models import GeoPoint, RoadNetwork, RoadSnap

# Anything closer than this is good enough to stop scanning.
EARLY_EXIT_KM = 0.1


def find_nearest_road_point_locally(
    point: GeoPoint, network: RoadNetwork, *, max_distance_km: float = 20.0
) -> RoadSnap | None:
    """Snap `point` onto the closest segment of an already-fetched network.

    Segments are scanned in network order (most important roads first).
    """

    best: RoadSnap | None = None
    for segment in network.segments:
        found = closest_point_on_polyline(point, segment.path)
        if found is None:
            continue
        candidate, distance_km = found
        if best is None or distance_km < best.distance_km:
            best = RoadSnap(
                point=candidate, distance_km=distance_km, source="local", road=segment
            )
            if distance_km < EARLY_EXIT_KM:
                break

    if best is None or best.distance_km > max_distance_km:
        return None
    return best
