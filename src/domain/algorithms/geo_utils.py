from __future__ import annotations

import math

from src.domain.models import GeoPoint

EARTH_RADIUS_KM = 6371.0

# Equirectangular approximation used for projecting onto short road segments.
KM_PER_DEGREE = 111.32


def haversine_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in kilometers."""

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_KM * math.atan2(math.sqrt(s), math.sqrt(1.0 - s))


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    return haversine_distance_km(a, b) * 1000.0


def polyline_distance_km(points: tuple[GeoPoint, ...]) -> float:
    if len(points) < 2:
        return 0.0
    return float(sum(haversine_distance_km(a, b) for a, b in zip(points, points[1:])))


def points_close(a: GeoPoint, b: GeoPoint, tolerance_deg: float = 1e-4) -> bool:
    return abs(a.lat - b.lat) <= tolerance_deg and abs(a.lon - b.lon) <= tolerance_deg


def project_point_on_segment(p: GeoPoint, v: GeoPoint, w: GeoPoint) -> GeoPoint:
    """Closest point to `p` on segment v-w.

    Works in a planar frame centred on `p` (x scaled by cos(p.lat)); good
    enough for road segments a few kilometers long.
    """

    kx = KM_PER_DEGREE * max(math.cos(math.radians(p.lat)), 1e-9)
    ky = KM_PER_DEGREE

    vx, vy = (v.lon - p.lon) * kx, (v.lat - p.lat) * ky
    wx, wy = (w.lon - p.lon) * kx, (w.lat - p.lat) * ky

    l2 = (wx - vx) ** 2 + (wy - vy) ** 2
    if l2 == 0.0:
        return v

    t = (-vx * (wx - vx) - vy * (wy - vy)) / l2
    t = max(0.0, min(1.0, t))

    lat = p.lat + (vy + t * (wy - vy)) / ky
    lon = p.lon + (vx + t * (wx - vx)) / kx
    return GeoPoint(lat=max(-90.0, min(90.0, lat)), lon=max(-180.0, min(180.0, lon)))


def closest_point_on_polyline(
    point: GeoPoint, path: tuple[GeoPoint, ...]
) -> tuple[GeoPoint, float] | None:
    """Return (closest point, distance in km), or None for an empty path."""

    if not path:
        return None
    if len(path) == 1:
        return path[0], haversine_distance_km(point, path[0])

    best: tuple[GeoPoint, float] | None = None
    for a, b in zip(path, path[1:]):
        candidate = project_point_on_segment(point, a, b)
        d = haversine_distance_km(point, candidate)
        if best is None or d < best[1]:
            best = (candidate, d)
    return best
