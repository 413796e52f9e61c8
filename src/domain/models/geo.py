from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Sequence

from src.domain.exceptions import InvalidCoordinates


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.lat) or not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not math.isfinite(self.lon) or not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")


@dataclass(frozen=True, slots=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def __post_init__(self) -> None:
        if self.south > self.north:
            raise ValueError(f"Invalid bounding box: south {self.south} > north {self.north}")
        if self.west > self.east:
            raise ValueError(f"Invalid bounding box: west {self.west} > east {self.east}")

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.south <= point.lat <= self.north
            and self.west <= point.lon <= self.east
        )


# Himachal Pradesh, the service's default region.
DEFAULT_REGION = BoundingBox(south=30.3868, west=75.5762, north=33.2569, east=79.0787)


def to_lon_lat(point: GeoPoint) -> tuple[float, float]:
    """Provider axis order (GeoJSON, ORS, OSRM): longitude first."""

    return (point.lon, point.lat)


def from_lon_lat(coords: Sequence[float]) -> GeoPoint:
    """Inverse of `to_lon_lat`. Extra items (e.g. elevation) are ignored."""

    return GeoPoint(lat=float(coords[1]), lon=float(coords[0]))


def coerce_point(value: Any) -> GeoPoint:
    """Accept a GeoPoint or a ``(lat, lon)`` pair of real numbers.

    Raises InvalidCoordinates for anything else, including NaN/inf and
    out-of-range values.
    """

    if isinstance(value, GeoPoint):
        return value
    if value is None or isinstance(value, (str, bytes)):
        raise InvalidCoordinates(f"Expected a (lat, lon) pair, got {value!r}")

    try:
        items = list(value)
    except TypeError:
        raise InvalidCoordinates(f"Expected a (lat, lon) pair, got {value!r}") from None

    if len(items) != 2:
        raise InvalidCoordinates(f"Expected 2 coordinates, got {len(items)}")
    if any(isinstance(v, bool) or not isinstance(v, Real) for v in items):
        raise InvalidCoordinates(f"Coordinates must be numbers, got {items!r}")

    try:
        return GeoPoint(lat=float(items[0]), lon=float(items[1]))
    except ValueError as exc:
        raise InvalidCoordinates(str(exc)) from exc
