import math

import pytest

from src.domain.exceptions import InvalidCoordinates
from src.domain.models.geo import (
    BoundingBox,
    GeoPoint,
    coerce_point,
    from_lon_lat,
    to_lon_lat,
)


def test_geo_point_accepts_valid_coordinates() -> None:
    p = GeoPoint(lat=31.1048, lon=77.1734)
    assert p.lat == 31.1048
    assert p.lon == 77.1734


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (-90.0001, 0.0),
        (90.0001, 0.0),
        (0.0, -180.0001),
        (0.0, 180.0001),
        (math.nan, 0.0),
        (0.0, math.inf),
    ],
)
def test_geo_point_rejects_out_of_range_coordinates(lat: float, lon: float) -> None:
    with pytest.raises(ValueError):
        GeoPoint(lat=lat, lon=lon)


def test_lon_lat_conversion_swaps_axes_and_round_trips_exactly() -> None:
    p = GeoPoint(lat=31.1048, lon=77.1734)

    lon_lat = to_lon_lat(p)
    assert lon_lat == (77.1734, 31.1048)

    back = from_lon_lat(lon_lat)
    assert back == p
    assert (back.lat, back.lon) == (31.1048, 77.1734)


def test_from_lon_lat_ignores_elevation() -> None:
    assert from_lon_lat([77.1734, 31.1048, 2205.0]) == GeoPoint(lat=31.1048, lon=77.1734)


def test_coerce_point_accepts_pairs_and_points() -> None:
    p = GeoPoint(lat=31.1, lon=77.1)
    assert coerce_point(p) is p
    assert coerce_point([31.1, 77.1]) == p
    assert coerce_point((31, 77)) == GeoPoint(lat=31.0, lon=77.0)


@pytest.mark.parametrize(
    "value",
    [
        None,
        [32.2396],
        [1.0, 2.0, 3.0],
        ["31.1", "77.1"],
        [True, 77.1],
        "31.1,77.1",
        [math.nan, 77.1],
        [91.0, 0.0],
        42,
    ],
)
def test_coerce_point_rejects_unusable_input(value) -> None:
    with pytest.raises(InvalidCoordinates):
        coerce_point(value)


def test_bounding_box_contains() -> None:
    box = BoundingBox(south=30.0, west=75.0, north=33.0, east=79.0)
    assert box.contains(GeoPoint(lat=31.1, lon=77.1))
    assert not box.contains(GeoPoint(lat=28.6, lon=77.2))

    with pytest.raises(ValueError):
        BoundingBox(south=33.0, west=75.0, north=30.0, east=79.0)
