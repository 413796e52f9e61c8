from __future__ import annotations

import asyncio

import httpx
import pytest

from src.adapters.routing.osrm_route_provider import (
    OsrmRouteProvider,
    format_coordinates,
)
from src.domain.models import GeoPoint, RouteOptions, RoutingMethod

SHIMLA = GeoPoint(lat=31.1048, lon=77.1734)
MANALI = GeoPoint(lat=32.2396, lon=77.1887)

PRIMARY = "https://osrm-a.example.test"
SECONDARY = "https://osrm-b.example.test"


def _osrm_body(with_alternative: bool = False) -> dict:
    main = {
        "distance": 250123.4,
        "duration": 22000.0,
        "geometry": {
            "type": "LineString",
            "coordinates": [[77.1736, 31.1050], [77.15, 31.6], [77.1885, 32.2394]],
        },
        "legs": [
            {
                "distance": 250123.4,
                "duration": 22000.0,
                "steps": [
                    {
                        "distance": 500.0,
                        "duration": 60.0,
                        "name": "Cart Road",
                        "maneuver": {"type": "depart"},
                    },
                    {
                        "distance": 1500.0,
                        "duration": 120.0,
                        "name": "NH3",
                        "maneuver": {"type": "turn", "modifier": "left"},
                    },
                ],
            }
        ],
    }
    routes = [main]
    if with_alternative:
        routes.append(
            {
                "distance": 270000.0,
                "duration": 25000.0,
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[77.1736, 31.1050], [77.3, 31.7], [77.1885, 32.2394]],
                },
            }
        )
    return {"code": "Ok", "routes": routes}


@pytest.fixture(autouse=True)
def _clear_osrm_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OSRM_SERVERS", raising=False)
    monkeypatch.delenv("OSRM_TIMEOUT_S", raising=False)


def test_format_coordinates_is_lon_lat() -> None:
    assert format_coordinates([SHIMLA, MANALI]) == "77.1734,31.1048;77.1887,32.2396"


def test_servers_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OSRM_SERVERS", f"{PRIMARY}/, {SECONDARY}")

    assert OsrmRouteProvider().servers == (PRIMARY, SECONDARY)


def test_parses_route_steps_and_alternatives() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_osrm_body(with_alternative=True))

    provider = OsrmRouteProvider(servers=(PRIMARY,), transport=httpx.MockTransport(handler))

    result = asyncio.run(provider.try_route(SHIMLA, MANALI, RouteOptions()))

    assert result is not None
    assert result.method == RoutingMethod.OSRM
    assert result.distance_km == pytest.approx(250.1234)
    assert result.duration_s == pytest.approx(22000.0)
    assert result.geometry[0] == GeoPoint(lat=31.1050, lon=77.1736)
    assert len(result.alternatives) == 1
    assert result.alternatives[0].distance_km == pytest.approx(270.0)

    steps = result.legs[0].steps
    assert steps[0].instruction == "Depart onto Cart Road"
    assert steps[1].instruction == "Turn left onto NH3"
    assert steps[1].type == "turn"

    request = seen[0]
    assert request.url.path == "/route/v1/driving/77.1734,31.1048;77.1887,32.2396"
    assert request.url.params["geometries"] == "geojson"
    assert request.url.params["alternatives"] == "true"


def test_moves_to_next_server_after_http_error() -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        if request.url.host == "osrm-a.example.test":
            return httpx.Response(502, text="Bad Gateway")
        return httpx.Response(200, json=_osrm_body())

    provider = OsrmRouteProvider(
        servers=(PRIMARY, SECONDARY), transport=httpx.MockTransport(handler)
    )

    result = asyncio.run(provider.try_route(SHIMLA, MANALI, RouteOptions()))

    assert result is not None
    assert hosts == ["osrm-a.example.test", "osrm-b.example.test"]


def test_slow_server_is_abandoned_after_timeout() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "osrm-a.example.test":
            await asyncio.sleep(5)
        return httpx.Response(200, json=_osrm_body())

    provider = OsrmRouteProvider(
        servers=(PRIMARY, SECONDARY),
        timeout_s=0.05,
        transport=httpx.MockTransport(handler),
    )

    result = asyncio.run(provider.try_route(SHIMLA, MANALI, RouteOptions()))

    assert result is not None
    assert result.method == RoutingMethod.OSRM


@pytest.mark.parametrize(
    "body",
    [
        {"code": "NoRoute", "message": "Impossible route between points", "routes": []},
        {"code": "Ok", "routes": []},
        {"code": "Ok", "routes": [{"distance": 1.0, "duration": 1.0,
                                   "geometry": {"coordinates": [[77.1, 31.1]]}}]},
    ],
)
def test_unusable_responses_return_none(body: dict) -> None:
    provider = OsrmRouteProvider(
        servers=(PRIMARY, SECONDARY),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)),
    )

    assert asyncio.run(provider.try_route(SHIMLA, MANALI, RouteOptions())) is None


def test_alternatives_flag_is_forwarded() -> None:
    provider = OsrmRouteProvider(servers=(PRIMARY,))

    assert provider.build_params(RouteOptions(alternatives=False))["alternatives"] == "false"


@pytest.mark.parametrize(
    "legs",
    [
        ["oops"],
        [{"distance": 1.0, "duration": 1.0, "steps": ["oops"]}],
        [{"distance": 1.0, "duration": 1.0, "steps": [{"maneuver": "turn"}]}],
    ],
)
def test_malformed_legs_move_on_to_next_server(legs: list) -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        body = _osrm_body()
        if request.url.host == "osrm-a.example.test":
            body["routes"][0]["legs"] = legs
        return httpx.Response(200, json=body)

    provider = OsrmRouteProvider(
        servers=(PRIMARY, SECONDARY), transport=httpx.MockTransport(handler)
    )

    result = asyncio.run(provider.try_route(SHIMLA, MANALI, RouteOptions()))

    assert result is not None
    assert result.method == RoutingMethod.OSRM
    assert hosts == ["osrm-a.example.test", "osrm-b.example.test"]
    assert result.legs[0].steps[1].instruction == "Turn left onto NH3"
