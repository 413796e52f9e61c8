from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any

import httpx

from src.app.ports.output import IRouteProvider
from src.domain.exceptions import ProviderUnavailable
from src.domain.models import (
    GeoPoint,
    RouteAlternative,
    RouteLeg,
    RouteOptions,
    RouteResult,
    RouteStep,
    RoutingMethod,
    TransportProfile,
    from_lon_lat,
    to_lon_lat,
)

logger = logging.getLogger(__name__)

DEFAULT_OSRM_SERVERS = (
    "https://router.project-osrm.org",
    "https://routing.openstreetmap.de/routed-car",
)


def _servers_from_env() -> tuple[str, ...]:
    raw = (os.getenv("OSRM_SERVERS") or "").strip()
    if not raw:
        return DEFAULT_OSRM_SERVERS
    return tuple(s.strip().rstrip("/") for s in raw.split(",") if s.strip())


def format_coordinates(points: list[GeoPoint]) -> str:
    """OSRM path format: 'lon,lat;lon,lat;...'."""

    return ";".join("{},{}".format(*to_lon_lat(p)) for p in points)


@dataclass(slots=True)
class OsrmRouteProvider(IRouteProvider):
    """OSRM /route client tried against an ordered list of servers.

    Each server is attempted once, bounded by `timeout_s`; the first
    well-formed route wins.

    Env vars:
      - OSRM_SERVERS: comma-separated base URLs
      - OSRM_TIMEOUT_S: per-server timeout (default 10)
    """

    name = "osrm"

    PROFILE_MAP = {
        TransportProfile.DRIVING: "driving",
        TransportProfile.CYCLING: "cycling",
        TransportProfile.WALKING: "walking",
    }

    servers: tuple[str, ...] = field(default_factory=_servers_from_env)
    timeout_s: float = 10.0
    snap_radius_m: int = 2000
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if os.getenv("OSRM_TIMEOUT_S"):
            self.timeout_s = float(os.environ["OSRM_TIMEOUT_S"])

    def build_params(self, options: RouteOptions) -> dict[str, str]:
        return {
            "alternatives": "true" if options.alternatives else "false",
            "steps": "true",
            "geometries": "geojson",
            "overview": "full",
            "radiuses": f"{self.snap_radius_m};{self.snap_radius_m}",
        }

    async def try_route(
        self, start: GeoPoint, end: GeoPoint, options: RouteOptions
    ) -> RouteResult | None:
        profile = self.PROFILE_MAP.get(options.profile, "driving")
        path = f"/route/v1/{profile}/{format_coordinates([start, end])}"
        params = self.build_params(options)

        async with httpx.AsyncClient(
            timeout=self.timeout_s, transport=self.transport
        ) as client:
            for server in self.servers:
                url = server.rstrip("/") + path
                try:
                    data = await asyncio.wait_for(
                        self._get_json(client, url, params), timeout=self.timeout_s
                    )
                    return _parse_osrm_response(
                        data, is_mountainous=options.is_mountainous
                    )
                except asyncio.TimeoutError:
                    logger.warning(
                        "OSRM server %s timed out after %ss", server, self.timeout_s
                    )
                except ProviderUnavailable as exc:
                    logger.warning("OSRM server %s failed: %s", server, exc)

        logger.warning("All OSRM servers failed (%d tried)", len(self.servers))
        return None

    async def _get_json(
        self, client: httpx.AsyncClient, url: str, params: dict[str, str]
    ) -> Any:
        try:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailable(f"HTTP {exc.response.status_code}") from exc
        except httpx.TimeoutException:
            raise asyncio.TimeoutError() from None
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise ProviderUnavailable(f"Invalid JSON: {exc}") from exc


def _step_instruction(step: dict[str, Any]) -> str:
    maneuver = step.get("maneuver") or {}
    if maneuver.get("instruction"):
        return str(maneuver["instruction"])

    # Public OSRM servers omit text instructions; synthesise a short one.
    kind = str(maneuver.get("type") or "continue")
    modifier = maneuver.get("modifier")
    road = step.get("name")
    words = kind.replace("_", " ").capitalize()
    if modifier:
        words = f"{words} {modifier}"
    if road:
        words = f"{words} onto {road}"
    return words


def _parse_path(route: dict[str, Any]) -> tuple[GeoPoint, ...]:
    coords = route["geometry"]["coordinates"]
    path = tuple(from_lon_lat(c) for c in coords)
    if len(path) < 2:
        raise ProviderUnavailable("OSRM route geometry has fewer than 2 points")
    return path


def _parse_osrm_response(data: Any, *, is_mountainous: bool = False) -> RouteResult:
    if not isinstance(data, dict):
        raise ProviderUnavailable("OSRM response is not a JSON object")
    code = data.get("code")
    if code is not None and code != "Ok":
        raise ProviderUnavailable(f"OSRM error: {data.get('message') or code}")
    routes = data.get("routes") or []
    if not routes:
        raise ProviderUnavailable("OSRM returned no routes")

    try:
        main = routes[0]
        geometry = _parse_path(main)
        legs = tuple(
            RouteLeg(
                distance_m=float(leg.get("distance", 0.0)),
                duration_s=float(leg.get("duration", 0.0)),
                steps=tuple(
                    RouteStep(
                        distance_m=float(step.get("distance", 0.0)),
                        duration_s=float(step.get("duration", 0.0)),
                        instruction=_step_instruction(step),
                        name=step.get("name") or "Unnamed road",
                        type=(step.get("maneuver") or {}).get("type"),
                    )
                    for step in leg.get("steps") or ()
                ),
            )
            for leg in main.get("legs") or ()
        )

        alternatives: list[RouteAlternative] = []
        for alt in routes[1:]:
            try:
                alternatives.append(
                    RouteAlternative(
                        geometry=_parse_path(alt),
                        distance_km=float(alt["distance"]) / 1000.0,
                        duration_s=float(alt["duration"]),
                    )
                )
            except (
                AttributeError, KeyError, TypeError, ValueError, ProviderUnavailable
            ) as exc:
                logger.debug("Skipping malformed OSRM alternative: %r", exc)

        return RouteResult(
            success=True,
            method=RoutingMethod.OSRM,
            geometry=geometry,
            distance_km=float(main["distance"]) / 1000.0,
            duration_s=float(main["duration"]),
            alternatives=tuple(alternatives),
            legs=legs,
            is_mountainous=is_mountainous,
        )
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        raise ProviderUnavailable(f"Malformed OSRM response: {exc!r}") from exc
