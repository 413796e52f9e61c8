from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx

from src.app.ports.output import IRouteProvider
from src.domain.exceptions import ProviderUnavailable
from src.domain.models import (
    GeoPoint,
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

PLACEHOLDER_API_KEY = "your_api_key_here"


@dataclass(slots=True)
class OrsRouteProvider(IRouteProvider):
    """OpenRouteService directions (GeoJSON endpoint).

    Env vars:
      - ORS_API_KEY: API key; missing/blank/placeholder disables the provider
      - ORS_BASE_URL: default https://api.openrouteservice.org
      - ORS_TIMEOUT_S: request timeout (default 10)
    """

    name = "ors"

    PROFILE_MAP = {
        TransportProfile.DRIVING: "driving-car",
        TransportProfile.CYCLING: "cycling-regular",
        TransportProfile.WALKING: "foot-walking",
    }

    api_key: str | None = None
    base_url: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = os.getenv("ORS_API_KEY")
        if self.base_url is None:
            self.base_url = os.getenv("ORS_BASE_URL") or "https://api.openrouteservice.org"
        if os.getenv("ORS_TIMEOUT_S"):
            self.timeout_s = float(os.environ["ORS_TIMEOUT_S"])

    def is_configured(self) -> bool:
        key = (self.api_key or "").strip()
        if not key:
            logger.debug("ORS_API_KEY is not set; OpenRouteService disabled")
            return False
        if key == PLACEHOLDER_API_KEY:
            logger.warning("ORS_API_KEY is the placeholder value; OpenRouteService disabled")
            return False
        return True

    def build_payload(
        self, start: GeoPoint, end: GeoPoint, options: RouteOptions
    ) -> dict[str, Any]:
        return {
            "coordinates": [list(to_lon_lat(start)), list(to_lon_lat(end))],
            "preference": options.preference,
            "units": "m",
            "language": options.language,
            "instructions": True,
            "elevation": True,
        }

    async def try_route(
        self, start: GeoPoint, end: GeoPoint, options: RouteOptions
    ) -> RouteResult | None:
        if not self.is_configured():
            return None

        try:
            data = await self._post_directions(start, end, options)
            return _parse_ors_geojson(data, is_mountainous=options.is_mountainous)
        except ProviderUnavailable as exc:
            logger.warning("OpenRouteService route failed: %s", exc)
            return None

    async def _post_directions(
        self, start: GeoPoint, end: GeoPoint, options: RouteOptions
    ) -> Any:
        profile = self.PROFILE_MAP.get(options.profile, "driving-car")
        url = f"{(self.base_url or '').rstrip('/')}/v2/directions/{profile}/geojson"
        headers = {
            "Authorization": self.api_key or "",
            "Content-Type": "application/json",
            "Accept": "application/json, application/geo+json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.post(
                    url, json=self.build_payload(start, end, options), headers=headers
                )
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailable(
                f"HTTP {exc.response.status_code}: {_error_message(exc.response)}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise ProviderUnavailable(f"Invalid JSON: {exc}") from exc


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if err:
            return str(err)
    return resp.text[:200]


def _parse_ors_geojson(data: Any, *, is_mountainous: bool = False) -> RouteResult:
    try:
        feature = data["features"][0]
        coords = feature["geometry"]["coordinates"]
        properties = feature["properties"]
        segments = properties["segments"]

        geometry = tuple(from_lon_lat(c) for c in coords)
        first = segments[0]
        distance_km = float(first["distance"]) / 1000.0
        duration_s = float(first["duration"])

        legs = tuple(
            RouteLeg(
                distance_m=float(seg.get("distance", 0.0)),
                duration_s=float(seg.get("duration", 0.0)),
                steps=tuple(
                    RouteStep(
                        distance_m=float(step.get("distance", 0.0)),
                        duration_s=float(step.get("duration", 0.0)),
                        instruction=step.get("instruction") or "",
                        name=step.get("name") or "",
                        type=str(step["type"]) if step.get("type") is not None else None,
                    )
                    for step in seg.get("steps") or ()
                ),
            )
            for seg in segments
        )
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        raise ProviderUnavailable(f"Malformed ORS response: {exc!r}") from exc

    if len(geometry) < 2:
        raise ProviderUnavailable("ORS route geometry has fewer than 2 points")

    ascent = properties.get("ascent")
    descent = properties.get("descent")

    return RouteResult(
        success=True,
        method=RoutingMethod.ORS,
        geometry=geometry,
        distance_km=distance_km,
        duration_s=duration_s,
        legs=legs,
        is_mountainous=is_mountainous,
        ascent_m=float(ascent) if ascent is not None else None,
        descent_m=float(descent) if descent is not None else None,
    )
