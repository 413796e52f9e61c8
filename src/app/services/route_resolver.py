from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Sequence

from src.app.ports.output import IRouteProvider
from src.domain.algorithms.geo_utils import haversine_distance_km, points_close
from src.domain.exceptions import AllProvidersExhausted, InvalidCoordinates
from src.domain.models import (
    GeoPoint,
    RouteLeg,
    RouteOptions,
    RouteResult,
    RouteStep,
    RoutingMethod,
    coerce_point,
)

logger = logging.getLogger(__name__)

# Endpoint tolerance used to decide whether a provider path already starts/ends
# at the requested points.
ENDPOINT_TOLERANCE_DEG = 1e-4


def anchor_geometry(
    path: tuple[GeoPoint, ...], *, start: GeoPoint, end: GeoPoint
) -> tuple[GeoPoint, ...]:
    """Make a provider path begin at `start` and end at `end`.

    Routing engines snap endpoints to the road network; the requested
    points are added as connectors instead of moving the snapped ones.
    """

    if not path:
        return (start, end)

    out = list(path)
    if not points_close(out[0], start, ENDPOINT_TOLERANCE_DEG):
        out.insert(0, start)
    if not points_close(out[-1], end, ENDPOINT_TOLERANCE_DEG):
        out.append(end)
    if len(out) < 2:
        return (start, end)
    return tuple(out)


@dataclass(slots=True)
class RouteResolver:
    """Best-effort route resolution with graceful degradation.

    Providers are tried strictly in order and the first one that returns a
    route wins. When none does, a straight-line estimate is returned.
    `resolve_route` never raises; only malformed coordinates produce an
    unsuccessful result.
    """

    providers: Sequence[IRouteProvider] = field(default_factory=tuple)

    # Direct-route speed assumptions (km/h).
    direct_speed_kmh: float = 30.0
    mountain_speed_kmh: float = 20.0

    async def resolve_route(
        self, start: Any, end: Any, options: RouteOptions | None = None
    ) -> RouteResult:
        options = options or RouteOptions()

        try:
            origin = coerce_point(start)
            destination = coerce_point(end)
        except InvalidCoordinates as exc:
            logger.warning("Rejecting route request with invalid input: %s", exc)
            return RouteResult.failure(f"InvalidInput: {exc}")

        logger.debug(
            "Resolving route %s -> %s (profile=%s)",
            origin,
            destination,
            options.profile.value,
        )

        try:
            result = await self._first_provider_route(origin, destination, options)
        except AllProvidersExhausted as exc:
            logger.info("Falling back to direct route: %s", exc)
            return self.direct_route(origin, destination, options)

        return replace(
            result,
            geometry=anchor_geometry(result.geometry, start=origin, end=destination),
            is_direct=False,
        )

    async def _first_provider_route(
        self, start: GeoPoint, end: GeoPoint, options: RouteOptions
    ) -> RouteResult:
        tried: list[str] = []
        for provider in self.providers:
            name = getattr(provider, "name", type(provider).__name__)
            tried.append(name)
            try:
                result = await provider.try_route(start, end, options)
            except Exception:
                logger.exception("Route provider %s raised; trying next", name)
                continue

            if result is None:
                logger.info("Route provider %s returned no route", name)
                continue
            if not result.success or len(result.geometry) < 2:
                logger.warning("Route provider %s returned an unusable route", name)
                continue

            logger.info("Route found via %s", name)
            return result

        raise AllProvidersExhausted(
            f"No route from providers: {', '.join(tried) or 'none configured'}"
        )

    def direct_route(
        self, start: GeoPoint, end: GeoPoint, options: RouteOptions
    ) -> RouteResult:
        distance_km = haversine_distance_km(start, end)
        speed = self.mountain_speed_kmh if options.is_mountainous else self.direct_speed_kmh
        duration_s = distance_km / speed * 3600.0

        suffix = " (mountainous terrain)" if options.is_mountainous else ""
        step = RouteStep(
            distance_m=distance_km * 1000.0,
            duration_s=duration_s,
            instruction=f"Follow direct route to destination{suffix}",
            name="Direct mountain route" if options.is_mountainous else "Direct route",
            type="direct",
        )

        return RouteResult(
            success=True,
            method=RoutingMethod.DIRECT,
            geometry=(start, end),
            distance_km=distance_km,
            duration_s=duration_s,
            is_direct=True,
            legs=(
                RouteLeg(
                    distance_m=distance_km * 1000.0,
                    duration_s=duration_s,
                    steps=(step,),
                ),
            ),
            is_mountainous=options.is_mountainous,
        )
