from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import GeoPoint, RouteOptions, RouteResult


class IRouteProvider(ABC):
    """Port for an external routing service tried by the RouteResolver."""

    name: str

    @abstractmethod
    async def try_route(
        self, start: GeoPoint, end: GeoPoint, options: RouteOptions
    ) -> RouteResult | None:
        """Return a successful route, or None if this provider cannot serve it.

        Implementations should absorb their own network/parse failures.
        """
