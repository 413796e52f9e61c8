class RoutingError(Exception):
    """Base exception for route calculation failures."""


class InvalidCoordinates(RoutingError, ValueError):
    """Raised when a start/end point is not a usable (lat, lon) pair."""


class ProviderUnavailable(RoutingError):
    """Raised when a routing provider fails or returns a malformed response."""


class AllProvidersExhausted(RoutingError):
    """Raised when no configured provider produced a route."""


class RouteRequestSuperseded(RoutingError):
    """Raised to the caller of a request cancelled by a newer one for the same key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Route request superseded for key {key!r}")
        self.key = key
