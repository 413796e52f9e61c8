from .routing import (
    AllProvidersExhausted,
    InvalidCoordinates,
    ProviderUnavailable,
    RouteRequestSuperseded,
    RoutingError,
)

__all__ = [
    "AllProvidersExhausted",
    "InvalidCoordinates",
    "ProviderUnavailable",
    "RouteRequestSuperseded",
    "RoutingError",
]
