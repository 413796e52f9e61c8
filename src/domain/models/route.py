from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .geo import GeoPoint


class TransportProfile(str, Enum):
    DRIVING = "driving"
    CYCLING = "cycling"
    WALKING = "walking"


class RoutingMethod(str, Enum):
    ORS = "ors"
    OSRM = "osrm"
    DIRECT = "direct"


@dataclass(frozen=True, slots=True)
class RouteOptions:
    profile: TransportProfile = TransportProfile.DRIVING
    alternatives: bool = True
    is_mountainous: bool = False
    preference: str = "fastest"  # ORS: fastest | shortest | recommended
    language: str = "en"


@dataclass(frozen=True, slots=True)
class RouteStep:
    distance_m: float
    duration_s: float
    instruction: str = ""
    name: str = ""
    type: str | None = None


@dataclass(frozen=True, slots=True)
class RouteLeg:
    distance_m: float
    duration_s: float
    steps: tuple[RouteStep, ...] = ()


@dataclass(frozen=True, slots=True)
class RouteAlternative:
    geometry: tuple[GeoPoint, ...]
    distance_km: float
    duration_s: float


@dataclass(frozen=True, slots=True)
class RouteResult:
    """Outcome of a single route resolution.

    A successful result always carries at least two geometry points. Direct
    (straight-line) results carry exactly two.
    """

    success: bool
    method: RoutingMethod
    geometry: tuple[GeoPoint, ...] = ()
    distance_km: float = 0.0
    duration_s: float = 0.0
    is_direct: bool = False
    alternatives: tuple[RouteAlternative, ...] = field(default_factory=tuple)
    legs: tuple[RouteLeg, ...] = field(default_factory=tuple)
    is_mountainous: bool = False
    ascent_m: float | None = None
    descent_m: float | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> "RouteResult":
        return cls(success=False, method=RoutingMethod.DIRECT, error=error)
