from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .geo import GeoPoint

# OSM highway class -> rank (lower is more important).
HIGHWAY_IMPORTANCE: dict[str, int] = {
    "trunk": 1,
    "primary": 2,
    "secondary": 3,
    "tertiary": 4,
}


def highway_importance(highway: str | None) -> int:
    return HIGHWAY_IMPORTANCE.get((highway or "").strip().lower(), 5)


def road_kind(ref: str | None) -> str:
    return "national_highway" if (ref or "").startswith("NH") else "state_highway"


@dataclass(frozen=True, slots=True)
class RoadSegment:
    id: str
    path: tuple[GeoPoint, ...]
    highway: str = "unknown"
    name: str = "Unnamed Road"
    ref: str = ""

    @property
    def kind(self) -> str:
        return road_kind(self.ref)

    @property
    def importance(self) -> int:
        return highway_importance(self.highway)


@dataclass(frozen=True, slots=True)
class RoadNetwork:
    segments: tuple[RoadSegment, ...] = ()

    @classmethod
    def from_segments(cls, segments) -> "RoadNetwork":
        # sorted() is stable, so equal-importance roads keep source order.
        usable = [s for s in segments if len(s.path) >= 2]
        return cls(segments=tuple(sorted(usable, key=lambda s: s.importance)))

    def __len__(self) -> int:
        return len(self.segments)


@dataclass(frozen=True, slots=True)
class RoadSnap:
    point: GeoPoint
    distance_km: float
    source: Literal["local", "major_road"]
    road: RoadSegment | None = None
