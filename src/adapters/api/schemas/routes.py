from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class RouteStepSchema(BaseModel):
    distance_m: float
    duration_s: float
    instruction: str = ""
    name: str = ""
    type: str | None = None


class RouteLegSchema(BaseModel):
    distance_m: float
    duration_s: float
    steps: list[RouteStepSchema] = []


class RouteAlternativeSchema(BaseModel):
    geometry: list[GeoPointSchema]
    distance_km: float
    duration_s: float


class RouteResultSchema(BaseModel):
    success: bool
    method: Literal["ors", "osrm", "direct"]
    geometry: list[GeoPointSchema] = []
    distance_km: float = 0.0
    duration_s: float = 0.0
    is_direct: bool = False
    alternatives: list[RouteAlternativeSchema] = []
    legs: list[RouteLegSchema] = []
    is_mountainous: bool = False
    ascent_m: float | None = None
    descent_m: float | None = None
    error: str | None = None


class RouteRequestSchema(BaseModel):
    # Missing endpoints are reported as an unsuccessful route, not a 422.
    start: GeoPointSchema | None = None
    end: GeoPointSchema | None = None
    profile: Literal["driving", "cycling", "walking"] = "driving"
    alternatives: bool = True
    is_mountainous: bool = False
    preference: Literal["fastest", "shortest", "recommended"] = "fastest"
    language: str = "en"
    # Requests sharing a session_id supersede each other.
    session_id: str | None = Field(default=None, max_length=128)
