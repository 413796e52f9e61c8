from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from src.adapters.api.schemas.routes import GeoPointSchema


class FacilitySchema(BaseModel):
    id: str
    name: str
    type: str
    location: GeoPointSchema
    specialties: list[str] = []
    emergency: bool = False
    address: str = ""
    phone: str = ""
    wheelchair: str | None = None
    beds: int | None = None
    rating: float | None = None
    opening_hours: str | None = None


class FacilityMatchSchema(BaseModel):
    facility: FacilitySchema
    distance_km: float


class NearestFacilitiesRequestSchema(BaseModel):
    point: GeoPointSchema
    max_distance_km: float = Field(default=20.0, gt=0.0)
    limit: int = Field(default=10, ge=1, le=500)
    filter_by_type: str | None = None
    sort_by: Literal["distance", "emergency", "rating"] = "distance"


class FacilityStatsSchema(BaseModel):
    total: int
    by_type: dict[str, int]
    specialties: list[str]
    emergency: int
    wheelchair: int
