from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from src.adapters.api.schemas.routes import GeoPointSchema


class RoadSnapRequestSchema(BaseModel):
    point: GeoPointSchema


class RoadSchema(BaseModel):
    id: str
    name: str
    ref: str = ""
    highway: str
    type: str
    importance: int


class RoadSnapSchema(BaseModel):
    point: GeoPointSchema
    distance_m: float
    source: Literal["local", "major_road"]
    road: RoadSchema | None = None
