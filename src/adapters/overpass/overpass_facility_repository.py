from __future__ import annotations

import asyncio
import logging
import math
import os
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from src.adapters.overpass.client import OverpassClient, element_point
from src.app.ports.output import IFacilityRepository
from src.domain.models import Facility, FacilityType, GeoPoint

logger = logging.getLogger(__name__)

DEFAULT_AREA_NAME = "Himachal Pradesh"

FACILITY_QUERY = """
[out:json][timeout:60];
area["name"="{area}"]["admin_level"="4"]->.searchArea;
(
  nwr["amenity"="hospital"](area.searchArea);
  nwr["healthcare"="hospital"](area.searchArea);
  nwr["amenity"="clinic"](area.searchArea);
  nwr["healthcare"="clinic"](area.searchArea);
  nwr["healthcare"="doctor"](area.searchArea);
  nwr["amenity"="doctors"](area.searchArea);
  nwr["healthcare"="centre"](area.searchArea);
  nwr["amenity"="pharmacy"](area.searchArea);
  nwr["healthcare"="pharmacy"](area.searchArea);
);
out body center qt;
"""


def _facility(
    id: str,
    name: str,
    type: FacilityType,
    lat: float,
    lon: float,
    address: str,
    phone: str,
    emergency: bool,
    wheelchair: str,
    specialties: tuple[str, ...],
) -> Facility:
    return Facility(
        id=id,
        name=name,
        type=type.value,
        location=GeoPoint(lat=lat, lon=lon),
        address=address,
        phone=phone,
        emergency=emergency,
        wheelchair=wheelchair,
        specialties=specialties,
    )


# Served when Overpass is unreachable or returns nothing usable.
DEFAULT_FACILITIES: tuple[Facility, ...] = (
    _facility(
        "default1", "Regional Hospital Shimla", FacilityType.TERTIARY,
        31.1048, 77.1734, "Shimla, Himachal Pradesh", "+91 123-456-7890", True, "yes",
        ("Emergency Care", "Surgery", "Cardiology", "Pediatrics"),
    ),
    _facility(
        "default2", "District Clinic Dharamshala", FacilityType.SECONDARY,
        32.2143, 76.3196, "Dharamshala, Himachal Pradesh", "+91 123-456-7891", False,
        "limited", ("General Medicine", "Orthopedics"),
    ),
    _facility(
        "default3", "Community Health Center Manali", FacilityType.PRIMARY,
        32.2396, 77.1887, "Manali, Himachal Pradesh", "+91 123-456-7892", False, "no",
        ("General Medicine", "Vaccination"),
    ),
    _facility(
        "default4", "Hill View Pharmacy", FacilityType.PRIMARY,
        31.0893, 77.1835, "Shimla, Himachal Pradesh", "+91 123-456-7893", False, "yes",
        ("Pharmacy", "General Medicine"),
    ),
    _facility(
        "default5", "Mountain Emergency Hospital", FacilityType.TERTIARY,
        31.6340, 77.1166, "Rampur, Himachal Pradesh", "+91 123-456-7894", True, "yes",
        ("Emergency Care", "Trauma Care", "Surgery"),
    ),
)


def classify_facility(tags: dict[str, Any]) -> FacilityType | None:
    is_hospital = tags.get("healthcare") == "hospital" or tags.get("amenity") == "hospital"

    if is_hospital and tags.get("emergency") == "yes":
        return FacilityType.TERTIARY

    if is_hospital:
        beds = _parse_int(tags.get("beds"))
        if beds is not None and beds > 50:
            return FacilityType.SECONDARY
        if tags.get("facility_type") == "secondary":
            return FacilityType.SECONDARY
        return FacilityType.PRIMARY

    if tags.get("healthcare") or tags.get("amenity") in {"clinic", "doctors", "pharmacy"}:
        return FacilityType.PRIMARY

    return None


def facility_specialties(tags: dict[str, Any]) -> tuple[str, ...]:
    out: list[str] = []
    if tags.get("emergency") == "yes":
        out.append("Emergency")
    raw = tags.get("healthcare:speciality") or tags.get("healthcare_speciality") or ""
    for part in str(raw).split(";"):
        part = part.strip()
        if part and part not in out:
            out.append(part)
    return tuple(out)


def format_address(tags: dict[str, Any]) -> str:
    parts = [tags.get(k) for k in ("addr:street", "addr:city", "addr:state")]
    parts = [str(p).strip() for p in parts if p and str(p).strip()]
    return ", ".join(parts) if parts else "Address not available"


def _parse_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _valid_coordinate(lat: Any, lon: Any) -> bool:
    if isinstance(lat, bool) or isinstance(lon, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False
    if not math.isfinite(lat) or not math.isfinite(lon):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def facility_from_element(element: dict[str, Any]) -> Facility | None:
    tags = element.get("tags") or {}
    if not any(tags.get(k) for k in ("name", "operator", "amenity", "healthcare")):
        return None

    lat, lon = element_point(element)
    if not _valid_coordinate(lat, lon):
        logger.debug("Skipping OSM element %s with invalid coordinates", element.get("id"))
        return None

    facility_type = classify_facility(tags)
    if facility_type is None:
        return None

    name = (
        tags.get("name")
        or tags.get("operator")
        or f"{tags.get('amenity') or tags.get('healthcare')} {element.get('id')}"
    )

    rating = tags.get("rating")
    try:
        rating_value = float(rating) if rating is not None else None
    except ValueError:
        rating_value = None

    return Facility(
        id=str(element.get("id")),
        name=str(name),
        type=facility_type.value,
        location=GeoPoint(lat=float(lat), lon=float(lon)),
        specialties=facility_specialties(tags),
        emergency=tags.get("emergency") == "yes",
        address=format_address(tags),
        phone=tags.get("phone") or tags.get("contact:phone") or "N/A",
        wheelchair=tags.get("wheelchair"),
        beds=_parse_int(tags.get("beds")),
        rating=rating_value,
        opening_hours=tags.get("opening_hours"),
    )


def parse_facilities(data: dict[str, Any]) -> tuple[Facility, ...]:
    by_id: dict[str, Facility] = {}
    for element in data.get("elements") or ():
        if not isinstance(element, dict):
            continue
        facility = facility_from_element(element)
        if facility is not None:
            by_id[facility.id] = facility
    return tuple(by_id.values())


@dataclass(slots=True)
class OverpassFacilityRepository(IFacilityRepository):
    """Healthcare facilities from OpenStreetMap via Overpass.

    Env vars:
      - OVERPASS_AREA_NAME: admin_level 4 area name (default Himachal Pradesh)
      - FACILITY_CACHE_TTL_S: in-process cache TTL seconds (default 3600)

    Falls back to DEFAULT_FACILITIES when the query fails or yields nothing;
    fallbacks are not cached so the next call retries Overpass.
    """

    client: OverpassClient = field(default_factory=OverpassClient)
    area_name: str | None = None
    cache_ttl_s: float = 3600.0
    fallback: tuple[Facility, ...] = DEFAULT_FACILITIES

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _cached_at_monotonic: float = 0.0
    _cached: tuple[Facility, ...] = ()

    def __post_init__(self) -> None:
        if self.area_name is None:
            self.area_name = os.getenv("OVERPASS_AREA_NAME") or DEFAULT_AREA_NAME
        if os.getenv("FACILITY_CACHE_TTL_S"):
            self.cache_ttl_s = float(os.environ["FACILITY_CACHE_TTL_S"])

    async def list_facilities(self) -> tuple[Facility, ...]:
        async with self._lock:
            now_mono = time.monotonic()
            if self._cached and (now_mono - self._cached_at_monotonic) < self.cache_ttl_s:
                return self._cached

            try:
                data = await self.client.query(FACILITY_QUERY.format(area=self.area_name))
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Overpass facility query failed, using defaults: %s", exc)
                return self.fallback

            facilities = parse_facilities(data)
            logger.info(
                "Loaded %d facilities from %d OSM elements",
                len(facilities),
                len(data.get("elements") or ()),
            )
            if not facilities:
                logger.warning("No usable facilities from Overpass, using defaults")
                return self.fallback

            self._cached_at_monotonic = time.monotonic()
            self._cached = facilities
            return facilities
