from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest

from src.adapters.overpass.client import OverpassClient
from src.adapters.overpass.overpass_facility_repository import (
    DEFAULT_FACILITIES,
    OverpassFacilityRepository,
    classify_facility,
    facility_from_element,
    facility_specialties,
    format_address,
    parse_facilities,
)
from src.domain.models import FacilityType, GeoPoint


@dataclass(slots=True)
class FakeOverpassClient:
    responses: list[Any]
    queries: list[str] = field(default_factory=list)

    async def query(self, ql: str) -> dict[str, Any]:
        self.queries.append(ql)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _hospital_node(id: int, **tags: str) -> dict[str, Any]:
    return {
        "type": "node",
        "id": id,
        "lat": 31.1048,
        "lon": 77.1734,
        "tags": {"amenity": "hospital", "name": f"Hospital {id}", **tags},
    }


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OVERPASS_AREA_NAME", "FACILITY_CACHE_TTL_S", "OVERPASS_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        ({"amenity": "hospital", "emergency": "yes"}, FacilityType.TERTIARY),
        ({"healthcare": "hospital", "beds": "120"}, FacilityType.SECONDARY),
        ({"amenity": "hospital", "facility_type": "secondary"}, FacilityType.SECONDARY),
        ({"amenity": "hospital", "beds": "20"}, FacilityType.PRIMARY),
        ({"amenity": "clinic"}, FacilityType.PRIMARY),
        ({"healthcare": "pharmacy"}, FacilityType.PRIMARY),
        ({"amenity": "school"}, None),
    ],
)
def test_classify_facility(tags: dict[str, str], expected: FacilityType | None) -> None:
    assert classify_facility(tags) == expected


def test_specialties_and_address_from_tags() -> None:
    tags = {
        "emergency": "yes",
        "healthcare:speciality": "surgery; cardiology;surgery",
        "addr:street": "Mall Road",
        "addr:city": "Shimla",
    }

    assert facility_specialties(tags) == ("Emergency", "surgery", "cardiology")
    assert format_address(tags) == "Mall Road, Shimla"
    assert format_address({}) == "Address not available"


def test_facility_from_way_uses_center_and_fallback_name() -> None:
    element = {
        "type": "way",
        "id": 42,
        "center": {"lat": 32.2396, "lon": 77.1887},
        "tags": {"amenity": "clinic", "rating": "4.2", "beds": "x"},
    }

    facility = facility_from_element(element)

    assert facility is not None
    assert facility.id == "42"
    assert facility.name == "clinic 42"
    assert facility.location == GeoPoint(lat=32.2396, lon=77.1887)
    assert facility.rating == pytest.approx(4.2)
    assert facility.beds is None
    assert facility.phone == "N/A"


@pytest.mark.parametrize(
    "element",
    [
        {"type": "node", "id": 1, "lat": 31.1, "lon": 77.1, "tags": {}},
        {"type": "node", "id": 2, "lat": None, "lon": 77.1, "tags": {"amenity": "clinic"}},
        {"type": "way", "id": 3, "tags": {"amenity": "clinic"}},
        {"type": "node", "id": 4, "lat": 91.0, "lon": 77.1, "tags": {"amenity": "clinic"}},
    ],
)
def test_unusable_elements_are_skipped(element: dict[str, Any]) -> None:
    assert facility_from_element(element) is None


def test_parse_facilities_dedupes_by_id() -> None:
    data = {
        "elements": [
            _hospital_node(1),
            _hospital_node(1, name="Renamed"),
            _hospital_node(2, emergency="yes"),
            "garbage",
        ]
    }

    facilities = parse_facilities(data)

    assert [f.id for f in facilities] == ["1", "2"]
    assert facilities[0].name == "Renamed"
    assert facilities[1].emergency


def test_list_facilities_caches_successful_results() -> None:
    client = FakeOverpassClient(responses=[{"elements": [_hospital_node(7)]}])
    repo = OverpassFacilityRepository(client=client, area_name="Himachal Pradesh")  # type: ignore[arg-type]

    async def scenario() -> tuple:
        return await repo.list_facilities(), await repo.list_facilities()

    first, second = asyncio.run(scenario())

    assert first == second
    assert [f.name for f in first] == ["Hospital 7"]
    assert len(client.queries) == 1
    assert '"name"="Himachal Pradesh"' in client.queries[0]


def test_list_facilities_falls_back_on_error_and_retries() -> None:
    client = FakeOverpassClient(
        responses=[
            httpx.ConnectError("unreachable"),
            {"elements": []},
            {"elements": [_hospital_node(8)]},
        ]
    )
    repo = OverpassFacilityRepository(client=client)  # type: ignore[arg-type]

    async def scenario() -> list:
        return [await repo.list_facilities() for _ in range(3)]

    failed, empty, loaded = asyncio.run(scenario())

    assert failed == DEFAULT_FACILITIES
    assert empty == DEFAULT_FACILITIES
    assert [f.id for f in loaded] == ["8"]
    assert len(client.queries) == 3


def test_default_facilities_are_stable() -> None:
    assert [f.id for f in DEFAULT_FACILITIES] == [
        "default1",
        "default2",
        "default3",
        "default4",
        "default5",
    ]
    assert DEFAULT_FACILITIES[0].name == "Regional Hospital Shimla"
    assert DEFAULT_FACILITIES[0].emergency


def test_overpass_client_posts_query_as_form_field() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"elements": []})

    client = OverpassClient(
        url="https://overpass.example.test/api/interpreter",
        transport=httpx.MockTransport(handler),
    )

    assert asyncio.run(client.query("[out:json];node(1);out;")) == {"elements": []}
    assert seen["form"]["data"] == ["[out:json];node(1);out;"]


def test_overpass_client_rejects_non_object_body() -> None:
    client = OverpassClient(
        url="https://overpass.example.test/api/interpreter",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[1, 2])),
    )

    with pytest.raises(ValueError):
        asyncio.run(client.query("[out:json];"))
