from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"


@dataclass(slots=True)
class OverpassClient:
    """Minimal Overpass QL client.

    Env vars:
      - OVERPASS_URL: interpreter endpoint
      - OVERPASS_TIMEOUT_S: HTTP timeout (default 90)
    """

    url: str | None = None
    timeout_s: float = 90.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("OVERPASS_URL") or DEFAULT_OVERPASS_URL
        if os.getenv("OVERPASS_TIMEOUT_S"):
            self.timeout_s = float(os.environ["OVERPASS_TIMEOUT_S"])

    async def query(self, ql: str) -> dict[str, Any]:
        """POST a query as the `data` form field and return the JSON body.

        HTTP and decoding errors propagate to the caller.
        """

        async with httpx.AsyncClient(
            timeout=self.timeout_s, transport=self.transport
        ) as client:
            resp = await client.post(self.url or DEFAULT_OVERPASS_URL, data={"data": ql})
            resp.raise_for_status()
            data = resp.json()

        if not isinstance(data, dict):
            raise ValueError("Overpass response is not a JSON object")
        return data


def element_point(element: dict[str, Any]) -> tuple[Any, Any]:
    """(lat, lon) of a node, or of a way/relation's `center` (when requested)."""

    if element.get("type") == "node":
        return element.get("lat"), element.get("lon")
    center = element.get("center") or {}
    return center.get("lat"), center.get("lon")
