from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import osmnx as ox

from src.app.ports.output import IRoadNetworkProvider
from src.domain.models import BoundingBox, RoadNetwork, RoadSegment, from_lon_lat

logger = logging.getLogger(__name__)

MAJOR_ROADS_FILTER = '["highway"~"trunk|primary|secondary|tertiary"]'


def _first(value: Any) -> Any:
    # OSMnx merges tags of simplified edges into lists.
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def road_network_from_graph(graph: Any) -> RoadNetwork:
    """Convert an OSMnx/NetworkX street graph into road segments.

    Nodes carry lon/lat in x/y; simplified edges may carry a shapely
    `geometry`. The reverse edge of a two-way road is emitted once.
    """

    try:
        edges = [(u, v, k, d) for u, v, k, d in graph.edges(keys=True, data=True)]
    except TypeError:
        edges = [(u, v, 0, d) for u, v, d in graph.edges(data=True)]

    seen: set[tuple[Any, Any, Any]] = set()
    segments: list[RoadSegment] = []
    for u, v, k, data in edges:
        undirected = (min(u, v, key=str), max(u, v, key=str), k)
        if undirected in seen:
            continue
        seen.add(undirected)

        geom = data.get("geometry")
        if geom is not None and hasattr(geom, "coords"):
            coords = list(geom.coords)
        else:
            try:
                coords = [
                    (float(graph.nodes[u]["x"]), float(graph.nodes[u]["y"])),
                    (float(graph.nodes[v]["x"]), float(graph.nodes[v]["y"])),
                ]
            except (KeyError, TypeError, ValueError):
                continue

        try:
            path = tuple(from_lon_lat(c) for c in coords)
        except ValueError:
            continue

        ref = _first(data.get("ref")) or ""
        segments.append(
            RoadSegment(
                id=str(_first(data.get("osmid")) or f"{u}-{v}-{k}"),
                path=path,
                highway=_first(data.get("highway")) or "unknown",
                name=_first(data.get("name")) or ref or "Unnamed Road",
                ref=ref,
            )
        )

    return RoadNetwork.from_segments(segments)


@dataclass(slots=True)
class OSMnxRoadNetworkProvider(IRoadNetworkProvider):
    """OSMnx-backed major-road provider.

    Env vars:
      - OSMNX_CACHE_FOLDER: OSMnx HTTP cache folder (default data/osm_cache)
      - ROAD_GRAPH_PATH: optional .graphml to load instead of downloading;
        written after the first download when missing
    """

    custom_filter: str = MAJOR_ROADS_FILTER

    def _configure_osmnx(self) -> None:
        # Make Overpass downloads cacheable across requests.
        ox.settings.use_cache = True
        ox.settings.log_console = False
        ox.settings.cache_folder = os.getenv("OSMNX_CACHE_FOLDER") or "data/osm_cache"

    def _graph_path(self) -> Path | None:
        raw = (os.getenv("ROAD_GRAPH_PATH") or "").strip()
        if not raw:
            return None
        if not raw.lower().endswith(".graphml"):
            raise RuntimeError(f"Unsupported ROAD_GRAPH_PATH format: {raw}")
        return Path(raw)

    def _load_graph(self, bounds: BoundingBox) -> Any:
        self._configure_osmnx()

        path = self._graph_path()
        if path is not None and path.exists():
            return ox.load_graphml(path)

        try:
            # OSMnx 2.x bbox order: (left, bottom, right, top).
            graph = ox.graph_from_bbox(
                (bounds.west, bounds.south, bounds.east, bounds.north),
                custom_filter=self.custom_filter,
                simplify=True,
                retain_all=True,
            )
        except ValueError as exc:
            # InsufficientResponseError: no matching roads in the box.
            logger.warning("OSMnx returned no roads for %s: %s", bounds, exc)
            return None

        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            ox.save_graphml(graph, tmp)
            os.replace(tmp, path)

        return graph

    async def fetch_major_roads(self, *, bounds: BoundingBox) -> RoadNetwork:
        graph = await asyncio.to_thread(self._load_graph, bounds)
        if graph is None:
            return RoadNetwork()
        network = road_network_from_graph(graph)
        logger.info("Built %d road segments from OSMnx graph", len(network))
        return network
