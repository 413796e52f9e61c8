from __future__ import annotations

import asyncio
import gzip
import json
import logging
from dataclasses import dataclass

from botocore.exceptions import ClientError

from src.adapters.aws import RoadNetworkBucket, s3_client
from src.adapters.maps.geojson import road_network_from_geojson, road_network_to_geojson
from src.app.ports.output import IRoadNetworkProvider
from src.domain.models import BoundingBox, GeoPoint, RoadNetwork

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class S3CachedRoadNetworkProvider(IRoadNetworkProvider):
    """Caches regional road networks in S3 as gzip'd GeoJSON.

    Wraps another IRoadNetworkProvider. Radius queries are passed through
    uncached.

    Env vars:
      - ROAD_NETWORK_BUCKET (required unless `bucket` is given)
      - ROAD_NETWORK_PREFIX (default: road-networks)
      - ENDPOINT_URL (preferred for LocalStack)
    """

    upstream: IRoadNetworkProvider
    bucket: str | None = None
    prefix: str | None = None

    def _location(self) -> RoadNetworkBucket:
        return RoadNetworkBucket.from_env(self.bucket, self.prefix)

    def key_for(self, bounds: BoundingBox, prefix: str) -> str:
        # 4 decimals (about 11 m) keeps keys stable for the same region.
        parts = [round(v, 4) for v in (bounds.south, bounds.west, bounds.north, bounds.east)]
        return f"{prefix}/bbox={'_'.join(str(p) for p in parts)}.geojson.gz"

    def _read(self, bucket: str, key: str) -> RoadNetwork | None:
        try:
            obj = s3_client().get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in {"NoSuchKey", "404"}:
                logger.warning("Road network cache read failed for %s: %s", key, exc)
            return None
        body = obj["Body"].read()
        return road_network_from_geojson(json.loads(gzip.decompress(body)))

    def _write(self, bucket: str, key: str, network: RoadNetwork) -> None:
        payload = gzip.compress(json.dumps(road_network_to_geojson(network)).encode("utf-8"))
        s3_client().put_object(
            Bucket=bucket,
            Key=key,
            Body=payload,
            ContentType="application/geo+json",
            ContentEncoding="gzip",
        )

    async def fetch_major_roads(self, *, bounds: BoundingBox) -> RoadNetwork:
        location = self._location()
        key = self.key_for(bounds, location.prefix)

        cached = await asyncio.to_thread(self._read, location.name, key)
        if cached is not None:
            logger.debug("Road network cache hit: s3://%s/%s", location.name, key)
            return cached

        network = await self.upstream.fetch_major_roads(bounds=bounds)
        if len(network):
            await asyncio.to_thread(self._write, location.name, key, network)
        return network

    async def roads_near(self, *, center: GeoPoint, radius_m: int) -> RoadNetwork:
        return await self.upstream.roads_near(center=center, radius_m=radius_m)
