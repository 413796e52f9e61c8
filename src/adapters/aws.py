from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

import boto3
from botocore.client import BaseClient

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
else:
    S3Client = BaseClient  # type: ignore[misc,assignment]

DEFAULT_LOCALSTACK_URL = "http://localhost:4566"
DEFAULT_ROAD_NETWORK_PREFIX = "road-networks"


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


@dataclass(frozen=True, slots=True)
class AwsRuntimeConfig:
    """Region and endpoint for boto3 clients.

    ENDPOINT_URL wins; otherwise USE_LOCALSTACK points clients at
    LOCALSTACK_ENDPOINT_URL. With neither set, real AWS is used.
    """

    region: str
    endpoint_url: str | None = None

    @staticmethod
    def from_env() -> "AwsRuntimeConfig":
        endpoint_url = _env_str("ENDPOINT_URL")
        if endpoint_url is None and env_bool("USE_LOCALSTACK"):
            endpoint_url = _env_str("LOCALSTACK_ENDPOINT_URL") or DEFAULT_LOCALSTACK_URL

        return AwsRuntimeConfig(
            region=_env_str("AWS_REGION") or "ap-south-1",
            endpoint_url=endpoint_url,
        )


@dataclass(frozen=True, slots=True)
class RoadNetworkBucket:
    """Where cached road networks live: ROAD_NETWORK_BUCKET / ROAD_NETWORK_PREFIX."""

    name: str
    prefix: str = DEFAULT_ROAD_NETWORK_PREFIX

    @staticmethod
    def from_env(
        name: str | None = None, prefix: str | None = None
    ) -> "RoadNetworkBucket":
        bucket = name or _env_str("ROAD_NETWORK_BUCKET")
        if not bucket:
            raise RuntimeError("Missing ROAD_NETWORK_BUCKET")
        raw_prefix = prefix or _env_str("ROAD_NETWORK_PREFIX") or DEFAULT_ROAD_NETWORK_PREFIX
        return RoadNetworkBucket(name=bucket, prefix=raw_prefix.strip("/"))


def s3_client(cfg: AwsRuntimeConfig | None = None) -> S3Client:
    cfg = cfg or AwsRuntimeConfig.from_env()
    session = boto3.session.Session(region_name=cfg.region)
    return session.client("s3", endpoint_url=cfg.endpoint_url)
