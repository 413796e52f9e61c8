from __future__ import annotations

import os
import urllib.request
from uuid import uuid4

import pytest
from botocore.exceptions import ClientError

from src.adapters.aws import s3_client


def _localstack_healthy(endpoint_url: str) -> bool:
    url = endpoint_url.rstrip("/") + "/_localstack/health"
    try:
        with urllib.request.urlopen(url, timeout=1.5) as resp:  # nosec B310
            return 200 <= resp.status < 300
    except OSError:
        return False


@pytest.fixture(scope="session", autouse=True)
def localstack_env() -> None:
    """Point boto3 at LocalStack unless the environment says otherwise."""

    os.environ.setdefault("USE_LOCALSTACK", "true")
    os.environ.setdefault("ENDPOINT_URL", "http://localhost:4566")
    os.environ.setdefault("AWS_REGION", "ap-south-1")

    # boto3 requires some credentials to be present, even for LocalStack.
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")


@pytest.fixture(scope="session")
def require_localstack(localstack_env: None) -> str:
    endpoint_url = os.environ["ENDPOINT_URL"]
    if not _localstack_healthy(endpoint_url):
        msg = f"LocalStack not reachable at {endpoint_url}"

        # CI starts LocalStack, so an unreachable endpoint there is a failure.
        if os.getenv("CI") or os.getenv("GITHUB_ACTIONS") or os.getenv("REQUIRE_LOCALSTACK"):
            pytest.fail(msg, pytrace=False)

        pytest.skip(f"{msg}; skipping integration tests")
    return endpoint_url


@pytest.fixture
def road_network_bucket(
    require_localstack: str, monkeypatch: pytest.MonkeyPatch
) -> str:
    """A LocalStack bucket plus a fresh key prefix for this test."""

    bucket = "gshealth-test-road-networks"
    try:
        s3_client().create_bucket(
            Bucket=bucket,
            CreateBucketConfiguration={"LocationConstraint": os.environ["AWS_REGION"]},
        )
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") not in {
            "BucketAlreadyOwnedByYou",
            "BucketAlreadyExists",
        }:
            raise

    monkeypatch.setenv("ROAD_NETWORK_BUCKET", bucket)
    monkeypatch.setenv("ROAD_NETWORK_PREFIX", f"road-networks-test-{uuid4()}")
    return bucket
