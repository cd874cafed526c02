from __future__ import annotations

import os
import socket
from urllib.parse import urlparse

import boto3
import pytest


def dynamodb_endpoint() -> str:
    return os.environ.get("DYNAMODB_ENDPOINT", "http://localhost:8000")


def _endpoint_reachable(url: str) -> bool:
    parsed = urlparse(url)
    try:
        with socket.create_connection((parsed.hostname or "localhost", parsed.port or 80), timeout=0.5):
            return True
    except OSError:
        return False


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    _ = config
    reason = None
    if os.environ.get("SKIP_INTEGRATION") in {"1", "true"}:
        reason = "SKIP_INTEGRATION set"
    elif not _endpoint_reachable(dynamodb_endpoint()):
        reason = f"DynamoDB Local not reachable at {dynamodb_endpoint()}"
    if reason is None:
        return
    for item in items:
        if "tests/integration" in str(item.fspath).replace(os.sep, "/"):
            item.add_marker(pytest.mark.skip(reason=reason))


@pytest.fixture
def ddb_client():
    return boto3.client(
        "dynamodb",
        endpoint_url=dynamodb_endpoint(),
        region_name=os.environ.get("AWS_REGION", "us-east-1"),
        aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID", "dummy"),
        aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY", "dummy"),
    )
