from __future__ import annotations

from botocore.exceptions import ClientError

from .mocks import ANY, FakeDynamoDBClient, FakeStore, paged_responses


def client_error(code: str, message: str = "", *, operation: str = "Scan") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


__all__ = [
    "ANY",
    "FakeDynamoDBClient",
    "FakeStore",
    "client_error",
    "paged_responses",
]
