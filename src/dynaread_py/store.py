from __future__ import annotations

import asyncio
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Protocol

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from .aws_errors import map_client_error
from .errors import StoreError
from .paginate import Page
from .request import RequestDescriptor


class StoreClient(Protocol):
    async def put(self, table: str, item: Mapping[str, Any]) -> dict[str, Any]: ...

    async def get(self, table: str, key: Mapping[str, Any]) -> dict[str, Any] | None: ...

    async def delete(self, table: str, key: Mapping[str, Any]) -> None: ...

    async def scan_page(
        self, descriptor: RequestDescriptor, start_key: Any | None = None
    ) -> Page[dict[str, Any]]: ...

    async def query_page(
        self, descriptor: RequestDescriptor, start_key: Any | None = None
    ) -> Page[dict[str, Any]]: ...


def _to_dynamo_number(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, Mapping):
        return {k: _to_dynamo_number(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_dynamo_number(v) for v in value]
    return value


class Boto3StoreClient:
    """StoreClient over a low-level boto3 DynamoDB client.

    boto3 is blocking, so every call runs in a worker thread. Items, keys and
    expression values are plain Python values on this side of the boundary;
    continuation tokens are passed through in wire form.
    """

    def __init__(self, client: Any | None = None) -> None:
        self._client: Any = client or boto3.client("dynamodb")
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    async def put(self, table: str, item: Mapping[str, Any]) -> dict[str, Any]:
        await self._call("put_item", {"TableName": table, "Item": self._to_wire(item)})
        return dict(item)

    async def get(self, table: str, key: Mapping[str, Any]) -> dict[str, Any] | None:
        resp = await self._call("get_item", {"TableName": table, "Key": self._to_wire(key)})
        raw = resp.get("Item")
        if raw is None:
            return None
        return self._from_wire(raw)

    async def delete(self, table: str, key: Mapping[str, Any]) -> None:
        await self._call("delete_item", {"TableName": table, "Key": self._to_wire(key)})

    async def scan_page(
        self, descriptor: RequestDescriptor, start_key: Any | None = None
    ) -> Page[dict[str, Any]]:
        return await self._read_page("scan", descriptor, start_key)

    async def query_page(
        self, descriptor: RequestDescriptor, start_key: Any | None = None
    ) -> Page[dict[str, Any]]:
        return await self._read_page("query", descriptor, start_key)

    async def _read_page(
        self, method: str, descriptor: RequestDescriptor, start_key: Any | None
    ) -> Page[dict[str, Any]]:
        req = descriptor.to_request()
        if "ExpressionAttributeValues" in req:
            req["ExpressionAttributeValues"] = self._to_wire(req["ExpressionAttributeValues"])
        if start_key:
            req["ExclusiveStartKey"] = start_key

        resp = await self._call(method, req)
        items = [self._from_wire(item) for item in resp.get("Items", [])]
        return Page(items=items, continuation_token=resp.get("LastEvaluatedKey") or None)

    async def _call(self, method: str, req: dict[str, Any]) -> Mapping[str, Any]:
        fn = getattr(self._client, method)
        try:
            return await asyncio.to_thread(fn, **req)
        except ClientError as err:
            raise map_client_error(err) from err
        except BotoCoreError as err:
            raise StoreError(code=type(err).__name__, message=str(err)) from err

    def _to_wire(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return {k: self._serializer.serialize(_to_dynamo_number(v)) for k, v in values.items()}

    def _from_wire(self, item: Mapping[str, Any]) -> dict[str, Any]:
        return {k: self._deserializer.deserialize(v) for k, v in item.items()}
