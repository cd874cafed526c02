from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import ClientError

from .paginate import Page
from .request import RequestDescriptor


class _AnySentinel:
    def __repr__(self) -> str:  # pragma: no cover
        return "ANY"


ANY: Any = _AnySentinel()


def _assert_match(expected: Any, actual: Any, *, path: str) -> None:
    if expected is ANY:
        return

    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            raise AssertionError(f"{path}: expected dict, got {type(actual).__name__}")
        for k, v in expected.items():
            if k not in actual:
                raise AssertionError(f"{path}: missing key {k!r}")
            _assert_match(v, actual[k], path=f"{path}.{k}")
        return

    if isinstance(expected, list):
        if not isinstance(actual, list):
            raise AssertionError(f"{path}: expected list, got {type(actual).__name__}")
        if len(expected) != len(actual):
            raise AssertionError(f"{path}: expected {len(expected)} items, got {len(actual)}")
        for i, (e, a) in enumerate(zip(expected, actual, strict=True)):
            _assert_match(e, a, path=f"{path}[{i}]")
        return

    if expected != actual:
        raise AssertionError(f"{path}: expected {expected!r}, got {actual!r}")


_READ_METHODS = ("scan", "query")
_EXPRESSION_FIELDS = (
    "FilterExpression",
    "ProjectionExpression",
    "KeyConditionExpression",
    "ExpressionAttributeNames",
    "ExpressionAttributeValues",
)


def _validation_exception(operation: str, message: str) -> ClientError:
    return ClientError({"Error": {"Code": "ValidationException", "Message": message}}, operation)


def _check_read_request(method: str, req: Mapping[str, Any]) -> None:
    # DynamoDB rejects present-but-empty expression fields.
    for name in _EXPRESSION_FIELDS:
        if name in req and not req[name]:
            raise _validation_exception(method.capitalize(), f"{name} must not be empty")
    if method == "query" and not req.get("KeyConditionExpression"):
        raise _validation_exception("Query", "KeyConditionExpression is required")


def paged_responses(pages: Sequence[Sequence[Mapping[str, Any]]]) -> list[dict[str, Any]]:
    """Wire-format read responses chaining ``LastEvaluatedKey`` between pages."""
    responses: list[dict[str, Any]] = []
    for i, items in enumerate(pages):
        resp: dict[str, Any] = {"Items": [dict(item) for item in items]}
        if i < len(pages) - 1:
            resp["LastEvaluatedKey"] = {"page": {"N": str(i + 1)}}
        responses.append(resp)
    return responses


@dataclass(frozen=True)
class ExpectedCall:
    method: str
    expected: Mapping[str, Any] | Callable[[Mapping[str, Any]], None] | None = None
    response: Mapping[str, Any] | None = None
    error: Exception | None = None


class FakeDynamoDBClient:
    """Stand-in for a low-level boto3 DynamoDB client.

    Calls must arrive in the order they were registered with ``expect``;
    request dicts are matched key by key (``ANY`` matches anything).
    Scan and query requests are also checked the way DynamoDB checks them:
    empty expression fields raise ``ValidationException``, and each page
    must pass the previous page's ``LastEvaluatedKey`` as
    ``ExclusiveStartKey``.
    """

    def __init__(self) -> None:
        self._expected: list[ExpectedCall] = []
        self._pending_key: dict[str, Any | None] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def expect(
        self,
        method: str,
        expected: Mapping[str, Any] | Callable[[Mapping[str, Any]], None] | None = None,
        *,
        response: Mapping[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._expected.append(ExpectedCall(method=method, expected=expected, response=response, error=error))

    def expect_pages(
        self,
        method: str,
        pages: Sequence[Sequence[Mapping[str, Any]]],
        expected: Mapping[str, Any] | Callable[[Mapping[str, Any]], None] | None = None,
    ) -> None:
        if method not in _READ_METHODS:
            raise ValueError(f"paged responses only apply to {_READ_METHODS}, got {method}")
        for resp in paged_responses(pages):
            self.expect(method, expected, response=resp)

    def assert_no_pending(self) -> None:
        if self._expected:
            raise AssertionError(f"pending expected calls: {self._expected!r}")

    def _handle(self, method: str, req: dict[str, Any]) -> Mapping[str, Any]:
        self.calls.append((method, dict(req)))
        if not self._expected:
            raise AssertionError(f"unexpected call: {method}")

        call = self._expected.pop(0)
        if call.method != method:
            raise AssertionError(f"expected {call.method}, got {method}")

        if callable(call.expected):
            call.expected(req)
        elif call.expected is not None:
            _assert_match(dict(call.expected), req, path=method)

        if method in _READ_METHODS:
            start_key = req.get("ExclusiveStartKey")
            pending = self._pending_key.get(method)
            if start_key != pending:
                raise AssertionError(
                    f"{method}: ExclusiveStartKey {start_key!r} does not continue from {pending!r}"
                )
            try:
                _check_read_request(method, req)
            except ClientError:
                self._pending_key[method] = None
                raise

        if call.error is not None:
            self._pending_key[method] = None
            raise call.error

        response = dict(call.response or {})
        if method in _READ_METHODS:
            self._pending_key[method] = response.get("LastEvaluatedKey") or None
        return response

    def put_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("put_item", kwargs)

    def get_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("get_item", kwargs)

    def delete_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("delete_item", kwargs)

    def query(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("query", kwargs)

    def scan(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("scan", kwargs)


@dataclass(frozen=True)
class ScriptedPage:
    method: str
    items: list[dict[str, Any]]
    continuation_token: Any | None = None
    error: Exception | None = None


class FakeStore:
    """In-memory StoreClient with scripted scan/query pages.

    Single-item operations work against ``tables``; ``scan_page`` and
    ``query_page`` replay the pages registered with ``expect_page`` and
    ``expect_error`` in order.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, Any, Any]] = []
        self._pages: list[ScriptedPage] = []

    def expect_page(
        self,
        method: str,
        items: list[dict[str, Any]],
        continuation_token: Any | None = None,
    ) -> None:
        self._pages.append(ScriptedPage(method=method, items=list(items), continuation_token=continuation_token))

    def expect_error(self, method: str, error: Exception) -> None:
        self._pages.append(ScriptedPage(method=method, items=[], error=error))

    def assert_no_pending(self) -> None:
        if self._pages:
            raise AssertionError(f"pending scripted pages: {self._pages!r}")

    async def put(self, table: str, item: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("put", table, dict(item)))
        self.tables.setdefault(table, []).append(dict(item))
        return dict(item)

    async def get(self, table: str, key: Mapping[str, Any]) -> dict[str, Any] | None:
        self.calls.append(("get", table, dict(key)))
        for item in self.tables.get(table, []):
            if all(item.get(k) == v for k, v in key.items()):
                return dict(item)
        return None

    async def delete(self, table: str, key: Mapping[str, Any]) -> None:
        self.calls.append(("delete", table, dict(key)))
        self.tables[table] = [
            item for item in self.tables.get(table, []) if not all(item.get(k) == v for k, v in key.items())
        ]

    async def scan_page(
        self, descriptor: RequestDescriptor, start_key: Any | None = None
    ) -> Page[dict[str, Any]]:
        return self._next_page("scan", descriptor, start_key)

    async def query_page(
        self, descriptor: RequestDescriptor, start_key: Any | None = None
    ) -> Page[dict[str, Any]]:
        return self._next_page("query", descriptor, start_key)

    def _next_page(self, method: str, descriptor: RequestDescriptor, start_key: Any | None) -> Page[dict[str, Any]]:
        self.calls.append((method, descriptor, start_key))
        if not self._pages:
            raise AssertionError(f"unexpected call: {method}")

        scripted = self._pages.pop(0)
        if scripted.method != method:
            raise AssertionError(f"expected {scripted.method}, got {method}")
        if scripted.error is not None:
            raise scripted.error

        return Page(items=list(scripted.items), continuation_token=scripted.continuation_token)
