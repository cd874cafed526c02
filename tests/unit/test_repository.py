from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pytest

from dynaread_py import (
    ComparisonFilter,
    ContractViolation,
    DynamoRepository,
    EntityRepository,
    EnvConfig,
    FunctionFilter,
    QueryParameters,
    StoreError,
)
from dynaread_py.config import DatabaseConfig
from dynaread_py.testkit import FakeStore


@dataclass(frozen=True)
class User:
    userId: str
    userName: str
    age: int = 0


def _user_from_item(item: dict[str, Any]) -> User:
    return User(userId=item["userId"], userName=item.get("userName", ""), age=int(item.get("age", 0)))


class UsersRepository(EntityRepository[User]):
    logical_table = "users"
    id_attribute = "userId"


@pytest.mark.asyncio
async def test_create_read_delete_entity() -> None:
    store = FakeStore()
    repo: DynamoRepository[User] = DynamoRepository(store, from_item=_user_from_item)

    ada = User(userId="u1", userName="ada", age=36)
    assert await repo.create_entity("users", ada) is ada
    assert await repo.read_entity("users", "userId", "u1") == ada

    await repo.delete_entity("users", "userId", "u1")
    assert await repo.read_entity("users", "userId", "u1") is None
    assert [c[0] for c in store.calls] == ["put", "get", "delete", "get"]


@pytest.mark.asyncio
async def test_read_all_entities_builds_scan_descriptor() -> None:
    store = FakeStore()
    store.expect_page("scan", [{"userId": "u1", "userName": "ada", "age": 36}], "more")
    store.expect_page("scan", [{"userId": "u2", "userName": "bob", "age": 40}])
    repo: DynamoRepository[User] = DynamoRepository(store, from_item=_user_from_item)

    users = await repo.read_all_entities(
        "users",
        "userId",
        filters={"age": [ComparisonFilter.gt(18)]},
        negation_filters={"bannedAt": [FunctionFilter.exists()]},
        fields=["userName", "age"],
    )

    assert [u.userId for u in users] == ["u1", "u2"]
    descriptor = store.calls[0][1]
    assert descriptor.filter_expression == "(#age > :age0 ) AND (NOT (attribute_exists(#bannedAt) ))"
    assert descriptor.projection_expression == "#userName,#age,#userId"


@pytest.mark.asyncio
async def test_read_entities_from_query_sets_index() -> None:
    store = FakeStore()
    store.expect_page("query", [{"userId": "u1", "userName": "ada"}])
    repo: DynamoRepository[dict[str, Any]] = DynamoRepository(store)

    items = await repo.read_entities_from_query(
        "users",
        "userId",
        QueryParameters(
            index_name="UserNameIndex",
            key_condition_expression="userName = :userName",
            expression_attribute_values={":userName": "ada"},
        ),
    )

    assert items == [{"userId": "u1", "userName": "ada"}]
    assert store.calls[0][1].index_name == "UserNameIndex"


@pytest.mark.asyncio
async def test_entity_repository_logs_calls_and_builds_index_query(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="dynaread_py.repository")
    store = FakeStore()
    store.expect_page("query", [{"userId": "u1", "userName": "ada", "age": 36}])

    env = EnvConfig(database=DatabaseConfig(tables={"users": "users-dev"}))
    repo = UsersRepository.from_env(env, client=store, from_item=_user_from_item)
    users = await repo.read_all_by_index(
        "UserNameIndex", "userName", "ada", filters={"age": [ComparisonFilter.gte(18)]}
    )

    assert users == [User(userId="u1", userName="ada", age=36)]
    descriptor = store.calls[0][1]
    assert descriptor.table_name == "users-dev"
    assert descriptor.to_request() == {
        "TableName": "users-dev",
        "IndexName": "UserNameIndex",
        "KeyConditionExpression": "#userName = :userName",
        "FilterExpression": "(#age >= :age0 )",
        "ExpressionAttributeNames": {"#age": "age", "#userName": "userName"},
        "ExpressionAttributeValues": {":age0": 18, ":userName": "ada"},
    }
    assert any(
        r.name == "dynaread_py.repository.UsersRepository" and "read_all_by_index called" in r.getMessage()
        for r in caplog.records
    )


@pytest.mark.asyncio
async def test_entity_repository_propagates_store_errors() -> None:
    store = FakeStore()
    store.expect_page("scan", [{"userId": "u1", "userName": "ada"}], "next")
    store.expect_error("scan", StoreError(code="InternalServerError", message="boom"))
    repo = UsersRepository(DynamoRepository(store, from_item=_user_from_item), table_name="users")

    with pytest.raises(StoreError, match="boom"):
        await repo.read_all_entities()


def test_entity_repository_requires_configured_table() -> None:
    with pytest.raises(ContractViolation, match="no table configured"):
        UsersRepository.from_env(EnvConfig(), client=FakeStore())
