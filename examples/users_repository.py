from __future__ import annotations

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from typing import Any

import boto3

from dynaread_py import (
    Boto3StoreClient,
    ComparisonFilter,
    DynamoRepository,
    EntityRepository,
    FunctionFilter,
)


@dataclass(frozen=True)
class User:
    userId: str
    userName: str
    age: int


def _user_from_item(item: dict[str, Any]) -> User:
    return User(userId=item["userId"], userName=item.get("userName", ""), age=int(item.get("age", 0)))


class UsersRepository(EntityRepository[User]):
    logical_table = "users"
    id_attribute = "userId"

    async def read_all_by_user_name(self, user_name: str, fields: list[str] | None = None) -> list[User]:
        return await self.read_all_by_index("UserNameIndex", "userName", user_name, fields=fields)


def _client():
    return boto3.client(
        "dynamodb",
        endpoint_url=os.environ.get("DYNAMODB_ENDPOINT", "http://localhost:8000"),
        region_name=os.environ.get("AWS_REGION", "us-east-1"),
        aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID", "dummy"),
        aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY", "dummy"),
    )


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    client = _client()
    table_name = f"dynaread_example_{uuid.uuid4().hex[:12]}"

    client.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "userId", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "userId", "AttributeType": "S"},
            {"AttributeName": "userName", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "UserNameIndex",
                "KeySchema": [{"AttributeName": "userName", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)

    try:
        provider: DynamoRepository[User] = DynamoRepository(Boto3StoreClient(client), from_item=_user_from_item)
        users = UsersRepository(provider, table_name=table_name)

        await users.create_entity(User(userId="u1", userName="ada", age=36))
        await users.create_entity(User(userId="u2", userName="bob", age=17))
        await users.create_entity(User(userId="u3", userName="ada", age=70))

        print("read_entity:", await users.read_entity("u1"))
        print(
            "adults not named bob:",
            await users.read_all_entities(
                {"age": [ComparisonFilter.gte(18)]},
                negation_filters={"userName": [ComparisonFilter.eq("bob")]},
            ),
        )
        print("by user name:", await users.read_all_by_user_name("ada"))
        print("without a nickname:", await users.read_all_entities({"nickname": [FunctionFilter.not_exists()]}))
    finally:
        client.delete_table(TableName=table_name)


if __name__ == "__main__":
    asyncio.run(main())
