from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict, is_dataclass
from typing import Any, cast

from .config import EnvConfig, get_dynamodb_client
from .filters import Filters
from .paginate import query_all, scan_all
from .request import QueryParameters, build_query_request, build_request
from .store import Boto3StoreClient, StoreClient
from .validation import validate_attribute_name


def _default_to_item(entity: Any) -> dict[str, Any]:
    if is_dataclass(entity) and not isinstance(entity, type):
        return asdict(entity)
    if isinstance(entity, Mapping):
        return dict(entity)
    raise TypeError(f"cannot convert {type(entity).__name__} to an item; pass to_item")


class DynamoRepository[T]:
    def __init__(
        self,
        client: StoreClient,
        *,
        from_item: Callable[[dict[str, Any]], T] | None = None,
        to_item: Callable[[T], Mapping[str, Any]] | None = None,
    ) -> None:
        self._client = client
        self._from_item: Callable[[dict[str, Any]], T] = from_item or (lambda item: cast(T, item))
        self._to_item: Callable[[T], Mapping[str, Any]] = to_item or _default_to_item

    async def create_entity(self, table_name: str, entity: T) -> T:
        await self._client.put(table_name, self._to_item(entity))
        return entity

    async def read_entity(self, table_name: str, id_attribute: str, entity_id: Any) -> T | None:
        item = await self._client.get(table_name, {id_attribute: entity_id})
        if item is None:
            return None
        return self._from_item(item)

    async def read_all_entities(
        self,
        table_name: str,
        id_attribute: str,
        filters: Filters | None = None,
        negation_filters: Filters | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[T]:
        descriptor = build_request(
            table_name,
            id_attribute,
            filters=filters,
            negation_filters=negation_filters,
            fields=fields,
        )
        items = await scan_all(self._client, descriptor)
        return [self._from_item(item) for item in items]

    async def read_entities_from_query(
        self,
        table_name: str,
        id_attribute: str,
        query: QueryParameters,
        filters: Filters | None = None,
        negation_filters: Filters | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[T]:
        descriptor = build_query_request(
            table_name,
            id_attribute,
            query,
            filters=filters,
            negation_filters=negation_filters,
            fields=fields,
        )
        items = await query_all(self._client, descriptor)
        return [self._from_item(item) for item in items]

    async def delete_entity(self, table_name: str, id_attribute: str, entity_id: Any) -> None:
        await self._client.delete(table_name, {id_attribute: entity_id})


class EntityRepository[T]:
    """Repository bound to one table and id attribute.

    Subclasses name the entity's table and id attribute; every call is
    logged under the subclass name before it is delegated.
    """

    logical_table: str = ""
    id_attribute: str = "id"

    def __init__(
        self,
        provider: DynamoRepository[T],
        *,
        table_name: str,
        id_attribute: str | None = None,
    ) -> None:
        self.provider = provider
        self.table_name = table_name
        if id_attribute is not None:
            self.id_attribute = id_attribute
        validate_attribute_name(self.id_attribute)
        self._logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    @classmethod
    def from_env(
        cls,
        env: EnvConfig,
        *,
        client: StoreClient | None = None,
        from_item: Callable[[dict[str, Any]], T] | None = None,
        to_item: Callable[[T], Mapping[str, Any]] | None = None,
    ) -> EntityRepository[T]:
        store = client or Boto3StoreClient(get_dynamodb_client(env))
        provider: DynamoRepository[T] = DynamoRepository(store, from_item=from_item, to_item=to_item)
        return cls(provider, table_name=env.database.table(cls.logical_table))

    async def create_entity(self, entity: T) -> T:
        self._logger.info("create_entity called: %r", entity)
        return await self.provider.create_entity(self.table_name, entity)

    async def read_entity(self, entity_id: Any) -> T | None:
        self._logger.info("read_entity called: %r", entity_id)
        return await self.provider.read_entity(self.table_name, self.id_attribute, entity_id)

    async def read_all_entities(
        self,
        filters: Filters | None = None,
        fields: Sequence[str] | None = None,
        *,
        negation_filters: Filters | None = None,
    ) -> list[T]:
        self._logger.info(
            "read_all_entities called: filters=%r negation_filters=%r fields=%r",
            filters,
            negation_filters,
            fields,
        )
        return await self.provider.read_all_entities(
            self.table_name, self.id_attribute, filters, negation_filters, fields
        )

    async def read_all_by_index(
        self,
        index_name: str,
        key_attribute: str,
        key_value: Any,
        filters: Filters | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[T]:
        self._logger.info(
            "read_all_by_index called: index=%s %s=%r filters=%r fields=%r",
            index_name,
            key_attribute,
            key_value,
            filters,
            fields,
        )
        validate_attribute_name(key_attribute)
        query = QueryParameters(
            index_name=index_name,
            key_condition_expression=f"#{key_attribute} = :{key_attribute}",
            expression_attribute_names={f"#{key_attribute}": key_attribute},
            expression_attribute_values={f":{key_attribute}": key_value},
        )
        return await self.provider.read_entities_from_query(
            self.table_name, self.id_attribute, query, filters, None, fields
        )

    async def delete_entity(self, entity_id: Any) -> None:
        self._logger.info("delete_entity called: %r", entity_id)
        await self.provider.delete_entity(self.table_name, self.id_attribute, entity_id)
