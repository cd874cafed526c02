from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from .errors import ContractViolation
from .expressions import build_filter_expression, build_projection_expression
from .filters import Filters
from .validation import validate_index_name, validate_table_name


@dataclass(frozen=True)
class QueryParameters:
    index_name: str
    key_condition_expression: str
    expression_attribute_values: Mapping[str, Any] = field(default_factory=dict)
    expression_attribute_names: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestDescriptor:
    table_name: str
    index_name: str | None = None
    filter_expression: str | None = None
    projection_expression: str | None = None
    key_condition_expression: str | None = None
    expression_attribute_names: Mapping[str, str] | None = None
    expression_attribute_values: Mapping[str, Any] | None = None

    @property
    def is_query(self) -> bool:
        return bool(self.index_name) and bool(self.key_condition_expression)

    def to_request(self) -> dict[str, Any]:
        req: dict[str, Any] = {"TableName": self.table_name}
        if self.index_name:
            req["IndexName"] = self.index_name
        if self.key_condition_expression:
            req["KeyConditionExpression"] = self.key_condition_expression
        if self.filter_expression:
            req["FilterExpression"] = self.filter_expression
        if self.projection_expression:
            req["ProjectionExpression"] = self.projection_expression
        if self.expression_attribute_names:
            req["ExpressionAttributeNames"] = dict(self.expression_attribute_names)
        if self.expression_attribute_values:
            req["ExpressionAttributeValues"] = dict(self.expression_attribute_values)
        return req


def _merge_placeholders(target: dict[str, Any], incoming: Mapping[str, Any], *, kind: str) -> None:
    for ref, value in incoming.items():
        if ref in target:
            if target[ref] != value:
                raise ContractViolation(f"expression attribute {kind} collision: {ref}")
            continue
        target[ref] = value


def build_request(
    table_name: str,
    id_attribute: str,
    *,
    filters: Filters | None = None,
    negation_filters: Filters | None = None,
    fields: Sequence[str] | None = None,
) -> RequestDescriptor:
    validate_table_name(table_name)

    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    filter_expression = ""

    if filters:
        params = build_filter_expression(filters)
        _merge_placeholders(names, params.attribute_names, kind="name")
        _merge_placeholders(values, params.attribute_values, kind="value")
        filter_expression += params.expression

    if negation_filters:
        params = build_filter_expression(negation_filters)
        _merge_placeholders(names, params.attribute_names, kind="name")
        _merge_placeholders(values, params.attribute_values, kind="value")

        negated = f"NOT {params.expression}"
        if filter_expression:
            filter_expression = f"{filter_expression} AND ({negated})"
        else:
            filter_expression = negated

    projection_expression: str | None = None
    if fields is not None:
        projection = build_projection_expression(id_attribute, fields)
        _merge_placeholders(names, projection.attribute_names, kind="name")
        projection_expression = projection.expression

    return RequestDescriptor(
        table_name=table_name,
        filter_expression=filter_expression or None,
        projection_expression=projection_expression,
        expression_attribute_names=names or None,
        expression_attribute_values=values or None,
    )


def with_query(descriptor: RequestDescriptor, query: QueryParameters) -> RequestDescriptor:
    if not query.index_name:
        raise ContractViolation("query requires an index name")
    if not query.key_condition_expression:
        raise ContractViolation("query requires a key condition expression")
    validate_index_name(query.index_name)

    names = dict(descriptor.expression_attribute_names or {})
    values = dict(descriptor.expression_attribute_values or {})
    _merge_placeholders(names, query.expression_attribute_names, kind="name")
    _merge_placeholders(values, query.expression_attribute_values, kind="value")

    return replace(
        descriptor,
        index_name=query.index_name,
        key_condition_expression=query.key_condition_expression,
        expression_attribute_names=names or None,
        expression_attribute_values=values or None,
    )


def build_query_request(
    table_name: str,
    id_attribute: str,
    query: QueryParameters,
    *,
    filters: Filters | None = None,
    negation_filters: Filters | None = None,
    fields: Sequence[str] | None = None,
) -> RequestDescriptor:
    descriptor = build_request(
        table_name,
        id_attribute,
        filters=filters,
        negation_filters=negation_filters,
        fields=fields,
    )
    return with_query(descriptor, query)
