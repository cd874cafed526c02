from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal

from .errors import ContractViolation
from .validation import validate_condition_function, validate_filter_value, validate_operator

type ComparisonOperator = Literal["=", "<", "<=", ">", ">="]
type ConditionFunction = Literal["attribute_not_exists", "attribute_exists"]
type FilterValue = str | int | float | Decimal


@dataclass(frozen=True)
class ComparisonFilter:
    operator: ComparisonOperator
    value: FilterValue

    def __post_init__(self) -> None:
        validate_operator(self.operator)
        validate_filter_value(self.value)

    @staticmethod
    def eq(value: FilterValue) -> ComparisonFilter:
        return ComparisonFilter(operator="=", value=value)

    @staticmethod
    def lt(value: FilterValue) -> ComparisonFilter:
        return ComparisonFilter(operator="<", value=value)

    @staticmethod
    def lte(value: FilterValue) -> ComparisonFilter:
        return ComparisonFilter(operator="<=", value=value)

    @staticmethod
    def gt(value: FilterValue) -> ComparisonFilter:
        return ComparisonFilter(operator=">", value=value)

    @staticmethod
    def gte(value: FilterValue) -> ComparisonFilter:
        return ComparisonFilter(operator=">=", value=value)


@dataclass(frozen=True)
class FunctionFilter:
    condition_function: ConditionFunction = "attribute_not_exists"

    def __post_init__(self) -> None:
        validate_condition_function(self.condition_function)

    @staticmethod
    def not_exists() -> FunctionFilter:
        return FunctionFilter(condition_function="attribute_not_exists")

    @staticmethod
    def exists() -> FunctionFilter:
        return FunctionFilter(condition_function="attribute_exists")


type FilterExpression = ComparisonFilter | FunctionFilter
type Filters = Mapping[str, Sequence[FilterExpression]]


def parse_filter_expression(raw: Any) -> FilterExpression:
    """Convert one JSON-shaped predicate into its typed form.

    Accepts ``{"operator": ">", "value": 18}`` or
    ``{"conditionFunction": "attribute_not_exists"}``. Already-typed
    predicates are returned unchanged.
    """
    if isinstance(raw, (ComparisonFilter, FunctionFilter)):
        return raw
    if not isinstance(raw, Mapping):
        raise ContractViolation(f"filter expression must be a mapping, got {type(raw).__name__}")

    if "operator" in raw and "conditionFunction" in raw:
        raise ContractViolation("filter expression cannot have both operator and conditionFunction")

    if "operator" in raw:
        if "value" not in raw:
            raise ContractViolation("comparison filter requires a value")
        return ComparisonFilter(operator=raw["operator"], value=raw["value"])

    if "conditionFunction" in raw:
        return FunctionFilter(condition_function=raw["conditionFunction"])

    raise ContractViolation(f"unrecognised filter expression: {dict(raw)!r}")


def parse_filters(raw: Mapping[str, Any] | None) -> dict[str, list[FilterExpression]] | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ContractViolation("filters must be a mapping of attribute name to predicates")

    out: dict[str, list[FilterExpression]] = {}
    for attribute, predicates in raw.items():
        if isinstance(predicates, (str, bytes)) or not isinstance(predicates, Sequence):
            raise ContractViolation(f"predicates for {attribute!r} must be a list")
        out[str(attribute)] = [parse_filter_expression(p) for p in predicates]
    return out
