from __future__ import annotations

from decimal import Decimal

import pytest

from dynaread_py import ComparisonFilter, ContractViolation, FunctionFilter, parse_filters


def test_parse_filters_reads_json_shapes() -> None:
    parsed = parse_filters(
        {
            "age": [{"operator": ">", "value": 18}, {"operator": "<", "value": Decimal("65.5")}],
            "deletedAt": [{"conditionFunction": "attribute_not_exists"}],
        }
    )

    assert parsed == {
        "age": [ComparisonFilter(">", 18), ComparisonFilter("<", Decimal("65.5"))],
        "deletedAt": [FunctionFilter("attribute_not_exists")],
    }


def test_parse_filters_passes_typed_predicates_through() -> None:
    eq = ComparisonFilter.eq("x")
    assert parse_filters({"a": [eq]}) == {"a": [eq]}


def test_parse_filters_none_is_none() -> None:
    assert parse_filters(None) is None


@pytest.mark.parametrize(
    "raw",
    [
        {"a": [{"operator": "!=", "value": 1}]},
        {"a": [{"operator": "=", "value": True}]},
        {"a": [{"operator": "="}]},
        {"a": [{"conditionFunction": "contains"}]},
        {"a": [{"operator": "=", "value": 1, "conditionFunction": "attribute_not_exists"}]},
        {"a": [{"value": 1}]},
        {"a": "x"},
    ],
)
def test_parse_filters_rejects_malformed_input(raw: dict) -> None:
    with pytest.raises(ContractViolation):
        parse_filters(raw)


def test_typed_constructors_validate_operator() -> None:
    with pytest.raises(ContractViolation, match="unsupported comparison operator"):
        ComparisonFilter(operator="<>", value=1)  # type: ignore[arg-type]


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), Decimal("NaN"), Decimal("Infinity")])
def test_comparison_filter_rejects_non_finite_numbers(value: object) -> None:
    with pytest.raises(ContractViolation, match="must be finite"):
        ComparisonFilter.gt(value)  # type: ignore[arg-type]

    with pytest.raises(ContractViolation, match="must be finite"):
        parse_filters({"score": [{"operator": ">", "value": value}]})


def test_comparison_filter_rejects_non_scalar_values() -> None:
    with pytest.raises(ContractViolation, match="string or number"):
        ComparisonFilter.eq(["a", "b"])  # type: ignore[arg-type]
