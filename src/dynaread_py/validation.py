from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

from .errors import ContractViolation

MaxAttributeNameLength = 255

COMPARISON_OPERATORS = ("=", "<", "<=", ">", ">=")
CONDITION_FUNCTIONS = ("attribute_not_exists", "attribute_exists")

_PLACEHOLDER_SAFE = re.compile(r"^[A-Za-z0-9_]+$")
_RESOURCE_NAME = re.compile(r"^[a-zA-Z0-9_.-]+$")


def validate_attribute_name(name: str) -> None:
    if not name:
        raise ContractViolation("attribute name cannot be empty")
    if len(name) > MaxAttributeNameLength:
        raise ContractViolation(f"attribute name exceeds maximum length: {name[:32]}...")
    # Placeholders are derived from the name itself (#name, :name0).
    if _PLACEHOLDER_SAFE.match(name) is None:
        raise ContractViolation(
            f"attribute name must contain only alphanumeric characters and underscores: {name!r}"
        )


def validate_operator(op: str) -> None:
    if op not in COMPARISON_OPERATORS:
        raise ContractViolation(f"unsupported comparison operator: {op!r}")


def validate_condition_function(fn: str) -> None:
    if fn not in CONDITION_FUNCTIONS:
        raise ContractViolation(f"unsupported condition function: {fn!r}")


def validate_table_name(name: str) -> None:
    if len(name) < 3 or len(name) > 255:
        raise ContractViolation(f"table name length invalid: {name!r}")
    if _RESOURCE_NAME.match(name) is None:
        raise ContractViolation(f"table name contains invalid characters: {name!r}")


def validate_index_name(name: str) -> None:
    if len(name) < 3 or len(name) > 255:
        raise ContractViolation(f"index name length invalid: {name!r}")
    if _RESOURCE_NAME.match(name) is None:
        raise ContractViolation(f"index name contains invalid characters: {name!r}")


def validate_filter_value(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
        raise ContractViolation(f"comparison filter value must be a string or number: {value!r}")
    # DynamoDB numbers have no NaN or Infinity.
    if isinstance(value, float) and not math.isfinite(value):
        raise ContractViolation(f"comparison filter value must be finite: {value!r}")
    if isinstance(value, Decimal) and not value.is_finite():
        raise ContractViolation(f"comparison filter value must be finite: {value!r}")
