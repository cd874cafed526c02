from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import ContractViolation
from .filters import ComparisonFilter, Filters, FunctionFilter
from .validation import validate_attribute_name


@dataclass(frozen=True)
class FilterParams:
    expression: str
    attribute_names: dict[str, str] = field(default_factory=dict)
    attribute_values: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProjectionParams:
    expression: str
    attribute_names: dict[str, str] = field(default_factory=dict)


def build_filter_expression(filters: Filters) -> FilterParams:
    """Compile attribute predicates into a filter expression.

    Predicates on the same attribute are OR-ed inside one parenthesized
    group; groups are AND-ed in mapping order. With more than one attribute
    the whole expression gets an extra pair of parentheses so it can be
    combined with a negated group; a single group is left as-is because
    DynamoDB rejects the doubly wrapped form.
    """
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    groups: list[str] = []

    for attribute, predicates in filters.items():
        validate_attribute_name(attribute)
        if not predicates:
            raise ContractViolation(f"filter on {attribute!r} has no predicates")

        name_ref = f"#{attribute}"
        names[name_ref] = attribute

        terms: list[str] = []
        for i, predicate in enumerate(predicates):
            if isinstance(predicate, ComparisonFilter):
                value_ref = f":{attribute}{i}"
                if value_ref in values:
                    raise ContractViolation(f"expression attribute value collision: {value_ref}")
                values[value_ref] = predicate.value
                terms.append(f"{name_ref} {predicate.operator} {value_ref}")
            elif isinstance(predicate, FunctionFilter):
                terms.append(f"{predicate.condition_function}({name_ref})")
            else:
                raise ContractViolation(f"invalid filter expression for {attribute!r}: {predicate!r}")

        groups.append("(" + " OR ".join(terms) + " )")

    expression = " AND ".join(groups)
    if len(groups) > 1:
        expression = f"({expression} )"

    return FilterParams(expression=expression, attribute_names=names, attribute_values=values)


def build_projection_expression(id_attribute: str, fields: Sequence[str] | None) -> ProjectionParams:
    projected = list(fields or ())
    if id_attribute not in projected:
        projected.append(id_attribute)

    names: dict[str, str] = {}
    refs: list[str] = []
    for field_name in projected:
        validate_attribute_name(field_name)
        ref = f"#{field_name}"
        # DynamoDB rejects a projection that names the same attribute twice.
        if ref in names:
            continue
        names[ref] = field_name
        refs.append(ref)

    return ProjectionParams(expression=",".join(refs), attribute_names=names)
