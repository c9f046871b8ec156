"""
Key condition builder for Kettle queries.

This module accumulates fluent ``where`` predicates and renders them into the
``KeyConditions`` map of the DynamoDB Query API:

    {"age": {"ComparisonOperator": "GT", "AttributeValueList": [{"N": "20"}]}}

Usage:
    builder = ConditionBuilder()
    builder.where_equals("name", "John")
    builder.where_op("age", ">", 20)
    builder.where_op("country", "IN", ["Japan", "Korea"])
    builder.build(schema)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._logging import logger
from .schema import Schema, resolve_type

if TYPE_CHECKING:
    from .serializer import AttributeCodec


class ComparisonOperator(str, Enum):
    """Comparison operators accepted in KeyConditions."""

    EQ = "EQ"
    NE = "NE"
    GT = "GT"
    GE = "GE"
    LT = "LT"
    LE = "LE"
    BETWEEN = "BETWEEN"
    BEGINS_WITH = "BEGINS_WITH"
    CONTAINS = "CONTAINS"
    NOT_CONTAINS = "NOT_CONTAINS"
    IN = "IN"
    NULL = "NULL"
    NOT_NULL = "NOT_NULL"


OPERATOR_ALIASES: dict[str, ComparisonOperator] = {
    "=": ComparisonOperator.EQ,
    "!=": ComparisonOperator.NE,
    ">": ComparisonOperator.GT,
    ">=": ComparisonOperator.GE,
    "<": ComparisonOperator.LT,
    "<=": ComparisonOperator.LE,
    "~": ComparisonOperator.BETWEEN,
    "^": ComparisonOperator.BEGINS_WITH,
}


def normalize_operator(token: str | ComparisonOperator) -> ComparisonOperator:
    """
    Maps an operator token or alias to its canonical ComparisonOperator.

    Unrecognized tokens fall back to EQ and log a warning.
    """
    if isinstance(token, ComparisonOperator):
        return token
    if token in OPERATOR_ALIASES:
        return OPERATOR_ALIASES[token]
    try:
        return ComparisonOperator(token)
    except ValueError:
        logger.warning(
            "Unknown comparison operator, falling back to EQ", extra={"operator": token}
        )
        return ComparisonOperator.EQ


@dataclass(frozen=True)
class Condition:
    """A single (field, operator, values) predicate."""

    field_name: str
    operator: ComparisonOperator
    values: list[Any]


def _as_value_list(value: Any) -> list[Any]:
    # The wire format always carries a value list, even for single-value operators
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


class ConditionBuilder:
    """
    Implements the Builder Pattern for KeyConditions.
    Conditions are kept in call order; build() renders them against a schema.
    """

    def __init__(self) -> None:
        self.conditions: list[Condition] = []

    def where_equals(self, field_name: str, value: Any) -> ConditionBuilder:
        """Adds a field == value condition."""
        return self.where_op(field_name, ComparisonOperator.EQ, value)

    def where_op(
        self, field_name: str, operator: str | ComparisonOperator, value: Any
    ) -> ConditionBuilder:
        """
        Adds a condition with an explicit operator.

        Args:
            field_name: Attribute name
            operator: Canonical token (GT, IN, ...) or alias (>, ~, ^, ...)
            value: Scalar, or a list for IN / BETWEEN
        """
        self.conditions.append(
            Condition(
                field_name=field_name,
                operator=normalize_operator(operator),
                values=_as_value_list(value),
            )
        )
        return self

    def clear(self) -> None:
        self.conditions = []

    def __len__(self) -> int:
        return len(self.conditions)

    def build(self, schema: Schema, codec: AttributeCodec) -> dict[str, dict[str, Any]]:
        """
        Renders the accumulated conditions into a KeyConditions map.

        Every value is stringified before tagging, whatever the declared type.
        A later condition on the same field replaces an earlier one.
        """
        result: dict[str, dict[str, Any]] = {}
        for condition in self.conditions:
            tag = resolve_type(schema, condition.field_name)
            attributes = [
                codec.encode_value(tag, str(v), field_name=condition.field_name)
                for v in condition.values
            ]
            result[condition.field_name] = {
                "ComparisonOperator": condition.operator.value,
                "AttributeValueList": attributes,
            }
        return result
