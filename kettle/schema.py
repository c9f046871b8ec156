from collections.abc import Mapping
from enum import Enum

from ._logging import logger


class WireType(str, Enum):
    """DynamoDB attribute type tags used by record schemas."""

    S = "S"
    N = "N"
    B = "B"
    SS = "SS"
    NS = "NS"
    BS = "BS"


SET_TYPES = frozenset({WireType.SS, WireType.NS, WireType.BS})

Schema = Mapping[str, WireType]


def normalize_schema(schema: Mapping[str, str | WireType]) -> dict[str, WireType]:
    """
    Converts a declared schema into a field -> WireType dict.

    Raises:
        ValueError: If a tag is not one of S, N, B, SS, NS, BS
    """
    result: dict[str, WireType] = {}
    for field_name, tag in schema.items():
        try:
            result[field_name] = WireType(tag)
        except ValueError as e:
            raise ValueError(f"Unknown type tag {tag!r} for field '{field_name}'") from e
    return result


def resolve_type(schema: Schema, field_name: str) -> WireType:
    """
    Returns the declared wire type of a field.

    Fields absent from the schema resolve to String. Callers rely on this
    (hash keys are often left undeclared), so it is not an error.
    """
    tag = schema.get(field_name)
    if tag is None:
        logger.debug("Field not in schema, using S", extra={"field": field_name})
        return WireType.S
    return tag


def is_set_type(tag: WireType) -> bool:
    return tag in SET_TYPES
