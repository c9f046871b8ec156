"""
AttributeUpdates support for Kettle.

Builds the legacy ``AttributeUpdates`` map of UpdateItem, where every field
carries an Action (PUT, ADD or DELETE) and a tagged Value:

    {"count": {"Action": "ADD", "Value": {"N": "1"}}}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from .schema import Schema, WireType, resolve_type

if TYPE_CHECKING:
    from .serializer import AttributeCodec


class UpdateAction(str, Enum):
    PUT = "PUT"
    ADD = "ADD"
    DELETE = "DELETE"


# DynamoDB only allows ADD on numbers and sets
_ADDABLE_TYPES = frozenset({WireType.N, WireType.SS, WireType.NS, WireType.BS})


def build_attribute_updates(
    schema: Schema,
    codec: AttributeCodec,
    values: Mapping[str, Any],
    actions: Mapping[str, UpdateAction] | None = None,
    key_fields: Iterable[str] = (),
) -> dict[str, dict[str, Any]]:
    """
    Builds an AttributeUpdates map from plain values.

    Fields default to PUT. Key fields are left out because UpdateItem rejects
    updates to primary key attributes.

    Raises:
        ValueError: If ADD is requested on a field that is not a number or a set
    """
    actions = actions or {}
    skipped = set(key_fields)
    result: dict[str, dict[str, Any]] = {}
    for field_name, value in values.items():
        if field_name in skipped:
            continue
        tag = resolve_type(schema, field_name)
        action = UpdateAction(actions.get(field_name, UpdateAction.PUT))
        if action == UpdateAction.ADD and tag not in _ADDABLE_TYPES:
            raise ValueError(
                f"DynamoDB ADD supports only Numbers and Sets, field '{field_name}' is {tag.value}"
            )
        result[field_name] = {
            "Action": action.value,
            "Value": codec.encode_value(tag, value, field_name=field_name),
        }
    return result
