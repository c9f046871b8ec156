from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .schema import Schema, resolve_type

if TYPE_CHECKING:
    from .serializer import AttributeCodec


def build_expected(
    schema: Schema,
    codec: AttributeCodec,
    expected_values: Mapping[str, Any] | None = None,
    exists_flags: Mapping[str, bool] | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Builds the Expected clause of a conditional write.

    Value expectations and existence expectations are independent: a field may
    carry a Value, an Exists flag, or both.

    Args:
        schema: Record schema used to tag expected values
        codec: Codec used to encode the values
        expected_values: field -> value the stored item must currently hold
        exists_flags: field -> whether the attribute must currently exist

    Returns:
        {"version": {"Value": {"N": "3"}}, "id": {"Exists": False}}
    """
    result: dict[str, dict[str, Any]] = {}
    for field_name, value in (expected_values or {}).items():
        tag = resolve_type(schema, field_name)
        result[field_name] = {"Value": codec.encode_value(tag, value, field_name=field_name)}
    for field_name, exists in (exists_flags or {}).items():
        result.setdefault(field_name, {})["Exists"] = exists
    return result
