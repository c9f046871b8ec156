from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer

from .exceptions import AttributeSerializationError
from .schema import Schema, WireType, resolve_type


class AttributeCodec:
    """
    Converts plain field maps to and from DynamoDB's tagged attribute format.

    Architectural Note:
    -------------------
    Types come from the record schema, not from the Python value: a field
    declared 'N' is sent as {"N": "<number>"} whatever the caller stored in it.
    The low-level client only accepts strings inside S/N/SS/NS, so those
    payloads are stringified here; binary payloads pass through untouched.
    On the way back N/NS payloads are restored to int (whole) or float, or
    left as Decimal when a float cannot hold every digit.
    """

    def __init__(self) -> None:
        self._deserializer = TypeDeserializer()

    def encode(self, schema: Schema, data: dict[str, Any]) -> dict[str, dict[str, Any]]:
        """Converts {"age": 20} into {"age": {"N": "20"}} using the schema."""
        return {
            k: self.encode_value(resolve_type(schema, k), v, field_name=k) for k, v in data.items()
        }

    def encode_value(
        self, tag: WireType, value: Any, field_name: str | None = None
    ) -> dict[str, Any]:
        """
        Wraps a single value under a wire type tag.
        E.g.: (N, 10.5) -> {'N': '10.5'}
        """
        try:
            if tag in (WireType.S, WireType.N):
                payload: Any = self._scalar_to_str(value)
            elif tag in (WireType.SS, WireType.NS):
                payload = [self._scalar_to_str(v) for v in self._as_list(value)]
            elif tag == WireType.BS:
                payload = self._as_list(value)
            else:
                payload = value
        except TypeError as e:
            raise AttributeSerializationError(
                f"Failed to encode field '{field_name}' as {tag.value}. value={value!r} error={e!s}",
                original_error=e,
            ) from e
        return {tag.value: payload}

    def decode(self, item: dict[str, dict[str, Any]]) -> dict[str, Any]:
        """Converts {"age": {"N": "20"}} back into {"age": 20}."""
        return {k: self._decode_attribute(v) for k, v in item.items()}

    def decode_all(self, items: Iterable[dict[str, dict[str, Any]]]) -> list[dict[str, Any]]:
        return [self.decode(item) for item in items]

    def remove_empty(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Drops fields holding empty values before a write.

        DynamoDB rejects empty strings and empty sets as attribute values, so
        every falsy value (None, "", [], set(), 0, False) is left out of the item.
        """
        return {k: v for k, v in data.items() if v}

    def serialize_cursor(self, last_evaluated_key: dict[str, Any]) -> dict[str, Any]:
        """
        Converts DynamoDB LastEvaluatedKey format to plain Python dict.

        Input:  {"pk": {"S": "value"}, "sk": {"N": "123"}}
        Output: {"pk": "value", "sk": 123}
        """
        return self.decode(last_evaluated_key)

    def deserialize_cursor(self, schema: Schema, cursor: dict[str, Any]) -> dict[str, Any]:
        """
        Converts a plain cursor back to DynamoDB key format.

        Input:  {"pk": "value", "sk": 123}
        Output: {"pk": {"S": "value"}, "sk": {"N": "123"}}
        """
        return self.encode(schema, cursor)

    def _decode_attribute(self, attribute: dict[str, Any]) -> Any:
        # The wire format carries exactly one tag per attribute
        tag, payload = next(iter(attribute.items()))
        if tag == WireType.N.value:
            return self._restore_number(Decimal(payload))
        if tag == WireType.NS.value:
            return [self._restore_number(Decimal(v)) for v in payload]
        if tag in (WireType.S.value, WireType.B.value):
            return payload
        if tag in (WireType.SS.value, WireType.BS.value):
            return list(payload)
        return self._restore_to_python(self._deserializer.deserialize(attribute))

    @staticmethod
    def _scalar_to_str(value: Any) -> str:
        if isinstance(value, (bytes, bytearray, dict, list, set, frozenset, tuple)):
            raise TypeError(f"unsupported scalar type {type(value).__name__}")
        if isinstance(value, float):
            # Go through Decimal to avoid float repr artifacts such as 1e-05
            return str(Decimal(str(value)))
        if isinstance(value, bool):
            return str(int(value))
        return str(value)

    @staticmethod
    def _as_list(value: Any) -> list[Any]:
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        return [value]

    @staticmethod
    def _restore_number(value: Decimal) -> int | float | Decimal:
        if value % 1 == 0:
            return int(value)
        # Keep the Decimal when a float would lose digits
        as_float = float(value)
        if Decimal(str(as_float)) == value:
            return as_float
        return value

    def _restore_to_python(self, value: Any) -> Any:
        """
        Recursively restores values decoded by boto3 to Python-friendly types.

        Converts:
        - Decimal -> int (if whole number), float, or Decimal if a float would round
        - set -> list
        """
        if isinstance(value, Decimal):
            return self._restore_number(value)
        if isinstance(value, (set, frozenset)):
            return [self._restore_to_python(v) for v in value]
        if isinstance(value, list):
            return [self._restore_to_python(v) for v in value]
        if isinstance(value, dict):
            return {k: self._restore_to_python(v) for k, v in value.items()}
        return value
