"""
Unit tests for AttributeCodec.

Tests schema-driven encoding and decoding between plain field maps and the
DynamoDB tagged attribute format.
"""

from decimal import Decimal

import pytest

from kettle.exceptions import AttributeSerializationError
from kettle.schema import WireType
from kettle.serializer import AttributeCodec

SCHEMA = {
    "id": WireType.S,
    "age": WireType.N,
    "score": WireType.N,
    "avatar": WireType.B,
    "tags": WireType.SS,
    "lucky": WireType.NS,
    "blobs": WireType.BS,
}


@pytest.mark.unit
class TestEncode:
    """Test plain -> wire encoding."""

    def setup_method(self) -> None:
        self.codec = AttributeCodec()

    def test_encode_string(self) -> None:
        assert self.codec.encode(SCHEMA, {"id": "u1"}) == {"id": {"S": "u1"}}

    def test_encode_number_is_stringified(self) -> None:
        assert self.codec.encode(SCHEMA, {"age": 20}) == {"age": {"N": "20"}}

    def test_encode_float(self) -> None:
        assert self.codec.encode(SCHEMA, {"score": 95.5}) == {"score": {"N": "95.5"}}

    def test_encode_binary_passes_through(self) -> None:
        assert self.codec.encode(SCHEMA, {"avatar": b"\x00\x01"}) == {"avatar": {"B": b"\x00\x01"}}

    def test_encode_string_set(self) -> None:
        result = self.codec.encode(SCHEMA, {"tags": ["a", "b"]})
        assert result == {"tags": {"SS": ["a", "b"]}}

    def test_encode_number_set(self) -> None:
        result = self.codec.encode(SCHEMA, {"lucky": [7, 13]})
        assert result == {"lucky": {"NS": ["7", "13"]}}

    def test_encode_binary_set(self) -> None:
        result = self.codec.encode(SCHEMA, {"blobs": [b"x", b"y"]})
        assert result == {"blobs": {"BS": [b"x", b"y"]}}

    def test_encode_undeclared_field_uses_string(self) -> None:
        assert self.codec.encode(SCHEMA, {"nickname": "bob"}) == {"nickname": {"S": "bob"}}

    def test_encode_unsupported_value_raises(self) -> None:
        with pytest.raises(AttributeSerializationError, match="Failed to encode field 'id'"):
            self.codec.encode(SCHEMA, {"id": {"nested": "dict"}})


@pytest.mark.unit
class TestDecode:
    """Test wire -> plain decoding."""

    def setup_method(self) -> None:
        self.codec = AttributeCodec()

    def test_decode_strips_tags(self) -> None:
        item = {"id": {"S": "u1"}, "tags": {"SS": ["a", "b"]}, "avatar": {"B": b"\x01"}}
        assert self.codec.decode(item) == {"id": "u1", "tags": ["a", "b"], "avatar": b"\x01"}

    def test_decode_whole_number_to_int(self) -> None:
        result = self.codec.decode({"age": {"N": "20"}})
        assert result == {"age": 20}
        assert isinstance(result["age"], int)

    def test_decode_fraction_to_float(self) -> None:
        result = self.codec.decode({"score": {"N": "95.5"}})
        assert result == {"score": 95.5}
        assert isinstance(result["score"], float)

    def test_decode_number_set(self) -> None:
        assert self.codec.decode({"lucky": {"NS": ["7", "1.5"]}}) == {"lucky": [7, 1.5]}

    def test_decode_keeps_precision_floats_cannot_hold(self) -> None:
        result = self.codec.decode({"balance": {"N": "12345678901234567.25"}})
        assert result == {"balance": Decimal("12345678901234567.25")}
        assert isinstance(result["balance"], Decimal)

    def test_precise_number_round_trip(self) -> None:
        data = {"age": Decimal("0.1000000000000000000001")}
        encoded = self.codec.encode({"age": WireType.N}, data)
        assert encoded == {"age": {"N": "0.1000000000000000000001"}}
        assert self.codec.decode(encoded) == data

    def test_decode_precise_number_set(self) -> None:
        result = self.codec.decode({"lucky": {"NS": ["1.5", "3.14159265358979323846"]}})
        assert result == {"lucky": [1.5, Decimal("3.14159265358979323846")]}

    def test_decode_foreign_tags(self) -> None:
        """Attributes written by other producers still decode."""
        item = {
            "active": {"BOOL": True},
            "missing": {"NULL": True},
            "profile": {"M": {"level": {"N": "3"}, "name": {"S": "x"}}},
            "history": {"L": [{"N": "1"}, {"S": "two"}]},
        }
        assert self.codec.decode(item) == {
            "active": True,
            "missing": None,
            "profile": {"level": 3, "name": "x"},
            "history": [1, "two"],
        }

    def test_decode_all_preserves_order(self) -> None:
        items = [{"id": {"S": "b"}}, {"id": {"S": "a"}}, {"id": {"S": "c"}}]
        assert self.codec.decode_all(items) == [{"id": "b"}, {"id": "a"}, {"id": "c"}]

    def test_decode_all_empty(self) -> None:
        assert self.codec.decode_all([]) == []


@pytest.mark.unit
class TestRoundTrip:
    """decode(encode(schema, data)) gives back data."""

    def test_round_trip_mixed_record(self) -> None:
        codec = AttributeCodec()
        data = {
            "id": "u1",
            "age": 42,
            "score": 7.25,
            "avatar": b"\xff",
            "tags": ["red", "blue"],
            "lucky": [3, 5],
            "blobs": [b"a"],
            "nickname": "undeclared",
        }
        assert codec.decode(codec.encode(SCHEMA, data)) == data


@pytest.mark.unit
class TestRemoveEmpty:
    """Test empty value stripping before writes."""

    def test_falsy_values_are_dropped(self) -> None:
        codec = AttributeCodec()
        data = {
            "id": "u1",
            "name": "",
            "tags": [],
            "nothing": None,
            "flags": set(),
            "age": 0,
        }
        assert codec.remove_empty(data) == {"id": "u1"}

    def test_input_is_not_mutated(self) -> None:
        codec = AttributeCodec()
        data = {"id": "u1", "name": ""}
        codec.remove_empty(data)
        assert data == {"id": "u1", "name": ""}


@pytest.mark.unit
class TestCursor:
    """Test cursor conversion."""

    def test_serialize_cursor_composite_key(self) -> None:
        codec = AttributeCodec()
        raw = {"room_id": {"S": "general"}, "posted_at": {"N": "3"}}
        assert codec.serialize_cursor(raw) == {"room_id": "general", "posted_at": 3}

    def test_deserialize_cursor_uses_schema(self) -> None:
        codec = AttributeCodec()
        schema = {"room_id": WireType.S, "posted_at": WireType.N}
        cursor = {"room_id": "general", "posted_at": 3}
        assert codec.deserialize_cursor(schema, cursor) == {
            "room_id": {"S": "general"},
            "posted_at": {"N": "3"},
        }
