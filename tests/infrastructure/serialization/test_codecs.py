"""Tests for value codecs."""

import pytest

from zkatom.domain.exceptions import DecodeError, EncodeError
from zkatom.infrastructure.serialization import JsonCodec, LiteralCodec


class TestJsonCodec:
    def test_encodes_compact_sorted_utf8(self) -> None:
        assert JsonCodec().encode({"b": 1, "a": "x"}) == b'{"a":"x","b":1}'

    def test_equal_dicts_encode_equal(self) -> None:
        codec = JsonCodec()
        assert codec.encode({"x": 1, "y": 2}) == codec.encode({"y": 2, "x": 1})

    def test_unsorted_keeps_insertion_order(self) -> None:
        assert JsonCodec(sort_keys=False).encode({"b": 1, "a": 2}) == b'{"b":1,"a":2}'

    @pytest.mark.parametrize(
        "value",
        [(1, 2), {1: "a"}, {"nested": [1, (2, 3)]}, {"k": {2: None}}],
        ids=["tuple", "int-key", "nested-tuple", "nested-int-key"],
    )
    def test_rejects_values_that_read_back_unequal(self, value) -> None:
        with pytest.raises(EncodeError, match="LiteralCodec") as exc_info:
            JsonCodec().encode(value)
        assert exc_info.value.value == value

    def test_rejects_nan(self) -> None:
        with pytest.raises(EncodeError):
            JsonCodec().encode(float("nan"))

    def test_nested_json_value_reads_back_equal(self) -> None:
        codec = JsonCodec()
        value = {"a": {"b": [None, False, 1.5]}}
        assert codec.decode(codec.encode(value)) == value

    def test_unserializable_value(self) -> None:
        value = object()
        with pytest.raises(EncodeError) as exc_info:
            JsonCodec().encode(value)
        assert exc_info.value.value is value

    @pytest.mark.parametrize("data", [b"{", b"\xff\xfe", b"\x00" * 8])
    def test_malformed_bytes(self, data: bytes) -> None:
        with pytest.raises(DecodeError):
            JsonCodec().decode(data)


class TestLiteralCodec:
    def test_keeps_python_literal_types(self) -> None:
        codec = LiteralCodec()
        value = {1: (2, 3), "s": {4}, "b": b"raw", "n": None}
        assert codec.decode(codec.encode(value)) == value

    def test_encodes_repr(self) -> None:
        assert LiteralCodec().encode((1, "a")) == b"(1, 'a')"

    def test_rejects_value_without_literal_form(self) -> None:
        with pytest.raises(EncodeError, match="object"):
            LiteralCodec().encode(object())

    def test_rejects_expressions(self) -> None:
        with pytest.raises(DecodeError):
            LiteralCodec().decode(b"__import__('os')")
