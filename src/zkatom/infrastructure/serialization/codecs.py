"""
Value codecs.

JsonCodec is the default: it is readable by any ZooKeeper client in any
language. It refuses values that would read back as something unequal
(tuples, non-string keys), since compare_and_set matches on equality.
LiteralCodec stores those Python literals as they are.
"""

import ast
import json
from typing import Any

from zkatom.domain.exceptions import DecodeError, EncodeError
from zkatom.domain.interfaces import CodecInterface


class JsonCodec(CodecInterface[Any]):
    """
    UTF-8 JSON with sorted keys, so equal dicts encode to equal bytes.

    Only values that decode back to an equal value are accepted.
    """

    def __init__(self, sort_keys: bool = True) -> None:
        self._sort_keys = sort_keys

    def encode(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                sort_keys=self._sort_keys,
                separators=(",", ":"),
                allow_nan=False,
            )
        except (TypeError, ValueError) as err:
            raise EncodeError(f"Value is not JSON serializable: {err}", value) from err
        if json.loads(text) != value:
            raise EncodeError(
                "Value would not read back equal from JSON "
                "(tuple or non-string key?); use LiteralCodec",
                value,
            )
        return text.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            raise DecodeError(f"Malformed JSON value: {err}", data) from err

    def __repr__(self) -> str:
        return "JsonCodec()"


class LiteralCodec(CodecInterface[Any]):
    """repr() on the way in, ast.literal_eval() on the way out."""

    def encode(self, value: Any) -> bytes:
        text = repr(value)
        try:
            ast.literal_eval(text)
        except (ValueError, SyntaxError) as err:
            raise EncodeError(
                f"Value has no literal representation: {type(value).__name__}", value
            ) from err
        return text.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return ast.literal_eval(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, SyntaxError) as err:
            raise DecodeError(f"Malformed literal value: {err}", data) from err

    def __repr__(self) -> str:
        return "LiteralCodec()"
