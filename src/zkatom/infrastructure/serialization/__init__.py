"""
Codec adapters for atom values.
"""

from zkatom.infrastructure.serialization.codecs import JsonCodec, LiteralCodec

__all__ = [
    "JsonCodec",
    "LiteralCodec",
]
