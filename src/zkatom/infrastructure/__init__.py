"""
Infrastructure layer for distributed atoms.

Contains adapters for external concerns (coordination services, locks, codecs).
"""

from zkatom.infrastructure.coordination import (
    InMemoryCoordinationService,
    KazooCoordinationConfig,
    KazooCoordinationService,
)
from zkatom.infrastructure.serialization import JsonCodec, LiteralCodec

__all__ = [
    # Coordination
    "InMemoryCoordinationService",
    "KazooCoordinationService",
    "KazooCoordinationConfig",
    # Serialization
    "JsonCodec",
    "LiteralCodec",
]
