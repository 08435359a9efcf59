"""
Coordination service adapters.
"""

from zkatom.infrastructure.coordination.memory import (
    InMemoryCoordinationService,
    InMemoryWriteLock,
)
from zkatom.infrastructure.coordination.zookeeper import (
    KazooCoordinationConfig,
    KazooCoordinationService,
    KazooWriteLock,
)

__all__ = [
    "InMemoryCoordinationService",
    "InMemoryWriteLock",
    "KazooCoordinationConfig",
    "KazooCoordinationService",
    "KazooWriteLock",
]
