"""
Domain layer for distributed atoms.

Contains models, path conventions, exceptions and ports with no external
dependencies.
"""

from zkatom.domain.exceptions import (
    DecodeError,
    EncodeError,
    InvalidStateError,
    LockTimeoutError,
    NoNodeError,
    NotEmptyError,
    StoreWriteError,
    VersionConflictError,
)
from zkatom.domain.interfaces import (
    AtomReferenceInterface,
    CodecInterface,
    CoordinationServiceInterface,
    DistributedLockInterface,
    ValueStoreInterface,
)
from zkatom.domain.models import (
    IGNORE_VERSION,
    SIGNAL_PAYLOAD,
    LockToken,
    NodeStat,
    WatchEvent,
    WatchEventType,
    WatchRegistration,
)

__all__ = [
    # Models
    "IGNORE_VERSION",
    "SIGNAL_PAYLOAD",
    "LockToken",
    "NodeStat",
    "WatchEvent",
    "WatchEventType",
    "WatchRegistration",
    # Interfaces
    "AtomReferenceInterface",
    "CodecInterface",
    "CoordinationServiceInterface",
    "DistributedLockInterface",
    "ValueStoreInterface",
    # Exceptions
    "InvalidStateError",
    "DecodeError",
    "EncodeError",
    "StoreWriteError",
    "LockTimeoutError",
    "NoNodeError",
    "VersionConflictError",
    "NotEmptyError",
]
