"""
zkatom: distributed atomic references over ZooKeeper.

A mutable value identified by a node path that many processes can read,
replace and conditionally update with the semantics of an in-process atom,
plus change notification.

Example:
    from zkatom import KazooCoordinationService, create_default_atom

    with KazooCoordinationService(hosts="127.0.0.1:2181") as service:
        counter = create_default_atom(service, "/counter", 0)
        counter.swap(lambda v: v + 1)
        counter.add_watch("log", lambda key, atom, old, new: print(new))
"""

from zkatom.application import (
    DistributedAtom,
    NodeValueStore,
    WatchSubscriptionManager,
)
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
from zkatom.factory import create_atom, create_default_atom
from zkatom.infrastructure import (
    InMemoryCoordinationService,
    JsonCodec,
    KazooCoordinationConfig,
    KazooCoordinationService,
    LiteralCodec,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Construction
    "create_atom",
    "create_default_atom",
    # Application layer
    "DistributedAtom",
    "NodeValueStore",
    "WatchSubscriptionManager",
    # Domain interfaces
    "AtomReferenceInterface",
    "CodecInterface",
    "CoordinationServiceInterface",
    "DistributedLockInterface",
    "ValueStoreInterface",
    # Domain exceptions
    "InvalidStateError",
    "DecodeError",
    "EncodeError",
    "StoreWriteError",
    "LockTimeoutError",
    "NoNodeError",
    "VersionConflictError",
    "NotEmptyError",
    # Infrastructure
    "InMemoryCoordinationService",
    "KazooCoordinationService",
    "KazooCoordinationConfig",
    "JsonCodec",
    "LiteralCodec",
]
