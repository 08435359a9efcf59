"""
Domain interfaces (Ports) for distributed atoms.

These abstract base classes define the contracts that implementations must satisfy.
They have no external dependencies and represent the core domain boundaries.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from zkatom.domain.models import LockToken, NodeStat, WatchEvent

T = TypeVar("T")


class CodecInterface(ABC, Generic[T]):
    """
    Port for value serialization.

    The format is opaque to the rest of the system: the value store only
    needs bytes out and a value back.
    """

    @abstractmethod
    def encode(self, value: T) -> bytes:
        """
        Serialize a value.

        Raises:
            EncodeError: If the value cannot be represented
        """
        pass

    @abstractmethod
    def decode(self, data: bytes) -> T:
        """
        Deserialize bytes produced by encode().

        Raises:
            DecodeError: If the bytes are malformed for this format
        """
        pass


class ValueStoreInterface(ABC, Generic[T]):
    """
    Port for the current value of one atom.

    A typed read/write over an opaque byte container. No locking and no
    comparison logic: the atom serializes writers.
    """

    @abstractmethod
    def get(self) -> T:
        """
        Return the current value.

        Raises:
            DecodeError: If the stored bytes are malformed
        """
        pass

    @abstractmethod
    def set(self, value: T) -> None:
        """
        Unconditionally replace the current value.

        Raises:
            StoreWriteError: If the underlying write fails
        """
        pass


class DistributedLockInterface(ABC):
    """
    Port for a write-exclusive lock scoped to one path.

    Implementations block in acquire_write() and may time out.
    """

    @abstractmethod
    def acquire_write(self) -> "LockToken":
        """
        Block until the write lock is held.

        Returns:
            A token to pass back to release()

        Raises:
            LockTimeoutError: If the lock could not be acquired in time
        """
        pass

    @abstractmethod
    def release(self, token: "LockToken") -> None:
        """Release a lock previously returned by acquire_write()."""
        pass


class CoordinationServiceInterface(ABC):
    """
    Port for a hierarchical, versioned node store with one-shot watches.

    Modelled on ZooKeeper. Paths are absolute and slash separated.
    """

    @abstractmethod
    def create_node(self, path: str, data: bytes = b"", persistent: bool = True) -> bool:
        """
        Create a node.

        Returns:
            True if the node was created, False if it already existed

        Raises:
            NoNodeError: If the parent node does not exist
        """
        pass

    @abstractmethod
    def ensure_path(self, path: str) -> str:
        """
        Create path and any missing ancestors as persistent nodes.

        Returns:
            The path
        """
        pass

    @abstractmethod
    def read_node(self, path: str) -> tuple[bytes, "NodeStat"]:
        """
        Read a node's bytes and metadata.

        Raises:
            NoNodeError: If the node does not exist
        """
        pass

    @abstractmethod
    def write_node(self, path: str, data: bytes, version: int = -1) -> "NodeStat":
        """
        Overwrite a node's bytes.

        Args:
            path: Node to write
            data: New contents
            version: Expected current version, or IGNORE_VERSION

        Returns:
            The node's metadata after the write

        Raises:
            NoNodeError: If the node does not exist
            VersionConflictError: If version does not match
        """
        pass

    @abstractmethod
    def delete_node(self, path: str, recursive: bool = False) -> None:
        """
        Delete a node.

        Raises:
            NoNodeError: If the node does not exist
            NotEmptyError: If the node has children and recursive is False
        """
        pass

    @abstractmethod
    def watch_existence(
        self, path: str, on_event: Callable[["WatchEvent"], Any]
    ) -> "NodeStat | None":
        """
        Register a single-delivery watch on path.

        on_event is called at most once, for the next creation, deletion or
        data change of the node, on a thread owned by the service. The node
        need not exist.

        Returns:
            The node's metadata, or None if it does not exist
        """
        pass

    @abstractmethod
    def write_lock(self, lock_path: str) -> DistributedLockInterface:
        """Build the write half of a distributed read/write lock at lock_path."""
        pass


class AtomReferenceInterface(ABC, Generic[T]):
    """
    Port for a mutable reference with atomic update operations.

    Mirrors an in-process atom: reads are plain, writes are serialized.
    """

    @abstractmethod
    def deref(self) -> T:
        """Return the current value."""
        pass

    @abstractmethod
    def reset(self, new_value: T) -> T:
        """Replace the value unconditionally. Returns new_value."""
        pass

    @abstractmethod
    def swap(self, f: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Replace the value with f(current, *args, **kwargs). Returns the result."""
        pass

    @abstractmethod
    def compare_and_set(self, old_value: T, new_value: T) -> bool:
        """Replace the value only if it equals old_value. Returns whether it did."""
        pass
