"""
In-memory implementation of the coordination service.

Useful for testing and single-process use. Behaves like a ZooKeeper
ensemble seen through one session: versioned nodes, one-shot watches
delivered in order on a dedicated thread, and write locks shared by every
handle built from the same service instance.
"""

import logging
import queue
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from zkatom.domain.exceptions import (
    LockTimeoutError,
    NoNodeError,
    NotEmptyError,
    VersionConflictError,
)
from zkatom.domain.interfaces import (
    CoordinationServiceInterface,
    DistributedLockInterface,
)
from zkatom.domain.models import (
    IGNORE_VERSION,
    LockToken,
    NodeStat,
    WatchEvent,
    WatchEventType,
)
from zkatom.domain.paths import ancestors, parent_path, validate_path

logger = logging.getLogger(__name__)

Watcher = Callable[[WatchEvent], Any]

_STOP = object()


@dataclass
class _Node:
    data: bytes
    version: int = 0
    persistent: bool = True

    def stat(self) -> NodeStat:
        return NodeStat(version=self.version, data_length=len(self.data))


class InMemoryCoordinationService(CoordinationServiceInterface):
    """Thread-safe node tree with asynchronous one-shot watches."""

    def __init__(self, lock_timeout: float | None = None) -> None:
        """
        Args:
            lock_timeout: Seconds a write lock waits before giving up
                (None waits forever)
        """
        self._nodes: dict[str, _Node] = {"/": _Node(b"")}
        self._watches: dict[str, list[Watcher]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._mutex = threading.RLock()
        self._lock_timeout = lock_timeout
        self._closed = False

        self._events: queue.Queue[Any] = queue.Queue()
        self._pending = 0
        self._idle = threading.Condition()
        self._dispatcher = threading.Thread(
            target=self._dispatch, name="zkatom-memory-events", daemon=True
        )
        self._dispatcher.start()

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def create_node(self, path: str, data: bytes = b"", persistent: bool = True) -> bool:
        validate_path(path)
        with self._mutex:
            if path in self._nodes:
                return False
            if parent_path(path) not in self._nodes:
                raise NoNodeError(parent_path(path))
            self._nodes[path] = _Node(data, persistent=persistent)
            self._fire(path, WatchEventType.CREATED)
        return True

    def ensure_path(self, path: str) -> str:
        with self._mutex:
            for ancestor in ancestors(path):
                self.create_node(ancestor)
            self.create_node(path)
        return path

    def read_node(self, path: str) -> tuple[bytes, NodeStat]:
        with self._mutex:
            node = self._get(path)
            return node.data, node.stat()

    def write_node(self, path: str, data: bytes, version: int = IGNORE_VERSION) -> NodeStat:
        with self._mutex:
            node = self._get(path)
            if version != IGNORE_VERSION and version != node.version:
                raise VersionConflictError(path, version, node.version)
            node.data = data
            node.version += 1
            self._fire(path, WatchEventType.CHANGED)
            return node.stat()

    def delete_node(self, path: str, recursive: bool = False) -> None:
        with self._mutex:
            self._get(path)
            children = self._children(path)
            if children and not recursive:
                raise NotEmptyError(path)
            # Deepest first, like a recursive ZooKeeper delete.
            for child in sorted(children, key=len, reverse=True):
                del self._nodes[child]
                self._fire(child, WatchEventType.DELETED)
            del self._nodes[path]
            self._fire(path, WatchEventType.DELETED)

    def exists(self, path: str) -> bool:
        with self._mutex:
            return path in self._nodes

    def _get(self, path: str) -> _Node:
        node = self._nodes.get(validate_path(path))
        if node is None:
            raise NoNodeError(path)
        return node

    def _children(self, path: str) -> list[str]:
        prefix = "/" if path == "/" else path + "/"
        return [p for p in self._nodes if p != path and p.startswith(prefix)]

    # -------------------------------------------------------------------------
    # Watches
    # -------------------------------------------------------------------------

    def watch_existence(self, path: str, on_event: Watcher) -> NodeStat | None:
        validate_path(path)
        with self._mutex:
            watchers = self._watches.setdefault(path, [])
            # The same watcher is only delivered once per event.
            if on_event not in watchers:
                watchers.append(on_event)
            node = self._nodes.get(path)
            return node.stat() if node else None

    def drain(self, timeout: float | None = None) -> bool:
        """
        Wait until every queued watch delivery has run.

        Returns:
            False if the timeout expired first
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    def close(self) -> None:
        """
        Stop the delivery thread. Pending deliveries still run.

        Watches firing after close are dropped.
        """
        with self._mutex:
            self._closed = True
        if self._dispatcher.is_alive():
            self._events.put(_STOP)
            self._dispatcher.join()

    def _fire(self, path: str, event_type: WatchEventType) -> None:
        watchers = self._watches.pop(path, [])
        if not watchers or self._closed:
            return
        event = WatchEvent(event_type=event_type, path=path)
        with self._idle:
            self._pending += len(watchers)
        for watcher in watchers:
            self._events.put((watcher, event))

    def _dispatch(self) -> None:
        while True:
            item = self._events.get()
            if item is _STOP:
                return
            watcher, event = item
            try:
                watcher(event)
            except Exception:
                logger.exception("Watcher for %s raised", event.path)
            finally:
                with self._idle:
                    self._pending -= 1
                    self._idle.notify_all()

    # -------------------------------------------------------------------------
    # Locks
    # -------------------------------------------------------------------------

    def write_lock(self, lock_path: str) -> DistributedLockInterface:
        validate_path(lock_path)
        with self._mutex:
            mutex = self._locks.setdefault(lock_path, threading.Lock())
        return InMemoryWriteLock(lock_path, mutex, timeout=self._lock_timeout)

    def __enter__(self) -> "InMemoryCoordinationService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class InMemoryWriteLock(DistributedLockInterface):
    """Write lock over a threading.Lock shared per lock path."""

    def __init__(
        self, path: str, mutex: threading.Lock, timeout: float | None = None
    ) -> None:
        self._path = path
        self._mutex = mutex
        self._timeout = timeout
        self._holders: set[str] = set()

    def acquire_write(self) -> LockToken:
        timeout = -1 if self._timeout is None else self._timeout
        if not self._mutex.acquire(timeout=timeout):
            raise LockTimeoutError(self._path, self._timeout)
        token = LockToken(path=self._path, holder=str(uuid.uuid4()))
        self._holders.add(token.holder)
        return token

    def release(self, token: LockToken) -> None:
        if token.holder not in self._holders:
            raise ValueError(f"Lock {self._path} is not held by {token.holder}")
        self._holders.discard(token.holder)
        self._mutex.release()
