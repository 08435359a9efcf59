"""
ZooKeeper implementation of the coordination service.

Connects to an ensemble through kazoo. Watches are delivered on kazoo's
event thread; write locks use kazoo's read/write lock recipe.
"""

import logging
import os
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from kazoo.client import KazooClient
from kazoo.exceptions import BadVersionError, LockTimeout, NodeExistsError
from kazoo.exceptions import NoNodeError as KazooNoNodeError
from kazoo.exceptions import NotEmptyError as KazooNotEmptyError

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

logger = logging.getLogger(__name__)

DEFAULT_HOSTS = "127.0.0.1:2181"


@dataclass
class KazooCoordinationConfig:
    """Configuration for KazooCoordinationService.

    This typed config ensures unknown fields are rejected at construction time.
    """

    hosts: str = DEFAULT_HOSTS
    timeout: float = 10.0  # Connection and session timeout
    lock_timeout: float | None = None  # None waits forever
    read_only: bool = False

    @classmethod
    def from_env(cls) -> "KazooCoordinationConfig":
        """Read ZKATOM_HOSTS, ZKATOM_TIMEOUT and ZKATOM_LOCK_TIMEOUT."""
        config = cls()
        if hosts := os.environ.get("ZKATOM_HOSTS"):
            config.hosts = hosts
        if timeout := os.environ.get("ZKATOM_TIMEOUT"):
            config.timeout = float(timeout)
        if lock_timeout := os.environ.get("ZKATOM_LOCK_TIMEOUT"):
            config.lock_timeout = float(lock_timeout)
        return config


def _to_stat(stat: Any) -> NodeStat:
    return NodeStat(version=stat.version, data_length=stat.dataLength)


class KazooCoordinationService(CoordinationServiceInterface):
    """Coordination service backed by a ZooKeeper ensemble."""

    config_class = KazooCoordinationConfig

    def __init__(
        self,
        config: KazooCoordinationConfig | None = None,
        client: KazooClient | None = None,
        **kwargs: Any,
    ):
        """
        Args:
            config: Typed configuration object (preferred)
            client: An existing client to use instead of creating one. Its
                connection lifecycle stays with the caller.
            **kwargs: Config fields, when no config object is given
        """
        if config is None:
            config = KazooCoordinationConfig(**kwargs)

        self._config = config
        self._owns_client = client is None
        if client is None:
            client = KazooClient(
                hosts=config.hosts,
                timeout=config.timeout,
                read_only=config.read_only,
            )
        self._client = client

    @property
    def client(self) -> KazooClient:
        return self._client

    def start(self) -> None:
        """Connect, waiting at most the configured timeout."""
        if self._owns_client:
            logger.debug("Connecting to ZooKeeper at %s", self._config.hosts)
            self._client.start(timeout=self._config.timeout)

    def stop(self) -> None:
        if self._owns_client:
            self._client.stop()
            self._client.close()

    def __enter__(self) -> "KazooCoordinationService":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def create_node(self, path: str, data: bytes = b"", persistent: bool = True) -> bool:
        try:
            self._client.create(path, data, ephemeral=not persistent)
        except NodeExistsError:
            return False
        except KazooNoNodeError as err:
            raise NoNodeError(path) from err
        return True

    def ensure_path(self, path: str) -> str:
        self._client.ensure_path(path)
        return path

    def read_node(self, path: str) -> tuple[bytes, NodeStat]:
        try:
            data, stat = self._client.get(path)
        except KazooNoNodeError as err:
            raise NoNodeError(path) from err
        return data or b"", _to_stat(stat)

    def write_node(self, path: str, data: bytes, version: int = IGNORE_VERSION) -> NodeStat:
        try:
            stat = self._client.set(path, data, version=version)
        except BadVersionError as err:
            raise VersionConflictError(path, version) from err
        except KazooNoNodeError as err:
            raise NoNodeError(path) from err
        return _to_stat(stat)

    def delete_node(self, path: str, recursive: bool = False) -> None:
        try:
            self._client.delete(path, recursive=recursive)
        except KazooNoNodeError as err:
            raise NoNodeError(path) from err
        except KazooNotEmptyError as err:
            raise NotEmptyError(path) from err

    # -------------------------------------------------------------------------
    # Watches and locks
    # -------------------------------------------------------------------------

    def watch_existence(
        self, path: str, on_event: Callable[[WatchEvent], Any]
    ) -> NodeStat | None:
        def relay(event: Any) -> None:
            on_event(
                WatchEvent(
                    event_type=WatchEventType(event.type),
                    path=event.path,
                    state=str(event.state),
                )
            )

        stat = self._client.exists(path, watch=relay)
        return _to_stat(stat) if stat is not None else None

    def write_lock(self, lock_path: str) -> DistributedLockInterface:
        return KazooWriteLock(self._client, lock_path, timeout=self._config.lock_timeout)


class KazooWriteLock(DistributedLockInterface):
    """
    Write half of kazoo's read/write lock recipe.

    Each acquisition uses its own recipe instance, so several local threads
    can contend through one KazooWriteLock.
    """

    def __init__(
        self,
        client: KazooClient,
        path: str,
        timeout: float | None = None,
        identifier: str | None = None,
    ) -> None:
        self._client = client
        self._path = path
        self._timeout = timeout
        self._identifier = identifier
        self._held: dict[str, Any] = {}
        self._mutex = threading.Lock()

    def acquire_write(self) -> LockToken:
        lock = self._client.WriteLock(self._path, self._identifier)
        try:
            lock.acquire(timeout=self._timeout)
        except LockTimeout as err:
            raise LockTimeoutError(self._path, self._timeout) from err
        token = LockToken(path=self._path, holder=str(uuid.uuid4()))
        with self._mutex:
            self._held[token.holder] = lock
        return token

    def release(self, token: LockToken) -> None:
        with self._mutex:
            lock = self._held.pop(token.holder, None)
        if lock is None:
            raise ValueError(f"Lock {self._path} is not held by {token.holder}")
        lock.release()
