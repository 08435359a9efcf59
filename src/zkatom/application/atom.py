"""
DistributedAtom: a compare-and-swap cell shared through a coordination service.

Writers are serialized by a distributed write lock; readers are not locked
and may observe a value that a concurrent writer is about to replace, but
never a partially written one. Subscribers watch the marker node, which
swap() and reset() touch after every successful write.
"""

import logging
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from zkatom.application.locking import write_locked
from zkatom.application.watches import WatchSubscriptionManager
from zkatom.domain.exceptions import InvalidStateError
from zkatom.domain.interfaces import (
    AtomReferenceInterface,
    CoordinationServiceInterface,
    DistributedLockInterface,
    ValueStoreInterface,
)
from zkatom.domain.models import WatchRegistration

logger = logging.getLogger(__name__)

T = TypeVar("T")

Validator = Callable[[Any], bool]
WatchCallback = Callable[[Hashable, "DistributedAtom[Any]", None, Any], Any]


class DistributedAtom(AtomReferenceInterface[T], Generic[T]):
    """
    Atom whose value lives in a value store shared across processes.

    Every handle on the same path sees the same value. The validator and
    the watch mapping belong to this handle only and are never shared.
    """

    def __init__(
        self,
        service: CoordinationServiceInterface,
        path: str,
        store: ValueStoreInterface[T],
        lock: DistributedLockInterface,
        validator: Validator | None = None,
    ):
        """
        Args:
            service: Coordination service holding the marker node
            path: Marker node path; subscribers watch this node
            store: Where the value itself is kept
            lock: Write lock scoped to this atom
            validator: Optional predicate every written value must satisfy
        """
        self._service = service
        self._path = path
        self._store = store
        self._lock = lock
        self._validator = validator
        self._watches = WatchSubscriptionManager(service, path, self._deliver)

    @property
    def path(self) -> str:
        return self._path

    @property
    def store(self) -> ValueStoreInterface[T]:
        return self._store

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def deref(self) -> T:
        """Current value. Takes no lock, so it may be stale but never torn."""
        return self._store.get()

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def reset(self, new_value: T) -> T:
        """
        Replace the value unconditionally and wake subscribers.

        Raises:
            InvalidStateError: If the validator rejects new_value
        """
        with write_locked(self._lock):
            self._validate(new_value)
            self._store.set(new_value)
            self._watches.signal()
        return new_value

    def swap(self, f: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Replace the value with f(current, *args, **kwargs) and wake subscribers.

        The read-modify-write is atomic with respect to other writers on
        the same path. f runs while the write lock is held.

        Returns:
            The value written

        Raises:
            InvalidStateError: If the validator rejects the result of f
        """
        with write_locked(self._lock):
            new_value = f(self._store.get(), *args, **kwargs)
            self._validate(new_value)
            self._store.set(new_value)
            self._watches.signal()
        return new_value

    def compare_and_set(self, old_value: T, new_value: T) -> bool:
        """
        Replace the value only if it currently equals old_value.

        Values are compared by equality, so a value that changed and changed
        back counts as unchanged. Subscribers are not signalled.

        Raises:
            InvalidStateError: If the validator rejects new_value (checked
                before the lock is taken)
        """
        self._validate(new_value)
        with write_locked(self._lock):
            if self._store.get() != old_value:
                return False
            self._store.set(new_value)
            return True

    # -------------------------------------------------------------------------
    # Watches
    # -------------------------------------------------------------------------

    def add_watch(self, key: Hashable, callback: WatchCallback) -> "DistributedAtom[T]":
        """
        Call callback(key, atom, None, new_value) after every swap or reset.

        The previous value is not known to subscribers and is always None.
        Re-adding a key replaces its callback. Callbacks run on the
        coordination service's delivery thread.
        """
        self._watches.subscribe(key, callback)
        return self

    def remove_watch(self, key: Hashable) -> "DistributedAtom[T]":
        self._watches.unsubscribe(key)
        return self

    def get_watches(self) -> dict[Hashable, WatchCallback]:
        return self._watches.registrations()

    def _deliver(self, registration: WatchRegistration) -> None:
        registration.callback(registration.key, self, None, self.deref())

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def set_validator(self, f: Validator | None) -> None:
        self._validator = f

    def get_validator(self) -> Validator | None:
        return self._validator

    def _validate(self, value: T) -> None:
        validator = self._validator
        if validator is not None and not validator(value):
            logger.warning("Validator rejected value for %s: %r", self._path, value)
            raise InvalidStateError(value)

    def __repr__(self) -> str:
        return f"DistributedAtom(path={self._path!r}, store={self._store!r})"
