"""
Watch subscription manager.

The coordination service delivers a single event per registered watch. This
turns that into a standing subscription: every watcher re-registers itself
after each delivery, and writers wake subscribers with an explicit signal
write to the marker node.

A write landing between a delivery and the watcher's re-registration is not
observed. That window is inherent to the one-shot primitive and is accepted.
"""

import logging
import threading
from collections.abc import Callable, Hashable
from typing import Any

from zkatom.domain.interfaces import CoordinationServiceInterface
from zkatom.domain.models import (
    IGNORE_VERSION,
    SIGNAL_PAYLOAD,
    WatchEvent,
    WatchEventType,
    WatchRegistration,
)

logger = logging.getLogger(__name__)


class WatchSubscriptionManager:
    """
    Keeps subscriber callbacks armed against one marker node.

    The mapping of keys to registrations is process-local. ``notify`` is
    invoked on the service's delivery thread for every data change seen by
    a current registration.
    """

    def __init__(
        self,
        service: CoordinationServiceInterface,
        marker_path: str,
        notify: Callable[[WatchRegistration], Any],
    ) -> None:
        self._service = service
        self._path = marker_path
        self._notify = notify
        self._registrations: dict[Hashable, WatchRegistration] = {}
        self._mutex = threading.Lock()

    def signal(self) -> None:
        """Wake every watcher of the marker node."""
        self._service.write_node(self._path, SIGNAL_PAYLOAD, IGNORE_VERSION)
        logger.debug("Signalled watchers of %s", self._path)

    def subscribe(self, key: Hashable, callback: Callable[..., Any]) -> None:
        """
        Register callback under key, replacing any previous registration.

        The replaced registration's watcher retires on its next delivery.
        If the watch cannot be registered the previous registration, if
        any, is put back and the error propagates.
        """
        registration = WatchRegistration(key=key, callback=callback)
        with self._mutex:
            previous = self._registrations.get(key)
            self._registrations[key] = registration

        def watcher(event: WatchEvent) -> None:
            if not self._is_current(registration):
                logger.debug("Watch %r on %s retired", key, self._path)
                return
            if event.event_type == WatchEventType.CHANGED:
                try:
                    self._notify(registration)
                except Exception:
                    logger.exception(
                        "Watch callback %r on %s failed", key, self._path
                    )
            self._rearm(watcher, key)

        try:
            self._service.watch_existence(self._path, watcher)
        except Exception:
            with self._mutex:
                if self._registrations.get(key) is registration:
                    if previous is None:
                        del self._registrations[key]
                    else:
                        self._registrations[key] = previous
            raise
        logger.debug("Watch %r armed on %s", key, self._path)

    def unsubscribe(self, key: Hashable) -> None:
        with self._mutex:
            self._registrations.pop(key, None)

    def registrations(self) -> dict[Hashable, Callable[..., Any]]:
        """Snapshot of subscribed keys and their callbacks."""
        with self._mutex:
            return {k: r.callback for k, r in self._registrations.items()}

    def _is_current(self, registration: WatchRegistration) -> bool:
        with self._mutex:
            return self._registrations.get(registration.key) is registration

    def _rearm(self, watcher: Callable[[WatchEvent], None], key: Hashable) -> None:
        try:
            self._service.watch_existence(self._path, watcher)
        except Exception:
            logger.exception("Could not re-arm watch %r on %s", key, self._path)
