"""Scoped acquisition of a distributed write lock."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from zkatom.domain.interfaces import DistributedLockInterface
from zkatom.domain.models import LockToken

logger = logging.getLogger(__name__)


@contextmanager
def write_locked(lock: DistributedLockInterface) -> Iterator[LockToken]:
    """
    Hold the write lock for the duration of the block.

    The lock is released on every exit path. If acquisition fails the
    error propagates and the block never runs.
    """
    token = lock.acquire_write()
    logger.debug("Acquired write lock %s (%s)", token.path, token.holder)
    try:
        yield token
    finally:
        lock.release(token)
        logger.debug("Released write lock %s (%s)", token.path, token.holder)
