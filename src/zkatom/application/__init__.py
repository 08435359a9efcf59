"""
Application layer for distributed atoms.

Contains the atom protocol that coordinates domain ports.
"""

from zkatom.application.atom import DistributedAtom
from zkatom.application.locking import write_locked
from zkatom.application.value_store import NodeValueStore
from zkatom.application.watches import WatchSubscriptionManager

__all__ = [
    "DistributedAtom",
    "NodeValueStore",
    "WatchSubscriptionManager",
    "write_locked",
]
