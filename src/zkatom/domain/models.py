"""
Domain models for distributed atoms.

Pure data structures shared by the ports and their adapters.
All models are immutable (frozen dataclasses).
"""

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Passed as the expected version for unconditional writes.
IGNORE_VERSION = -1

# Written to the marker node to wake watchers; the content is never read.
SIGNAL_PAYLOAD = (0).to_bytes(8, "big")


# =============================================================================
# NODES
# =============================================================================


@dataclass(frozen=True)
class NodeStat:
    """Metadata returned alongside a node's bytes."""

    version: int  # Bumped on every data write
    data_length: int = 0


# =============================================================================
# WATCHES
# =============================================================================


class WatchEventType(str, Enum):
    """Types of one-shot watch notifications."""

    CREATED = "CREATED"
    DELETED = "DELETED"
    CHANGED = "CHANGED"
    CHILD = "CHILD"
    NONE = "NONE"


@dataclass(frozen=True)
class WatchEvent:
    """A single watch delivery from the coordination service."""

    event_type: WatchEventType
    path: str
    state: str = "CONNECTED"


@dataclass(frozen=True, eq=False)
class WatchRegistration:
    """
    A subscriber key bound to its callback.

    Compared by identity: a watcher stays armed only while this exact
    registration is the one mapped to its key.
    """

    key: Hashable
    callback: Callable[..., Any]


# =============================================================================
# LOCKS
# =============================================================================


@dataclass(frozen=True)
class LockToken:
    """Proof of one write-lock acquisition, handed back on release."""

    path: str
    holder: str  # Unique per acquisition
