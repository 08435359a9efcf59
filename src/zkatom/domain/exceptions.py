"""
Domain exceptions for distributed atoms.

Validator rejection is the only condition callers are expected to recover
from. The rest describe failures of the value store, the write lock or the
coordination service, translated at the adapter boundary.
"""

from typing import Any


class InvalidStateError(Exception):
    """
    Raised when an atom's validator rejects a candidate value.

    The write lock, if it was held, has already been released and the
    stored value is untouched.
    """

    def __init__(self, value: Any, message: str = "Invalid reference state"):
        """
        Args:
            value: The candidate value the validator rejected
            message: Human-readable error message
        """
        super().__init__(message)
        self.value = value


class DecodeError(Exception):
    """Raised when stored bytes are malformed for the configured codec."""

    def __init__(self, message: str, data: bytes):
        super().__init__(message)
        self.data = data


class EncodeError(Exception):
    """Raised when a value cannot be serialized by the configured codec."""

    def __init__(self, message: str, value: Any):
        super().__init__(message)
        self.value = value


class StoreWriteError(Exception):
    """
    Raised when the value store fails to overwrite its node.

    The store is left in its last-known state. The underlying failure is
    available as ``__cause__``.
    """

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Failed to write value node {path}: {cause}")
        self.path = path


class LockTimeoutError(Exception):
    """Raised when the write lock could not be acquired in time."""

    def __init__(self, path: str, timeout: float | None):
        super().__init__(f"Timed out acquiring write lock {path} after {timeout}s")
        self.path = path
        self.timeout = timeout


class NoNodeError(Exception):
    """Raised when a node required by an operation does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Node does not exist: {path}")
        self.path = path


class VersionConflictError(Exception):
    """Raised when a version-conditioned write does not match the node."""

    def __init__(self, path: str, expected: int, actual: int | None = None):
        super().__init__(
            f"Version conflict on {path}: expected {expected}, found {actual}"
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class NotEmptyError(Exception):
    """Raised when deleting a node that still has children."""

    def __init__(self, path: str):
        super().__init__(f"Node has children: {path}")
        self.path = path
