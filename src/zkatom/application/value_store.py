"""
Value store backed by a node of the coordination service.

The default layout keeps an atom's value in a child ``data`` node so that
writing it does not wake watchers of the marker node.
"""

from typing import Generic, TypeVar

from zkatom.domain.exceptions import StoreWriteError
from zkatom.domain.interfaces import (
    CodecInterface,
    CoordinationServiceInterface,
    ValueStoreInterface,
)
from zkatom.domain.models import IGNORE_VERSION

T = TypeVar("T")


class NodeValueStore(ValueStoreInterface[T], Generic[T]):
    """Reads and replaces the whole encoded value held at one node."""

    def __init__(
        self,
        service: CoordinationServiceInterface,
        path: str,
        codec: CodecInterface[T],
    ) -> None:
        self._service = service
        self._path = path
        self._codec = codec

    @property
    def path(self) -> str:
        return self._path

    def get(self) -> T:
        """
        Decode the node's current bytes.

        An empty node has never been written and reads as None.
        """
        data, _ = self._service.read_node(self._path)
        if not data:
            return None  # type: ignore[return-value]
        return self._codec.decode(data)

    def set(self, value: T) -> None:
        data = self._codec.encode(value)
        try:
            self._service.write_node(self._path, data, IGNORE_VERSION)
        except Exception as err:
            raise StoreWriteError(self._path, err) from err

    def __repr__(self) -> str:
        return f"NodeValueStore(path={self._path!r}, codec={self._codec!r})"
