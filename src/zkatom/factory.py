"""
Construction of distributed atoms.

Layout under an atom's path:

    {path}        marker node, watched by subscribers
    {path}/data   the encoded value (default store)
    {path}/lock   write-lock subtree
"""

import logging
from typing import Any

from zkatom.application.atom import DistributedAtom, Validator
from zkatom.application.value_store import NodeValueStore
from zkatom.domain.interfaces import (
    CodecInterface,
    CoordinationServiceInterface,
    ValueStoreInterface,
)
from zkatom.domain.paths import data_path, lock_path, validate_path
from zkatom.infrastructure.serialization import JsonCodec

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def create_atom(
    service: CoordinationServiceInterface,
    path: str,
    store: ValueStoreInterface[Any],
    validator: Validator | None = None,
) -> DistributedAtom[Any]:
    """
    Bind an atom to path, creating its marker node if absent.

    Idempotent: any number of handles, in any number of processes, may be
    created for the same path.

    Args:
        service: Coordination service holding the nodes
        path: Marker node path; its parent must exist
        store: Where the value is kept
        validator: Optional predicate every written value must satisfy

    Raises:
        NoNodeError: If the parent of path does not exist
    """
    validate_path(path)
    if service.create_node(path, persistent=True):
        logger.debug("Created marker node %s", path)
    lock = service.write_lock(lock_path(path))
    return DistributedAtom(service, path, store, lock, validator=validator)


def create_default_atom(
    service: CoordinationServiceInterface,
    path: str,
    initial_value: Any = _UNSET,
    *,
    codec: CodecInterface[Any] | None = None,
    validator: Validator | None = None,
) -> DistributedAtom[Any]:
    """
    Bind an atom whose value lives in the ``data`` child of path.

    Missing ancestors are created. When initial_value is given the atom is
    reset to it, overwriting whatever another process stored before.

    Args:
        service: Coordination service holding the nodes
        path: Marker node path
        initial_value: Value to reset to after construction
        codec: Value serialization (JsonCodec by default)
        validator: Optional predicate every written value must satisfy
    """
    store = NodeValueStore(
        service, service.ensure_path(data_path(path)), codec or JsonCodec()
    )
    atom = create_atom(service, path, store, validator=validator)
    if initial_value is not _UNSET:
        atom.reset(initial_value)
    return atom
