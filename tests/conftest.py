"""Shared pytest fixtures for zkatom tests."""

from collections.abc import Iterator

import pytest

from zkatom.application.atom import DistributedAtom
from zkatom.factory import create_default_atom
from zkatom.infrastructure.coordination.memory import InMemoryCoordinationService


@pytest.fixture
def service() -> Iterator[InMemoryCoordinationService]:
    """Create an in-memory coordination service."""
    svc = InMemoryCoordinationService()
    yield svc
    svc.close()


@pytest.fixture
def atom(service: InMemoryCoordinationService) -> DistributedAtom:
    """Create a default atom at /a1 holding 0."""
    return create_default_atom(service, "/a1", 0)


class WatchRecorder:
    """Collects watch callback invocations."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, key, ref, old, new) -> None:
        self.calls.append((key, ref, old, new))

    @property
    def values(self) -> list:
        return [call[3] for call in self.calls]


@pytest.fixture
def recorder() -> WatchRecorder:
    return WatchRecorder()
