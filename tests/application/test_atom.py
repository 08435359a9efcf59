"""Tests for DistributedAtom reads and writes."""

import threading
from collections.abc import Iterator

import pytest

from zkatom.application.atom import DistributedAtom
from zkatom.domain.exceptions import EncodeError, InvalidStateError, LockTimeoutError
from zkatom.factory import create_default_atom
from zkatom.infrastructure.coordination.memory import InMemoryCoordinationService


@pytest.fixture
def timed_service() -> Iterator[InMemoryCoordinationService]:
    """Service whose write locks give up after a short wait."""
    svc = InMemoryCoordinationService(lock_timeout=0.2)
    yield svc
    svc.close()


def hold_write_lock(atom: DistributedAtom) -> tuple[threading.Event, threading.Event, threading.Thread]:
    """Start a swap that parks inside the critical section.

    Returns (entered, release, thread): entered is set once the lock is held,
    setting release lets the swap finish with value + 1.
    """
    entered = threading.Event()
    release = threading.Event()

    def slow_increment(value):
        entered.set()
        release.wait(5)
        return value + 1

    thread = threading.Thread(target=atom.swap, args=(slow_increment,))
    thread.start()
    assert entered.wait(5)
    return entered, release, thread


class TestDeref:
    def test_returns_stored_value(self, atom: DistributedAtom) -> None:
        assert atom.deref() == 0

    def test_does_not_wait_for_writers(self, atom: DistributedAtom) -> None:
        """A swap parked inside the lock does not delay readers."""
        _, release, thread = hold_write_lock(atom)
        try:
            assert atom.deref() == 0
        finally:
            release.set()
            thread.join(5)
        assert atom.deref() == 1


class TestReset:
    def test_returns_new_value(self, atom: DistributedAtom) -> None:
        assert atom.reset(42) == 42
        assert atom.deref() == 42

    def test_replaces_whole_value(self, service: InMemoryCoordinationService) -> None:
        doc = create_default_atom(service, "/doc", {"a": 1, "b": 2})
        doc.reset({"c": 3})
        assert doc.deref() == {"c": 3}

    def test_validator_rejection_leaves_value(self, atom: DistributedAtom) -> None:
        atom.set_validator(lambda v: v >= 0)
        with pytest.raises(InvalidStateError) as exc_info:
            atom.reset(-1)
        assert exc_info.value.value == -1
        assert atom.deref() == 0

    def test_validator_rejection_releases_lock(
        self, timed_service: InMemoryCoordinationService
    ) -> None:
        atom = create_default_atom(timed_service, "/a1", 0, validator=lambda v: v >= 0)
        with pytest.raises(InvalidStateError):
            atom.reset(-1)
        # Would time out if the rejected reset still held the lock.
        assert atom.reset(3) == 3


class TestSwap:
    def test_applies_function_to_current_value(self, atom: DistributedAtom) -> None:
        assert atom.swap(lambda v: v + 1) == 1
        assert atom.deref() == 1

    def test_passes_extra_arguments(self, atom: DistributedAtom) -> None:
        assert atom.swap(lambda v, a, b: v + a * b, 3, 4) == 12

    def test_passes_keyword_arguments(self, service: InMemoryCoordinationService) -> None:
        doc = create_default_atom(service, "/doc", {})
        doc.swap(lambda d, **kw: {**d, **kw}, a=1)
        assert doc.deref() == {"a": 1}

    def test_validator_rejection_leaves_value(self, atom: DistributedAtom) -> None:
        atom.reset(5)
        atom.set_validator(lambda v: v >= 0)
        with pytest.raises(InvalidStateError):
            atom.swap(lambda v: v - 100)
        assert atom.deref() == 5

    def test_function_error_propagates_and_releases_lock(
        self, timed_service: InMemoryCoordinationService
    ) -> None:
        atom = create_default_atom(timed_service, "/a1", 0)

        def boom(value):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            atom.swap(boom)
        assert atom.deref() == 0
        assert atom.swap(lambda v: v + 1) == 1

    def test_concurrent_swaps_are_serialized(
        self, service: InMemoryCoordinationService
    ) -> None:
        """N handles swapping once each leave exactly N; readers see only ints."""
        n = 20
        handles = [create_default_atom(service, "/counter") for _ in range(n)]
        handles[0].reset(0)
        start = threading.Barrier(n + 1)
        stop = threading.Event()
        observed: list = []

        def writer(handle: DistributedAtom) -> None:
            start.wait()
            handle.swap(lambda v: v + 1)

        def reader() -> None:
            start.wait()
            while not stop.is_set():
                observed.append(handles[0].deref())

        threads = [threading.Thread(target=writer, args=(h,)) for h in handles]
        reader_thread = threading.Thread(target=reader)
        for t in [*threads, reader_thread]:
            t.start()
        for t in threads:
            t.join(10)
        stop.set()
        reader_thread.join(10)

        assert handles[0].deref() == n
        assert all(isinstance(v, int) and 0 <= v <= n for v in observed)
        assert observed == sorted(observed)


class TestCompareAndSet:
    def test_success_then_failure(self, atom: DistributedAtom) -> None:
        atom.reset(5)
        assert atom.compare_and_set(5, 6) is True
        assert atom.deref() == 6
        assert atom.compare_and_set(5, 7) is False
        assert atom.deref() == 6

    def test_compares_by_value_equality(self, service: InMemoryCoordinationService) -> None:
        doc = create_default_atom(service, "/doc", {"a": [1, 2]})
        assert doc.compare_and_set({"a": [1, 2]}, {"a": [3]}) is True
        assert doc.deref() == {"a": [3]}

    def test_value_restored_to_old_counts_as_unchanged(
        self, atom: DistributedAtom
    ) -> None:
        """Equal values are indistinguishable, whatever happened in between."""
        seen = atom.deref()
        atom.reset(1)
        atom.reset(0)
        assert atom.compare_and_set(seen, 9) is True

    def test_validator_checked_before_lock(
        self, timed_service: InMemoryCoordinationService
    ) -> None:
        """A rejected value fails fast even while another writer holds the lock."""
        atom = create_default_atom(timed_service, "/a1", 0, validator=lambda v: v >= 0)
        _, release, thread = hold_write_lock(atom)
        try:
            with pytest.raises(InvalidStateError):
                atom.compare_and_set(0, -1)
        finally:
            release.set()
            thread.join(5)

    def test_mismatch_releases_lock(
        self, timed_service: InMemoryCoordinationService
    ) -> None:
        atom = create_default_atom(timed_service, "/a1", 0)
        assert atom.compare_and_set(1, 2) is False
        assert atom.reset(4) == 4


class TestJsonValues:
    """The default codec only stores values that read back equal."""

    def test_tuple_reset_rejected_and_value_kept(self, service, atom) -> None:
        with pytest.raises(EncodeError):
            atom.reset((1, 2))
        assert atom.deref() == 0
        # Lock was released and no signal was written
        assert atom.reset(1) == 1
        # Initial reset and this one each signalled once
        assert service.read_node("/a1")[1].version == 2

    def test_int_key_swap_rejected(self, atom: DistributedAtom) -> None:
        with pytest.raises(EncodeError):
            atom.swap(lambda _: {1: "a"})
        assert atom.deref() == 0

    def test_compare_and_set_matches_written_value(
        self, service: InMemoryCoordinationService
    ) -> None:
        doc = create_default_atom(service, "/doc", {"pair": [1, 2]})
        written = doc.deref()
        assert doc.compare_and_set(written, {"pair": [3, 4]}) is True


class TestLockTimeout:
    def test_timed_out_writers_do_not_mutate(
        self, timed_service: InMemoryCoordinationService
    ) -> None:
        atom = create_default_atom(timed_service, "/a1", 0)
        _, release, thread = hold_write_lock(atom)
        try:
            with pytest.raises(LockTimeoutError):
                atom.reset(100)
            with pytest.raises(LockTimeoutError):
                atom.compare_and_set(0, 100)
            with pytest.raises(LockTimeoutError):
                atom.swap(lambda v: 100)
            assert atom.deref() == 0
        finally:
            release.set()
            thread.join(5)
        assert atom.deref() == 1


class TestValidatorCell:
    def test_defaults_to_none(self, atom: DistributedAtom) -> None:
        assert atom.get_validator() is None

    def test_set_and_get(self, atom: DistributedAtom) -> None:
        def non_negative(v):
            return v >= 0

        atom.set_validator(non_negative)
        assert atom.get_validator() is non_negative

    def test_clearing_validator_allows_any_value(self, atom: DistributedAtom) -> None:
        atom.set_validator(lambda v: v >= 0)
        atom.set_validator(None)
        assert atom.reset(-5) == -5

    def test_validator_is_local_to_handle(
        self, service: InMemoryCoordinationService
    ) -> None:
        guarded = create_default_atom(service, "/shared", 0, validator=lambda v: v >= 0)
        other = create_default_atom(service, "/shared")
        other.reset(-1)
        assert guarded.deref() == -1
        with pytest.raises(InvalidStateError):
            guarded.reset(-2)


class TestRepr:
    def test_repr_names_path(self, atom: DistributedAtom) -> None:
        assert "/a1" in repr(atom)
