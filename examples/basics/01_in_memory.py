#!/usr/bin/env python3
"""
Basic zkatom example using InMemoryCoordinationService.

Shows the atom operations without a ZooKeeper ensemble:
- deref / reset / swap / compare_and_set
- a validator rejecting a write
- a watch firing after swap and reset, but not after compare_and_set

Run with: python examples/basics/01_in_memory.py
"""

from zkatom import (
    InMemoryCoordinationService,
    InvalidStateError,
    create_default_atom,
)


def main() -> None:
    with InMemoryCoordinationService() as service:
        counter = create_default_atom(service, "/a1", 0)
        print("deref:", counter.deref())
        print("swap inc:", counter.swap(lambda v: v + 1))

        # Two handles on the same path share the value
        other = create_default_atom(service, "/a1")
        other.swap(lambda v, n: v + n, 10)
        print("seen through first handle:", counter.deref())

        counter.set_validator(lambda v: v >= 0)
        try:
            counter.reset(-1)
        except InvalidStateError as err:
            print(f"rejected {err.value!r}; still {counter.deref()}")

        counter.add_watch(
            "printer", lambda key, atom, old, new: print(f"  watch {key}: {new}")
        )
        counter.swap(lambda v: v + 1)
        service.drain(timeout=1)
        counter.reset(100)
        service.drain(timeout=1)

        print("cas 100 -> 101:", counter.compare_and_set(100, 101))
        service.drain(timeout=1)
        print("cas 100 -> 102:", counter.compare_and_set(100, 102))
        counter.remove_watch("printer")


if __name__ == "__main__":
    main()
