#!/usr/bin/env python3
"""
zkatom against a running ZooKeeper ensemble.

Demonstrates that a slow swap in one thread holds the write lock without
blocking readers, and that watches fire for every swap.

Setup:
    1. Start ZooKeeper, e.g. docker run -p 2181:2181 zookeeper
    2. Optionally export ZKATOM_HOSTS="host:2181"
    3. Run: python examples/basics/02_zookeeper.py
"""

import logging
import threading
import time

from rich.logging import RichHandler

from zkatom import (
    KazooCoordinationConfig,
    KazooCoordinationService,
    create_default_atom,
)


def slow_increment(value: dict) -> dict:
    time.sleep(3)
    return {**value, "a": value["a"] + 1}


def main() -> None:
    logging.basicConfig(level=logging.INFO, handlers=[RichHandler()])
    logging.getLogger("kazoo.client").setLevel(logging.WARNING)

    config = KazooCoordinationConfig.from_env()
    with KazooCoordinationService(config) as service:
        doc = create_default_atom(service, "/a1", {})
        doc.swap(lambda v: {**v, "a": 1})

        writer = threading.Thread(target=doc.swap, args=(slow_increment,))
        writer.start()
        time.sleep(0.5)
        logging.info("Read during slow swap: %s", doc.deref())
        writer.join()
        logging.info("Read after slow swap: %s", doc.deref())

        doc.add_watch(
            "a1", lambda key, atom, old, new: logging.info("%s -> %s", key, new)
        )
        doc.swap(lambda v: {**v, "a": v["a"] + 1})
        doc.swap(lambda v: {**v, "a": v["a"] + 1})
        time.sleep(1)
        doc.remove_watch("a1")


if __name__ == "__main__":
    main()
