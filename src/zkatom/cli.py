"""Command line access to distributed atoms.

Usage:
    zkatom --hosts 127.0.0.1:2181 reset /counter 0
    zkatom incr /counter --by 5
    zkatom get /counter
    zkatom cas /counter 5 6
    zkatom watch /counter --count 3

Values are JSON. Connection settings fall back to ZKATOM_HOSTS,
ZKATOM_TIMEOUT and ZKATOM_LOCK_TIMEOUT.
"""

import json
import logging
import threading
from collections.abc import Hashable
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from zkatom.application.value_store import NodeValueStore
from zkatom.domain.exceptions import (
    DecodeError,
    EncodeError,
    InvalidStateError,
    LockTimeoutError,
    NoNodeError,
)
from zkatom.domain.interfaces import CoordinationServiceInterface
from zkatom.domain.paths import data_path, validate_path
from zkatom.factory import create_default_atom
from zkatom.infrastructure.coordination.zookeeper import (
    DEFAULT_HOSTS,
    KazooCoordinationConfig,
    KazooCoordinationService,
)
from zkatom.infrastructure.serialization import JsonCodec

logger = logging.getLogger("zkatom.cli")

_NOISY_LOGGERS = ["kazoo.client", "kazoo.protocol.connection"]
_USER_ERRORS = (InvalidStateError, DecodeError, EncodeError, LockTimeoutError, NoNodeError)


def _configure_logging(debug: bool) -> None:
    """Log to stderr so stdout carries only values."""
    level = logging.DEBUG if debug else logging.WARNING
    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True)
    handler.setLevel(level)
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _open_service(config: KazooCoordinationConfig) -> CoordinationServiceInterface:
    service = KazooCoordinationService(config)
    service.start()
    click.get_current_context().call_on_close(service.stop)
    return service


def _parse_value(_ctx: click.Context, param: click.Parameter, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as err:
        raise click.BadParameter(f"not valid JSON: {err}", param=param) from err


def _parse_path(_ctx: click.Context, param: click.Parameter, raw: str) -> str:
    try:
        return validate_path(raw)
    except ValueError as err:
        raise click.BadParameter(str(err), param=param) from err


def _atom(ctx: click.Context, path: str) -> Any:
    service = _open_service(ctx.obj)
    return create_default_atom(service, path)


def _read(ctx: click.Context, path: str) -> Any:
    """Read the value without creating nodes; an unknown atom is an error."""
    service = _open_service(ctx.obj)
    return NodeValueStore(service, data_path(path), JsonCodec()).get()


def _emit(value: Any) -> None:
    Console().print_json(data=value)


@click.group()
@click.option(
    "--hosts",
    envvar="ZKATOM_HOSTS",
    default=DEFAULT_HOSTS,
    show_default=True,
    help="ZooKeeper connection string",
)
@click.option(
    "--timeout", envvar="ZKATOM_TIMEOUT", default=10.0, help="Connection timeout (s)"
)
@click.option(
    "--lock-timeout",
    envvar="ZKATOM_LOCK_TIMEOUT",
    type=float,
    default=None,
    help="Give up acquiring the write lock after this many seconds",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    hosts: str,
    timeout: float,
    lock_timeout: float | None,
    debug: bool,
) -> None:
    """Read and update distributed atoms."""
    _configure_logging(debug)
    ctx.obj = KazooCoordinationConfig(
        hosts=hosts, timeout=timeout, lock_timeout=lock_timeout
    )


@cli.command()
@click.argument("path", callback=_parse_path)
@click.pass_context
def get(ctx: click.Context, path: str) -> None:
    """Print the current value of PATH."""
    try:
        _emit(_read(ctx, path))
    except _USER_ERRORS as err:
        raise click.ClickException(str(err)) from err


@cli.command()
@click.argument("path", callback=_parse_path)
@click.argument("value", callback=_parse_value)
@click.pass_context
def reset(ctx: click.Context, path: str, value: Any) -> None:
    """Set PATH to VALUE unconditionally."""
    try:
        _emit(_atom(ctx, path).reset(value))
    except _USER_ERRORS as err:
        raise click.ClickException(str(err)) from err


@cli.command()
@click.argument("path", callback=_parse_path)
@click.argument("old", callback=_parse_value)
@click.argument("new", callback=_parse_value)
@click.pass_context
def cas(ctx: click.Context, path: str, old: Any, new: Any) -> None:
    """Set PATH to NEW only if it currently equals OLD."""
    try:
        swapped = _atom(ctx, path).compare_and_set(old, new)
    except _USER_ERRORS as err:
        raise click.ClickException(str(err)) from err
    click.echo("true" if swapped else "false")


@cli.command()
@click.argument("path", callback=_parse_path)
@click.option("--by", default=1, show_default=True, help="Amount to add")
@click.pass_context
def incr(ctx: click.Context, path: str, by: int) -> None:
    """Add to the number at PATH (an unset value counts as 0)."""

    def add(value: Any, amount: int) -> Any:
        if value is None:
            return amount
        if not isinstance(value, int | float) or isinstance(value, bool):
            raise click.ClickException(f"{path} holds {value!r}, not a number")
        return value + amount

    try:
        _emit(_atom(ctx, path).swap(add, by))
    except _USER_ERRORS as err:
        raise click.ClickException(str(err)) from err


@cli.command()
@click.argument("path", callback=_parse_path)
@click.option("--count", type=int, default=None, help="Exit after this many changes")
@click.pass_context
def watch(ctx: click.Context, path: str, count: int | None) -> None:
    """Print the value of PATH after every swap or reset."""
    atom = _atom(ctx, path)
    seen = 0
    done = threading.Event()

    def on_change(key: Hashable, _atom: Any, _old: None, new: Any) -> None:
        nonlocal seen
        _emit(new)
        seen += 1
        if count is not None and seen >= count:
            done.set()

    atom.add_watch("zkatom-cli", on_change)
    logger.debug("Watching %s", path)
    try:
        done.wait()
    except KeyboardInterrupt:
        logger.debug("Stopped watching %s after %d changes", path, seen)
    finally:
        atom.remove_watch("zkatom-cli")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
