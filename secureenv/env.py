"""Read environment variables once and remove them from the process.

Every accessor here removes the variable as soon as it has been read, so
secrets passed through the environment are not inherited by child processes
spawned later. A variable that is not set is never an error: fetchers report
`present=False` and `assign` leaves its target alone.

Removal happens before a parse error reaches the caller, so a bad value can
never be read a second time.

!!! Warning
    `os.environ` is process-global state and nothing here takes a lock.
    Two threads consuming the same key at the same time may both observe it.
    Consume secrets during single-threaded startup or synchronize externally.
"""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from contextlib import contextmanager
from typing import Any, Iterator, NamedTuple

from secureenv.exception import ParseError
from secureenv.parse import (
    BOOL,
    FLOAT32,
    FLOAT64,
    INT,
    INT8,
    INT16,
    INT32,
    INT64,
    STRING,
    UINT,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    Kind,
)
from secureenv.utils.logging import get_logger

logger = get_logger(name=__name__)


class Lookup(NamedTuple):
    """Result of fetching an environment variable.

    Attributes:
        value: The parsed value, or the zero value of the kind when absent.
        present: Whether the variable was set.
    """

    value: Any
    present: bool


@contextmanager
def consume(key: str) -> Iterator[str | None]:
    """Yield the raw text of `key` and remove it when the block exits.

    Yields `None` and leaves the environment untouched when `key` is not set.
    When it is set, it is removed on every exit path, including exceptions
    raised inside the block.
    """
    text = os.environ.get(key)
    if text is None:
        yield None
        return

    try:
        yield text
    finally:
        # `del os.environ[...]` also unsets the variable at the C level.
        os.environ.pop(key, None)
        logger.debug("Consumed environment variable '%s'.", key)


def fetch(key: str, kind: Kind = STRING) -> Lookup:
    """Fetch `key`, remove it from the environment, and parse it as `kind`.

    Args:
        key: Name of the environment variable. Matching is case sensitive.
        kind: Target type. Defaults to the raw string.

    Returns:
        `Lookup(value, True)` if the variable was set, otherwise
        `Lookup(kind.zero, False)`.

    Raises:
        ParseError: The text could not be converted to `kind`. The variable
            has already been removed.
    """
    with consume(key) as text:
        if text is None:
            return Lookup(kind.zero, False)
        try:
            value = kind.parser(text)
        except ValueError as err:
            logger.debug("Environment variable '%s' is not a valid %s.", key, kind.name)
            raise ParseError(key, kind.name, str(err)) from err
    return Lookup(value, True)


def assign(target: Any, name: str, key: str, kind: Kind = STRING) -> bool:
    """Fetch `key` as `kind` and store it into `target`.

    Mappings get `target[name] = value`, everything else gets
    `setattr(target, name, value)`. `target` is not touched at all when the
    variable is absent or fails to parse.

    Returns:
        Whether the variable was set and stored.

    Raises:
        ParseError: The text could not be converted to `kind`.
    """
    value, present = fetch(key, kind)
    if not present:
        return False
    if isinstance(target, MutableMapping):
        target[name] = value
    else:
        setattr(target, name, value)
    return True


def get(key: str, default: str = "") -> str:
    """Return the raw text of `key` and remove it, or `default` if it is not set."""
    value, present = fetch(key)
    return value if present else default


def get_string(key: str) -> Lookup:
    """Fetch `key` as raw text."""
    return fetch(key, STRING)


def get_bool(key: str) -> Lookup:
    """Fetch `key` as a boolean."""
    return fetch(key, BOOL)


def get_int(key: str) -> Lookup:
    """Fetch `key` as a native-width signed integer."""
    return fetch(key, INT)


def get_int8(key: str) -> Lookup:
    """Fetch `key` as an 8-bit signed integer."""
    return fetch(key, INT8)


def get_int16(key: str) -> Lookup:
    """Fetch `key` as a 16-bit signed integer."""
    return fetch(key, INT16)


def get_int32(key: str) -> Lookup:
    """Fetch `key` as a 32-bit signed integer."""
    return fetch(key, INT32)


def get_int64(key: str) -> Lookup:
    """Fetch `key` as a 64-bit signed integer."""
    return fetch(key, INT64)


def get_uint(key: str) -> Lookup:
    """Fetch `key` as a native-width unsigned integer."""
    return fetch(key, UINT)


def get_uint8(key: str) -> Lookup:
    """Fetch `key` as an 8-bit unsigned integer."""
    return fetch(key, UINT8)


def get_uint16(key: str) -> Lookup:
    """Fetch `key` as a 16-bit unsigned integer."""
    return fetch(key, UINT16)


def get_uint32(key: str) -> Lookup:
    """Fetch `key` as a 32-bit unsigned integer."""
    return fetch(key, UINT32)


def get_uint64(key: str) -> Lookup:
    """Fetch `key` as a 64-bit unsigned integer."""
    return fetch(key, UINT64)


def get_float32(key: str) -> Lookup:
    """Fetch `key` as a single precision float."""
    return fetch(key, FLOAT32)


def get_float64(key: str) -> Lookup:
    """Fetch `key` as a double precision float."""
    return fetch(key, FLOAT64)
