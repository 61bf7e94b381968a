"""Conversion of raw environment variable text into typed values.

Every parser takes the raw text and either returns the converted value or
raises `ValueError` with a short reason (`"invalid syntax"` or
`"value out of range"`). Raw text never appears in the reason.

Integer and float widths are range checked with `numpy.iinfo` and
`numpy.float32`. The unsized `INT` and `UINT` kinds use the native pointer
width of the host, fixed once at import time as `NATIVE_INT_BITS`.
"""

from __future__ import annotations

import math
import string
from dataclasses import dataclass
from fractions import Fraction
from functools import partial
from typing import Any, Callable

import numpy as np

NATIVE_INT_BITS: int = np.iinfo(np.intp).bits

INVALID_SYNTAX = "invalid syntax"
OUT_OF_RANGE = "value out of range"

_TRUE_TOKENS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_TOKENS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_SIGNED_TYPES = {8: np.int8, 16: np.int16, 32: np.int32, 64: np.int64}
_UNSIGNED_TYPES = {8: np.uint8, 16: np.uint16, 32: np.uint32, 64: np.uint64}
_RADIX_PREFIXES = {"0x": 16, "0o": 8, "0b": 2}
_DIGIT_CHARS = frozenset(string.hexdigits + "_")
_INFINITIES = frozenset({"inf", "infinity"})


def _check_text(text: str) -> None:
    # `int` and `float` silently strip whitespace and accept non-ASCII digits.
    if not text or not text.isascii() or text != text.strip():
        raise ValueError(INVALID_SYNTAX)


def parse_string(text: str) -> str:
    """Return the text unchanged."""
    return text


def parse_bool(text: str) -> bool:
    """Parse `1`, `t`, `T`, `TRUE`, `true`, `True` and their false counterparts."""
    if text in _TRUE_TOKENS:
        return True
    if text in _FALSE_TOKENS:
        return False
    raise ValueError(INVALID_SYNTAX)


def _parse_integer(text: str, signed: bool) -> int:
    _check_text(text)

    negative = False
    body = text
    if body[0] in "+-":
        if not signed:
            raise ValueError(INVALID_SYNTAX)
        negative = body[0] == "-"
        body = body[1:]

    base = _RADIX_PREFIXES.get(body[:2].lower(), 10)
    if base != 10:
        body = body[2:]
        # Same as Python literals: `0x_ff` is allowed.
        if body.startswith("_"):
            body = body[1:]

    if not body or not _DIGIT_CHARS.issuperset(body):
        raise ValueError(INVALID_SYNTAX)
    try:
        value = int(body, base)
    except ValueError:
        raise ValueError(INVALID_SYNTAX) from None
    return -value if negative else value


def parse_int(text: str, bits: int = NATIVE_INT_BITS) -> int:
    """Parse a signed integer that fits in `bits` bits.

    An explicit `0x`, `0o` or `0b` prefix selects the radix, otherwise the
    text is read in base 10. A leading `+` or `-` is allowed.
    """
    value = _parse_integer(text, signed=True)
    info = np.iinfo(_SIGNED_TYPES[bits])
    if not int(info.min) <= value <= int(info.max):
        raise ValueError(OUT_OF_RANGE)
    return value


def parse_uint(text: str, bits: int = NATIVE_INT_BITS) -> int:
    """Parse an unsigned integer that fits in `bits` bits. No sign is allowed."""
    value = _parse_integer(text, signed=False)
    if value > int(np.iinfo(_UNSIGNED_TYPES[bits]).max):
        raise ValueError(OUT_OF_RANGE)
    return value


def _exact_value(text: str) -> Fraction:
    """Return the exact value of finite float text that already parsed."""
    negative = text[0] == "-"
    unsigned = (text[1:] if text[0] in "+-" else text).lower()
    if unsigned.startswith("0x"):
        mantissa, _, exponent = unsigned[2:].partition("p")
        whole, _, fraction = mantissa.partition(".")
        exact = Fraction(int(whole + fraction or "0", 16)) * Fraction(2) ** (
            int(exponent) - 4 * len(fraction)
        )
    else:
        exact = Fraction(unsigned.replace("_", ""))
    return -exact if negative else exact


def _single_value(single: np.float32) -> Fraction:
    # Infinity stands in for the next power of two above the largest single.
    if np.isinf(single):
        return Fraction(2) ** 128 * (1 if single > 0 else -1)
    return Fraction(float(single))


def _nearest_single(exact: Fraction) -> np.float32:
    """Round an exact value to the nearest single, ties to even.

    Going through a double first can land exactly on a midpoint between two
    singles and then round the wrong way.
    """
    with np.errstate(over="ignore"):
        approx = np.float32(float(exact))
    if np.isinf(approx):
        approx = np.float32(np.finfo(np.float32).max) * np.float32(np.sign(approx))

    if _single_value(approx) <= exact:
        low, high = approx, np.nextafter(approx, np.float32(np.inf))
    else:
        low, high = np.nextafter(approx, np.float32(-np.inf)), approx

    midpoint = (_single_value(low) + _single_value(high)) / 2
    if exact < midpoint:
        return low
    if exact > midpoint:
        return high
    low_bits = np.array(low, dtype=np.float32).view(np.uint32).item()
    return low if low_bits % 2 == 0 else high


def parse_float(text: str, bits: int = 64) -> float:
    """Parse a 32 or 64-bit float.

    Accepts decimal and scientific notation, hexadecimal floats with a
    binary exponent such as `0x1p-2`, and `inf`, `infinity` and `nan` in any
    case. Finite text whose magnitude does not fit in `bits` is out of range.
    32-bit values are rounded once, directly from the text, to the nearest
    single.
    """
    if bits not in (32, 64):
        raise ValueError(f"Unsupported float width {bits}")
    _check_text(text)

    unsigned = text[1:] if text[0] in "+-" else text
    try:
        if unsigned[:2].lower() == "0x":
            if "p" not in unsigned.lower():
                raise ValueError(INVALID_SYNTAX)
            value = float.fromhex(text)
        else:
            value = float(text)
    except OverflowError:
        raise ValueError(OUT_OF_RANGE) from None
    except ValueError:
        raise ValueError(INVALID_SYNTAX) from None

    explicit_inf = unsigned.lower() in _INFINITIES
    if math.isinf(value) and not explicit_inf:
        raise ValueError(OUT_OF_RANGE)

    if bits == 32:
        with np.errstate(over="ignore"):
            single = np.float32(value)
        # A double that is already a single was the nearest single to the text.
        if not math.isnan(value) and float(single) != value:
            single = _nearest_single(_exact_value(text))
        if np.isinf(single) and not explicit_inf:
            raise ValueError(OUT_OF_RANGE)
        value = float(single)
    return value


@dataclass(frozen=True)
class Kind:
    """A target type for environment variable values.

    Attributes:
        name: Name used in error messages.
        zero: Value reported when the variable is absent.
        parser: Converts raw text, raising `ValueError` on failure.
    """

    name: str
    zero: Any
    parser: Callable[[str], Any]


STRING = Kind("string", "", parse_string)
BOOL = Kind("bool", False, parse_bool)

INT = Kind("int", 0, partial(parse_int, bits=NATIVE_INT_BITS))
INT8 = Kind("int8", 0, partial(parse_int, bits=8))
INT16 = Kind("int16", 0, partial(parse_int, bits=16))
INT32 = Kind("int32", 0, partial(parse_int, bits=32))
INT64 = Kind("int64", 0, partial(parse_int, bits=64))

UINT = Kind("uint", 0, partial(parse_uint, bits=NATIVE_INT_BITS))
UINT8 = Kind("uint8", 0, partial(parse_uint, bits=8))
UINT16 = Kind("uint16", 0, partial(parse_uint, bits=16))
UINT32 = Kind("uint32", 0, partial(parse_uint, bits=32))
UINT64 = Kind("uint64", 0, partial(parse_uint, bits=64))

FLOAT32 = Kind("float32", 0.0, partial(parse_float, bits=32))
FLOAT64 = Kind("float64", 0.0, partial(parse_float, bits=64))
