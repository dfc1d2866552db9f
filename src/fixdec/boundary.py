"""
boundary.py — Conversion boundary to the arbitrary-precision decimal

================================================================================
ROLE
================================================================================

FixedDecimal never parses, formats or applies rounding modes on its own raw
integer. Those jobs are delegated to Python's decimal.Decimal, which is
unbounded in both coefficient and exponent:

    raw (int64)  --to_arbitrary-->    Decimal(coefficient=raw, exponent=-9)
    Decimal      --from_arbitrary-->  trunc(value * 10**9), narrowed to int64

Everything here works on plain ints and Decimals, so it has no dependency on
the FixedDecimal class itself.

================================================================================
DETERMINISM
================================================================================

decimal arithmetic normally reads the thread-local context (precision,
rounding, traps). Every operation here passes an explicit private context, so
results are identical whatever the caller did to getcontext().

================================================================================
"""

from __future__ import annotations

import logging
import re
import struct
from decimal import (
    ROUND_DOWN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    InvalidOperation,
)
from typing import Optional, Protocol

from .config import (
    BOUNDARY_PRECISION,
    CASH_INTERVALS,
    DIGITS,
    INT64_MAX,
    INT64_MIN,
)
from .errors import DeserializationError, ParseError

logger = logging.getLogger(__name__)

_CONTEXT = Context(prec=BOUNDARY_PRECISION)

# Optional sign, digits with optional fraction (or a bare fraction), optional
# exponent. No whitespace, no underscores, no NaN/Infinity.
_LITERAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

_INT64_DIGITS = len(str(INT64_MAX))

# Binary layout: 4-byte exponent, then the coefficient with a version/sign
# prefix byte.
_EXPONENT = struct.Struct(">I")
_COEFFICIENT_VERSION = 1


# ==============================================================================
# NARROWING
# ==============================================================================

def narrow(value: int) -> int:
    """
    Check that an unbounded int fits the signed 64-bit raw representation.

    Raises:
        OverflowError: if value is outside [INT64_MIN, INT64_MAX]
    """
    if value < INT64_MIN or value > INT64_MAX:
        raise OverflowError(f"{value} does not fit in a signed 64-bit integer")
    return value


# ==============================================================================
# TO / FROM ARBITRARY PRECISION
# ==============================================================================

def _leading_int(digits: tuple[int, ...], count: int) -> int:
    """The first `count` digits as an int, zero-padded on the right."""
    result = 0
    for digit in digits[:count]:
        result = result * 10 + digit
    return result * 10 ** max(count - len(digits), 0)


def to_arbitrary(raw: int) -> Decimal:
    """Exact Decimal with coefficient `raw` and exponent -DIGITS."""
    return Decimal(raw).scaleb(-DIGITS, context=_CONTEXT)


def from_arbitrary(value: Decimal) -> int:
    """
    Scale `value` by 10**DIGITS, truncate toward zero, narrow to 64 bits.

    Reads only the leading digits of the coefficient, so neither context
    rounding nor the length of the coefficient matters.

    Raises:
        ValueError: if value is NaN or infinite
        OverflowError: if the truncated result does not fit in 64 bits
    """
    if not value.is_finite():
        raise ValueError(f"can't convert {value} to a fixed-point decimal")
    if value.is_zero():
        return 0

    # Number of digits left of the point once scaled by 10**DIGITS.
    integer_digits = value.adjusted() + DIGITS + 1
    if integer_digits <= 0:
        return 0
    if integer_digits > _INT64_DIGITS:
        raise OverflowError(f"{value} does not fit in a signed 64-bit fixed-point decimal")

    sign, digits, _ = value.as_tuple()
    raw = _leading_int(digits, integer_digits)
    return narrow(-raw if sign else raw)


# ==============================================================================
# PARSING AND FORMATTING
# ==============================================================================

def parse(text: str) -> Decimal:
    """
    Parse a decimal literal.

    Grammar: [+-] (digits [. [digits]] | . digits) [(e|E) [+-] digits]

    Raises:
        ParseError: if text is not a str or does not match the grammar
    """
    if not isinstance(text, str):
        raise ParseError(text, f"expected str, got {type(text).__name__}")
    if _LITERAL.fullmatch(text) is None:
        logger.debug("rejected decimal literal %r", text)
        raise ParseError(text)
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise ParseError(text) from e
    if not value.is_finite():
        raise ParseError(text, "exponent out of range")
    return value


def format_plain(value: Decimal) -> str:
    """Shortest positional form: no exponent, no trailing fractional zeros."""
    if value.is_zero():
        return "0"
    return format(value.normalize(_CONTEXT), "f")


def format_positional(value: Decimal) -> str:
    """Positional form keeping the exponent of `value`, so trailing zeros stay."""
    return format(value, "f")


# ==============================================================================
# ROUNDING SERVICE
# ==============================================================================

class RoundingService(Protocol):
    """
    Rounding modes applied at the boundary.

    Any correct arbitrary-precision decimal library can satisfy this; the
    default is DecimalRounding. Each method returns a Decimal that
    from_arbitrary() narrows back into a raw integer.
    """

    def round(self, value: Decimal, places: int) -> Decimal:
        """Round half away from zero to `places` fractional digits."""
        ...

    def round_bank(self, value: Decimal, places: int) -> Decimal:
        """Round half to even to `places` fractional digits."""
        ...

    def round_cash(self, value: Decimal, interval: int) -> Decimal:
        """Round to the nearest multiple of `interval` hundredths."""
        ...


def _quantum(places: int) -> Decimal:
    return Decimal((0, (1,), -places))


class DecimalRounding:
    """
    RoundingService backed by the standard decimal module.

    Negative `places` round the integer part: places=-2 rounds to hundreds.
    """

    def round(self, value: Decimal, places: int) -> Decimal:
        return value.quantize(_quantum(places), rounding=ROUND_HALF_UP, context=_CONTEXT)

    def round_bank(self, value: Decimal, places: int) -> Decimal:
        return value.quantize(_quantum(places), rounding=ROUND_HALF_EVEN, context=_CONTEXT)

    def round_cash(self, value: Decimal, interval: int) -> Decimal:
        """
        Cash (denomination) rounding.

        Supported intervals, in hundredths: 5, 10, 25, 50, 100.
        Example with interval=5: 3.43 -> 3.45, 3.42 -> 3.40.

        Raises:
            ValueError: for any other interval
        """
        multiplier = CASH_INTERVALS.get(interval)
        if multiplier is None:
            raise ValueError(
                f"unsupported cash rounding interval {interval}, "
                f"expected one of {sorted(CASH_INTERVALS)}"
            )
        factor = Decimal(multiplier)
        scaled = _CONTEXT.multiply(value, factor).quantize(
            _quantum(0), rounding=ROUND_HALF_UP, context=_CONTEXT
        )
        return _CONTEXT.divide(scaled, factor).quantize(
            _quantum(2), rounding=ROUND_DOWN, context=_CONTEXT
        )


DEFAULT_ROUNDING: RoundingService = DecimalRounding()


# ==============================================================================
# BINARY LAYOUT OF THE ARBITRARY-PRECISION VALUE
# ==============================================================================

def encode_binary(value: Decimal) -> bytes:
    """
    Binary form of a finite Decimal.

    Layout:
        bytes 0-3   exponent as a big-endian uint32 (two's complement int32)
        byte  4     (version << 1) | sign
        bytes 5..   coefficient magnitude, big-endian, no leading zero bytes

    Raises:
        ValueError: if value is not finite or its exponent exceeds int32
    """
    if not value.is_finite():
        raise ValueError(f"can't encode {value}")
    sign, digits, exponent = value.as_tuple()
    if not -(2 ** 31) <= exponent < 2 ** 31:
        raise ValueError(f"exponent {exponent} does not fit in 32 bits")

    magnitude = int(Decimal((0, digits, 0)))
    negative = bool(sign) and magnitude != 0
    header = (_COEFFICIENT_VERSION << 1) | int(negative)
    body = magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "big")
    return _EXPONENT.pack(exponent & 0xFFFFFFFF) + bytes([header]) + body


def decode_binary(data: bytes) -> Decimal:
    """
    Inverse of encode_binary().

    An empty coefficient section decodes as zero.

    Raises:
        DeserializationError: on short input or an unknown version byte
    """
    if len(data) < _EXPONENT.size:
        raise DeserializationError(
            f"error decoding binary {data!r}: expected at least {_EXPONENT.size} bytes, got {len(data)}"
        )
    (unsigned,) = _EXPONENT.unpack_from(data)
    exponent = unsigned - 2 ** 32 if unsigned >= 2 ** 31 else unsigned

    coefficient = data[_EXPONENT.size:]
    if not coefficient:
        return Decimal((0, (0,), exponent))

    header = coefficient[0]
    if header >> 1 != _COEFFICIENT_VERSION:
        raise DeserializationError(f"coefficient encoding version {header >> 1} not supported")
    magnitude = int.from_bytes(coefficient[1:], "big")
    negative = bool(header & 1) and magnitude != 0
    digits = Decimal(magnitude).as_tuple().digits
    return Decimal((int(negative), digits, exponent))


# ==============================================================================
# TEXT, JSON AND DRIVER VALUES
# ==============================================================================

def decode_text(data: bytes | str) -> str:
    """
    Raises:
        ParseError: if data is neither str nor valid UTF-8 bytes
    """
    if isinstance(data, str):
        return data
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            return bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(data, "not valid UTF-8") from e
    raise ParseError(data, f"expected bytes or str, got {type(data).__name__}")


def unquote_json(data: bytes | str) -> Optional[str]:
    """
    Literal text of a JSON string or number; None for JSON null.

    Raises:
        DeserializationError: if data is not text
    """
    try:
        text = decode_text(data)
    except ParseError as e:
        raise DeserializationError(f"error decoding JSON {data!r}: {e.reason}") from e
    if text == "null":
        return None
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


def scan(value: object) -> Decimal:
    """
    Decimal from a database driver value.

    str/bytes are parsed (surrounding double quotes allowed), ints are exact,
    floats use their shortest repr, Decimals pass through.

    Raises:
        DeserializationError: for None, bool, any other type, or bad text
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise DeserializationError(f"could not convert value {value!r} to a decimal")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        try:
            text = decode_text(value)
            if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
                text = text[1:-1]
            return parse(text)
        except ParseError as e:
            raise DeserializationError(f"could not convert value {value!r} to a decimal: {e.reason}") from e
    raise DeserializationError(
        f"could not convert value {value!r} of type {type(value).__name__} to a decimal"
    )


# ==============================================================================
# NULLABLE HELPERS
# ==============================================================================

def to_arbitrary_nullable(raw: int, valid: bool) -> Optional[Decimal]:
    """Nullable counterpart of to_arbitrary(): None when not valid."""
    return to_arbitrary(raw) if valid else None
