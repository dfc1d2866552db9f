"""
core.py — Fixed-point decimal backed by a signed 64-bit integer

================================================================================
DESIGN PRINCIPLES
================================================================================

1. INTERNAL REPRESENTATION
   A single int `raw`, read as raw / 10**9. Nine fractional digits, base 10.
   Never floating point internally.

2. VALUE SEMANTICS
   Frozen dataclass. Every operation returns a new instance. Equality,
   ordering, hashing and sign are plain integer operations on `raw`, so two
   distinct raw values never mean the same number.

3. FIXED WIDTH
   `raw` always fits in a signed 64-bit integer. Arithmetic wraps around
   exactly like int64 in a fixed-width language (overflow is a correctness
   boundary, not an exception). Conversions INTO the type (float, text,
   Decimal) refuse values that don't fit and raise OverflowError.

4. EXACT CORE, DELEGATED EDGES
   + - * / floor truncate shift are integer operations on `raw`.
   Parsing, formatting and rounding modes (half-up, banker's, cash) go through
   decimal.Decimal at the boundary (see boundary.py), behind an injectable
   RoundingService.

================================================================================
VALID RANGE
================================================================================

    |value| <= 9_223_372_036.854775807

mul() and div() compute the intermediate product with unbounded Python ints,
so only the final result has to fit. Callers are responsible for keeping
results inside the range above; outside it the result wraps.

================================================================================
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from . import boundary
from .boundary import RoundingService
from .config import BASE, DIGITS, INT64_MAX, INT64_MIN, PLACES_MAX, PLACES_MIN, SCALE
from .errors import DeserializationError, ParseError, RequireError

_MODULUS = 2 ** 64


def _wrap(value: int) -> int:
    """Two's complement wrap of an unbounded int into int64."""
    return (value - INT64_MIN) % _MODULUS + INT64_MIN


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero (Python's // floors)."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _check_places(name: str, value: int) -> int:
    if not PLACES_MIN <= value <= PLACES_MAX:
        raise ValueError(f"{name} must be in [{PLACES_MIN}, {PLACES_MAX}], got {value}")
    return value


def _service(service: Optional[RoundingService]) -> RoundingService:
    return boundary.DEFAULT_ROUNDING if service is None else service


# ==============================================================================
# FIXED DECIMAL
# ==============================================================================

@dataclass(frozen=True, slots=True)
class FixedDecimal:
    """
    Decimal number with 9 fixed fractional digits stored in one int64.

    INVARIANTS:
    1. raw is an int in [INT64_MIN, INT64_MAX]
    2. value == raw / SCALE, exactly
    3. a == b  <=>  a.raw == b.raw

    USAGE:
        price = FixedDecimal.from_string("19.99")
        total = price * FixedDecimal.from_parts(3, 0)
        str(total)                    # '59.97'
        total.string_fixed(1)         # '60.0'
    """
    raw: int

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"raw must be int, not {type(self.raw).__name__}")
        if not INT64_MIN <= self.raw <= INT64_MAX:
            raise OverflowError(f"raw value {self.raw} does not fit in a signed 64-bit integer")

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_parts(cls, integer_part: int, fractional_part: int) -> FixedDecimal:
        """
        Build from an integer part and a fractional part in units of 10**-9.

        fractional_part is not range checked: from_parts(1, 1_500_000_000)
        is 2.5. The result wraps on int64 overflow.

            FixedDecimal.from_parts(2, 500_000_000)   # 2.5
            FixedDecimal.from_parts(-2, -500_000_000) # -2.5
        """
        return cls(_wrap(integer_part * SCALE + fractional_part))

    @classmethod
    def from_float(cls, value: float) -> FixedDecimal:
        """
        Build from a float, truncating toward zero after scaling.

        Not exact for every float (0.1 is not representable in binary).
        to_float() reports whether a value round-trips.

        Raises:
            ValueError: if value is NaN
            OverflowError: if value is infinite or out of range
        """
        return cls(boundary.narrow(int(value * SCALE)))

    @classmethod
    def from_float32(cls, value: float) -> FixedDecimal:
        """Like from_float(), but first rounds value to IEEE single precision."""
        (single,) = struct.unpack("<f", struct.pack("<f", value))
        return cls.from_float(single)

    @classmethod
    def from_string(cls, text: str) -> FixedDecimal:
        """
        Parse a decimal literal such as "2.5", "-.75", "1e3" or "+12.000".

        Digits beyond the 9th fractional place are truncated toward zero.

        Raises:
            ParseError: if text is not a valid literal or is out of range
        """
        value = boundary.parse(text)
        try:
            return cls.from_arbitrary(value)
        except OverflowError as e:
            raise ParseError(text, "out of range for a 64-bit fixed-point decimal") from e

    @classmethod
    def require_from_string(cls, text: str) -> FixedDecimal:
        """
        from_string() for literals that are known to be valid.

        Raises:
            RequireError: if text can't be parsed
        """
        try:
            return cls.from_string(text)
        except ParseError as e:
            raise RequireError(str(e)) from e

    @classmethod
    def from_arbitrary(cls, value: Decimal) -> FixedDecimal:
        """
        Narrow a decimal.Decimal: truncate beyond 9 fractional digits.

        Raises:
            ValueError: if value is NaN or infinite
            OverflowError: if value does not fit
        """
        return cls(boundary.from_arbitrary(value))

    def to_arbitrary(self) -> Decimal:
        """Exact decimal.Decimal with coefficient raw and exponent -9."""
        return boundary.to_arbitrary(self.raw)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def add(self, other: FixedDecimal) -> FixedDecimal:
        return FixedDecimal(_wrap(self.raw + other.raw))

    def sub(self, other: FixedDecimal) -> FixedDecimal:
        return FixedDecimal(_wrap(self.raw - other.raw))

    def mul(self, other: FixedDecimal) -> FixedDecimal:
        """
        Product truncated toward zero at the 9th fractional digit.

        The raw product is formed with unbounded ints before dividing by
        SCALE, so only the result needs to fit.
        """
        return FixedDecimal(_wrap(_tdiv(self.raw * other.raw, SCALE)))

    def div(self, other: FixedDecimal) -> FixedDecimal:
        """
        Quotient truncated toward zero at the 9th fractional digit.

        Raises:
            ZeroDivisionError: if other is zero
        """
        if other.raw == 0:
            raise ZeroDivisionError("fixed-point decimal division by zero")
        return FixedDecimal(_wrap(_tdiv(self.raw * SCALE, other.raw)))

    def div_round(
        self,
        other: FixedDecimal,
        places: int,
        service: Optional[RoundingService] = None,
    ) -> FixedDecimal:
        """div() followed by round(places)."""
        return self.div(other).round(places, service)

    def neg(self) -> FixedDecimal:
        return FixedDecimal(_wrap(-self.raw))

    def abs(self) -> FixedDecimal:
        # abs(INT64_MIN) wraps back to INT64_MIN, as in fixed-width ints
        return FixedDecimal(_wrap(abs(self.raw)))

    def sign(self) -> int:
        """-1, 0 or 1."""
        return (self.raw > 0) - (self.raw < 0)

    def cmp(self, other: FixedDecimal) -> int:
        """-1 if self < other, 0 if equal, 1 if self > other."""
        return (self.raw > other.raw) - (self.raw < other.raw)

    def int_part(self) -> int:
        """Integer part, truncated toward zero."""
        return _tdiv(self.raw, SCALE)

    # -------------------------------------------------------------------------
    # Rounding, truncation, shifting
    # -------------------------------------------------------------------------

    def floor(self) -> FixedDecimal:
        """Largest whole number <= self."""
        raw = self.raw
        if raw < 0 and raw % SCALE != 0:
            raw = _wrap(raw - SCALE)
        return FixedDecimal(_tdiv(raw, SCALE) * SCALE)

    def truncate(self, precision: int) -> FixedDecimal:
        """
        Drop fractional digits beyond `precision`, toward zero.

            FixedDecimal.from_string("1.99").truncate(1)   # 1.9
            FixedDecimal.from_string("-1.99").truncate(0)  # -1

        precision <= 0 truncates to a whole number; precision >= 9 is a no-op.
        """
        _check_places("precision", precision)
        if precision >= DIGITS:
            return self
        divisor = SCALE
        for _ in range(max(precision, 0)):
            divisor //= BASE
        return FixedDecimal(divisor * _tdiv(self.raw, divisor))

    def round(self, places: int, service: Optional[RoundingService] = None) -> FixedDecimal:
        """
        Round half away from zero to `places` fractional digits.

        Negative places round the integer part: round(-1) rounds to tens.
        """
        _check_places("places", places)
        return FixedDecimal.from_arbitrary(_service(service).round(self.to_arbitrary(), places))

    def round_bank(self, places: int, service: Optional[RoundingService] = None) -> FixedDecimal:
        """Round half to even (banker's rounding) to `places` fractional digits."""
        _check_places("places", places)
        return FixedDecimal.from_arbitrary(
            _service(service).round_bank(self.to_arbitrary(), places)
        )

    def round_cash(self, interval: int, service: Optional[RoundingService] = None) -> FixedDecimal:
        """
        Round to the nearest multiple of `interval` hundredths (5, 10, 25, 50, 100).

        Raises:
            ValueError: for an unsupported interval
        """
        return FixedDecimal.from_arbitrary(
            _service(service).round_cash(self.to_arbitrary(), interval)
        )

    def shift(self, places: int) -> FixedDecimal:
        """
        Multiply by 10**places, or divide by 10**-places when negative.

        Applied one digit at a time; each division truncates toward zero and
        each multiplication wraps.
        """
        _check_places("places", places)
        raw = self.raw
        if places >= 0:
            for _ in range(places):
                raw = _wrap(raw * BASE)
        else:
            for _ in range(-places):
                raw = _tdiv(raw, BASE)
        return FixedDecimal(raw)

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def is_zero(self) -> bool:
        return self.raw == 0

    def is_positive(self) -> bool:
        return self.raw > 0

    def is_negative(self) -> bool:
        return self.raw < 0

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def _check_operand(self, other: object, op: str) -> None:
        if not isinstance(other, FixedDecimal):
            raise TypeError(
                f"Operation not allowed: FixedDecimal {op} {type(other).__name__}. "
                f"Use FixedDecimal.from_string() or from_parts() to convert."
            )

    def __add__(self, other: FixedDecimal) -> FixedDecimal:
        self._check_operand(other, "+")
        return self.add(other)

    def __sub__(self, other: FixedDecimal) -> FixedDecimal:
        self._check_operand(other, "-")
        return self.sub(other)

    def __mul__(self, other: FixedDecimal) -> FixedDecimal:
        self._check_operand(other, "*")
        return self.mul(other)

    def __truediv__(self, other: FixedDecimal) -> FixedDecimal:
        self._check_operand(other, "/")
        return self.div(other)

    def __neg__(self) -> FixedDecimal:
        return self.neg()

    def __pos__(self) -> FixedDecimal:
        return self

    def __abs__(self) -> FixedDecimal:
        return self.abs()

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedDecimal):
            return self.raw == other.raw
        return NotImplemented

    def __lt__(self, other: FixedDecimal) -> bool:
        self._check_operand(other, "<")
        return self.raw < other.raw

    def __le__(self, other: FixedDecimal) -> bool:
        self._check_operand(other, "<=")
        return self.raw <= other.raw

    def __gt__(self, other: FixedDecimal) -> bool:
        self._check_operand(other, ">")
        return self.raw > other.raw

    def __ge__(self, other: FixedDecimal) -> bool:
        self._check_operand(other, ">=")
        return self.raw >= other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __bool__(self) -> bool:
        return self.raw != 0

    # -------------------------------------------------------------------------
    # Numeric conversion
    # -------------------------------------------------------------------------

    def to_float(self) -> tuple[float, bool]:
        """
        Nearest float, plus whether it converts back to exactly this value.

            FixedDecimal.from_parts(2, 500_000_000).to_float()  # (2.5, True)
        """
        f = float(self.raw) / SCALE
        try:
            exact = FixedDecimal.from_float(f).raw == self.raw
        except OverflowError:
            exact = False
        return f, exact

    def __float__(self) -> float:
        return self.to_float()[0]

    def __int__(self) -> int:
        return self.int_part()

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Plain positional form without trailing zeros: '2.5', '100', '-0.001'."""
        return boundary.format_plain(self.to_arbitrary())

    def __repr__(self) -> str:
        return f"FixedDecimal('{self}')"

    def __format__(self, format_spec: str) -> str:
        if not format_spec:
            return str(self)
        return format(self.to_arbitrary(), format_spec)

    def string_fixed(self, places: int, service: Optional[RoundingService] = None) -> str:
        """
        Round half away from zero, then render exactly `places` fractional digits.

            FixedDecimal.from_string("5.45").string_fixed(1)  # '5.5'
            FixedDecimal.from_string("5").string_fixed(2)     # '5.00'
        """
        _check_places("places", places)
        return boundary.format_positional(_service(service).round(self.to_arbitrary(), places))

    def string_fixed_bank(self, places: int, service: Optional[RoundingService] = None) -> str:
        """Like string_fixed(), with banker's rounding."""
        _check_places("places", places)
        return boundary.format_positional(
            _service(service).round_bank(self.to_arbitrary(), places)
        )

    def string_fixed_cash(self, interval: int, service: Optional[RoundingService] = None) -> str:
        """Cash rounding to `interval` hundredths, rendered with 2 fractional digits."""
        return boundary.format_positional(
            _service(service).round_cash(self.to_arbitrary(), interval)
        )

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_text(self) -> bytes:
        return str(self).encode("utf-8")

    @classmethod
    def from_text(cls, data: bytes | str) -> FixedDecimal:
        """
        Raises:
            ParseError: on malformed or out-of-range text
        """
        return cls.from_string(boundary.decode_text(data))

    def to_json(self) -> bytes:
        """JSON string literal: b'"2.5"'."""
        return b'"' + self.to_text() + b'"'

    @classmethod
    def from_json(cls, data: bytes | str) -> FixedDecimal:
        """
        Accepts a JSON string ("2.5") or a bare JSON number (2.5).

        Raises:
            DeserializationError: on null or malformed input
        """
        text = boundary.unquote_json(data)
        if text is None:
            raise DeserializationError(
                "can't unmarshal JSON null into FixedDecimal, use NullFixedDecimal"
            )
        try:
            return cls.from_string(text)
        except ParseError as e:
            raise DeserializationError(f"error decoding JSON {data!r}: {e}") from e

    def to_binary(self) -> bytes:
        """Binary layout of the equivalent decimal.Decimal (see boundary.encode_binary)."""
        return boundary.encode_binary(self.to_arbitrary())

    @classmethod
    def from_binary(cls, data: bytes) -> FixedDecimal:
        """
        Raises:
            DeserializationError: on malformed or out-of-range input
        """
        value = boundary.decode_binary(data)
        try:
            return cls.from_arbitrary(value)
        except OverflowError as e:
            raise DeserializationError(f"binary value {value} out of range") from e

    def to_db(self) -> str:
        """Database driver value: the plain text form."""
        return str(self)

    @classmethod
    def from_db(cls, value: object) -> FixedDecimal:
        """
        Convert a value read from a database driver.

        Accepts str, bytes, int, float and decimal.Decimal.

        Raises:
            DeserializationError: for NULL (None), other types, or bad values
        """
        if value is None:
            raise DeserializationError(
                "can't scan NULL into FixedDecimal, use NullFixedDecimal"
            )
        decimal_value = boundary.scan(value)
        try:
            return cls.from_arbitrary(decimal_value)
        except (ValueError, OverflowError) as e:
            raise DeserializationError(f"can't scan {value!r} into FixedDecimal: {e}") from e


ZERO = FixedDecimal(0)
ONE = FixedDecimal(SCALE)


# ==============================================================================
# REDUCERS
# ==============================================================================

def _non_empty(values: Iterable[FixedDecimal], name: str) -> list[FixedDecimal]:
    items = list(values)
    if not items:
        raise ValueError(f"{name}() requires at least one value")
    return items


def sum_of(values: Iterable[FixedDecimal]) -> FixedDecimal:
    """Sum of one or more values; wraps on int64 overflow like add()."""
    items = _non_empty(values, "sum_of")
    return FixedDecimal(_wrap(sum(v.raw for v in items)))


def average(values: Iterable[FixedDecimal]) -> FixedDecimal:
    """
    sum_of(values) divided by the count, truncated toward zero.

    The remainder is dropped, not rounded:

        average([from_parts(1, 0), from_parts(1, 0), from_parts(0, 0)])
        # raw 2_000_000_000 // 3 == 666_666_666 -> 0.666666666
    """
    items = _non_empty(values, "average")
    return FixedDecimal(_tdiv(sum_of(items).raw, len(items)))


def maximum(values: Iterable[FixedDecimal]) -> FixedDecimal:
    """Largest of one or more values (the first one on ties)."""
    return max(_non_empty(values, "maximum"), key=lambda v: v.raw)


def minimum(values: Iterable[FixedDecimal]) -> FixedDecimal:
    """Smallest of one or more values (the first one on ties)."""
    return min(_non_empty(values, "minimum"), key=lambda v: v.raw)
