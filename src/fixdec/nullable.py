"""
nullable.py — FixedDecimal that may be NULL

A NullFixedDecimal pairs a FixedDecimal with a `valid` flag. When `valid` is
False the stored value means nothing: it is never serialized, and two invalid
instances are equal whatever they hold.

Its arbitrary-precision counterpart is Optional[decimal.Decimal], with None
standing for NULL.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from . import boundary
from .core import ZERO, FixedDecimal


@dataclass(frozen=True, slots=True)
class NullFixedDecimal:
    """
    Nullable FixedDecimal for JSON null / SQL NULL.

    USAGE:
        NullFixedDecimal.of(FixedDecimal.from_string("2.5")).to_json()  # b'"2.5"'
        NullFixedDecimal.null().to_json()                             # b'null'
        NullFixedDecimal.from_db(None).valid                          # False
    """
    value: FixedDecimal = ZERO
    valid: bool = False

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def of(cls, value: FixedDecimal) -> NullFixedDecimal:
        return cls(value=value, valid=True)

    @classmethod
    def null(cls) -> NullFixedDecimal:
        return cls()

    @classmethod
    def from_optional(cls, value: Optional[FixedDecimal]) -> NullFixedDecimal:
        return cls.null() if value is None else cls.of(value)

    def to_optional(self) -> Optional[FixedDecimal]:
        return self.value if self.valid else None

    # -------------------------------------------------------------------------
    # Arbitrary-precision boundary
    # -------------------------------------------------------------------------

    def to_arbitrary(self) -> Optional[Decimal]:
        """decimal.Decimal when valid, None otherwise."""
        return boundary.to_arbitrary_nullable(self.value.raw, self.valid)

    @classmethod
    def from_arbitrary(cls, value: Optional[Decimal]) -> NullFixedDecimal:
        if value is None:
            return cls.null()
        return cls.of(FixedDecimal.from_arbitrary(value))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_json(self) -> bytes:
        if not self.valid:
            return b"null"
        return self.value.to_json()

    @classmethod
    def from_json(cls, data: bytes | str) -> NullFixedDecimal:
        """
        JSON null gives an invalid value; anything else must parse.

        Raises:
            DeserializationError: on malformed input
        """
        if boundary.unquote_json(data) is None:
            return cls.null()
        return cls.of(FixedDecimal.from_json(data))

    def to_db(self) -> Optional[str]:
        if not self.valid:
            return None
        return self.value.to_db()

    @classmethod
    def from_db(cls, value: object) -> NullFixedDecimal:
        """
        SQL NULL (None) gives an invalid value.

        Raises:
            DeserializationError: for unsupported types or bad values
        """
        if value is None:
            return cls.null()
        return cls.of(FixedDecimal.from_db(value))

    # -------------------------------------------------------------------------
    # Comparison and output
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NullFixedDecimal):
            return NotImplemented
        if not self.valid or not other.valid:
            return self.valid == other.valid
        return self.value == other.value

    def __hash__(self) -> int:
        return hash((self.valid, self.value.raw if self.valid else 0))

    def __repr__(self) -> str:
        if not self.valid:
            return "NullFixedDecimal(null)"
        return f"NullFixedDecimal('{self.value}')"

    def __str__(self) -> str:
        return str(self.value) if self.valid else "null"

