"""
codec.py — Integration with json and sqlite3

FixedDecimal and NullFixedDecimal already carry their own to_*/from_*
methods. This module plugs them into the standard library's JSON encoder and
the sqlite3 adapter/converter registry.

Example usage:
    import json
    from fixdec import FixedDecimal, FixedDecimalJSONEncoder

    json.dumps({"amount": FixedDecimal.from_string("12.5")}, cls=FixedDecimalJSONEncoder)
    # '{"amount": "12.5"}'

    conn = sqlite3.connect(":memory:", detect_types=sqlite3.PARSE_DECLTYPES)
    register_sqlite()
    conn.execute("CREATE TABLE t (amount DECIMAL_TEXT)")
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any

from .config import SQLITE_TYPE_NAME
from .core import FixedDecimal
from .nullable import NullFixedDecimal

logger = logging.getLogger(__name__)


class FixedDecimalJSONEncoder(json.JSONEncoder):
    """
    JSON encoder that writes FixedDecimal as a string, preserving every digit.

    An invalid NullFixedDecimal becomes null.

    Example:
        >>> json.dumps([FixedDecimal.from_parts(2, 500_000_000)], cls=FixedDecimalJSONEncoder)
        '["2.5"]'
    """

    def default(self, o: Any) -> Any:
        if isinstance(o, FixedDecimal):
            return str(o)
        if isinstance(o, NullFixedDecimal):
            return str(o.value) if o.valid else None
        return super().default(o)


def adapt_fixed_decimal(value: FixedDecimal) -> str:
    """Convert FixedDecimal to text for SQLite storage."""
    return value.to_db()


def adapt_null_fixed_decimal(value: NullFixedDecimal) -> str | None:
    return value.to_db()


def convert_fixed_decimal(data: bytes) -> FixedDecimal:
    """Convert SQLite text back to FixedDecimal."""
    return FixedDecimal.from_db(data)


def register_sqlite(type_name: str = SQLITE_TYPE_NAME) -> None:
    """
    Register sqlite3 adapters for both types and a converter for `type_name`.

    Columns declared with `type_name` come back as FixedDecimal when the
    connection uses detect_types=sqlite3.PARSE_DECLTYPES. sqlite3 never calls
    converters for NULL, so a NULL column reads as None; wrap it with
    NullFixedDecimal.from_optional() where needed.
    """
    sqlite3.register_adapter(FixedDecimal, adapt_fixed_decimal)
    sqlite3.register_adapter(NullFixedDecimal, adapt_null_fixed_decimal)
    sqlite3.register_converter(type_name, convert_fixed_decimal)
    logger.debug("registered sqlite3 adapters and %r converter", type_name)
