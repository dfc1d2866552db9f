"""
fixdec — Fixed-point decimal for financial quantities

A 64-bit fixed-point decimal with 9 fractional digits. Cheap to compare and
hash, exact for addition and free of binary floating-point drift.

================================================================================
QUICK START
================================================================================

Basic usage:

    from fixdec import FixedDecimal, average

    price = FixedDecimal.from_string("0.1")
    qty = FixedDecimal.from_string("0.3")
    price * qty == FixedDecimal.from_string("0.03")     # True, no float drift

    FixedDecimal.from_string("-1.5").floor()            # FixedDecimal('-2')
    FixedDecimal.from_string("1.99").truncate(1)        # FixedDecimal('1.9')
    FixedDecimal.from_string("2.345").round_bank(2)     # FixedDecimal('2.34')

Serialization:

    from fixdec import NullFixedDecimal

    FixedDecimal.from_string("2.5").to_json()           # b'"2.5"'
    NullFixedDecimal.from_json(b"null").valid           # False

================================================================================
"""

# Core type
from .core import (
    FixedDecimal,
    ZERO,
    ONE,
    sum_of,
    average,
    maximum,
    minimum,
)

# Constants
from .config import (
    DIGITS,
    BASE,
    SCALE,
    INT64_MIN,
    INT64_MAX,
    PLACES_MIN,
    PLACES_MAX,
)

# Arbitrary-precision boundary
from .boundary import (
    RoundingService,
    DecimalRounding,
    DEFAULT_ROUNDING,
)

# Nullable wrapper
from .nullable import NullFixedDecimal

# json / sqlite3 integration
from .codec import (
    FixedDecimalJSONEncoder,
    register_sqlite,
)

# Errors
from .errors import (
    FixedDecimalError,
    ParseError,
    DeserializationError,
    RequireError,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Core
    "FixedDecimal",
    "ZERO",
    "ONE",
    "sum_of",
    "average",
    "maximum",
    "minimum",
    # Constants
    "DIGITS",
    "BASE",
    "SCALE",
    "INT64_MIN",
    "INT64_MAX",
    "PLACES_MIN",
    "PLACES_MAX",
    # Boundary
    "RoundingService",
    "DecimalRounding",
    "DEFAULT_ROUNDING",
    # Nullable
    "NullFixedDecimal",
    # Integration
    "FixedDecimalJSONEncoder",
    "register_sqlite",
    # Errors
    "FixedDecimalError",
    "ParseError",
    "DeserializationError",
    "RequireError",
]
