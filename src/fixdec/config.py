"""
Central configuration (SSOT) for the fixed-point representation.

These are compile-time constants. Nothing in fixdec mutates them, and the
representation of every stored value depends on them: changing DIGITS changes
the meaning of every persisted raw integer.
"""

from typing import Final

# --- Scale ---
DIGITS: Final[int] = 9          # fractional digits
BASE: Final[int] = 10
SCALE: Final[int] = BASE ** DIGITS

# --- Storage width (signed 64-bit) ---
INT64_BITS: Final[int] = 64
INT64_MIN: Final[int] = -(2 ** (INT64_BITS - 1))
INT64_MAX: Final[int] = 2 ** (INT64_BITS - 1) - 1

# --- Places and shift arguments (signed 8-bit) ---
PLACES_MIN: Final[int] = -128
PLACES_MAX: Final[int] = 127

# --- Cash rounding ---
# Interval in hundredths of a unit -> multiplier that turns the interval into 1.
CASH_INTERVALS: Final[dict[int, int]] = {
    5: 20,
    10: 10,
    25: 4,
    50: 2,
    100: 1,
}

# --- Boundary arithmetic ---
# Precision of the private decimal context used for rounding and formatting.
# Wide enough for a full int64 coefficient plus any int8 places argument.
BOUNDARY_PRECISION: Final[int] = 400

# --- Persistence ---
# Declared column type for sqlite3. Contains "TEXT" so SQLite gives the column
# TEXT affinity and stores values verbatim instead of coercing them to REAL.
SQLITE_TYPE_NAME: Final[str] = "DECIMAL_TEXT"
