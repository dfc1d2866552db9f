"""
errors.py — Exception hierarchy for fixdec

Parsing and deserialization failures are ValueErrors, so callers that already
guard numeric input with `except ValueError` keep working. Arithmetic is not
trapped: overflow wraps and division by zero is Python's ZeroDivisionError.
"""


class FixedDecimalError(ValueError):
    """Base class for input errors raised by fixdec."""


class ParseError(FixedDecimalError):
    """
    Raised when text is not a valid decimal literal.

    Used by FixedDecimal.from_string() and every text-based deserializer.
    """

    def __init__(self, text, reason: str = "invalid decimal literal"):
        self.text = text
        self.reason = reason
        super().__init__(f"can't parse {text!r}: {reason}")


class DeserializationError(FixedDecimalError):
    """Raised for malformed JSON, binary or database-driver input."""


class RequireError(RuntimeError):
    """
    Raised by FixedDecimal.require_from_string() on a bad literal.

    Signals a programming mistake (a bad literal in source), not bad input.
    """
