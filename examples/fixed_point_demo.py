#!/usr/bin/env python3
"""
fixed_point_demo.py — Why a 64-bit fixed-point decimal

================================================================================
THE BUG
================================================================================

    >>> 0.1 * 0.3
    0.030000000000000002

IEEE 754 binary floats can't hold 0.1 exactly, so every price times quantity
drifts a little.

================================================================================
THE FIX
================================================================================

    from fixdec import FixedDecimal

    FixedDecimal.from_string("0.1") * FixedDecimal.from_string("0.3")
    # FixedDecimal('0.03')

The value is one int64 counting billionths. Compare and hash are integer
operations, and rounding modes are explicit.

================================================================================
"""

import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fixdec import (
    FixedDecimal,
    FixedDecimalJSONEncoder,
    NullFixedDecimal,
    ParseError,
    average,
)


def demonstrate_bug():
    """Show the floating-point drift."""
    print("=" * 60)
    print("THE BUG")
    print("=" * 60)
    print()
    result = 0.1 * 0.3
    print(">>> 0.1 * 0.3")
    print(f"{result}")
    print(f"Equal to 0.03? {result == 0.03}")
    print()


def demonstrate_solution():
    """Show exact fixed-point arithmetic."""
    print("=" * 60)
    print("THE SOLUTION")
    print("=" * 60)
    print()

    price = FixedDecimal.from_string("0.1")
    qty = FixedDecimal.from_string("0.3")
    product = price * qty
    print(f"{price} * {qty} = {product}")
    print(f"Equal to 0.03? {product == FixedDecimal.from_string('0.03')}")
    print(f"Raw int64:     {product.raw}")
    print()

    third = FixedDecimal.from_parts(1, 0) / FixedDecimal.from_parts(3, 0)
    print(f"1 / 3 = {third}  (truncated at 9 digits)")
    print()


def demonstrate_rounding():
    """Show floor, truncate and the rounding modes."""
    print("=" * 60)
    print("ROUNDING")
    print("=" * 60)
    print()

    v = FixedDecimal.from_string("-1.5")
    print(f"floor({v})              = {v.floor()}")
    print(f"truncate(1.99, 1)       = {FixedDecimal.from_string('1.99').truncate(1)}")

    tie = FixedDecimal.from_string("2.345")
    print(f"round({tie}, 2)       = {tie.round(2)}")
    print(f"round_bank({tie}, 2)  = {tie.round_bank(2)}")
    print(f"round_cash(3.43, 5)     = {FixedDecimal.from_string('3.43').string_fixed_cash(5)}")

    values = [FixedDecimal.from_parts(1, 0), FixedDecimal.from_parts(1, 0), FixedDecimal.from_parts(0, 0)]
    print(f"average(1, 1, 0)        = {average(values)}  (remainder dropped)")
    print()


def demonstrate_parsing():
    """Show strict parsing."""
    print("=" * 60)
    print("PARSING")
    print("=" * 60)
    print()

    print('>>> FixedDecimal.from_string("not-a-number")')
    try:
        FixedDecimal.from_string("not-a-number")
    except ParseError as e:
        print(f"ParseError: {e}")
    print()


def demonstrate_serialization():
    """Show JSON and nullable serialization."""
    print("=" * 60)
    print("SERIALIZATION")
    print("=" * 60)
    print()

    invoice = {
        "total": FixedDecimal.from_string("1234567.123456789"),
        "discount": NullFixedDecimal.null(),
    }
    encoded = json.dumps(invoice, cls=FixedDecimalJSONEncoder)
    print(f"JSON:     {encoded}")

    restored = FixedDecimal.from_json(invoice["total"].to_json())
    print(f"Restored: {restored}")
    print(f"Equal:    {restored == invoice['total']}")
    print(f"Binary:   {restored.to_binary().hex()}")
    print()


def main():
    """Run all demonstrations."""
    demonstrate_bug()
    demonstrate_solution()
    demonstrate_rounding()
    demonstrate_parsing()
    demonstrate_serialization()


if __name__ == "__main__":
    main()
