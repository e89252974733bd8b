"""
Numeric backends for the expression engine.

Unchecked (sentinel values on failure):
- FloatNumeric: Python float
- ComplexNumeric: Python complex

Checked (EvalError on failure):
- IntegerNumeric: fixed-width signed integers, or big integers with bits=None
- DecimalNumeric: decimal.Decimal at a configurable precision
"""

from mathexpr.core.numeric.base import (
    CheckedNumeric,
    Numeric,
    Rounding,
    UncheckedNumeric,
)
from mathexpr.core.numeric.decimals import DecimalNumeric
from mathexpr.core.numeric.floating import ComplexNumeric, FloatNumeric
from mathexpr.core.numeric.integer import IntegerNumeric

__all__ = [
    "CheckedNumeric",
    "ComplexNumeric",
    "DecimalNumeric",
    "FloatNumeric",
    "IntegerNumeric",
    "Numeric",
    "Rounding",
    "UncheckedNumeric",
]
