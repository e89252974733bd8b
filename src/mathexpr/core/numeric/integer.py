"""
Checked integer backend.

``IntegerNumeric(bits=64)`` behaves like a signed two's-complement machine
integer whose every operation is range checked. ``IntegerNumeric(bits=None)``
is an unbounded big integer; only exponentiation is limited, so that a
single ``^`` cannot allocate an absurd amount of memory.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

from mathexpr.core.numeric.base import CheckedNumeric, Rounding

# Results of ^ on a big integer may not exceed this many bits
BIGINT_POW_LIMIT_BITS = 1 << 22


class IntegerNumeric(CheckedNumeric):
    """Signed integers with checked arithmetic and truncating division."""

    literal_pattern = re.compile(r"\d+")

    def __init__(self, bits: int | None = 64) -> None:
        super().__init__()
        if bits is not None and bits < 2:
            raise ValueError(f"Integer width must be at least 2 bits, got {bits}")
        self.bits = bits
        self.min_value = -(1 << (bits - 1)) if bits else None
        self.max_value = (1 << (bits - 1)) - 1 if bits else None

    def __repr__(self) -> str:
        return f"IntegerNumeric(bits={self.bits})"

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"i{self.bits}" if self.bits else "bigint"

    def _check(self, value: int, what: str = "result") -> int:
        if self.bits and not (self.min_value <= value <= self.max_value):
            raise self.overflow(what)
        return value

    # -- conversion ---------------------------------------------------------

    def parse(self, literal: str) -> int:
        value = int(literal)
        if self.bits and value > self.max_value:
            raise ValueError(f"Integer literal {literal} does not fit in {self.bits} bits")
        return value

    def coerce(self, value: Any) -> int:
        """Convert to an integer; non-integral numbers truncate toward zero."""
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return self._check(value, f"value {value}")
        if isinstance(value, float):
            return self.from_float(value)
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise self.overflow(f"value {value}")
            return self._check(int(value), f"value {value}")
        if isinstance(value, str):
            return self._check(int(value.strip()), f"value {value}")
        raise TypeError(f"Cannot convert {type(value).__name__} to an integer")

    def from_int(self, n: int) -> int:
        return self._check(n)

    def from_float(self, x: float) -> int:
        if not math.isfinite(x):
            raise self.overflow(f"value {x}")
        return self._check(int(x), f"value {x}")

    def to_float(self, value: int) -> float:
        try:
            return float(value)
        except OverflowError as e:
            raise self.overflow(f"value {value}") from e

    def to_int(self, value: int) -> int:
        return value

    # -- arithmetic ---------------------------------------------------------

    def add(self, a: int, b: int) -> int:
        return self._check(a + b)

    def sub(self, a: int, b: int) -> int:
        return self._check(a - b)

    def mul(self, a: int, b: int) -> int:
        return self._check(a * b)

    def _truncated_quotient(self, a: int, b: int) -> int:
        if b == 0:
            raise self.division_by_zero()
        q = abs(a) // abs(b)
        return q if (a < 0) == (b < 0) else -q

    def div(self, a: int, b: int) -> int:
        return self._check(self._truncated_quotient(a, b))

    def rem(self, a: int, b: int) -> int:
        return a - b * self._truncated_quotient(a, b)

    def neg(self, a: int) -> int:
        return self._check(-a)

    def pow(self, a: int, b: int) -> int:
        if b < 0:
            if a == 0:
                raise self.division_by_zero()
            if a == 1:
                return 1
            if a == -1:
                return -1 if b % 2 else 1
            # |a| > 1: 1 / a^|b| truncates to zero
            return 0
        if abs(a) > 1:
            limit = self.bits if self.bits else BIGINT_POW_LIMIT_BITS
            if b * math.log2(abs(a)) > limit:
                raise self.overflow(f"{a} ^ {b}")
        return self._check(a**b)

    def to_integral(self, value: int, rounding: Rounding) -> int:
        return value

    def is_integer(self, value: int) -> bool:
        return True
