"""
Unchecked floating-point backends: ``float`` and ``complex``.

Neither backend ever raises for arithmetic: division by zero and overflow
produce infinities or NaN the way IEEE 754 does.
"""

from __future__ import annotations

import cmath
import math
import re
from decimal import Decimal
from typing import Any

from mathexpr.core.errors import ErrorKind, EvalError
from mathexpr.core.numeric.base import DECIMAL_LITERAL_RE, Rounding, UncheckedNumeric


def _round_float(x: float, rounding: Rounding) -> float:
    if not math.isfinite(x):
        return x
    if rounding == Rounding.FLOOR:
        return float(math.floor(x))
    if rounding == Rounding.CEIL:
        return float(math.ceil(x))
    if rounding == Rounding.ROUND:
        return math.copysign(math.floor(abs(x) + 0.5), x)
    return float(math.trunc(x))


def _format_float(x: float) -> str:
    if math.isfinite(x) and x.is_integer() and abs(x) < 1e16:
        return str(int(x))
    return repr(x)


class FloatNumeric(UncheckedNumeric):
    """Python ``float`` (IEEE 754 double)."""

    name = "float"

    def parse(self, literal: str) -> float:
        return float(literal)

    def format(self, value: float) -> str:
        return _format_float(value)

    def coerce(self, value: Any) -> float:
        if isinstance(value, int) and not isinstance(value, bool):
            return self.from_int(value)
        return float(value)

    def from_int(self, n: int) -> float:
        try:
            return float(n)
        except OverflowError:
            return math.inf if n > 0 else -math.inf

    def from_float(self, x: float) -> float:
        return x

    def to_float(self, value: float) -> float:
        return value

    def to_int(self, value: float) -> int:
        if not math.isfinite(value):
            raise EvalError(ErrorKind.OVERFLOW, f"Cannot convert {value} to an integer")
        return int(value)

    def add(self, a: float, b: float) -> float:
        return a + b

    def sub(self, a: float, b: float) -> float:
        return a - b

    def mul(self, a: float, b: float) -> float:
        return a * b

    def div(self, a: float, b: float) -> float:
        if b == 0:
            if a == 0 or math.isnan(a):
                return math.nan
            return math.copysign(math.inf, a) * math.copysign(1.0, b)
        return a / b

    def rem(self, a: float, b: float) -> float:
        if b == 0 or not math.isfinite(a):
            return math.nan
        return math.fmod(a, b)

    def neg(self, a: float) -> float:
        return -a

    def pow(self, a: float, b: float) -> float:
        try:
            return math.pow(a, b)
        except OverflowError:
            odd = b.is_integer() and b % 2 == 1
            return -math.inf if a < 0 and odd else math.inf
        except ValueError:
            # 0 ** negative, or a negative base with a fractional exponent
            return math.inf if a == 0 else math.nan

    def to_integral(self, value: float, rounding: Rounding) -> float:
        return _round_float(value, rounding)

    def is_finite(self, value: float) -> bool:
        return math.isfinite(value)

    def is_integer(self, value: float) -> bool:
        return math.isfinite(value) and value.is_integer()


# ---------------------------------------------------------------------------
# Complex
# ---------------------------------------------------------------------------

# A real literal with an optional imaginary suffix: 2, 2.5, 3i, 1.5j
COMPLEX_LITERAL_RE = re.compile(DECIMAL_LITERAL_RE.pattern + r"(?:[ij](?!\w))?")

_DEG = math.pi / 180


class ComplexNumeric(UncheckedNumeric):
    """Python ``complex``; functions use the principal branch from ``cmath``."""

    name = "complex"
    literal_pattern = COMPLEX_LITERAL_RE

    def __init__(self) -> None:
        super().__init__()
        self.transcendentals.update(
            {
                "abs": lambda z: complex(abs(z)),
                "sqrt": cmath.sqrt,
                "cbrt": lambda z: z ** (1 / 3) if z.imag or z.real >= 0 else -((-z) ** (1 / 3)),
                "exp": cmath.exp,
                "ln": cmath.log,
                "log": cmath.log10,
                "sin": lambda z: cmath.sin(z * _DEG),
                "cos": lambda z: cmath.cos(z * _DEG),
                "tan": lambda z: cmath.tan(z * _DEG),
                "asin": lambda z: cmath.asin(z) / _DEG,
                "acos": lambda z: cmath.acos(z) / _DEG,
                "atan": lambda z: cmath.atan(z) / _DEG,
                "sinh": cmath.sinh,
                "cosh": cmath.cosh,
                "tanh": cmath.tanh,
                "asinh": cmath.asinh,
                "acosh": cmath.acosh,
                "atanh": cmath.atanh,
                "to_radians": lambda z: z * _DEG,
                "to_degrees": lambda z: z / _DEG,
            }
        )

    def parse(self, literal: str) -> complex:
        if literal[-1] in "ij":
            return complex(0.0, float(literal[:-1]))
        return complex(float(literal))

    def format(self, value: complex) -> str:
        if value.imag == 0:
            return _format_float(value.real)
        imag = _format_float(abs(value.imag))
        if value.real == 0:
            return f"{'-' if value.imag < 0 else ''}{imag}i"
        sign = "-" if value.imag < 0 else "+"
        return f"{_format_float(value.real)}{sign}{imag}i"

    def coerce(self, value: Any) -> complex:
        if isinstance(value, int) and not isinstance(value, bool):
            return self.from_int(value)
        if isinstance(value, Decimal):
            return complex(float(value))
        if isinstance(value, str) and value.endswith("i"):
            return complex(value[:-1] + "j")
        return complex(value)

    def constants(self) -> dict[str, Any]:
        return {**super().constants(), "i": 1j}

    def from_int(self, n: int) -> complex:
        try:
            return complex(n)
        except OverflowError:
            return complex(math.inf if n > 0 else -math.inf)

    def from_float(self, x: float) -> complex:
        return complex(x)

    def _real(self, value: complex) -> float:
        if value.imag != 0:
            raise EvalError(
                ErrorKind.INVALID_INPUT, f"{self.format(value)} has a non-zero imaginary part"
            )
        return value.real

    def to_float(self, value: complex) -> float:
        return self._real(value)

    def to_int(self, value: complex) -> int:
        real = self._real(value)
        if not math.isfinite(real):
            raise EvalError(ErrorKind.OVERFLOW, f"Cannot convert {real} to an integer")
        return int(real)

    def add(self, a: complex, b: complex) -> complex:
        return a + b

    def sub(self, a: complex, b: complex) -> complex:
        return a - b

    def mul(self, a: complex, b: complex) -> complex:
        return a * b

    def div(self, a: complex, b: complex) -> complex:
        if b == 0:
            return complex(math.nan, math.nan) if a == 0 else complex(math.inf, math.inf)
        return a / b

    def rem(self, a: complex, b: complex) -> complex:
        x, y = self._real(a), self._real(b)
        if y == 0 or not math.isfinite(x):
            return complex(math.nan)
        return complex(math.fmod(x, y))

    def neg(self, a: complex) -> complex:
        # -(1+0j) is (-1-0j), which puts sqrt(-1) on the wrong branch
        return 0j - a

    def pow(self, a: complex, b: complex) -> complex:
        try:
            return a**b
        except ZeroDivisionError:
            return complex(math.inf, math.inf)
        except OverflowError:
            return complex(math.inf, math.inf)

    def to_integral(self, value: complex, rounding: Rounding) -> complex:
        return complex(_round_float(value.real, rounding), _round_float(value.imag, rounding))

    def compare(self, a: complex, b: complex) -> int:
        x, y = self._real(a), self._real(b)
        return (x > y) - (x < y)

    def is_finite(self, value: complex) -> bool:
        return cmath.isfinite(value)

    def is_integer(self, value: complex) -> bool:
        return value.imag == 0 and math.isfinite(value.real) and value.real.is_integer()
