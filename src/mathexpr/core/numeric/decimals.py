"""
Checked arbitrary-precision decimal backend.

Arithmetic runs through a private ``decimal.Context`` whose ``Overflow``,
``Underflow``, ``Subnormal``, ``DivisionByZero`` and ``InvalidOperation``
signals are trapped, so every failure surfaces as an ``EvalError``. Results
below ``10 ** -emax`` are reported as ``OVERFLOW``, like those above
``10 ** emax``. Transcendental functions use ``decimal_math`` and never
degrade through ``float``.
"""

from __future__ import annotations

import decimal
import math
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from mathexpr.core.errors import ErrorKind, EvalError
from mathexpr.core.numeric import decimal_math
from mathexpr.core.numeric.base import CheckedNumeric, Rounding

DEFAULT_PRECISION = 28
DEFAULT_EMAX = 999_999
# decimal_math series stay within their iteration bound up to this precision
MAX_PRECISION = 100

_ROUNDING_MODES: dict[Rounding, str] = {
    Rounding.FLOOR: decimal.ROUND_FLOOR,
    Rounding.CEIL: decimal.ROUND_CEILING,
    Rounding.ROUND: decimal.ROUND_HALF_UP,
    Rounding.TRUNC: decimal.ROUND_DOWN,
}


class DecimalNumeric(CheckedNumeric):
    """``decimal.Decimal`` with a fixed precision and exponent range."""

    name = "decimal"

    def __init__(self, precision: int = DEFAULT_PRECISION, emax: int = DEFAULT_EMAX) -> None:
        if not 1 <= precision <= MAX_PRECISION:
            raise ValueError(
                f"Decimal precision must be between 1 and {MAX_PRECISION}, got {precision}"
            )
        super().__init__()
        self.context = decimal.Context(
            prec=precision,
            Emax=emax,
            Emin=-emax,
            traps=[
                decimal.InvalidOperation,
                decimal.DivisionByZero,
                decimal.Overflow,
                decimal.Underflow,
                decimal.Subnormal,
            ],
        )
        ctx = self.context
        self.transcendentals.update(
            {
                "sqrt": self._checked(ctx.sqrt),
                "cbrt": self._checked(lambda x: decimal_math.cbrt(x, ctx)),
                "exp": self._checked(lambda x: decimal_math.exp(x, ctx)),
                "ln": self._checked(lambda x: decimal_math.ln(x, ctx)),
                "log": self._checked(lambda x: decimal_math.log10(x, ctx)),
                "sin": self._checked(lambda x: decimal_math.sin(x, ctx, degrees=True)),
                "cos": self._checked(lambda x: decimal_math.cos(x, ctx, degrees=True)),
                "tan": self._checked(lambda x: decimal_math.tan(x, ctx, degrees=True)),
                "asin": self._checked(lambda x: decimal_math.asin(x, ctx, degrees=True)),
                "acos": self._checked(lambda x: decimal_math.acos(x, ctx, degrees=True)),
                "atan": self._checked(lambda x: decimal_math.atan(x, ctx, degrees=True)),
                "atan2": self._checked(lambda y, x: decimal_math.atan2(y, x, ctx, degrees=True)),
                "sinh": self._checked(lambda x: decimal_math.sinh(x, ctx)),
                "cosh": self._checked(lambda x: decimal_math.cosh(x, ctx)),
                "tanh": self._checked(lambda x: decimal_math.tanh(x, ctx)),
                "asinh": self._checked(lambda x: decimal_math.asinh(x, ctx)),
                "acosh": self._checked(lambda x: decimal_math.acosh(x, ctx)),
                "atanh": self._checked(lambda x: decimal_math.atanh(x, ctx)),
                "to_radians": self._checked(lambda x: decimal_math.to_radians(x, ctx)),
                "to_degrees": self._checked(lambda x: decimal_math.to_degrees(x, ctx)),
            }
        )

    def __repr__(self) -> str:
        return f"DecimalNumeric(precision={self.context.prec})"

    def _checked(self, fn: Callable[..., Decimal]) -> Callable[..., Decimal]:
        """Wrap ``fn`` so trapped decimal signals become ``EvalError``."""

        def call(*args: Decimal) -> Decimal:
            try:
                return fn(*args)
            except ZeroDivisionError as e:
                # decimal.DivisionByZero
                raise self.division_by_zero() from e
            except decimal.Overflow as e:
                raise self.overflow("result") from e
            except decimal.Subnormal as e:
                # also decimal.Underflow
                raise self.overflow("result magnitude") from e
            except decimal.InvalidOperation as e:
                raise EvalError(ErrorKind.INVALID_INPUT, "Invalid decimal operation") from e

        return call

    # -- conversion ---------------------------------------------------------

    def parse(self, literal: str) -> Decimal:
        try:
            return self.context.create_decimal(literal)
        except (decimal.Overflow, decimal.Subnormal) as e:
            raise ValueError(f"Decimal literal {literal} is out of range") from e

    def format(self, value: Decimal) -> str:
        normalized = value.normalize(self.context)
        if abs(normalized.adjusted()) < self.context.prec:
            return format(normalized, "f")
        return str(normalized)

    def coerce(self, value: Any) -> Decimal:
        if isinstance(value, float):
            return self.from_float(value)
        return self._checked(self.context.create_decimal)(value)

    def constants(self) -> dict[str, Any]:
        return {
            "PI": decimal_math.pi_constant(self.context),
            "E": decimal_math.e_constant(self.context),
        }

    def from_int(self, n: int) -> Decimal:
        return self._checked(self.context.create_decimal)(n)

    def from_float(self, x: float) -> Decimal:
        if not math.isfinite(x):
            raise self.overflow(f"value {x}")
        # repr() gives the shortest string that round-trips, so 0.1 stays 0.1
        return self._checked(self.context.create_decimal)(repr(x))

    def to_float(self, value: Decimal) -> float:
        result = float(value)
        if not math.isfinite(result):
            raise self.overflow(f"value {self.format(value)}")
        return result

    def to_int(self, value: Decimal) -> int:
        return int(value)

    # -- arithmetic ---------------------------------------------------------

    def add(self, a: Decimal, b: Decimal) -> Decimal:
        return self._checked(self.context.add)(a, b)

    def sub(self, a: Decimal, b: Decimal) -> Decimal:
        return self._checked(self.context.subtract)(a, b)

    def mul(self, a: Decimal, b: Decimal) -> Decimal:
        return self._checked(self.context.multiply)(a, b)

    def div(self, a: Decimal, b: Decimal) -> Decimal:
        # 0 / 0 is signalled as InvalidOperation
        if b == 0:
            raise self.division_by_zero()
        return self._checked(self.context.divide)(a, b)

    def rem(self, a: Decimal, b: Decimal) -> Decimal:
        # so is x % 0
        if b == 0:
            raise self.division_by_zero()
        return self._checked(self.context.remainder)(a, b)

    def neg(self, a: Decimal) -> Decimal:
        return self._checked(self.context.minus)(a)

    def pow(self, a: Decimal, b: Decimal) -> Decimal:
        # 0 ^ -n is Infinity without a signal
        if a == 0 and b < 0:
            raise self.division_by_zero()
        return self._checked(self.context.power)(a, b)

    def to_integral(self, value: Decimal, rounding: Rounding) -> Decimal:
        return value.to_integral_value(rounding=_ROUNDING_MODES[rounding], context=self.context)

    def is_integer(self, value: Decimal) -> bool:
        return value == value.to_integral_value()
