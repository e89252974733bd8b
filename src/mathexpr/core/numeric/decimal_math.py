"""
Arbitrary-precision transcendental functions for ``decimal.Decimal``.

Values are never routed through ``float``. Each public function:

1. raises the working precision by ``GUARD_DIGITS``,
2. reduces its argument into a range where the series converges fast
   (using the constants below),
3. sums at most ``TAYLOR_SERIES_ITERATIONS`` terms, stopping once a term
   drops below an absolute epsilon of ``10 ** -(prec + GUARD_DIGITS)``,
4. rounds the result back to the caller's context.

The precomputed constants carry 40 significant digits. Above that working
precision they are derived from the same series and cached per precision.

Usage:
    ctx = decimal.Context(prec=28)
    sin(Decimal(30), ctx, degrees=True)  # Decimal('0.5000000000000000000000000000')
"""

from __future__ import annotations

import decimal
from collections.abc import Callable
from decimal import Decimal, localcontext
from functools import lru_cache
from typing import NamedTuple

from mathexpr.core.errors import ErrorKind, EvalError

TAYLOR_SERIES_ITERATIONS = 100
GUARD_DIGITS = 5

PI = Decimal("3.141592653589793238462643383279502884197")
HALF_PI = Decimal("1.570796326794896619231321691639751442099")
TWO_PI = Decimal("6.283185307179586476925286766559005768394")
E = Decimal("2.718281828459045235360287471352662497757")
LN_2 = Decimal("0.6931471805599453094172321214581765680755")
LN_10 = Decimal("2.302585092994045684017991454684364207601")
SQRT_2 = Decimal("1.414213562373095048801688724209698078570")

PRECOMPUTED_DIGITS = 40

_ATAN_REDUCTION_LIMIT = Decimal("0.2")


class _Constants(NamedTuple):
    pi: Decimal
    e: Decimal
    half_pi: Decimal
    two_pi: Decimal
    ln_2: Decimal
    ln_10: Decimal
    sqrt_2: Decimal


_PRECOMPUTED = _Constants(PI, E, HALF_PI, TWO_PI, LN_2, LN_10, SQRT_2)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(ctx: decimal.Context, fn: Callable[[], Decimal]) -> Decimal:
    """Evaluate ``fn`` with guard digits, then round to ``ctx``."""
    with localcontext(ctx) as work:
        work.prec = ctx.prec + GUARD_DIGITS
        result = fn()
    return ctx.plus(result)


def _epsilon() -> Decimal:
    return Decimal(1).scaleb(-decimal.getcontext().prec)


def _constants() -> _Constants:
    """Range-reduction constants good to the current working precision."""
    prec = decimal.getcontext().prec
    if prec <= PRECOMPUTED_DIGITS:
        return _PRECOMPUTED
    return _derive_constants(prec)


@lru_cache(maxsize=None)
def _derive_constants(prec: int) -> _Constants:
    with localcontext(decimal.Context(prec=prec + GUARD_DIGITS)):
        sqrt_2 = Decimal(2).sqrt()
        # atan(1) reduces by halving alone, without pi
        pi = 4 * _atan(Decimal(1))
        # ln 2 = 2 ln(sqrt 2) and ln 10 = 3 ln 2 + ln 1.25
        ln_2 = 4 * _atanh_series((sqrt_2 - 1) / (sqrt_2 + 1))
        ln_10 = 3 * ln_2 + 2 * _atanh_series(Decimal(1) / 9)
        e = _exp_series(Decimal(1))
        return _Constants(pi, e, pi / 2, 2 * pi, ln_2, ln_10, sqrt_2)


def _domain_error(message: str) -> EvalError:
    return EvalError(ErrorKind.INVALID_INPUT, message)


def _radians(x: Decimal) -> Decimal:
    return x * _constants().pi / 180


def _degrees(x: Decimal) -> Decimal:
    return x * 180 / _constants().pi


def _reduce_angle(x: Decimal) -> Decimal:
    """Map ``x`` into ``[-pi, pi]``."""
    k = _constants()
    x = x % k.two_pi
    if x > k.pi:
        x -= k.two_pi
    elif x < -k.pi:
        x += k.two_pi
    return x


def _snap(result: Decimal, angle: Decimal) -> Decimal:
    # sin(pi) and cos(pi/2) leave a residue from the finite-precision pi
    if abs(result) < _epsilon() <= abs(angle):
        return Decimal(0)
    return result


# ---------------------------------------------------------------------------
# Series (called at working precision)
# ---------------------------------------------------------------------------


def _exp(x: Decimal) -> Decimal:
    # e^x = 2^k * e^r with |r| <= ln(2) / 2
    ln_2 = _constants().ln_2
    k = (x / ln_2).to_integral_value()
    r = x - k * ln_2
    return _exp_series(r) * Decimal(2) ** int(k)


def _exp_series(r: Decimal) -> Decimal:
    eps = _epsilon()
    term = Decimal(1)
    total = Decimal(1)
    for n in range(1, TAYLOR_SERIES_ITERATIONS + 1):
        term = term * r / n
        total += term
        if abs(term) < eps:
            break
    return total


def _atanh_series(y: Decimal) -> Decimal:
    """atanh(y) for small ``|y|``."""
    y2 = y * y
    eps = _epsilon()
    term = y
    total = y
    for n in range(1, TAYLOR_SERIES_ITERATIONS + 1):
        term *= y2
        step = term / (2 * n + 1)
        total += step
        if abs(step) < eps:
            break
    return total


def _ln(x: Decimal) -> Decimal:
    if x <= 0:
        raise _domain_error("Logarithm is only defined for positive values")
    k = _constants()
    # x = m * 2^halvings * 10^e with 1 <= m <= sqrt(2)
    e = x.adjusted()
    m = x.scaleb(-e)
    halvings = 0
    while m > k.sqrt_2:
        m /= 2
        halvings += 1

    # ln(m) = 2 * atanh((m - 1) / (m + 1))
    return 2 * _atanh_series((m - 1) / (m + 1)) + halvings * k.ln_2 + e * k.ln_10


def _sin(x: Decimal) -> Decimal:
    x = _reduce_angle(x)
    x2 = x * x
    eps = _epsilon()
    term = x
    total = x
    for n in range(1, TAYLOR_SERIES_ITERATIONS + 1):
        term = -term * x2 / ((2 * n) * (2 * n + 1))
        total += term
        if abs(term) < eps:
            break
    return total


def _cos(x: Decimal) -> Decimal:
    x = _reduce_angle(x)
    x2 = x * x
    eps = _epsilon()
    term = Decimal(1)
    total = Decimal(1)
    for n in range(1, TAYLOR_SERIES_ITERATIONS + 1):
        term = -term * x2 / ((2 * n - 1) * (2 * n))
        total += term
        if abs(term) < eps:
            break
    return total


def _atan(x: Decimal) -> Decimal:
    if x == 0:
        return Decimal(0)
    negative = x < 0
    x = abs(x)
    inverted = x > 1
    if inverted:
        x = 1 / x

    # atan(x) = 2 * atan(x / (1 + sqrt(1 + x^2)))
    doublings = 0
    while x > _ATAN_REDUCTION_LIMIT:
        x = x / (1 + (1 + x * x).sqrt())
        doublings += 1

    x2 = x * x
    eps = _epsilon()
    term = x
    total = x
    for n in range(1, TAYLOR_SERIES_ITERATIONS + 1):
        term = -term * x2
        step = term / (2 * n + 1)
        total += step
        if abs(step) < eps:
            break

    total *= 2**doublings
    if inverted:
        total = _constants().half_pi - total
    return -total if negative else total


def _asin(x: Decimal) -> Decimal:
    if abs(x) > 1:
        raise _domain_error("Inverse sine is only defined for values in [-1, 1]")
    if abs(x) == 1:
        return _constants().half_pi.copy_sign(x)
    return _atan(x / (1 - x * x).sqrt())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def pi_constant(ctx: decimal.Context) -> Decimal:
    return _run(ctx, lambda: _constants().pi)


def e_constant(ctx: decimal.Context) -> Decimal:
    return _run(ctx, lambda: _constants().e)


def exp(x: Decimal, ctx: decimal.Context) -> Decimal:
    return _run(ctx, lambda: _exp(x))


def ln(x: Decimal, ctx: decimal.Context) -> Decimal:
    return _run(ctx, lambda: _ln(x))


def log10(x: Decimal, ctx: decimal.Context) -> Decimal:
    return _run(ctx, lambda: _ln(x) / _constants().ln_10)


def log(x: Decimal, base: Decimal, ctx: decimal.Context) -> Decimal:
    """Logarithm of ``x`` in an arbitrary ``base``."""
    return _run(ctx, lambda: _ln(x) / _ln(base))


def cbrt(x: Decimal, ctx: decimal.Context) -> Decimal:
    """Cube root by Newton's method, seeded with the right order of magnitude."""

    def compute() -> Decimal:
        if x == 0:
            return Decimal(0)
        a = abs(x)
        y = Decimal(10) ** (a.adjusted() // 3)
        eps = _epsilon()
        for _ in range(TAYLOR_SERIES_ITERATIONS):
            following = (2 * y + a / (y * y)) / 3
            if abs(following - y) <= eps * following:
                y = following
                break
            y = following
        return y.copy_sign(x)

    return _run(ctx, compute)


def _sine(x: Decimal, degrees: bool) -> Decimal:
    if degrees:
        # Exact zeros; the reduction is exact in degrees
        if x % 180 == 0:
            return Decimal(0)
        return _sin(_radians(x % 360))
    return _snap(_sin(x), x)


def _cosine(x: Decimal, degrees: bool) -> Decimal:
    if degrees:
        if (x - 90) % 180 == 0:
            return Decimal(0)
        return _cos(_radians(x % 360))
    return _snap(_cos(x), x)


def sin(x: Decimal, ctx: decimal.Context, degrees: bool = False) -> Decimal:
    return _run(ctx, lambda: _sine(x, degrees))


def cos(x: Decimal, ctx: decimal.Context, degrees: bool = False) -> Decimal:
    return _run(ctx, lambda: _cosine(x, degrees))


def tan(x: Decimal, ctx: decimal.Context, degrees: bool = False) -> Decimal:
    return _run(ctx, lambda: _sine(x, degrees) / _cosine(x, degrees))


def asin(x: Decimal, ctx: decimal.Context, degrees: bool = False) -> Decimal:
    def compute() -> Decimal:
        result = _asin(x)
        return _degrees(result) if degrees else result

    return _run(ctx, compute)


def acos(x: Decimal, ctx: decimal.Context, degrees: bool = False) -> Decimal:
    def compute() -> Decimal:
        result = _constants().half_pi - _asin(x)
        return _degrees(result) if degrees else result

    return _run(ctx, compute)


def atan(x: Decimal, ctx: decimal.Context, degrees: bool = False) -> Decimal:
    def compute() -> Decimal:
        result = _atan(x)
        return _degrees(result) if degrees else result

    return _run(ctx, compute)


def atan2(y: Decimal, x: Decimal, ctx: decimal.Context, degrees: bool = False) -> Decimal:
    """Angle of the point ``(x, y)``, matching ``math.atan2`` quadrants."""

    def compute() -> Decimal:
        k = _constants()
        if x > 0:
            result = _atan(y / x)
        elif x < 0:
            result = _atan(y / x) + (k.pi if y >= 0 else -k.pi)
        elif y > 0:
            result = k.half_pi
        elif y < 0:
            result = -k.half_pi
        else:
            result = Decimal(0)
        return _degrees(result) if degrees else result

    return _run(ctx, compute)


def sinh(x: Decimal, ctx: decimal.Context) -> Decimal:
    def compute() -> Decimal:
        e = _exp(x)
        return (e - 1 / e) / 2

    return _run(ctx, compute)


def cosh(x: Decimal, ctx: decimal.Context) -> Decimal:
    def compute() -> Decimal:
        e = _exp(x)
        return (e + 1 / e) / 2

    return _run(ctx, compute)


def tanh(x: Decimal, ctx: decimal.Context) -> Decimal:
    def compute() -> Decimal:
        # Past this point tanh(x) rounds to +-1 at the working precision
        if 2 * abs(x) > _constants().ln_10 * (decimal.getcontext().prec + 1):
            return Decimal(1).copy_sign(x)
        e2 = _exp(2 * x)
        return (e2 - 1) / (e2 + 1)

    return _run(ctx, compute)


def asinh(x: Decimal, ctx: decimal.Context) -> Decimal:
    def compute() -> Decimal:
        a = abs(x)
        result = _ln(a + (a * a + 1).sqrt())
        return result.copy_sign(x)

    return _run(ctx, compute)


def acosh(x: Decimal, ctx: decimal.Context) -> Decimal:
    def compute() -> Decimal:
        if x < 1:
            raise _domain_error("Inverse hyperbolic cosine is only defined for values >= 1")
        return _ln(x + (x * x - 1).sqrt())

    return _run(ctx, compute)


def atanh(x: Decimal, ctx: decimal.Context) -> Decimal:
    def compute() -> Decimal:
        if abs(x) >= 1:
            raise _domain_error(
                "Inverse hyperbolic tangent is only defined for values in (-1, 1)"
            )
        return _ln((1 + x) / (1 - x)) / 2

    return _run(ctx, compute)


def to_radians(x: Decimal, ctx: decimal.Context) -> Decimal:
    return _run(ctx, lambda: _radians(x))


def to_degrees(x: Decimal, ctx: decimal.Context) -> Decimal:
    return _run(ctx, lambda: _degrees(x))
