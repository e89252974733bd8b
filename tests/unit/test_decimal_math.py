"""Tests for the arbitrary-precision decimal series functions."""

from __future__ import annotations

import decimal
from collections.abc import Callable
from decimal import Decimal

import pytest

from mathexpr.core.errors import ErrorKind, EvalError
from mathexpr.core.numeric import decimal_math as dm

SeriesFn = Callable[..., Decimal]


@pytest.fixture
def ctx() -> decimal.Context:
    return decimal.Context(prec=28)


def close(actual: Decimal, expected: str | int | Decimal, tol: str = "1e-25") -> bool:
    return abs(actual - Decimal(expected)) <= Decimal(tol)


# ============================================================================
# Exponentials and logarithms
# ============================================================================


class TestExpLog:
    def test_exp(self, ctx: decimal.Context) -> None:
        assert close(dm.exp(Decimal(1), ctx), dm.E)
        assert dm.exp(Decimal(0), ctx) == 1
        assert close(dm.exp(Decimal(-1), ctx), "0.3678794411714423215955237702")

    def test_exp_large_argument(self, ctx: decimal.Context) -> None:
        result = dm.exp(Decimal(100), ctx)
        assert close(result / Decimal("2.688117141816135448412625551580e43"), 1)

    def test_ln(self, ctx: decimal.Context) -> None:
        assert close(dm.ln(dm.E, ctx), 1)
        assert close(dm.ln(Decimal(10), ctx), dm.LN_10)
        assert close(dm.ln(Decimal("0.5"), ctx), -dm.LN_2)
        assert dm.ln(Decimal(1), ctx) == 0

    @pytest.mark.parametrize("value", ["0", "-1"])
    def test_ln_domain(self, ctx: decimal.Context, value: str) -> None:
        with pytest.raises(EvalError) as exc_info:
            dm.ln(Decimal(value), ctx)
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    def test_log10(self, ctx: decimal.Context) -> None:
        assert close(dm.log10(Decimal(1000), ctx), 3)
        assert close(dm.log10(Decimal("0.01"), ctx), -2)

    def test_log_base(self, ctx: decimal.Context) -> None:
        assert close(dm.log(Decimal(8), Decimal(2), ctx), 3)

    def test_result_is_rounded_to_context(self, ctx: decimal.Context) -> None:
        result = dm.ln(Decimal(2), ctx)
        assert len(result.as_tuple().digits) == 28

    def test_higher_precision(self) -> None:
        ctx = decimal.Context(prec=35)
        assert close(dm.exp(Decimal(1), ctx), dm.E, "1e-33")


# ============================================================================
# Above the precomputed constants
# ============================================================================


class TestHighPrecision:
    """Past 40 digits the constants are derived, so results track the context."""

    @pytest.fixture
    def ctx60(self) -> decimal.Context:
        return decimal.Context(prec=60)

    def test_ln_matches_decimal(self, ctx60: decimal.Context) -> None:
        for value in ("2", "10", "0.001", "123.456"):
            assert close(dm.ln(Decimal(value), ctx60), ctx60.ln(Decimal(value)), "1e-57")

    def test_exp_matches_decimal(self, ctx60: decimal.Context) -> None:
        for value in ("1", "2.5", "-3"):
            assert close(dm.exp(Decimal(value), ctx60), ctx60.exp(Decimal(value)), "1e-57")

    def test_log10_matches_decimal(self, ctx60: decimal.Context) -> None:
        assert close(dm.log10(Decimal(7), ctx60), ctx60.log10(Decimal(7)), "1e-58")

    def test_constants(self, ctx60: decimal.Context) -> None:
        pi = "3.14159265358979323846264338327950288419716939937510582097494"
        e = "2.71828182845904523536028747135266249775724709369995957496697"
        assert close(dm.pi_constant(ctx60), pi, "1e-58")
        assert close(dm.e_constant(ctx60), e, "1e-58")

    def test_degrees(self, ctx60: decimal.Context) -> None:
        assert close(dm.sin(Decimal(30), ctx60, degrees=True), "0.5", "1e-58")
        assert close(dm.atan(Decimal(1), ctx60, degrees=True), 45, "1e-57")

    def test_maximum_precision(self) -> None:
        ctx = decimal.Context(prec=100)
        assert close(dm.ln(Decimal(2), ctx), ctx.ln(Decimal(2)), "1e-98")
        assert close(dm.exp(Decimal(1), ctx), ctx.exp(Decimal(1)), "1e-98")


# ============================================================================
# Roots
# ============================================================================


class TestCbrt:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("27", "3"),
            ("-8", "-2"),
            ("0", "0"),
            ("0.001", "0.1"),
            ("2", "1.259921049894873164767210607"),
        ],
    )
    def test_cbrt(self, ctx: decimal.Context, value: str, expected: str) -> None:
        assert close(dm.cbrt(Decimal(value), ctx), expected)


# ============================================================================
# Trigonometry
# ============================================================================


class TestTrig:
    """Angles in degrees unless ``degrees=False``."""

    @pytest.mark.parametrize(
        "fn,value,expected",
        [
            (dm.sin, "30", "0.5"),
            (dm.sin, "-90", "-1"),
            (dm.sin, "390", "0.5"),
            (dm.cos, "60", "0.5"),
            (dm.cos, "180", "-1"),
            (dm.tan, "45", "1"),
            (dm.tan, "-45", "-1"),
        ],
    )
    def test_degrees(
        self, ctx: decimal.Context, fn: SeriesFn, value: str, expected: str
    ) -> None:
        assert close(fn(Decimal(value), ctx, degrees=True), expected)

    @pytest.mark.parametrize(
        "fn,value",
        [(dm.sin, "0"), (dm.sin, "180"), (dm.sin, "-360"), (dm.cos, "90"), (dm.cos, "270")],
    )
    def test_exact_zeros(self, ctx: decimal.Context, fn: SeriesFn, value: str) -> None:
        assert fn(Decimal(value), ctx, degrees=True) == 0

    def test_tan_pole(self, ctx: decimal.Context) -> None:
        with pytest.raises(ZeroDivisionError):
            dm.tan(Decimal(90), ctx, degrees=True)

    def test_radians(self, ctx: decimal.Context) -> None:
        assert close(dm.sin(dm.HALF_PI, ctx), 1)
        assert close(dm.cos(dm.PI, ctx), -1)
        assert close(dm.sin(dm.PI, ctx), 0)
        assert close(dm.sin(Decimal(1), ctx), "0.8414709848078965066525023216")

    def test_inverse(self, ctx: decimal.Context) -> None:
        assert close(dm.asin(Decimal(1), ctx, degrees=True), 90)
        assert close(dm.asin(Decimal("0.5"), ctx, degrees=True), 30)
        assert close(dm.acos(Decimal("0.5"), ctx, degrees=True), 60)
        assert close(dm.acos(Decimal(-1), ctx, degrees=True), 180)
        assert close(dm.atan(Decimal(1), ctx, degrees=True), 45)
        assert close(dm.atan(Decimal(-1000), ctx), "-1.569796327128229752564797882")

    def test_inverse_domain(self, ctx: decimal.Context) -> None:
        with pytest.raises(EvalError):
            dm.asin(Decimal(2), ctx)
        with pytest.raises(EvalError):
            dm.acos(Decimal("-1.5"), ctx)

    @pytest.mark.parametrize(
        "y,x,expected",
        [
            ("1", "1", "45"),
            ("1", "-1", "135"),
            ("-1", "-1", "-135"),
            ("-1", "0", "-90"),
            ("1", "0", "90"),
            ("0", "-1", "180"),
            ("0", "0", "0"),
        ],
    )
    def test_atan2_quadrants(self, ctx: decimal.Context, y: str, x: str, expected: str) -> None:
        assert close(dm.atan2(Decimal(y), Decimal(x), ctx, degrees=True), expected)

    def test_angle_conversion(self, ctx: decimal.Context) -> None:
        assert close(dm.to_radians(Decimal(180), ctx), dm.PI)
        assert close(dm.to_degrees(dm.PI, ctx), 180)


# ============================================================================
# Hyperbolic
# ============================================================================


class TestHyperbolic:
    def test_values(self, ctx: decimal.Context) -> None:
        assert dm.sinh(Decimal(0), ctx) == 0
        assert dm.cosh(Decimal(0), ctx) == 1
        assert close(dm.sinh(Decimal(1), ctx), "1.175201193643801456882381851")
        assert close(dm.cosh(Decimal(1), ctx), "1.543080634815243778477905621")
        assert close(dm.tanh(Decimal("0.5"), ctx), "0.4621171572600097585023184836")

    def test_tanh_saturates(self, ctx: decimal.Context) -> None:
        assert dm.tanh(Decimal(1000), ctx) == 1
        assert dm.tanh(Decimal(-1000), ctx) == -1

    def test_inverse(self, ctx: decimal.Context) -> None:
        assert close(dm.asinh(Decimal(-1), ctx), "-0.8813735870195430252326093250")
        assert close(dm.acosh(Decimal(2), ctx), "1.316957896924816708625046347")
        assert close(dm.atanh(Decimal("0.5"), ctx), "0.5493061443340548456976226185")

    @pytest.mark.parametrize(
        "fn,value",
        [(dm.acosh, "0.5"), (dm.atanh, "1"), (dm.atanh, "-2")],
    )
    def test_inverse_domain(self, ctx: decimal.Context, fn: SeriesFn, value: str) -> None:
        with pytest.raises(EvalError) as exc_info:
            fn(Decimal(value), ctx)
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
