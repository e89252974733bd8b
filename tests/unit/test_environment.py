"""Tests for environment-driven backend selection."""

from __future__ import annotations

import logging

import pytest

from mathexpr.core.environment import (
    NumericKind,
    default_numeric,
    get_decimal_precision,
    get_numeric_kind,
)
from mathexpr.core.numeric import ComplexNumeric, DecimalNumeric, FloatNumeric, IntegerNumeric


class TestNumericKind:
    def test_default(self) -> None:
        assert get_numeric_kind() == NumericKind.FLOAT

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("float", NumericKind.FLOAT),
            ("DECIMAL", NumericKind.DECIMAL),
            (" complex ", NumericKind.COMPLEX),
            ("int", NumericKind.INT),
            ("bigint", NumericKind.BIGINT),
            ("double", NumericKind.FLOAT),
            ("i64", NumericKind.INT),
            ("bignum", NumericKind.BIGINT),
        ],
    )
    def test_values(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: NumericKind
    ) -> None:
        monkeypatch.setenv("MATHEXPR_NUMERIC", value)
        assert get_numeric_kind() == expected

    def test_unknown_value_warns(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("MATHEXPR_NUMERIC", "quaternion")
        with caplog.at_level(logging.WARNING, logger="mathexpr.core.environment"):
            assert get_numeric_kind() == NumericKind.FLOAT
        assert "Unknown MATHEXPR_NUMERIC value 'quaternion'" in caplog.text


class TestDecimalPrecision:
    def test_default(self) -> None:
        assert get_decimal_precision() == 28

    def test_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MATHEXPR_DECIMAL_PRECISION", "50")
        assert get_decimal_precision() == 50

    @pytest.mark.parametrize("value", ["zero", "0", "-3", "101"])
    def test_invalid_value_warns(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture, value: str
    ) -> None:
        monkeypatch.setenv("MATHEXPR_DECIMAL_PRECISION", value)
        with caplog.at_level(logging.WARNING, logger="mathexpr.core.environment"):
            assert get_decimal_precision() == 28
        assert "Invalid MATHEXPR_DECIMAL_PRECISION" in caplog.text


class TestDefaultNumeric:
    @pytest.mark.parametrize(
        "value,backend",
        [
            ("float", FloatNumeric),
            ("decimal", DecimalNumeric),
            ("complex", ComplexNumeric),
            ("int", IntegerNumeric),
            ("bigint", IntegerNumeric),
        ],
    )
    def test_backend(self, monkeypatch: pytest.MonkeyPatch, value: str, backend: type) -> None:
        monkeypatch.setenv("MATHEXPR_NUMERIC", value)
        assert isinstance(default_numeric(), backend)

    def test_integer_widths(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MATHEXPR_NUMERIC", "int")
        assert default_numeric().name == "i64"
        monkeypatch.setenv("MATHEXPR_NUMERIC", "bigint")
        assert default_numeric().name == "bigint"

    def test_decimal_precision(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MATHEXPR_NUMERIC", "decimal")
        monkeypatch.setenv("MATHEXPR_DECIMAL_PRECISION", "40")
        numeric = default_numeric()
        assert isinstance(numeric, DecimalNumeric)
        assert numeric.context.prec == 40
