"""Shared pytest fixtures for mathexpr tests."""

from __future__ import annotations

import pytest

from mathexpr.core.config import Config
from mathexpr.core.context import Context
from mathexpr.core.numeric import (
    ComplexNumeric,
    DecimalNumeric,
    FloatNumeric,
    IntegerNumeric,
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host's MATHEXPR_* settings out of the tests."""
    monkeypatch.delenv("MATHEXPR_NUMERIC", raising=False)
    monkeypatch.delenv("MATHEXPR_DECIMAL_PRECISION", raising=False)


@pytest.fixture
def ctx() -> Context:
    """Float context with the built-in library."""
    return Context.with_builtins(FloatNumeric())


@pytest.fixture
def implicit_ctx() -> Context:
    """Float context with implicit multiplication enabled."""
    return Context.with_builtins(FloatNumeric(), Config().with_implicit_mul())


@pytest.fixture
def decimal_ctx() -> Context:
    """28-digit decimal context with the built-in library."""
    return Context.with_builtins(DecimalNumeric())


@pytest.fixture
def int_ctx() -> Context:
    """Checked 64-bit integer context with the built-in library."""
    return Context.with_builtins(IntegerNumeric(bits=64))


@pytest.fixture
def bigint_ctx() -> Context:
    """Unbounded integer context with the built-in library."""
    return Context.with_builtins(IntegerNumeric(bits=None))


@pytest.fixture
def complex_ctx() -> Context:
    """Complex context with the built-in library."""
    return Context.with_builtins(ComplexNumeric())
