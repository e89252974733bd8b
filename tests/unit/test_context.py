"""Tests for the Context symbol registry."""

from __future__ import annotations

import logging
import math
from fractions import Fraction

import pytest

from mathexpr.core.context import Context
from mathexpr.core.errors import ContextError, ErrorKind, EvalError
from mathexpr.core.expression_lang import evaluate
from mathexpr.core.ir.functions import BinaryFunction, Function, Notation, UnaryFunction
from mathexpr.core.numeric import ComplexNumeric, FloatNumeric, IntegerNumeric
from mathexpr.stdlib import install


def identity(args: list[float]) -> float:
    return args[0]


# ============================================================================
# Constants and variables
# ============================================================================


class TestValues:
    """Constants are write-once; variables may be reassigned."""

    def test_add_constant(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.add_constant("tau", 6.28)
        assert ctx.is_constant("tau")
        assert ctx.get_constant("tau") == 6.28

    def test_constant_is_write_once(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.add_constant("tau", 6.28)
        with pytest.raises(ContextError) as exc_info:
            ctx.add_constant("tau", 6.0)
        assert exc_info.value.kind == ErrorKind.NAME_CONFLICT
        assert ctx.get_constant("tau") == 6.28

    def test_constant_overwrite(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.add_constant("tau", 6.0)
        ctx.add_constant("tau", 6.28, overwrite=True)
        assert ctx.get_constant("tau") == 6.28

    def test_set_variable_returns_previous(self) -> None:
        ctx = Context(FloatNumeric())
        assert ctx.set_variable("x", 1) is None
        assert ctx.set_variable("x", 2) == 1
        assert ctx.get_variable("x") == 2

    def test_values_are_coerced(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 3)
        assert isinstance(ctx.get_variable("x"), float)

    def test_remove_variable(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 4)
        assert ctx.remove_variable("x") == 4
        assert ctx.remove_variable("x") is None
        assert not ctx.is_variable("x")
        with pytest.raises(EvalError) as exc_info:
            evaluate("x", ctx)
        assert exc_info.value.kind == ErrorKind.UNKNOWN_VARIABLE

    def test_properties_are_copies(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 1)
        ctx.variables["y"] = 2.0
        ctx.constants["c"] = 3.0
        assert ctx.value_names() == ["x"]

    def test_uncoercible_value(self) -> None:
        ctx = Context(FloatNumeric())
        with pytest.raises(ContextError) as exc_info:
            ctx.set_variable("x", "not a number")
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    def test_value_out_of_range(self) -> None:
        ctx = Context(IntegerNumeric(bits=64))
        with pytest.raises(ContextError) as exc_info:
            ctx.set_variable("x", 2**64)
        assert exc_info.value.kind == ErrorKind.OVERFLOW

    def test_huge_integer_becomes_infinite(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 10**400)
        ctx.set_variable("y", -(10**400))
        assert ctx.get_variable("x") == math.inf
        assert ctx.get_variable("y") == -math.inf

        complex_ctx = Context(ComplexNumeric())
        complex_ctx.set_variable("z", 10**400)
        assert complex_ctx.get_variable("z") == complex(math.inf)

    def test_huge_fraction_is_out_of_range(self) -> None:
        ctx = Context(FloatNumeric())
        with pytest.raises(ContextError) as exc_info:
            ctx.set_variable("x", Fraction(10**400))
        assert exc_info.value.kind == ErrorKind.OVERFLOW
        assert not ctx.is_variable("x")

    @pytest.mark.parametrize(
        "name",
        ["", "2x", ".x", "a b", "tab\tname", "bell\x07"],
        ids=["empty", "leading_digit", "leading_dot", "space", "tab", "control"],
    )
    def test_invalid_names(self, name: str) -> None:
        ctx = Context(FloatNumeric())
        with pytest.raises(ContextError) as exc_info:
            ctx.set_variable(name, 1)
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT


# ============================================================================
# Collisions
# ============================================================================


class TestNameConflicts:
    """A name belongs to one category; only operators may share a symbol."""

    def test_variable_shadowing_constant(self, ctx: Context) -> None:
        with pytest.raises(ContextError) as exc_info:
            ctx.set_variable("PI", 3)
        assert exc_info.value.kind == ErrorKind.NAME_CONFLICT

    def test_constant_shadowing_variable(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 1)
        with pytest.raises(ContextError, match="already defined as a variable"):
            ctx.add_constant("x", 2)

    def test_variable_shadowing_function(self, ctx: Context) -> None:
        with pytest.raises(ContextError, match="function or operator"):
            ctx.set_variable("sin", 1)

    def test_function_shadowing_variable(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("f", 1)
        with pytest.raises(ContextError) as exc_info:
            ctx.add_function(Function(name="f", min_args=1, max_args=1, func=identity))
        assert exc_info.value.kind == ErrorKind.NAME_CONFLICT

    def test_function_shadowing_operator(self, ctx: Context) -> None:
        with pytest.raises(ContextError, match="already defined as an operator"):
            ctx.add_function(Function(name="mod", func=identity))

    def test_operator_shadowing_function(self, ctx: Context) -> None:
        with pytest.raises(ContextError, match="already defined as a function"):
            ctx.add_binary_function(BinaryFunction(name="max", func=lambda a, b: a))

    def test_alias_conflict(self, ctx: Context) -> None:
        with pytest.raises(ContextError):
            ctx.add_function(Function(name="fresh", aliases=("PI",), func=identity))
        assert not ctx.is_function("fresh")

    def test_unary_and_binary_share_symbol(self, ctx: Context) -> None:
        assert ctx.is_unary_function("-")
        assert ctx.is_binary_function("-")

    def test_replacing_descriptor(self, ctx: Context) -> None:
        ctx.add_function(Function(name="abs", min_args=1, max_args=1, func=lambda a: 42.0))
        assert evaluate("abs(-1)", ctx) == 42

    @pytest.mark.parametrize("name", ["pi", "Pi", "Sin", "MOD"], ids=["pi", "Pi", "Sin", "MOD"])
    def test_conflicts_ignore_case(self, ctx: Context, name: str) -> None:
        with pytest.raises(ContextError) as exc_info:
            ctx.set_variable(name, 3)
        assert exc_info.value.kind == ErrorKind.NAME_CONFLICT

    def test_constant_shadowing_variable_in_other_case(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 1)
        with pytest.raises(ContextError, match="already defined as a variable"):
            ctx.add_constant("X", 2)

    def test_function_shadowing_variable_in_other_case(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("area", 1)
        with pytest.raises(ContextError) as exc_info:
            ctx.add_function(Function(name="Area", func=identity))
        assert exc_info.value.kind == ErrorKind.NAME_CONFLICT


# ============================================================================
# Letter case
# ============================================================================


class TestLetterCase:
    """Constants, functions and operators ignore case; variables do not."""

    def test_function_lookup(self, ctx: Context) -> None:
        assert ctx.get_function("SIN") is ctx.get_function("sin")
        assert ctx.is_function("Max")
        assert ctx.get_binary_function("Mod") is ctx.get_binary_function("mod")

    def test_constant_lookup(self, ctx: Context) -> None:
        assert ctx.is_constant("pi")
        assert ctx.get_constant("pi") == pytest.approx(math.pi)
        assert ctx.get_constant("Pi") == ctx.get_constant("PI")

    def test_variables_are_case_sensitive(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 1)
        ctx.set_variable("X", 2)
        assert ctx.get_variable("x") == 1
        assert ctx.get_variable("X") == 2
        assert not ctx.is_variable("Y")

    def test_registered_spelling_is_kept(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.add_constant("Tau", 6.28)
        ctx.add_function(Function(name="Area", aliases=("AREA2",), func=identity))
        assert ctx.constants == {"Tau": 6.28}
        assert ctx.function_names() == ["Area", "AREA2"]
        assert ctx.get_function("area") is ctx.get_function("area2")


# ============================================================================
# Functions and operators
# ============================================================================


class TestDescriptors:
    """Descriptors are stored once under every spelling."""

    def test_aliases_share_descriptor(self, ctx: Context) -> None:
        assert ctx.get_function("prod") is ctx.get_function("product")
        assert ctx.get_binary_function("mod") is ctx.get_binary_function("%")

    def test_lookup_misses(self, ctx: Context) -> None:
        assert ctx.get_function("nope") is None
        assert ctx.get_unary_function("*") is None
        assert ctx.get_binary_function("!") is None

    def test_function_names_in_registration_order(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.add_function(Function(name="f", aliases=("g",), func=identity))
        ctx.add_unary_function(UnaryFunction(name="~", func=lambda x: -x))
        ctx.add_binary_function(BinaryFunction(name="~", func=lambda a, b: a - b))
        assert ctx.function_names() == ["f", "g", "~"]

    def test_descriptors_are_unique(self, ctx: Context) -> None:
        descriptors = ctx.descriptors()
        assert len(descriptors) == len({id(d) for d in descriptors})
        minus = [d for d in descriptors if d.name == "-"]
        assert {type(d) for d in minus} == {UnaryFunction, BinaryFunction}

    def test_builtin_postfix(self, ctx: Context) -> None:
        factorial = ctx.get_unary_function("!")
        assert factorial is not None
        assert factorial.notation == Notation.POSTFIX

    def test_registration_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        ctx = Context(FloatNumeric())
        with caplog.at_level(logging.DEBUG, logger="mathexpr.core.context"):
            ctx.add_function(Function(name="f", min_args=1, max_args=1, func=identity))
        assert "Registered function f (1 args)" in caplog.text


# ============================================================================
# Construction
# ============================================================================


class TestConstruction:
    def test_default_backend_is_float(self) -> None:
        assert isinstance(Context().numeric, FloatNumeric)

    def test_backend_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MATHEXPR_NUMERIC", "int")
        assert isinstance(Context().numeric, IntegerNumeric)

    def test_copy_is_independent(self, ctx: Context) -> None:
        ctx.set_variable("x", 1)
        other = ctx.copy()
        other.set_variable("x", 2)
        other.add_function(Function(name="f", func=identity))
        assert ctx.get_variable("x") == 1
        assert not ctx.is_function("f")
        assert other.get_function("sin") is ctx.get_function("sin")

    def test_install_twice(self, ctx: Context) -> None:
        before = len(ctx.descriptors())
        install(ctx)
        assert len(ctx.descriptors()) == before

    def test_repr(self) -> None:
        ctx = Context(FloatNumeric())
        ctx.set_variable("x", 1)
        assert repr(ctx) == "Context(numeric=FloatNumeric(), constants=0, variables=1, functions=0)"
