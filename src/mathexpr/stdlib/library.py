"""
Built-in math library.

Every implementation is a closure over the context's numeric backend, so
one definition serves float, complex, decimal and integer contexts.

Transcendental functions have two paths:
- native: the backend's ``transcendentals`` table (decimal Taylor series,
  complex ``cmath``), used as-is;
- float-degrading: convert with ``to_float``, compute with ``math``,
  convert back with ``from_float``. Checked backends turn a non-finite
  result into OVERFLOW and a domain error into INVALID_INPUT; unchecked
  backends keep the infinity or NaN.

Trigonometric functions take degrees; inverse trigonometric functions
return degrees.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from mathexpr.core.errors import ErrorKind, EvalError
from mathexpr.core.ir.functions import (
    Associativity,
    BinaryFunction,
    Function,
    Notation,
    Precedence,
    UnaryFunction,
)
from mathexpr.core.numeric.base import Rounding
from mathexpr.stdlib.vocab import MathVocab, VocabEntry, default_vocab

if TYPE_CHECKING:
    from mathexpr.core.context import Context
    from mathexpr.core.numeric import Numeric

logger = logging.getLogger(__name__)

# Logical operators bind looser than comparisons, "or" loosest of all
AND_PRECEDENCE = Precedence.VERY_LOW - 1
OR_PRECEDENCE = Precedence.VERY_LOW - 2

# Largest integer factorial a checked backend will attempt
MAX_FACTORIAL_ARGUMENT = 100_000


# ---------------------------------------------------------------------------
# Float fallbacks
# ---------------------------------------------------------------------------


def _degrees_in(fn: Callable[[float], float]) -> Callable[[float], float]:
    return lambda x: fn(math.radians(x))


def _degrees_out(fn: Callable[[float], float]) -> Callable[[float], float]:
    return lambda x: math.degrees(fn(x))


def _log_or_minus_inf(fn: Callable[[float], float]) -> Callable[[float], float]:
    return lambda x: -math.inf if x == 0 else fn(x)


def _sinh(x: float) -> float:
    try:
        return math.sinh(x)
    except OverflowError:
        return math.copysign(math.inf, x)


FLOAT_FUNCTIONS: dict[str, Callable[..., float]] = {
    "sqrt": math.sqrt,
    "cbrt": math.cbrt,
    "exp": math.exp,
    "ln": _log_or_minus_inf(math.log),
    "log": _log_or_minus_inf(math.log10),
    "gamma": math.gamma,
    "to_radians": math.radians,
    "to_degrees": math.degrees,
    "sin": _degrees_in(math.sin),
    "cos": _degrees_in(math.cos),
    "tan": _degrees_in(math.tan),
    "asin": _degrees_out(math.asin),
    "acos": _degrees_out(math.acos),
    "atan": _degrees_out(math.atan),
    "atan2": lambda y, x: math.degrees(math.atan2(y, x)),
    "sinh": _sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "asinh": math.asinh,
    "acosh": math.acosh,
    "atanh": math.atanh,
}


def float_path(numeric: Numeric, name: str, fn: Callable[..., float]) -> Callable[..., Any]:
    """Compute ``fn`` in float precision and convert the result back."""

    def call(*args: Any) -> Any:
        xs = [numeric.to_float(a) for a in args]
        try:
            result = fn(*xs)
        except OverflowError:
            result = math.inf
        except (ValueError, ZeroDivisionError) as e:
            if numeric.checked:
                raise EvalError(
                    ErrorKind.INVALID_INPUT, f"'{name}' is undefined for the given argument"
                ) from e
            result = math.nan
        return numeric.from_float(result)

    return call


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------


class _Library:
    """Built-in implementations bound to one numeric backend."""

    def __init__(self, numeric: Numeric) -> None:
        self.numeric = numeric
        self.zero = numeric.from_int(0)
        self.one = numeric.from_int(1)

    def resolve(self, name: str) -> Callable[..., Any]:
        native = self.numeric.transcendentals.get(name)
        if native is not None:
            return native
        return float_path(self.numeric, name, FLOAT_FUNCTIONS[name])

    def boolean(self, flag: bool) -> Any:
        return self.one if flag else self.zero

    # -- aggregates -----------------------------------------------------------

    def sum(self, args: list[Any]) -> Any:
        total = args[0]
        for value in args[1:]:
            total = self.numeric.add(total, value)
        return total

    def product(self, args: list[Any]) -> Any:
        total = args[0]
        for value in args[1:]:
            total = self.numeric.mul(total, value)
        return total

    def avg(self, args: list[Any]) -> Any:
        return self.numeric.div(self.sum(args), self.numeric.from_int(len(args)))

    def max(self, args: list[Any]) -> Any:
        best = args[0]
        for value in args[1:]:
            if self.numeric.compare(value, best) > 0:
                best = value
        return best

    def min(self, args: list[Any]) -> Any:
        best = args[0]
        for value in args[1:]:
            if self.numeric.compare(value, best) < 0:
                best = value
        return best

    # -- single value ---------------------------------------------------------

    def abs(self, value: Any) -> Any:
        native = self.numeric.transcendentals.get("abs")
        if native is not None:
            return native(value)
        if self.numeric.compare(value, self.zero) < 0:
            return self.numeric.neg(value)
        return value

    def sign(self, value: Any) -> Any:
        return self.numeric.from_int(self.numeric.compare(value, self.zero))

    def factorial(self, value: Any) -> Any:
        numeric = self.numeric
        if not numeric.is_integer(value):
            # x! = gamma(x + 1)
            gamma = float_path(numeric, "!", FLOAT_FUNCTIONS["gamma"])
            return gamma(numeric.add(value, self.one))

        n = numeric.to_int(value)
        if n < 0:
            raise EvalError(ErrorKind.INVALID_INPUT, f"Factorial of negative number {n}")
        if numeric.checked and n > MAX_FACTORIAL_ARGUMENT:
            raise EvalError(ErrorKind.OVERFLOW, f"Factorial argument {n} is too large")
        result = self.one
        for i in range(2, n + 1):
            result = numeric.mul(result, numeric.from_int(i))
            if not numeric.is_finite(result):
                break
        return result

    def random(self, args: list[Any]) -> Any:
        low, high = 0.0, 1.0
        if len(args) == 1:
            high = self.numeric.to_float(args[0])
        elif len(args) == 2:
            low = self.numeric.to_float(args[0])
            high = self.numeric.to_float(args[1])
        if low > high:
            raise EvalError(
                ErrorKind.INVALID_INPUT, f"random: minimum {low} is greater than maximum {high}"
            )
        return self.numeric.from_float(low + random.random() * (high - low))

    def log(self, args: list[Any]) -> Any:
        if len(args) == 1:
            return self.resolve("log")(args[0])
        ln = self.resolve("ln")
        return self.numeric.div(ln(args[0]), ln(args[1]))

    # -- combinators ----------------------------------------------------------

    def reciprocal_of(self, name: str) -> Callable[[Any], Any]:
        """``1 / f(x)``, as for csc, sec and cot."""
        fn = self.resolve(name)
        return lambda x: self.numeric.div(self.one, fn(x))

    def of_reciprocal(self, name: str) -> Callable[[Any], Any]:
        """``f(1 / x)``, as for acsc, asec and acot."""
        fn = self.resolve(name)
        return lambda x: fn(self.numeric.div(self.one, x))

    def rounded(self, rounding: Rounding) -> Callable[[Any], Any]:
        return lambda x: self.numeric.to_integral(x, rounding)

    # -- tables -----------------------------------------------------------------

    def binary_operators(self) -> list[tuple[str, int, Associativity, Callable[[Any, Any], Any]]]:
        n = self.numeric
        left, right = Associativity.LEFT, Associativity.RIGHT
        return [
            ("+", Precedence.LOW, left, n.add),
            ("-", Precedence.LOW, left, n.sub),
            ("*", Precedence.MEDIUM, left, n.mul),
            ("/", Precedence.MEDIUM, left, n.div),
            ("%", Precedence.MEDIUM, left, n.rem),
            ("^", Precedence.HIGH, right, n.pow),
            ("==", Precedence.VERY_LOW, left, lambda a, b: self.boolean(n.equals(a, b))),
            ("!=", Precedence.VERY_LOW, left, lambda a, b: self.boolean(not n.equals(a, b))),
            ("<", Precedence.VERY_LOW, left, lambda a, b: self.boolean(n.compare(a, b) < 0)),
            (">", Precedence.VERY_LOW, left, lambda a, b: self.boolean(n.compare(a, b) > 0)),
            ("<=", Precedence.VERY_LOW, left, lambda a, b: self.boolean(n.compare(a, b) <= 0)),
            (">=", Precedence.VERY_LOW, left, lambda a, b: self.boolean(n.compare(a, b) >= 0)),
            ("and", AND_PRECEDENCE, left, lambda a, b: self.boolean(n.truthy(a) and n.truthy(b))),
            ("or", OR_PRECEDENCE, left, lambda a, b: self.boolean(n.truthy(a) or n.truthy(b))),
        ]

    def unary_operators(self) -> list[tuple[str, Notation, int, Callable[[Any], Any]]]:
        n = self.numeric
        return [
            ("+", Notation.PREFIX, Precedence.MEDIUM, lambda x: x),
            ("-", Notation.PREFIX, Precedence.MEDIUM, n.neg),
            ("not", Notation.PREFIX, AND_PRECEDENCE, lambda x: self.boolean(not n.truthy(x))),
            ("!", Notation.POSTFIX, Precedence.VERY_HIGH, self.factorial),
        ]

    def functions(self) -> list[tuple[str, int, int | None, Callable[[list[Any]], Any]]]:
        def one(fn: Callable[[Any], Any]) -> Callable[[list[Any]], Any]:
            return lambda args: fn(args[0])

        table: list[tuple[str, int, int | None, Callable[[list[Any]], Any]]] = [
            ("sum", 1, None, self.sum),
            ("product", 1, None, self.product),
            ("avg", 1, None, self.avg),
            ("max", 1, None, self.max),
            ("min", 1, None, self.min),
            ("abs", 1, 1, one(self.abs)),
            ("floor", 1, 1, one(self.rounded(Rounding.FLOOR))),
            ("ceil", 1, 1, one(self.rounded(Rounding.CEIL))),
            ("truncate", 1, 1, one(self.rounded(Rounding.TRUNC))),
            ("round", 1, 1, one(self.rounded(Rounding.ROUND))),
            ("sign", 1, 1, one(self.sign)),
            ("log", 1, 2, self.log),
            ("random", 0, 2, self.random),
        ]

        atan2 = self.resolve("atan2")
        table.append(("atan2", 2, 2, lambda args: atan2(args[0], args[1])))

        for name in (
            "sqrt", "cbrt", "exp", "ln", "to_radians", "to_degrees",
            "sin", "cos", "tan", "asin", "acos", "atan",
            "sinh", "cosh", "tanh", "asinh", "acosh", "atanh",
        ):
            table.append((name, 1, 1, one(self.resolve(name))))

        for name, base in (
            ("csc", "sin"), ("sec", "cos"), ("cot", "tan"),
            ("csch", "sinh"), ("sech", "cosh"), ("coth", "tanh"),
        ):
            table.append((name, 1, 1, one(self.reciprocal_of(base))))

        for name, base in (
            ("acsc", "asin"), ("asec", "acos"), ("acot", "atan"),
            ("acsch", "asinh"), ("asech", "acosh"), ("acoth", "atanh"),
        ):
            table.append((name, 1, 1, one(self.of_reciprocal(base))))

        return table


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def _docs(section: dict[str, VocabEntry], name: str) -> dict[str, Any]:
    entry = section.get(name)
    if entry is None:
        return {}
    return {"aliases": entry.aliases, "description": entry.description}


def install(context: Context, vocab: MathVocab | None = None) -> None:
    """Register the built-in library on ``context``.

    Constants are overwritten and operators/functions replaced, so
    installing twice is harmless. Names the context already uses for a
    different category raise ContextError.

    Args:
        context: Context to populate; its numeric backend is used.
        vocab: Descriptions and aliases; defaults to the packaged YAML.
    """
    vocab = vocab if vocab is not None else default_vocab()
    numeric = context.numeric
    library = _Library(numeric)

    for name, value in numeric.constants().items():
        context.add_constant(name, value, overwrite=True)

    for name, precedence, associativity, func in library.binary_operators():
        context.add_binary_function(
            BinaryFunction(
                name=name,
                precedence=precedence,
                associativity=associativity,
                func=func,
                **_docs(vocab.binary, name),
            )
        )

    for name, notation, precedence, func in library.unary_operators():
        context.add_unary_function(
            UnaryFunction(
                name=name,
                notation=notation,
                precedence=precedence,
                func=func,
                **_docs(vocab.unary, name),
            )
        )

    for name, min_args, max_args, func in library.functions():
        context.add_function(
            Function(
                name=name,
                min_args=min_args,
                max_args=max_args,
                func=func,
                **_docs(vocab.functions, name),
            )
        )

    logger.debug(f"Installed built-in library for {numeric.name} backend")
