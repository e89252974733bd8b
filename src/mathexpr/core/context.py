"""
Symbol registry for expression evaluation.

A Context owns the constants, variables and function/operator descriptors
an expression may refer to, the numeric backend values are computed with,
and the parse Config.

Every name belongs to at most one category: constant, variable, or
function/operator. A symbol may be registered both as a unary and as a
binary operator (``-``), but a Function name cannot also be an operator.
Cross-category collisions raise ContextError when registering.

Constant, function and operator names match case-insensitively (``Sin(30)``,
``pi``); variable names are case-sensitive.

Usage:
    from mathexpr import Context, evaluate

    ctx = Context.with_builtins()
    ctx.set_variable("x", 5)
    evaluate("x + 1", ctx)  # 6.0
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from mathexpr.core.config import Config
from mathexpr.core.environment import default_numeric
from mathexpr.core.errors import ContextError, ErrorKind, EvalError
from mathexpr.core.ir.functions import BinaryFunction, Function, UnaryFunction, validate_name

if TYPE_CHECKING:
    from mathexpr.core.ir.functions import Descriptor
    from mathexpr.core.numeric import Numeric

logger = logging.getLogger(__name__)


def _fold(name: str) -> str:
    return name.casefold()


class Context:
    """Mutable registry of constants, variables, functions and operators."""

    def __init__(self, numeric: Numeric | None = None, config: Config | None = None) -> None:
        self.numeric = numeric if numeric is not None else default_numeric()
        self.config = config if config is not None else Config()
        # Folded name -> (registered name, value)
        self._constants: dict[str, tuple[str, Any]] = {}
        self._variables: dict[str, Any] = {}
        self._functions: dict[str, Function] = {}
        self._unary: dict[str, UnaryFunction] = {}
        self._binary: dict[str, BinaryFunction] = {}
        # Folded function and operator names -> registered spelling, in
        # first-registration order
        self._names: dict[str, str] = {}

    @classmethod
    def with_builtins(cls, numeric: Numeric | None = None, config: Config | None = None) -> Context:
        """Create a context holding the built-in math library."""
        from mathexpr.stdlib.library import install

        context = cls(numeric, config)
        install(context)
        return context

    def __repr__(self) -> str:
        return (
            f"Context(numeric={self.numeric!r}, constants={len(self._constants)}, "
            f"variables={len(self._variables)}, functions={len(self._names)})"
        )

    def copy(self) -> Context:
        """Independent registry sharing the (immutable) descriptors."""
        other = Context(self.numeric, self.config)
        other._constants = dict(self._constants)
        other._variables = dict(self._variables)
        other._functions = dict(self._functions)
        other._unary = dict(self._unary)
        other._binary = dict(self._binary)
        other._names = dict(self._names)
        return other

    def evaluate(self, expression: str) -> Any:
        """Evaluate ``expression`` against this context."""
        from mathexpr.core.expression_lang.evaluator import evaluate

        return evaluate(expression, self)

    # -- validation ---------------------------------------------------------

    def _conflict(self, name: str, category: str) -> ContextError:
        return ContextError(
            ErrorKind.NAME_CONFLICT,
            f"Cannot define '{name}': it is already defined as {category}",
        )

    def _has_variable_folded(self, key: str) -> bool:
        return any(_fold(variable) == key for variable in self._variables)

    def _check_value_name(self, name: str, category: str) -> None:
        try:
            validate_name(name)
        except ValueError as e:
            raise ContextError(ErrorKind.INVALID_INPUT, str(e)) from e
        key = _fold(name)
        if category != "constant" and key in self._constants:
            raise self._conflict(name, "a constant")
        if category != "variable" and self._has_variable_folded(key):
            raise self._conflict(name, "a variable")
        if key in self._names:
            raise self._conflict(name, "a function or operator")

    def _check_function_names(self, names: Iterable[str], kind: str) -> None:
        for name in names:
            key = _fold(name)
            if key in self._constants:
                raise self._conflict(name, "a constant")
            if self._has_variable_folded(key):
                raise self._conflict(name, "a variable")
            if kind == "function" and (key in self._unary or key in self._binary):
                raise self._conflict(name, "an operator")
            if kind != "function" and key in self._functions:
                raise self._conflict(name, "a function")

    def _coerce(self, name: str, value: Any) -> Any:
        try:
            return self.numeric.coerce(value)
        except (ValueError, TypeError) as e:
            raise ContextError(
                ErrorKind.INVALID_INPUT,
                f"Cannot use {value!r} as a {self.numeric.name} value for '{name}'",
            ) from e
        except OverflowError as e:
            raise ContextError(
                ErrorKind.OVERFLOW,
                f"Cannot store '{name}': value is out of range for {self.numeric.name}",
            ) from e
        except EvalError as e:
            raise ContextError(e.kind, f"Cannot store '{name}': {e.message}") from e

    # -- constants and variables ----------------------------------------------

    def add_constant(self, name: str, value: Any, overwrite: bool = False) -> None:
        """Define a constant. Constants are write-once unless ``overwrite``."""
        self._check_value_name(name, "constant")
        key = _fold(name)
        if key in self._constants and not overwrite:
            raise ContextError(ErrorKind.NAME_CONFLICT, f"Constant '{name}' is already defined")
        self._constants[key] = (name, self._coerce(name, value))
        logger.debug(f"Registered constant {name}")

    def set_variable(self, name: str, value: Any) -> Any | None:
        """Set a variable, returning its previous value if it had one."""
        self._check_value_name(name, "variable")
        previous = self._variables.get(name)
        self._variables[name] = self._coerce(name, value)
        return previous

    def remove_variable(self, name: str) -> Any | None:
        return self._variables.pop(name, None)

    def get_constant(self, name: str) -> Any | None:
        entry = self._constants.get(_fold(name))
        return entry[1] if entry is not None else None

    def get_variable(self, name: str) -> Any | None:
        return self._variables.get(name)

    def is_constant(self, name: str) -> bool:
        return _fold(name) in self._constants

    def is_variable(self, name: str) -> bool:
        return name in self._variables

    @property
    def constants(self) -> dict[str, Any]:
        return dict(self._constants.values())

    @property
    def variables(self) -> dict[str, Any]:
        return dict(self._variables)

    # -- functions and operators ----------------------------------------------

    def _remember(self, names: Iterable[str]) -> None:
        for name in names:
            self._names.setdefault(_fold(name), name)

    def add_function(self, function: Function) -> None:
        """Register a function under its name and aliases."""
        self._check_function_names(function.names, "function")
        for name in function.names:
            self._functions[_fold(name)] = function
        self._remember(function.names)
        logger.debug(f"Registered function {function.name} ({function.arity} args)")

    def add_unary_function(self, operator: UnaryFunction) -> None:
        """Register a prefix or postfix unary operator."""
        self._check_function_names(operator.names, "unary")
        for name in operator.names:
            self._unary[_fold(name)] = operator
        self._remember(operator.names)
        logger.debug(f"Registered {operator.notation} operator {operator.name}")

    def add_binary_function(self, operator: BinaryFunction) -> None:
        """Register an infix binary operator."""
        self._check_function_names(operator.names, "binary")
        for name in operator.names:
            self._binary[_fold(name)] = operator
        self._remember(operator.names)
        logger.debug(
            f"Registered binary operator {operator.name} "
            f"(precedence {operator.precedence}, {operator.associativity})"
        )

    def get_function(self, name: str) -> Function | None:
        return self._functions.get(_fold(name))

    def get_unary_function(self, name: str) -> UnaryFunction | None:
        return self._unary.get(_fold(name))

    def get_binary_function(self, name: str) -> BinaryFunction | None:
        return self._binary.get(_fold(name))

    def is_function(self, name: str) -> bool:
        return _fold(name) in self._functions

    def is_unary_function(self, name: str) -> bool:
        return _fold(name) in self._unary

    def is_binary_function(self, name: str) -> bool:
        return _fold(name) in self._binary

    def function_names(self) -> list[str]:
        """All function and operator names and aliases, in registration order."""
        return list(self._names.values())

    def value_names(self) -> list[str]:
        """All constant and variable names."""
        return [*(name for name, _ in self._constants.values()), *self._variables]

    def descriptors(self) -> list[Descriptor]:
        """Each registered descriptor once, in registration order."""
        seen: dict[int, Descriptor] = {}
        for key in self._names:
            for registry in (self._functions, self._unary, self._binary):
                descriptor = registry.get(key)
                if descriptor is not None:
                    seen.setdefault(id(descriptor), descriptor)
        return list(seen.values())
