"""
Error types for mathexpr tokenization, evaluation, and context registration.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class ErrorKind(StrEnum):
    """Kinds of failure reported by the engine."""

    # Syntax
    EMPTY_EXPRESSION = "empty_expression"
    INVALID_EXPRESSION = "invalid_expression"

    # Name resolution
    UNKNOWN_VARIABLE = "unknown_variable"
    UNKNOWN_FUNCTION = "unknown_function"
    INVALID_ARGUMENT_COUNT = "invalid_argument_count"

    # Arithmetic
    OVERFLOW = "overflow"
    DIVISION_BY_ZERO = "division_by_zero"
    INVALID_INPUT = "invalid_input"

    # Registration
    NAME_CONFLICT = "name_conflict"


class MathExprError(Exception):
    """Base exception for all mathexpr errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class EvalError(MathExprError):
    """
    Raised when an expression cannot be tokenized or evaluated.

    Examples:
    - Unbalanced or mismatched group symbols
    - Names missing from the context
    - Wrong number of function arguments
    - Checked arithmetic overflow or division by zero
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        position: int | None = None,
        source: str | None = None,
    ):
        self.kind = kind
        self.position = position
        context = None
        if position is not None and source is not None:
            context = ErrorContext(source=source, position=position)
        super().__init__(message, context)

    def at(self, position: int, source: str | None) -> "EvalError":
        """Return a copy of this error located at ``position``."""
        return EvalError(self.kind, self.message, position, source)


class ContextError(MathExprError):
    """
    Raised when a constant, variable, or function cannot be registered.

    Examples:
    - A name already bound in another category
    - A constant redefined without ``overwrite``
    - A name containing whitespace or control characters
    """

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        super().__init__(message)


@dataclass
class ErrorContext:
    """
    Location of an error inside an expression.

    Attributes:
        source: The full expression text
        position: Character offset (0-indexed)
    """

    source: str
    position: int

    def format(self) -> str:
        """Format the expression with a marker under the failing character."""
        return f"{self.source}\n{' ' * self.position}^"
