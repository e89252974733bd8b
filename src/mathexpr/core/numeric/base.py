"""
Numeric capability layer.

The tokenizer, evaluator and built-in library never touch a number
directly; they go through a ``Numeric`` backend. Backends come in two
tiers:

- ``UncheckedNumeric``: undefined operations produce sentinel values
  (infinity, NaN) instead of failing.
- ``CheckedNumeric``: every primitive raises ``EvalError`` with kind
  ``OVERFLOW`` or ``DIVISION_BY_ZERO`` instead of producing a value that
  cannot be represented.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import StrEnum
from typing import Any, ClassVar

from mathexpr.core.errors import ErrorKind, EvalError
from mathexpr.core.numeric.decimal_math import E, PI

# Digits, optional fraction, optional exponent: 12, 1.5, .5, 2e10, 1.5E-3
DECIMAL_LITERAL_RE = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class Rounding(StrEnum):
    """Modes for rounding a value to an integral value."""

    FLOOR = "floor"
    CEIL = "ceil"
    ROUND = "round"  # half away from zero
    TRUNC = "trunc"


class Numeric(ABC):
    """Operation set the engine requires from a numeric type."""

    name: ClassVar[str] = "numeric"
    checked: ClassVar[bool] = False
    literal_pattern: ClassVar[re.Pattern[str]] = DECIMAL_LITERAL_RE

    def __init__(self) -> None:
        # Native implementations of library functions, keyed by function
        # name. Anything missing goes through the float-degrading path.
        self.transcendentals: dict[str, Callable[..., Any]] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    # -- conversion ---------------------------------------------------------

    @abstractmethod
    def parse(self, literal: str) -> Any:
        """Parse a literal matched by ``literal_pattern``.

        Raises:
            ValueError: If the literal is not representable.
        """

    def format(self, value: Any) -> str:
        return str(value)

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        """Convert a host value (int, float, str, Decimal) into this backend."""

    @abstractmethod
    def from_int(self, n: int) -> Any: ...

    @abstractmethod
    def from_float(self, x: float) -> Any: ...

    @abstractmethod
    def to_float(self, value: Any) -> float:
        """Convert to float, raising ``OVERFLOW`` when out of float range."""

    @abstractmethod
    def to_int(self, value: Any) -> int:
        """Convert an integral value to a Python int."""

    def constants(self) -> dict[str, Any]:
        """Constants the built-in library registers for this backend."""
        return {"PI": self.coerce(PI), "E": self.coerce(E)}

    # -- arithmetic ---------------------------------------------------------

    @abstractmethod
    def add(self, a: Any, b: Any) -> Any: ...

    @abstractmethod
    def sub(self, a: Any, b: Any) -> Any: ...

    @abstractmethod
    def mul(self, a: Any, b: Any) -> Any: ...

    @abstractmethod
    def div(self, a: Any, b: Any) -> Any: ...

    @abstractmethod
    def rem(self, a: Any, b: Any) -> Any:
        """Remainder of truncated division; takes the sign of ``a``."""

    @abstractmethod
    def neg(self, a: Any) -> Any: ...

    @abstractmethod
    def pow(self, a: Any, b: Any) -> Any: ...

    @abstractmethod
    def to_integral(self, value: Any, rounding: Rounding) -> Any: ...

    # -- inspection ---------------------------------------------------------

    def compare(self, a: Any, b: Any) -> int:
        """Return -1, 0 or 1 as ``a`` is less than, equal to or greater than ``b``."""
        return (a > b) - (a < b)

    def equals(self, a: Any, b: Any) -> bool:
        return bool(a == b)

    def is_zero(self, value: Any) -> bool:
        return bool(value == 0)

    def is_finite(self, value: Any) -> bool:
        return True

    @abstractmethod
    def is_integer(self, value: Any) -> bool: ...

    def truthy(self, value: Any) -> bool:
        return not self.is_zero(value)


class UncheckedNumeric(Numeric):
    """Backend whose undefined operations yield sentinel values."""

    checked = False


class CheckedNumeric(Numeric):
    """Backend whose primitives report overflow and division by zero."""

    checked = True

    def overflow(self, what: str) -> EvalError:
        return EvalError(ErrorKind.OVERFLOW, f"Overflow: {what} is out of range for {self.name}")

    def division_by_zero(self) -> EvalError:
        return EvalError(ErrorKind.DIVISION_BY_ZERO, "Division by zero")
