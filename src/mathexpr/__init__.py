"""
mathexpr - math expression evaluation over pluggable numeric backends.

Tokenizes and evaluates infix expressions with runtime-registered
constants, variables, functions and operators, over float, complex,
decimal, or checked integer arithmetic.

Usage:
    from mathexpr import Context, DecimalNumeric, evaluate

    ctx = Context.with_builtins(DecimalNumeric(precision=50))
    evaluate("sqrt(2) * max(1, 2, 3)", ctx)
"""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core.config import Config
from .core.context import Context
from .core.errors import ContextError, ErrorContext, ErrorKind, EvalError, MathExprError
from .core.expression_lang import Token, TokenKind, evaluate, evaluate_tokens, tokenize
from .core.ir import (
    Associativity,
    BinaryFunction,
    Function,
    Notation,
    Precedence,
    UnaryFunction,
)
from .core.numeric import (
    CheckedNumeric,
    ComplexNumeric,
    DecimalNumeric,
    FloatNumeric,
    IntegerNumeric,
    Numeric,
    UncheckedNumeric,
)


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    # In editable mode, read directly from pyproject.toml for live updates
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    # Fall back to installed metadata
    try:
        return _metadata_version("mathexpr")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "Associativity",
    "BinaryFunction",
    "CheckedNumeric",
    "ComplexNumeric",
    "Config",
    "Context",
    "ContextError",
    "DecimalNumeric",
    "ErrorContext",
    "ErrorKind",
    "EvalError",
    "FloatNumeric",
    "Function",
    "IntegerNumeric",
    "MathExprError",
    "Notation",
    "Numeric",
    "Precedence",
    "Token",
    "TokenKind",
    "UnaryFunction",
    "UncheckedNumeric",
    "evaluate",
    "evaluate_tokens",
    "tokenize",
]
