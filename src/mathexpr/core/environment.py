"""
Environment configuration for mathexpr.

Process-wide defaults are read from environment variables so front ends
can switch numeric backends without code changes.

Environment values:
    MATHEXPR_NUMERIC: float (default), decimal, complex, int, bigint
    MATHEXPR_DECIMAL_PRECISION: significant digits for the decimal
        backend (default 28, at most 100)

Usage:
    from mathexpr.core.environment import default_numeric

    numeric = default_numeric()  # FloatNumeric() unless MATHEXPR_NUMERIC is set
"""

from __future__ import annotations

import logging
import os
from enum import StrEnum

from mathexpr.core.numeric import (
    ComplexNumeric,
    DecimalNumeric,
    FloatNumeric,
    IntegerNumeric,
    Numeric,
)
from mathexpr.core.numeric.decimals import DEFAULT_PRECISION, MAX_PRECISION

logger = logging.getLogger(__name__)


class NumericKind(StrEnum):
    """Selectable numeric backends."""

    FLOAT = "float"
    DECIMAL = "decimal"
    COMPLEX = "complex"
    INT = "int"
    BIGINT = "bigint"


_DEFAULT_KIND = NumericKind.FLOAT

NUMERIC_ENV_VAR = "MATHEXPR_NUMERIC"
PRECISION_ENV_VAR = "MATHEXPR_DECIMAL_PRECISION"

_ALIASES = {
    "double": NumericKind.FLOAT,
    "f64": NumericKind.FLOAT,
    "i64": NumericKind.INT,
    "integer": NumericKind.INT,
    "bignum": NumericKind.BIGINT,
}


def get_numeric_kind() -> NumericKind:
    """Get the default numeric backend from MATHEXPR_NUMERIC.

    Returns:
        NumericKind: The selected backend. Defaults to float if the
        variable is not set or invalid.
    """
    value = os.environ.get(NUMERIC_ENV_VAR, "").lower().strip()
    if not value:
        return _DEFAULT_KIND
    if value in _ALIASES:
        return _ALIASES[value]
    try:
        return NumericKind(value)
    except ValueError:
        logger.warning(
            "Unknown %s value '%s'. Valid values: %s. Defaulting to %s.",
            NUMERIC_ENV_VAR,
            value,
            ", ".join(kind.value for kind in NumericKind),
            _DEFAULT_KIND.value,
        )
        return _DEFAULT_KIND


def get_decimal_precision() -> int:
    """Get the decimal backend precision from MATHEXPR_DECIMAL_PRECISION."""
    value = os.environ.get(PRECISION_ENV_VAR, "").strip()
    if not value:
        return DEFAULT_PRECISION
    try:
        precision = int(value)
    except ValueError:
        precision = 0
    if not 1 <= precision <= MAX_PRECISION:
        logger.warning(
            "Invalid %s value '%s'. Expected an integer from 1 to %d. Defaulting to %d.",
            PRECISION_ENV_VAR,
            value,
            MAX_PRECISION,
            DEFAULT_PRECISION,
        )
        return DEFAULT_PRECISION
    return precision


def default_numeric() -> Numeric:
    """Build the numeric backend selected by the environment."""
    kind = get_numeric_kind()
    if kind == NumericKind.DECIMAL:
        return DecimalNumeric(precision=get_decimal_precision())
    if kind == NumericKind.COMPLEX:
        return ComplexNumeric()
    if kind == NumericKind.INT:
        return IntegerNumeric(bits=64)
    if kind == NumericKind.BIGINT:
        return IntegerNumeric(bits=None)
    return FloatNumeric()
