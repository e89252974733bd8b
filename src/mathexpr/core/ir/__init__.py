"""
mathexpr descriptor types.

Function and operator descriptors registered in a Context, and the
precedence/associativity/notation metadata they carry.
"""

from .functions import (
    Associativity,
    BinaryFunction,
    Descriptor,
    Function,
    FunctionKind,
    Notation,
    Precedence,
    UnaryFunction,
    validate_name,
)

__all__ = [
    "Associativity",
    "BinaryFunction",
    "Descriptor",
    "Function",
    "FunctionKind",
    "Notation",
    "Precedence",
    "UnaryFunction",
    "validate_name",
]
