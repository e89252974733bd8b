"""
mathexpr Standard Library

The built-in math library: arithmetic, comparison and logical operators,
factorial, rounding, aggregate, logarithmic, trigonometric and hyperbolic
functions, and the PI and E constants.

Standard Library Contents:
- math_vocab.yml: descriptions and aliases for every built-in
- library.py: implementations, written against the numeric backend

Usage:
    from mathexpr.core.context import Context
    from mathexpr.stdlib import install

    ctx = Context.with_builtins()   # same as: install(Context())
"""

from mathexpr.stdlib.library import install
from mathexpr.stdlib.vocab import (
    MATH_VOCAB_PATH,
    STDLIB_DIR,
    MathVocab,
    VocabEntry,
    default_vocab,
    load_math_vocab,
)

__all__ = [
    "MATH_VOCAB_PATH",
    "STDLIB_DIR",
    "MathVocab",
    "VocabEntry",
    "default_vocab",
    "install",
    "load_math_vocab",
]
