"""
mathexpr expression language.

Tokenizer and two-stack evaluator for infix math expressions.

Usage:
    from mathexpr.core.context import Context
    from mathexpr.core.expression_lang import evaluate

    ctx = Context.with_builtins()
    evaluate("2 + 3 * 4", ctx)
    # 14.0
"""

from mathexpr.core.expression_lang.evaluator import evaluate, evaluate_tokens
from mathexpr.core.expression_lang.tokenizer import Token, TokenKind, tokenize

__all__ = ["Token", "TokenKind", "evaluate", "evaluate_tokens", "tokenize"]
