"""
Tokenizer for mathexpr expressions.

Converts an expression string into a sequence of typed tokens, using the
Context for function/operator names and the numeric backend's literal
grammar. Group balance is not checked here; the evaluator does that in
its single pass.
"""

from __future__ import annotations

import re
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from mathexpr.core.errors import ErrorKind, EvalError
from mathexpr.core.ir.functions import Notation

if TYPE_CHECKING:
    from mathexpr.core.config import Config
    from mathexpr.core.context import Context


class TokenKind(StrEnum):
    """Token types for the expression language."""

    NUMBER = auto()
    IDENTIFIER = auto()
    UNARY_OPERATOR = auto()
    BINARY_OPERATOR = auto()
    FUNCTION_CALL = auto()
    OPEN_GROUP = auto()
    CLOSE_GROUP = auto()
    ARG_SEPARATOR = auto()


class Token:
    """A single token from the expression tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: Any, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (self.kind, self.value, self.pos) == (other.kind, other.value, other.pos)

    __hash__ = None  # type: ignore[assignment]


# Identifier: letter or underscore followed by word characters (Unicode aware)
_IDENT_RE = re.compile(r"[^\W\d]\w*")
_WORD_RE = re.compile(r"\w")

IMPLICIT_MUL_OPERATOR = "*"

# Left kinds after which a value-like right kind gets an implicit '*'
_IMPLICIT_MUL_RULES: dict[TokenKind, frozenset[TokenKind]] = {
    TokenKind.NUMBER: frozenset(
        {TokenKind.IDENTIFIER, TokenKind.OPEN_GROUP, TokenKind.FUNCTION_CALL}
    ),
    TokenKind.CLOSE_GROUP: frozenset(
        {
            TokenKind.NUMBER,
            TokenKind.IDENTIFIER,
            TokenKind.OPEN_GROUP,
            TokenKind.FUNCTION_CALL,
        }
    ),
}
_AFTER_POSTFIX = frozenset({TokenKind.IDENTIFIER, TokenKind.OPEN_GROUP, TokenKind.FUNCTION_CALL})


def _is_postfix(token: Token, context: Context) -> bool:
    if token.kind != TokenKind.UNARY_OPERATOR:
        return False
    operator = context.get_unary_function(token.value)
    return operator is not None and operator.notation == Notation.POSTFIX


def ends_value(token: Token, context: Context) -> bool:
    """Whether ``token`` can be the last token of an operand."""
    if token.kind in (TokenKind.NUMBER, TokenKind.IDENTIFIER, TokenKind.CLOSE_GROUP):
        return True
    return _is_postfix(token, context)


def _match_name(source: str, i: int, names: list[str]) -> str | None:
    """Longest registered name at ``source[i:]``; ties keep registration order.

    Names compare case-insensitively, so ``SIN`` matches ``sin``.
    """
    for name in names:
        end = i + len(name)
        if source[i:end].casefold() != name.casefold():
            continue
        # A word-like name must not run into more identifier characters
        if _WORD_RE.fullmatch(name[-1]) and end < len(source) and _WORD_RE.match(source, end):
            continue
        return name
    return None


def _classify(name: str, tokens: list[Token], context: Context) -> TokenKind:
    if context.is_function(name):
        return TokenKind.FUNCTION_CALL
    unary = context.get_unary_function(name)
    binary = context.get_binary_function(name)
    if unary is not None and binary is not None:
        after_value = bool(tokens) and ends_value(tokens[-1], context)
        return TokenKind.BINARY_OPERATOR if after_value else TokenKind.UNARY_OPERATOR
    if unary is not None:
        return TokenKind.UNARY_OPERATOR
    return TokenKind.BINARY_OPERATOR


def _needs_implicit_mul(prev: Token, token: Token, context: Context) -> bool:
    if token.kind in _IMPLICIT_MUL_RULES.get(prev.kind, ()):
        return True
    return token.kind in _AFTER_POSTFIX and _is_postfix(prev, context)


def tokenize(source: str, context: Context, config: Config | None = None) -> list[Token]:
    """Tokenize an expression string into a list of tokens.

    Args:
        source: Expression text.
        context: Supplies registered names and the numeric backend.
        config: Parse settings; defaults to ``context.config``.

    Returns:
        Tokens in source order. Whitespace is dropped.

    Raises:
        EvalError: EMPTY_EXPRESSION for blank input, INVALID_EXPRESSION for
            malformed literals and unexpected characters.
    """
    config = config if config is not None else context.config
    if not source.strip():
        raise EvalError(ErrorKind.EMPTY_EXPRESSION, "Expression is empty", 0, source)

    numeric = context.numeric
    opening = config.opening
    closing = config.closing
    # Stable sort: equal lengths keep registration order
    names = sorted(context.function_names(), key=len, reverse=True)
    symbols = sorted(
        (n for n in context.value_names() if not _WORD_RE.match(n)), key=len, reverse=True
    )

    tokens: list[Token] = []

    def emit(kind: TokenKind, value: Any, pos: int) -> None:
        token = Token(kind, value, pos)
        if config.implicit_mul and tokens and _needs_implicit_mul(tokens[-1], token, context):
            tokens.append(Token(TokenKind.BINARY_OPERATOR, IMPLICIT_MUL_OPERATOR, pos))
        tokens.append(token)

    i = 0
    n = len(source)
    while i < n:
        c = source[i]

        # Skip whitespace
        if c.isspace():
            i += 1
            continue

        # Numeric literals, as the backend defines them
        m = numeric.literal_pattern.match(source, i)
        if m:
            literal = m.group(0)
            try:
                value = numeric.parse(literal)
            except (ValueError, ArithmeticError) as e:
                raise EvalError(
                    ErrorKind.INVALID_EXPRESSION, f"Invalid number '{literal}'", i, source
                ) from e
            emit(TokenKind.NUMBER, value, i)
            i = m.end()
            continue

        # Grouping and argument separation
        if c in opening:
            emit(TokenKind.OPEN_GROUP, c, i)
            i += 1
            continue
        if c in closing:
            emit(TokenKind.CLOSE_GROUP, c, i)
            i += 1
            continue
        if c == config.arg_separator:
            emit(TokenKind.ARG_SEPARATOR, c, i)
            i += 1
            continue

        # Registered functions and operators
        name = _match_name(source, i, names)
        if name is not None:
            emit(_classify(name, tokens, context), name, i)
            i += len(name)
            continue

        # Identifiers, resolved at evaluation time
        m = _IDENT_RE.match(source, i)
        if m:
            emit(TokenKind.IDENTIFIER, m.group(0), i)
            i = m.end()
            continue

        # Symbolic constant/variable names such as π
        symbol = next((s for s in symbols if source.startswith(s, i)), None)
        if symbol is not None:
            emit(TokenKind.IDENTIFIER, symbol, i)
            i += len(symbol)
            continue

        raise EvalError(ErrorKind.INVALID_EXPRESSION, f"Unexpected character '{c}'", i, source)

    return tokens
