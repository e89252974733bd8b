"""
Expression evaluator for mathexpr.

Evaluates a token sequence in a single left-to-right pass with two
explicit stacks (operands and pending operators), in the style of the
shunting-yard algorithm, applying each operator as soon as precedence
allows instead of emitting postfix output. Group balance, argument lists
and operand placement are validated in the same pass.
"""

from __future__ import annotations

import decimal
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from mathexpr.core.errors import ErrorKind, EvalError
from mathexpr.core.expression_lang.tokenizer import Token, TokenKind, tokenize
from mathexpr.core.ir.functions import BinaryFunction, Function, UnaryFunction

if TYPE_CHECKING:
    from mathexpr.core.config import Config
    from mathexpr.core.context import Context

logger = logging.getLogger(__name__)


def evaluate(expression: str, context: Context) -> Any:
    """Tokenize and evaluate an expression.

    Args:
        expression: Expression text, e.g. ``"2 + 3 * x"``.
        context: Names, numeric backend and parse Config to evaluate with.

    Returns:
        The result as a value of the context's numeric backend.

    Raises:
        EvalError: If the expression is malformed, refers to unknown names,
            calls a function with the wrong number of arguments, or an
            operation fails on a checked backend.
    """
    tokens = tokenize(expression, context)
    result = evaluate_tokens(tokens, context, source=expression)
    logger.debug("Evaluated %r = %r", expression, result)
    return result


def evaluate_tokens(
    tokens: list[Token],
    context: Context,
    source: str | None = None,
    config: Config | None = None,
) -> Any:
    """Evaluate an already tokenized expression.

    ``source`` is only used to point at the failing character in errors.
    ``config`` must be the one the tokens were produced with; it defaults to
    ``context.config``.
    """
    if not tokens:
        raise EvalError(ErrorKind.EMPTY_EXPRESSION, "Expression is empty", 0, source)
    return _Evaluation(tokens, context, source, config).run()


class _Operator:
    """A unary or binary operator waiting on the operator stack."""

    __slots__ = ("descriptor", "pos")

    def __init__(self, descriptor: UnaryFunction | BinaryFunction, pos: int) -> None:
        self.descriptor = descriptor
        self.pos = pos

    @property
    def is_unary(self) -> bool:
        return isinstance(self.descriptor, UnaryFunction)


class _Group:
    """An open group marker, optionally collecting function arguments."""

    __slots__ = ("symbol", "pos", "function", "base", "separators")

    def __init__(self, symbol: str, pos: int, function: Function | None, base: int) -> None:
        self.symbol = symbol
        self.pos = pos
        self.function = function
        # Operand stack height when the group opened
        self.base = base
        self.separators = 0


class _Evaluation:
    """Two-stack evaluation of one token sequence."""

    def __init__(
        self,
        tokens: list[Token],
        context: Context,
        source: str | None,
        config: Config | None = None,
    ) -> None:
        self.tokens = tokens
        self.context = context
        self.config = config if config is not None else context.config
        self.source = source
        self.operands: list[Any] = []
        self.operators: list[_Operator | _Group] = []
        # True while the next token must start an operand
        self.expect_operand = True
        self.pos = 0

    # -- helpers ------------------------------------------------------------

    def error(self, kind: ErrorKind, message: str, pos: int | None = None) -> EvalError:
        return EvalError(kind, message, self.pos if pos is None else pos, self.source)

    def invalid(self, message: str, pos: int | None = None) -> EvalError:
        return self.error(ErrorKind.INVALID_EXPRESSION, message, pos)

    def peek(self, index: int) -> Token | None:
        return self.tokens[index] if index < len(self.tokens) else None

    def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run an implementation, normalising its failures to EvalError."""
        try:
            return fn(*args)
        except EvalError as e:
            if e.position is None:
                raise e.at(self.pos, self.source) from e
            raise
        except ZeroDivisionError as e:
            raise self.error(ErrorKind.DIVISION_BY_ZERO, "Division by zero") from e
        except (OverflowError, decimal.Overflow) as e:
            raise self.error(ErrorKind.OVERFLOW, f"Overflow: {e}") from e
        except (ValueError, ArithmeticError) as e:
            raise self.error(ErrorKind.INVALID_INPUT, f"Invalid input: {e}") from e

    def apply(self, entry: _Operator) -> None:
        descriptor = entry.descriptor
        self.pos = entry.pos
        if entry.is_unary:
            if not self.operands:
                raise self.invalid(f"Missing operand for '{descriptor.name}'")
            self.operands[-1] = self.call(descriptor.call, self.operands[-1])
            return
        if len(self.operands) < 2:
            raise self.invalid(f"Missing operand for '{descriptor.name}'")
        right = self.operands.pop()
        left = self.operands.pop()
        self.operands.append(self.call(descriptor.call, left, right))

    def reduce(self, should_apply: Callable[[_Operator], bool]) -> None:
        """Apply stacked operators down to the nearest group while ``should_apply``."""
        while self.operators:
            top = self.operators[-1]
            if isinstance(top, _Group) or not should_apply(top):
                return
            self.operators.pop()
            self.apply(top)

    def reduce_group(self) -> None:
        self.reduce(lambda _: True)

    def push_operand(self, value: Any, token: Token) -> None:
        if not self.expect_operand:
            raise self.invalid(f"Unexpected '{token.value}': missing operator", token.pos)
        self.operands.append(value)
        self.expect_operand = False

    # -- token handlers -------------------------------------------------------

    def run(self) -> Any:
        index = 0
        while index < len(self.tokens):
            token = self.tokens[index]
            self.pos = token.pos
            kind = token.kind
            if kind == TokenKind.NUMBER:
                self.push_operand(token.value, token)
            elif kind == TokenKind.IDENTIFIER:
                self.identifier(token, self.peek(index + 1))
            elif kind == TokenKind.FUNCTION_CALL:
                self.function_call(token, self.peek(index + 1))
                index += 1  # the group opener was consumed too
            elif kind == TokenKind.UNARY_OPERATOR:
                self.unary_operator(token)
            elif kind == TokenKind.BINARY_OPERATOR:
                self.binary_operator(token)
            elif kind == TokenKind.OPEN_GROUP:
                self.open_group(token)
            elif kind == TokenKind.CLOSE_GROUP:
                self.close_group(token, self.tokens[index - 1] if index else None)
            elif kind == TokenKind.ARG_SEPARATOR:
                self.arg_separator(token)
            index += 1
        return self.finish()

    def identifier(self, token: Token, following: Token | None) -> None:
        name = token.value
        context = self.context
        if context.is_variable(name):
            value = context.get_variable(name)
        elif context.is_constant(name):
            value = context.get_constant(name)
        elif following is not None and following.kind == TokenKind.OPEN_GROUP:
            raise self.error(ErrorKind.UNKNOWN_FUNCTION, f"Unknown function '{name}'", token.pos)
        else:
            raise self.error(ErrorKind.UNKNOWN_VARIABLE, f"Unknown variable '{name}'", token.pos)
        self.push_operand(value, token)

    def function_call(self, token: Token, following: Token | None) -> None:
        function = self.context.get_function(token.value)
        if function is None:
            raise self.error(
                ErrorKind.UNKNOWN_FUNCTION, f"Unknown function '{token.value}'", token.pos
            )
        if not self.expect_operand:
            raise self.invalid(f"Unexpected function '{token.value}': missing operator")
        symbol = self.config.call_symbol
        if (
            following is None
            or following.kind != TokenKind.OPEN_GROUP
            or (not self.config.custom_function_call and following.value != symbol)
        ):
            raise self.invalid(f"Function '{token.value}' must be followed by '{symbol}'")
        self.operators.append(_Group(following.value, following.pos, function, len(self.operands)))

    def unary_operator(self, token: Token) -> None:
        operator = self.context.get_unary_function(token.value)
        if operator is None:
            raise self.error(ErrorKind.UNKNOWN_FUNCTION, f"Unknown operator '{token.value}'")
        if operator.is_prefix:
            if not self.expect_operand:
                raise self.invalid(f"Unexpected prefix operator '{token.value}'")
            self.operators.append(_Operator(operator, token.pos))
            return

        if self.expect_operand:
            raise self.invalid(f"Missing operand before '{token.value}'")
        # Prefix operators binding tighter than the postfix one go first
        self.reduce(lambda top: top.is_unary and top.descriptor.precedence > operator.precedence)
        self.operands[-1] = self.call(operator.call, self.operands[-1])

    def binary_operator(self, token: Token) -> None:
        operator = self.context.get_binary_function(token.value)
        if operator is None:
            raise self.error(ErrorKind.UNKNOWN_FUNCTION, f"Unknown operator '{token.value}'")
        if self.expect_operand:
            raise self.invalid(f"Missing operand before '{token.value}'")
        precedence = operator.precedence

        def should_apply(top: _Operator) -> bool:
            if top.is_unary:
                return top.descriptor.precedence >= precedence
            if top.descriptor.precedence == precedence:
                return top.descriptor.is_left_associative
            return top.descriptor.precedence > precedence

        self.reduce(should_apply)
        self.operators.append(_Operator(operator, token.pos))
        self.expect_operand = True

    def open_group(self, token: Token) -> None:
        if not self.expect_operand:
            raise self.invalid(f"Unexpected '{token.value}': missing operator")
        self.operators.append(_Group(token.value, token.pos, None, len(self.operands)))

    def innermost_group(self, token: Token) -> _Group:
        self.reduce_group()
        top = self.operators[-1] if self.operators else None
        if not isinstance(top, _Group):
            raise self.invalid(f"Unmatched '{token.value}'")
        return top

    def arg_separator(self, token: Token) -> None:
        if self.expect_operand:
            raise self.invalid(f"Missing argument before '{token.value}'")
        group = self.innermost_group(token)
        if group.function is None:
            raise self.invalid(f"'{token.value}' is only valid inside a function call")
        group.separators += 1
        self.expect_operand = True

    def close_group(self, token: Token, previous: Token | None) -> None:
        empty_call = False
        if self.expect_operand:
            top = self.operators[-1] if self.operators else None
            empty_call = (
                isinstance(top, _Group)
                and top.function is not None
                and previous is not None
                and previous.kind == TokenKind.OPEN_GROUP
            )
            if not empty_call:
                raise self.invalid(f"Missing operand before '{token.value}'")

        group = self.innermost_group(token)
        expected = self.config.opening.get(group.symbol)
        if expected is None:
            raise self.invalid(f"'{group.symbol}' is not a group symbol", group.pos)
        if token.value != expected:
            raise self.invalid(
                f"Mismatched '{token.value}': expected '{expected}' to close "
                f"'{group.symbol}' at position {group.pos}"
            )
        self.operators.pop()

        if group.function is not None:
            args = self.operands[group.base :]
            del self.operands[group.base :]
            if len(args) != (0 if empty_call else group.separators + 1):
                raise self.invalid(f"Malformed arguments for '{group.function.name}'")
            self.pos = token.pos
            self.operands.append(self.call(group.function.call, args))
        self.expect_operand = False

    def finish(self) -> Any:
        if self.expect_operand:
            end = len(self.source) if self.source is not None else self.pos
            raise self.invalid("Unexpected end of expression", end)
        self.reduce_group()
        if self.operators:
            group = self.operators[-1]
            raise self.invalid(f"Unclosed '{group.symbol}'", group.pos)
        if len(self.operands) != 1:
            raise self.invalid("Expression does not reduce to a single value")
        return self.operands[0]
