"""
Function and operator descriptors.

A descriptor is one of three kinds, discriminated by ``kind``:

- Function: called as ``name(arg, ...)`` with a bounded or open arity
- UnaryFunction: a prefix (``-x``) or postfix (``x!``) operator
- BinaryFunction: an infix operator with a precedence and associativity

Descriptors are immutable. A Context stores one descriptor object under
its name and every alias, so all spellings share the same metadata.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable
from enum import IntEnum, StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mathexpr.core.errors import ErrorKind, EvalError

# ---------------------------------------------------------------------------
# Operator metadata
# ---------------------------------------------------------------------------


class Precedence(IntEnum):
    """Named binding-strength tiers. Any int is a valid precedence."""

    VERY_LOW = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    VERY_HIGH = 4


class Associativity(StrEnum):
    """Grouping of consecutive operators of equal precedence."""

    LEFT = "left"
    RIGHT = "right"


class Notation(StrEnum):
    """Position of a unary operator relative to its operand."""

    PREFIX = "prefix"
    POSTFIX = "postfix"


class FunctionKind(StrEnum):
    FUNCTION = "function"
    UNARY = "unary"
    BINARY = "binary"


def validate_name(name: str) -> str:
    """Check that ``name`` can be matched by the tokenizer.

    Raises:
        ValueError: If the name is empty, starts with a digit or ``.``,
            or contains whitespace or control characters.
    """
    if not name:
        raise ValueError("Name cannot be empty")
    if name[0].isdigit() or name[0] == ".":
        raise ValueError(f"Name '{name}' cannot start with a digit or '.'")
    for c in name:
        if c.isspace():
            raise ValueError(f"Name '{name}' cannot contain whitespace")
        if unicodedata.category(c).startswith("C"):
            raise ValueError(f"Name {name!r} cannot contain control characters")
    return name


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class _Descriptor(BaseModel):
    """Metadata shared by every descriptor kind."""

    name: str = Field(description="Canonical name")
    aliases: tuple[str, ...] = Field(default=(), description="Alternative names")
    description: str | None = Field(default=None, description="Human-readable description")

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def validate_canonical_name(cls, v: str) -> str:
        return validate_name(v)

    @field_validator("aliases")
    @classmethod
    def validate_aliases(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for alias in v:
            validate_name(alias)
        return v

    @property
    def names(self) -> tuple[str, ...]:
        """Canonical name followed by the aliases."""
        return (self.name, *(a for a in self.aliases if a != self.name))


class Function(_Descriptor):
    """
    A named function called with a parenthesised argument list.

    Examples:
        - Function(name="max", min_args=1, func=max_impl) → max(1, 2, 3)
        - Function(name="random", min_args=0, max_args=2, func=random_impl) → random()
    """

    kind: Literal[FunctionKind.FUNCTION] = FunctionKind.FUNCTION
    min_args: int = Field(default=0, ge=0, description="Fewest accepted arguments")
    max_args: int | None = Field(
        default=None, description="Most accepted arguments (None = unbounded)"
    )
    func: Callable[[list[Any]], Any] = Field(description="Implementation taking the argument list")

    @model_validator(mode="after")
    def validate_arity(self) -> Function:
        if self.max_args is not None and self.max_args < self.min_args:
            raise ValueError(
                f"max_args ({self.max_args}) must not be less than min_args ({self.min_args})"
            )
        return self

    def accepts(self, count: int) -> bool:
        """Whether ``count`` arguments are within the declared arity."""
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    @property
    def arity(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.max_args == self.min_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"

    def call(self, args: list[Any]) -> Any:
        if not self.accepts(len(args)):
            raise EvalError(
                ErrorKind.INVALID_ARGUMENT_COUNT,
                f"Function '{self.name}' expects {self.arity} argument(s), got {len(args)}",
            )
        return self.func(args)


class UnaryFunction(_Descriptor):
    """A unary operator such as ``-x`` or ``x!``."""

    kind: Literal[FunctionKind.UNARY] = FunctionKind.UNARY
    notation: Notation = Field(default=Notation.PREFIX, description="Prefix or postfix")
    precedence: int = Field(default=Precedence.MEDIUM, description="Binding strength")
    func: Callable[[Any], Any] = Field(description="Implementation taking one operand")

    @property
    def is_prefix(self) -> bool:
        return self.notation == Notation.PREFIX

    def call(self, value: Any) -> Any:
        return self.func(value)


class BinaryFunction(_Descriptor):
    """An infix operator such as ``a + b``."""

    kind: Literal[FunctionKind.BINARY] = FunctionKind.BINARY
    precedence: int = Field(default=Precedence.LOW, description="Binding strength")
    associativity: Associativity = Field(
        default=Associativity.LEFT, description="Grouping of equal-precedence chains"
    )
    func: Callable[[Any, Any], Any] = Field(description="Implementation taking two operands")

    @property
    def is_left_associative(self) -> bool:
        return self.associativity == Associativity.LEFT

    def call(self, left: Any, right: Any) -> Any:
        return self.func(left, right)


Descriptor = Annotated[
    Function | UnaryFunction | BinaryFunction,
    Field(discriminator="kind"),
]
