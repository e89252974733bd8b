"""
Parsing configuration shared by the tokenizer and evaluator.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _check_symbol(symbol: str, role: str) -> None:
    if len(symbol) != 1:
        raise ValueError(f"{role} '{symbol}' must be a single character")
    if symbol.isspace() or symbol.isalnum() or symbol in "._":
        raise ValueError(f"{role} '{symbol}' cannot be whitespace, a letter, a digit, '.' or '_'")


class Config(BaseModel):
    """
    Immutable parse settings.

    Examples:
        - Config() → parentheses only, no implicit multiplication
        - Config().with_group_symbol("[", "]") → ( ) and [ ] both group
        - Config(group_symbols=(("[", "]"),)) → only [ ] groups
        - Config().with_implicit_mul() → 2(3+4) and 2x are products
    """

    group_symbols: tuple[tuple[str, str], ...] = Field(
        default=(("(", ")"),),
        description="Open/close pairs; the first pair wraps function arguments",
    )
    arg_separator: str = Field(default=",", description="Function argument separator")
    implicit_mul: bool = Field(
        default=False, description="Insert '*' between adjacent value-like tokens"
    )
    custom_function_call: bool = Field(
        default=False, description="Allow any group pair to wrap function arguments"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("group_symbols")
    @classmethod
    def validate_group_symbols(cls, v: tuple[tuple[str, str], ...]) -> tuple[tuple[str, str], ...]:
        """Validate group pairs are single, distinct characters."""
        if not v:
            raise ValueError("At least one group symbol pair is required")
        seen: set[str] = set()
        for open_symbol, close_symbol in v:
            for symbol in (open_symbol, close_symbol):
                _check_symbol(symbol, "Group symbol")
                if symbol in seen:
                    raise ValueError(f"Group symbol '{symbol}' is used more than once")
                seen.add(symbol)
        return v

    @field_validator("arg_separator")
    @classmethod
    def validate_arg_separator(cls, v: str) -> str:
        _check_symbol(v, "Argument separator")
        return v

    @model_validator(mode="after")
    def validate_separator_not_grouping(self) -> Config:
        if self.arg_separator in self.opening or self.arg_separator in self.closing:
            raise ValueError(f"Argument separator '{self.arg_separator}' is also a group symbol")
        return self

    # -- derived lookups ----------------------------------------------------

    @property
    def opening(self) -> dict[str, str]:
        """Open symbol → close symbol."""
        return dict(self.group_symbols)

    @property
    def closing(self) -> dict[str, str]:
        """Close symbol → open symbol."""
        return {close: open_ for open_, close in self.group_symbols}

    @property
    def call_symbol(self) -> str:
        """Open symbol that must follow a function name."""
        return self.group_symbols[0][0]

    # -- builders -----------------------------------------------------------

    def _replace(self, **changes: Any) -> Config:
        # model_copy() skips validation
        return Config(**{**self.model_dump(), **changes})

    def with_group_symbol(self, open_symbol: str, close_symbol: str) -> Config:
        """Return a config that also groups with ``open_symbol``/``close_symbol``."""
        pair = (open_symbol, close_symbol)
        if pair in self.group_symbols:
            return self
        return self._replace(group_symbols=(*self.group_symbols, pair))

    def with_implicit_mul(self, enabled: bool = True) -> Config:
        return self._replace(implicit_mul=enabled)

    def with_custom_function_call(self, enabled: bool = True) -> Config:
        return self._replace(custom_function_call=enabled)

    def with_arg_separator(self, separator: str) -> Config:
        return self._replace(arg_separator=separator)
