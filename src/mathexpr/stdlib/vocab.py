"""
Descriptions and aliases for the built-in library, loaded from YAML.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

STDLIB_DIR = Path(__file__).parent
MATH_VOCAB_PATH = STDLIB_DIR / "math_vocab.yml"


class VocabEntry(BaseModel):
    """Documentation for one built-in symbol."""

    aliases: tuple[str, ...] = Field(default=(), description="Alternative names")
    description: str | None = Field(default=None, description="Human-readable description")

    model_config = {"frozen": True}


class MathVocab(BaseModel):
    """Documentation for the built-in library, by descriptor kind."""

    binary: dict[str, VocabEntry] = Field(default_factory=dict)
    unary: dict[str, VocabEntry] = Field(default_factory=dict)
    functions: dict[str, VocabEntry] = Field(default_factory=dict)

    model_config = {"frozen": True}


def load_math_vocab(path: Path = MATH_VOCAB_PATH) -> MathVocab:
    """
    Load built-in descriptions and aliases from YAML.

    Args:
        path: Path to the vocabulary file

    Returns:
        MathVocab instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If YAML is invalid or doesn't match schema
    """
    if not path.exists():
        raise FileNotFoundError(f"Math vocabulary not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        raise ValueError(f"Empty or invalid YAML in {path}")

    return MathVocab(**data)


@lru_cache(maxsize=1)
def default_vocab() -> MathVocab:
    """The packaged vocabulary, loaded once per process."""
    return load_math_vocab()
