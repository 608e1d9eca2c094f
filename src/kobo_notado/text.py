"""Text clean-up helpers applied to highlight bodies and annotations."""
from __future__ import annotations

from typing import List

TAG_PREFIX = "."


def normalise_text(value: str) -> str:
    """Strip surrounding whitespace and turn each newline into a space."""

    return value.strip().replace("\n", " ")


def split_highlight(text: str, max_length: int) -> List[str]:
    """Split ``text`` into consecutive chunks of at most ``max_length`` characters."""

    if max_length <= 0:
        raise ValueError("max_length must be positive")
    return [text[start : start + max_length] for start in range(0, len(text), max_length)]


def extract_tags(annotation: str) -> List[str]:
    """Return the ``.tag`` tokens of ``annotation`` without their leading dot.

    Tokens are separated by single spaces; order and duplicates are kept.
    """

    return [
        token[len(TAG_PREFIX) :]
        for token in annotation.split(" ")
        if token.startswith(TAG_PREFIX)
    ]
