"""
Input Preprocessing
===================
Canonicalize raw user input so "HELLO", "hello" and "  HeLLo  " match alike.
"""

import re
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizedInput:
    """
    Both forms of a user message.

    Attributes:
        original: Untouched input, kept for display and logging only
        normalized: Canonical form used for pattern matching
    """
    original: str
    normalized: str


def normalize(raw: Any) -> NormalizedInput:
    """
    Lowercase, trim, and collapse whitespace runs to a single space.

    Non-string input is stringified rather than rejected.

    Example:
        normalize("  HELLO   There!  ").normalized == "hello there!"
    """
    if not isinstance(raw, str):
        logger.warning(f"normalize received non-string input: {type(raw).__name__}")
        raw = str(raw)

    processed = raw.lower()
    processed = processed.strip()
    processed = _WHITESPACE_RUN.sub(" ", processed)

    return NormalizedInput(original=raw, normalized=processed)
