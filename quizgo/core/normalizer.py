"""
Normalizer for free-text answers
"""
import re
from typing import Any


_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(value: Any) -> str:
    """
    Canonicalize a free-text answer for comparison

    Rules:
      - None -> ""; any other non-string -> str(value)
      - trim, lowercase
      - collapse every whitespace run to a single space

    Example:
        >>> normalize_text("  New   York\\n")
        'new york'
    """
    text = "" if value is None else str(value)
    return _WHITESPACE_RUN.sub(" ", text.strip().lower())
