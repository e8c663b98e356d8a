"""Text processing utilities."""

from __future__ import annotations

import re
from typing import Any


def normalize_term(value: Any) -> str:
    """
    Normalize a term value coming back from the LLM.

    Non-string values become an empty string so that callers can treat
    them as invalid.

    Args:
        value: Raw term value

    Returns:
        Stripped text, or "" if not text
    """
    if not isinstance(value, str):
        return ""
    return value.strip()


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```)."""
    clean = text.strip()
    clean = re.sub(r'^```(?:json)?\s*', '', clean)
    clean = re.sub(r'\s*```$', '', clean)
    return clean


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to maximum length with suffix.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to append if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
