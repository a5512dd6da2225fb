"""Cleaning of free-text hypotheses before they are sent to a provider."""

import re

_QUOTES = re.compile(r"['\"]")
_WHITESPACE = re.compile(r"\s+")


def clean_query(text: str, min_token_length: int = 0) -> str:
    """Strip quotes, collapse whitespace and drop short tokens.

    Args:
        text: Raw hypothesis text
        min_token_length: Tokens with this many characters or fewer are
            dropped; 0 keeps every token

    Returns:
        Cleaned query string

    Example:
        >>> clean_query('Does "sleep" help  memory in rats?', min_token_length=2)
        'Does sleep help memory rats?'
    """
    text = _QUOTES.sub("", text)
    tokens = _WHITESPACE.split(text.strip())
    if min_token_length:
        tokens = [t for t in tokens if len(t) > min_token_length]
    return " ".join(t for t in tokens if t)
