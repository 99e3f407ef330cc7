"""
Text normalization for BM25 indexing and querying
"""

from typing import List

import regex

# Runs of Alphabetic or Numeric characters; Alphabetic includes the combining
# vowel signs of Indic and Thai scripts, underscore counts as a separator
_TOKEN_PATTERN = regex.compile(r"[\p{Alphabetic}\p{N}]+")

MIN_TOKEN_LENGTH = 2


def tokenize(text: str) -> List[str]:
    """
    Lowercase text and split it into alphanumeric tokens

    Args:
        text: Raw document or query text

    Returns:
        Tokens in input order, duplicates kept, tokens shorter than
        two characters dropped
    """
    if not text:
        return []

    return [
        token for token in _TOKEN_PATTERN.findall(text.lower())
        if len(token) >= MIN_TOKEN_LENGTH
    ]
