"""
Free-text tokenization for identity text entries.

Turns a free-text entry into a list of comparable tokens:
1. Lowercase the text
2. Replace every character outside [a-z0-9] and whitespace with a space
3. Split on whitespace runs
4. Drop stopwords
5. Strip one common suffix ("ing", "ed" or plural "s")

The suffix stripping is a heuristic normalizer, not a real stemmer.
Over- and under-stemming are accepted. Token order follows the input.
"""

import re
from typing import Iterable, List, Optional

# Common English function words
STOP_WORDS = frozenset([
    "the", "a", "an", "and", "or", "but", "if", "on", "in", "with", "to",
    "for", "of", "by", "is", "are", "am", "be", "was", "were", "this", "that",
])

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def simple_stem(token: str) -> str:
    """
    Strip the first matching suffix from a token.

    Rules, in priority order:
    - "ing" when the token is longer than 4 characters
    - "ed" when the token is longer than 3 characters
    - "s" when the token is longer than 3 characters

    Args:
        token: Lowercase token

    Returns:
        Token with at most one suffix removed
    """
    if token.endswith("ing") and len(token) > 4:
        return token[:-3]
    if token.endswith("ed") and len(token) > 3:
        return token[:-2]
    if token.endswith("s") and len(token) > 3:
        return token[:-1]
    return token


def tokenize(text: Optional[str]) -> List[str]:
    """
    Tokenize a free-text entry.

    Args:
        text: Free text (None is treated as empty)

    Returns:
        List of stemmed, stopword-free tokens in input order
    """
    if not text:
        return []

    cleaned = _NON_ALNUM_RE.sub(" ", text.lower())
    return [simple_stem(t) for t in cleaned.split() if t not in STOP_WORDS]


def tokenize_all(texts: Iterable[str]) -> List[str]:
    """
    Tokenize several entries independently and concatenate the tokens.

    Args:
        texts: Free-text entries of one participant in one lens

    Returns:
        Flattened token stream
    """
    tokens = []
    for text in texts:
        tokens.extend(tokenize(text))
    return tokens
