"""Feature engineering module for pairwise set similarity."""

from .set_similarity import (
    normalize_tags,
    weighted_jaccard,
    text_jaccard
)

__all__ = [
    "normalize_tags",
    "weighted_jaccard",
    "text_jaccard"
]
