"""
Pairwise set similarity for identity comparison.

This module computes similarities between the tag collections and token
streams of two participants (Participant A and Participant B) within a
single lens.

Similarity Types:
- Weighted Jaccard over tags: sum of per-key min weights / sum of per-key max weights
- Jaccard over text tokens: |A & B| / |A | B|

Both measures are symmetric and bounded to [0, 1]. Comparing two empty
collections yields 0, not NaN.
"""

import logging
from typing import Dict, Iterable

from ..schema import TagItem

logger = logging.getLogger(__name__)


def normalize_tags(tags: Iterable[TagItem]) -> Dict[str, int]:
    """
    Reduce a tag collection to a key -> weight map.

    The key is the trimmed, lowercased tag value. Duplicate keys collapse
    to the maximum weight seen. Keys keep the order in which they were
    first discovered.

    Args:
        tags: Tags of one participant in one lens

    Returns:
        Dictionary mapping tag key to weight
    """
    weights: Dict[str, int] = {}
    for item in tags:
        key = item.key
        weights[key] = max(weights.get(key, 0), item.weight)
    return weights


def weighted_jaccard(tags_a: Iterable[TagItem], tags_b: Iterable[TagItem]) -> float:
    """
    Compute weighted Jaccard similarity between two tag collections.

    For every key in the union, the smaller weight adds to the numerator
    and the larger weight adds to the denominator. A key missing on one
    side has weight 0 there.

    Args:
        tags_a: Tags of participant A
        tags_b: Tags of participant B

    Returns:
        Similarity in [0, 1] (0.0 when both sides are empty)
    """
    map_a = normalize_tags(tags_a)
    map_b = normalize_tags(tags_b)

    all_keys = set(map_a) | set(map_b)
    if not all_keys:
        return 0.0

    numerator = 0
    denominator = 0
    for key in all_keys:
        w_a = map_a.get(key, 0)
        w_b = map_b.get(key, 0)
        numerator += min(w_a, w_b)
        denominator += max(w_a, w_b)

    if denominator == 0:
        return 0.0
    return numerator / denominator


def text_jaccard(tokens_a: Iterable[str], tokens_b: Iterable[str]) -> float:
    """
    Compute Jaccard similarity between two token streams.

    Args:
        tokens_a: Tokens of participant A (already tokenized and stemmed)
        tokens_b: Tokens of participant B

    Returns:
        Similarity in [0, 1] (0.0 when both sides are empty)
    """
    set_a = set(tokens_a)
    set_b = set(tokens_b)
    if not set_a and not set_b:
        return 0.0

    intersection = len(set_a & set_b)
    union = len(set_a | set_b)
    return intersection / union
