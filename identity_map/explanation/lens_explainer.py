"""
Tag-level explanations for lens similarity.

For display, each lens comparison is explained by:
- Overlap: tags both participants hold
- Unique to A / unique to B: tags only one participant holds
- Top weights: the highest-weighted tags across both participants

Only tags are explained. Free text contributes to the lens score but not
to the explanation.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from ..schema import TagItem
from ..feature_engineering.set_similarity import normalize_tags
from ..fusion.lens_fusion import TOP_WEIGHTS_LIMIT

logger = logging.getLogger(__name__)


@dataclass
class LensExplanation:
    """
    Tag breakdown for one lens comparison.

    All entries are normalized tag keys (trimmed, lowercase, deduplicated).
    Overlap and unique lists follow the order in which keys were first
    seen: A's tags in input order, then B's new tags.

    Attributes:
        overlap: Keys present on both sides
        unique_a: Keys present only for participant A
        unique_b: Keys present only for participant B
        top_weights: Highest-weighted keys across both sides
    """
    overlap: List[str] = field(default_factory=list)
    unique_a: List[str] = field(default_factory=list)
    unique_b: List[str] = field(default_factory=list)
    top_weights: List[str] = field(default_factory=list)


def rank_tag_weights(weights: Dict[str, int], limit: int = TOP_WEIGHTS_LIMIT) -> List[str]:
    """
    Select the highest-weighted keys.

    Ordered by weight descending, ties by key ascending.

    Args:
        weights: Key -> weight map
        limit: Maximum number of keys to return

    Returns:
        Up to `limit` keys
    """
    ranked: List[Tuple[str, int]] = sorted(weights.items(), key=lambda kv: (-kv[1], kv[0]))
    return [key for key, _ in ranked[:limit]]


def explain_lens(
    tags_a: Iterable[TagItem],
    tags_b: Iterable[TagItem],
    limit: int = TOP_WEIGHTS_LIMIT
) -> LensExplanation:
    """
    Explain the tag overlap between two participants in one lens.

    Args:
        tags_a: Tags of participant A
        tags_b: Tags of participant B
        limit: Maximum number of top-weighted keys

    Returns:
        LensExplanation instance
    """
    map_a = normalize_tags(tags_a)
    map_b = normalize_tags(tags_b)

    # Discovery order: A first, then keys only B has
    all_keys = list(map_a) + [key for key in map_b if key not in map_a]

    explanation = LensExplanation()
    max_weights: Dict[str, int] = {}
    for key in all_keys:
        w_a = map_a.get(key, 0)
        w_b = map_b.get(key, 0)
        if w_a > 0 and w_b > 0:
            explanation.overlap.append(key)
        elif w_a > 0:
            explanation.unique_a.append(key)
        else:
            explanation.unique_b.append(key)
        max_weights[key] = max(w_a, w_b)

    explanation.top_weights = rank_tag_weights(max_weights, limit)
    return explanation
