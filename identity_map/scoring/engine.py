"""
Similarity scoring between two identities.

This module provides the similarity engine that:
1. Accepts Identity snapshots for Participant A and Participant B
2. Scores each lens by blending tag and text similarity
3. Explains each lens by its tag overlap
4. Aggregates the lens scores into an overall score

The engine holds no state beyond its fusion weights. It never mutates or
keeps references to its inputs, so it can be called concurrently.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..schema import (
    Identity,
    Lens,
    LENSES,
    LensSimilarityResult,
    SimilarityResult,
    TagItem,
)
from ..preprocessing.text import tokenize_all
from ..feature_engineering.set_similarity import weighted_jaccard, text_jaccard
from ..fusion.lens_fusion import LensFusion, SimilarityConfig
from ..explanation.lens_explainer import explain_lens

logger = logging.getLogger(__name__)


class SimilarityEngine:
    """
    Identity similarity engine.

    Attributes:
        config: SimilarityConfig with blend and lens weights
        fusion: LensFusion built from the config
    """

    def __init__(self, config: Optional[SimilarityConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Fusion weights (defaults to the standard 0.7/0.3 and 0.8/1.0/1.2)
        """
        self.config = config or SimilarityConfig()
        self.fusion = LensFusion(self.config)

    def lens_score(
        self,
        tags_a: Iterable[TagItem],
        texts_a: Iterable[str],
        tags_b: Iterable[TagItem],
        texts_b: Iterable[str]
    ) -> float:
        """
        Compute the similarity of one lens.

        Each text entry is tokenized on its own and the tokens of all entries
        are pooled per participant.

        Returns:
            Lens score in [0, 1]
        """
        tag_score = weighted_jaccard(tags_a, tags_b)
        text_score = text_jaccard(tokenize_all(texts_a), tokenize_all(texts_b))
        return self.fusion.combine(tag_score, text_score)

    def overall_score(self, scores: Mapping[Union[str, Lens], float]) -> float:
        """Weighted average of the lens scores."""
        return self.fusion.aggregate(scores)

    def compare(self, identity_a: Identity, identity_b: Identity) -> SimilarityResult:
        """
        Compute similarity between two identities.

        Args:
            identity_a: Identity of participant A
            identity_b: Identity of participant B

        Returns:
            SimilarityResult with lens scores, overall score and explanations
        """
        scores: Dict[Lens, float] = {}
        explanations: Dict[Lens, LensSimilarityResult] = {}

        for lens in LENSES:
            tags_a = identity_a.tags_for(lens)
            tags_b = identity_b.tags_for(lens)

            score = self.lens_score(
                tags_a, identity_a.texts_for(lens),
                tags_b, identity_b.texts_for(lens)
            )
            exp = explain_lens(tags_a, tags_b, limit=self.config.top_weights_limit)

            scores[lens] = score
            explanations[lens] = LensSimilarityResult(
                score=score,
                overlap_tags=exp.overlap,
                unique_to_a=exp.unique_a,
                unique_to_b=exp.unique_b,
                top_weights=exp.top_weights
            )

        score_overall = self.overall_score(scores)
        logger.debug(
            f"Compared {identity_a.participant_id} vs {identity_b.participant_id}: "
            f"overall={score_overall:.4f}"
        )

        return SimilarityResult(
            scores=scores,
            score_overall=score_overall,
            explanations=explanations
        )

    def compare_batch(
        self,
        pairs: Iterable[Tuple[Identity, Identity]]
    ) -> List[SimilarityResult]:
        """
        Compute similarity for multiple identity pairs.

        Args:
            pairs: Iterable of (identity_a, identity_b) tuples

        Returns:
            List of SimilarityResult
        """
        return [self.compare(a, b) for a, b in pairs]


def create_engine(config: Optional[SimilarityConfig] = None) -> SimilarityEngine:
    """
    Factory function to create a SimilarityEngine.

    Args:
        config: Optional SimilarityConfig

    Returns:
        SimilarityEngine instance
    """
    return SimilarityEngine(config)


def lens_score(
    tags_a: Iterable[TagItem],
    texts_a: Iterable[str],
    tags_b: Iterable[TagItem],
    texts_b: Iterable[str],
    config: Optional[SimilarityConfig] = None
) -> float:
    """Lens score: tag_weight * weighted Jaccard + text_weight * text Jaccard."""
    return SimilarityEngine(config).lens_score(tags_a, texts_a, tags_b, texts_b)


def overall_score(
    scores: Mapping[Union[str, Lens], float],
    config: Optional[SimilarityConfig] = None
) -> float:
    """Overall score: lens-weighted average of the lens scores."""
    return SimilarityEngine(config).overall_score(scores)


def compute_similarity(
    identity_a: Identity,
    identity_b: Identity,
    config: Optional[SimilarityConfig] = None
) -> SimilarityResult:
    """
    Compute per-lens and overall similarity between two identities.

    Args:
        identity_a: Identity of participant A
        identity_b: Identity of participant B
        config: Optional fusion weights

    Returns:
        SimilarityResult
    """
    return SimilarityEngine(config).compare(identity_a, identity_b)
