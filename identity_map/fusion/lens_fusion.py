"""
Score fusion for identity similarity.

This module combines the component similarities into a lens score and the
three lens scores into an overall score.

Fusion Formulas:
    lens_score = tag_weight * weighted_jaccard + text_weight * text_jaccard
    overall = sum(score_L * weight_L) / sum(weight_L)

Default weights:
- Tags 0.7, text 0.3
- GIVEN 0.8, CHOSEN 1.0, CORE 1.2 (CORE counts most toward overall similarity)

Every lens contributes at its full weight even when it holds no data; an
empty lens scores 0. Treating such a lens as unavailable is up to the
ranking layer.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Mapping, Union
import json

import numpy as np

from ..schema import Lens, LENSES

logger = logging.getLogger(__name__)

DEFAULT_TAG_WEIGHT = 0.7
DEFAULT_TEXT_WEIGHT = 0.3
DEFAULT_LENS_WEIGHTS = {
    Lens.GIVEN: 0.8,
    Lens.CHOSEN: 1.0,
    Lens.CORE: 1.2,
}
TOP_WEIGHTS_LIMIT = 3


def _default_lens_weights() -> Dict[Lens, float]:
    return dict(DEFAULT_LENS_WEIGHTS)


@dataclass
class SimilarityConfig:
    """
    Configuration for similarity fusion.

    Attributes:
        tag_weight: Weight of tag similarity within a lens
        text_weight: Weight of text similarity within a lens
        lens_weights: Weight of each lens in the overall score
        top_weights_limit: Number of top-weighted tags reported per lens
    """
    tag_weight: float = DEFAULT_TAG_WEIGHT
    text_weight: float = DEFAULT_TEXT_WEIGHT
    lens_weights: Dict[Lens, float] = field(default_factory=_default_lens_weights)
    top_weights_limit: int = TOP_WEIGHTS_LIMIT

    def __post_init__(self):
        """Coerce string lens keys."""
        self.lens_weights = {
            Lens.parse(lens): float(weight) for lens, weight in self.lens_weights.items()
        }

    def validate(self) -> None:
        """Validate configuration values."""
        if self.tag_weight < 0 or self.text_weight < 0:
            raise ValueError(
                f"Blend weights must be non-negative, got "
                f"tag={self.tag_weight}, text={self.text_weight}"
            )
        if abs(self.tag_weight + self.text_weight - 1.0) > 0.01:
            raise ValueError(
                f"Blend weights must sum to 1: {self.tag_weight} + {self.text_weight}"
            )
        missing = [lens.value for lens in LENSES if lens not in self.lens_weights]
        if missing:
            raise ValueError(f"Missing lens weights: {missing}")
        for lens, weight in self.lens_weights.items():
            if weight < 0:
                raise ValueError(f"Lens weight for {lens.value} must be non-negative, got {weight}")
        if sum(self.lens_weights.values()) <= 0:
            raise ValueError("Lens weights must not all be zero")
        if self.top_weights_limit < 1:
            raise ValueError(f"top_weights_limit must be >= 1, got {self.top_weights_limit}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tag_weight": self.tag_weight,
            "text_weight": self.text_weight,
            "lens_weights": {lens.value: w for lens, w in self.lens_weights.items()},
            "top_weights_limit": self.top_weights_limit
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SimilarityConfig":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SimilarityConfig":
        """Create from main config dictionary."""
        similarity_config = config.get("similarity") or {}

        return cls(
            tag_weight=similarity_config.get("tag_weight", DEFAULT_TAG_WEIGHT),
            text_weight=similarity_config.get("text_weight", DEFAULT_TEXT_WEIGHT),
            lens_weights=similarity_config.get("lens_weights", _default_lens_weights()),
            top_weights_limit=similarity_config.get("top_weights_limit", TOP_WEIGHTS_LIMIT)
        )

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved similarity config to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "SimilarityConfig":
        """Load from JSON file."""
        with open(filepath, "r") as f:
            d = json.load(f)
        return cls.from_dict(d)


class LensFusion:
    """
    Combiner for lens and overall similarity scores.

    Attributes:
        config: SimilarityConfig with fusion weights
    """

    def __init__(self, config: SimilarityConfig):
        """
        Initialize the fusion combiner.

        Args:
            config: SimilarityConfig instance
        """
        self.config = config
        self.config.validate()
        self._lens_weights = np.array([config.lens_weights[lens] for lens in LENSES])
        logger.debug(
            f"Initialized LensFusion with tag_weight={config.tag_weight}, "
            f"lens_weights={self.config.to_dict()['lens_weights']}"
        )

    def combine(self, tag_score: float, text_score: float) -> float:
        """
        Blend tag and text similarity into a lens score.

        Args:
            tag_score: Weighted Jaccard over tags
            text_score: Jaccard over text tokens

        Returns:
            Lens score in [0, 1]
        """
        score = self.config.tag_weight * tag_score + self.config.text_weight * text_score
        return float(np.clip(score, 0.0, 1.0))

    def aggregate(self, scores: Mapping[Union[str, Lens], float]) -> float:
        """
        Weighted average of the lens scores.

        Args:
            scores: Lens score per lens; a missing lens counts as 0

        Returns:
            Overall score in [0, 1]
        """
        by_lens = {Lens.parse(lens): score for lens, score in scores.items()}
        lens_scores = np.array([by_lens.get(lens, 0.0) for lens in LENSES], dtype=float)
        overall = np.dot(lens_scores, self._lens_weights) / self._lens_weights.sum()
        return float(np.clip(overall, 0.0, 1.0))

    def get_effective_weights(self) -> Dict[str, float]:
        """
        Get normalized lens weights.

        Returns:
            Dictionary with each lens's share of the overall score
        """
        total = self._lens_weights.sum()
        return {lens.value: float(w / total) for lens, w in zip(LENSES, self._lens_weights)}


def create_fusion_from_config(config: Dict[str, Any]) -> LensFusion:
    """
    Factory function to create LensFusion from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured LensFusion instance
    """
    return LensFusion(SimilarityConfig.from_config(config))
