"""Fusion module for combining similarity scores."""

from .lens_fusion import (
    LensFusion,
    SimilarityConfig,
    create_fusion_from_config,
    DEFAULT_TAG_WEIGHT,
    DEFAULT_TEXT_WEIGHT,
    DEFAULT_LENS_WEIGHTS,
    TOP_WEIGHTS_LIMIT
)

__all__ = [
    "LensFusion",
    "SimilarityConfig",
    "create_fusion_from_config",
    "DEFAULT_TAG_WEIGHT",
    "DEFAULT_TEXT_WEIGHT",
    "DEFAULT_LENS_WEIGHTS",
    "TOP_WEIGHTS_LIMIT"
]
