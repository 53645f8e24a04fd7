"""
Scoring module for identity similarity.

This module provides the similarity engine that compares two identities
lens by lens and aggregates an overall score.
"""

from .engine import (
    SimilarityEngine,
    create_engine,
    compute_similarity,
    lens_score,
    overall_score,
)

__all__ = [
    "SimilarityEngine",
    "create_engine",
    "compute_similarity",
    "lens_score",
    "overall_score",
]
