"""Evaluation module for session score statistics."""

from .metrics import (
    compute_score_distribution_stats,
    create_session_report,
    pair_scores,
    ScoreDistributionStats,
    SessionReport
)

__all__ = [
    "compute_score_distribution_stats",
    "create_session_report",
    "pair_scores",
    "ScoreDistributionStats",
    "SessionReport"
]
