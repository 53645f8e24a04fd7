"""Ranking module for session match lists."""

from .matches import (
    OVERALL,
    parse_scope,
    scope_name,
    lens_has_data,
    score_pair,
    rank_matches,
    compute_session_matrix,
    compute_session_matrices,
    Match,
    MatchReport,
    MatchScores
)

__all__ = [
    "OVERALL",
    "parse_scope",
    "scope_name",
    "lens_has_data",
    "score_pair",
    "rank_matches",
    "compute_session_matrix",
    "compute_session_matrices",
    "Match",
    "MatchReport",
    "MatchScores"
]
