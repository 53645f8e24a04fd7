"""
Session-level score statistics.

Summarizes the all-pairs similarity matrices of a session so a facilitator
can see how alike the group is overall and per lens. There are no ground
truth labels; these are descriptive statistics only.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
import json

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

DEFAULT_QUANTILES = [0.1, 0.25, 0.5, 0.75, 0.9]


@dataclass
class ScoreDistributionStats:
    """Statistics about score distribution."""
    mean: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]  # e.g., {"p10": 0.2, "p50": 0.5, "p90": 0.8}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": float(self.mean),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()}
        }


@dataclass
class SessionReport:
    """
    Score report for one session.

    Attributes:
        n_participants: Number of participants compared
        n_pairs: Number of unordered pairs
        scope_stats: Distribution per scope, None when a scope has no scored pairs
        scored_pairs: Number of pairs with a score per scope
    """
    n_participants: int
    n_pairs: int
    scope_stats: Dict[str, Optional[ScoreDistributionStats]] = field(default_factory=dict)
    scored_pairs: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_participants": int(self.n_participants),
            "n_pairs": int(self.n_pairs),
            "scored_pairs": {k: int(v) for k, v in self.scored_pairs.items()},
            "scope_stats": {
                scope: stats.to_dict() if stats else None
                for scope, stats in self.scope_stats.items()
            }
        }

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved session report to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the report."""
        lines = [
            f"Session Report: {self.n_participants} participants, {self.n_pairs} pairs",
            "=" * 50,
        ]

        for scope, stats in self.scope_stats.items():
            lines.append("")
            lines.append(f"{scope} ({self.scored_pairs.get(scope, 0)} scored pairs):")
            if stats is None:
                lines.append("  Not enough data")
                continue
            lines.extend([
                f"  Mean: {stats.mean:.4f}",
                f"  Std:  {stats.std:.4f}",
                f"  Min:  {stats.min:.4f}",
                f"  Max:  {stats.max:.4f}",
            ])
            for q_name, q_value in stats.quantiles.items():
                lines.append(f"  {q_name}: {q_value:.4f}")

        return "\n".join(lines)


def compute_score_distribution_stats(
    scores: np.ndarray,
    quantiles: Optional[List[float]] = None
) -> ScoreDistributionStats:
    """
    Compute distribution statistics for scores.

    Args:
        scores: Array of similarity scores
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance

    Raises:
        ValueError: If scores is empty
    """
    scores = np.asarray(scores, dtype=float)
    if scores.size == 0:
        raise ValueError("Cannot compute distribution statistics of an empty score array")

    quantiles = quantiles or DEFAULT_QUANTILES
    quantile_dict = {
        f"p{int(round(q * 100))}": float(np.percentile(scores, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        mean=float(np.mean(scores)),
        std=float(np.std(scores)),
        min=float(np.min(scores)),
        max=float(np.max(scores)),
        quantiles=quantile_dict
    )


def pair_scores(matrix: pd.DataFrame) -> np.ndarray:
    """
    Extract the scored unordered pairs from a symmetric matrix.

    Args:
        matrix: Participants x participants similarity matrix

    Returns:
        1-D array of finite upper-triangle values
    """
    values = matrix.to_numpy(dtype=float)
    upper = values[np.triu_indices(len(values), k=1)]
    return upper[np.isfinite(upper)]


def create_session_report(
    matrices: Dict[str, pd.DataFrame],
    quantiles: Optional[List[float]] = None
) -> SessionReport:
    """
    Create a session report from per-scope similarity matrices.

    Args:
        matrices: Scope name -> similarity matrix
        quantiles: Quantiles to report

    Returns:
        SessionReport instance
    """
    n_participants = len(next(iter(matrices.values()))) if matrices else 0
    report = SessionReport(
        n_participants=n_participants,
        n_pairs=n_participants * (n_participants - 1) // 2
    )

    for scope, matrix in matrices.items():
        scores = pair_scores(matrix)
        report.scored_pairs[scope] = len(scores)
        if len(scores) == 0:
            logger.warning(f"No scored pairs for scope {scope}")
            report.scope_stats[scope] = None
        else:
            report.scope_stats[scope] = compute_score_distribution_stats(scores, quantiles)

    return report
