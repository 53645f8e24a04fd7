"""
Match ranking for a session.

This module sits between the data loading layer and presentation. It
calls the similarity engine once per participant pair and turns the
results into ranked match lists.

Key Design Decisions:
- Scope is "overall" or a single lens
- A lens score is None ("no data") when neither participant has a tag or
  text in that lens; the engine itself always returns a number
- None scores are excluded from the top lists
- Most similar sorts by score descending, most different ascending; ties
  are broken by participant id
- Displayed dissimilarity is 1 - score
- Pairs are unordered: the session matrix computes each pair once
"""

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Mapping, Optional, Union
import json

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..schema import Identity, Lens, LENSES
from ..fusion.lens_fusion import SimilarityConfig
from ..scoring.engine import SimilarityEngine

logger = logging.getLogger(__name__)

OVERALL = "overall"
SCOPES = (OVERALL,) + LENSES

Scope = Union[str, Lens]


def parse_scope(value: Scope) -> Scope:
    """
    Parse a scope value.

    Args:
        value: "overall" or a lens name (case-insensitive)

    Returns:
        OVERALL or a Lens

    Raises:
        ValueError: If the value is neither
    """
    if isinstance(value, Lens):
        return value
    text = str(value).strip()
    if text.lower() == OVERALL:
        return OVERALL
    try:
        return Lens.parse(text)
    except ValueError:
        raise ValueError(
            f"Unknown scope: {value!r} (expected overall, given, chosen or core)"
        ) from None


def scope_name(scope: Scope) -> str:
    """Name used for a scope in reports and file names."""
    scope = parse_scope(scope)
    return OVERALL if scope == OVERALL else scope.value


def lens_has_data(identity_a: Identity, identity_b: Identity, lens: Scope) -> bool:
    """True when either participant has a tag or text in the lens."""
    return identity_a.has_data(lens) or identity_b.has_data(lens)


@dataclass
class MatchScores:
    """
    Scores of one participant pair as shown to a user.

    Attributes:
        overall: Overall similarity [0, 1]
        lenses: Lens score per lens, None when neither side has data
    """
    overall: float
    lenses: Dict[Lens, Optional[float]]

    def for_scope(self, scope: Scope) -> Optional[float]:
        """Score for "overall" or a single lens."""
        scope = parse_scope(scope)
        if scope == OVERALL:
            return self.overall
        return self.lenses[scope]

    def to_dict(self) -> Dict[str, Optional[float]]:
        """Convert to dictionary."""
        result = {OVERALL: self.overall}
        result.update({lens.value: self.lenses[lens] for lens in LENSES})
        return result


def score_pair(
    identity_a: Identity,
    identity_b: Identity,
    engine: Optional[SimilarityEngine] = None
) -> MatchScores:
    """
    Score a participant pair for display.

    Args:
        identity_a: Identity of the requesting participant
        identity_b: Identity of the other participant
        engine: Similarity engine (default weights if None)

    Returns:
        MatchScores with None for lenses without data on either side
    """
    engine = engine or SimilarityEngine()
    result = engine.compare(identity_a, identity_b)

    lenses = {
        lens: result.scores[lens] if lens_has_data(identity_a, identity_b, lens) else None
        for lens in LENSES
    }
    return MatchScores(overall=result.score_overall, lenses=lenses)


@dataclass
class Match:
    """
    One ranked match.

    Attributes:
        participant_id: The other participant
        display_name: Name shown to the user
        score: Similarity for the selected scope, None when unavailable
    """
    participant_id: str
    display_name: str
    score: Optional[float]

    @property
    def dissimilarity(self) -> Optional[float]:
        """Displayed difference: 1 - score."""
        if self.score is None:
            return None
        return 1.0 - self.score

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary."""
        return {
            "participant_id": self.participant_id,
            "display_name": self.display_name,
            "score": self.score,
            "dissimilarity": self.dissimilarity
        }


@dataclass
class MatchReport:
    """
    Ranked matches for one requesting participant.

    Attributes:
        requester_id: Participant the matches are computed for
        scope: "overall" or a lens name
        top_similar: Highest scores first
        top_different: Lowest scores first
        all_matches: Every other participant, in input order
        requester_has_data: Whether the requester has items in the scope
    """
    requester_id: str
    scope: str
    top_similar: List[Match] = field(default_factory=list)
    top_different: List[Match] = field(default_factory=list)
    all_matches: List[Match] = field(default_factory=list)
    requester_has_data: bool = True

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary."""
        return {
            "requester_id": self.requester_id,
            "scope": self.scope,
            "requester_has_data": self.requester_has_data,
            "top_similar": [m.to_dict() for m in self.top_similar],
            "top_different": [m.to_dict() for m in self.top_different],
            "all_matches": [m.to_dict() for m in self.all_matches]
        }

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved match report to {filepath}")


def rank_matches(
    requester_id: str,
    identities: Mapping[str, Identity],
    scope: Scope = OVERALL,
    top_k: int = 3,
    display_names: Optional[Mapping[str, str]] = None,
    config: Optional[SimilarityConfig] = None
) -> MatchReport:
    """
    Rank every other participant against the requester.

    Args:
        requester_id: Requesting participant
        identities: Identity per participant id (requester included)
        scope: "overall" or a lens
        top_k: Length of the most similar / most different lists
        display_names: Optional id -> name map (defaults to the id)
        config: Optional fusion weights

    Returns:
        MatchReport

    Raises:
        KeyError: If the requester has no identity
    """
    if requester_id not in identities:
        raise KeyError(f"No identity for requesting participant: {requester_id}")

    scope = parse_scope(scope)
    display_names = display_names or {}
    engine = SimilarityEngine(config)
    me = identities[requester_id]

    matches = []
    for participant_id, other in identities.items():
        if participant_id == requester_id:
            continue
        scores = score_pair(me, other, engine)
        matches.append(Match(
            participant_id=participant_id,
            display_name=display_names.get(participant_id, participant_id),
            score=scores.for_scope(scope)
        ))

    valid = [m for m in matches if m.score is not None]
    top_similar = sorted(valid, key=lambda m: (-m.score, m.participant_id))[:top_k]
    top_different = sorted(valid, key=lambda m: (m.score, m.participant_id))[:top_k]

    if scope == OVERALL:
        requester_has_data = any(me.has_data(lens) for lens in LENSES)
    else:
        requester_has_data = me.has_data(scope)

    logger.info(
        f"Ranked {len(valid)} of {len(matches)} participants for {requester_id} "
        f"(scope={scope_name(scope)})"
    )

    return MatchReport(
        requester_id=requester_id,
        scope=scope_name(scope),
        top_similar=top_similar,
        top_different=top_different,
        all_matches=matches,
        requester_has_data=requester_has_data
    )


def compute_session_matrices(
    identities: Mapping[str, Identity],
    n_jobs: int = 1,
    config: Optional[SimilarityConfig] = None
) -> Dict[str, pd.DataFrame]:
    """
    Compute all-pairs similarity matrices for a session.

    Each unordered pair is compared once and mirrored. The diagonal and
    lens scores without data are NaN.

    Args:
        identities: Identity per participant id
        n_jobs: Number of parallel jobs for pair comparisons
        config: Optional fusion weights

    Returns:
        Dictionary mapping scope name to a symmetric participants x participants DataFrame
    """
    ids = list(identities)
    pairs = list(combinations(range(len(ids)), 2))
    engine = SimilarityEngine(config)

    logger.info(f"Computing {len(pairs)} pair similarities for {len(ids)} participants (n_jobs={n_jobs})")

    results = Parallel(n_jobs=n_jobs)(
        delayed(score_pair)(identities[ids[i]], identities[ids[j]], engine)
        for i, j in pairs
    )

    matrices = {}
    for scope in SCOPES:
        values = np.full((len(ids), len(ids)), np.nan)
        for (i, j), scores in zip(pairs, results):
            score = scores.for_scope(scope)
            if score is not None:
                values[i, j] = values[j, i] = score
        matrices[scope_name(scope)] = pd.DataFrame(values, index=ids, columns=ids)

    return matrices


def compute_session_matrix(
    identities: Mapping[str, Identity],
    scope: Scope = OVERALL,
    n_jobs: int = 1,
    config: Optional[SimilarityConfig] = None
) -> pd.DataFrame:
    """
    Compute the all-pairs similarity matrix for one scope.

    Args:
        identities: Identity per participant id
        scope: "overall" or a lens
        n_jobs: Number of parallel jobs
        config: Optional fusion weights

    Returns:
        Symmetric participants x participants DataFrame
    """
    return compute_session_matrices(identities, n_jobs=n_jobs, config=config)[scope_name(scope)]
