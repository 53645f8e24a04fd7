"""
Data structures for identities and similarity results.

An Identity holds, for each of the three lenses, a list of weighted tags
and a list of free-text entries. Comparing two identities yields a
SimilarityResult with one score per lens, an overall score and a
tag-level explanation per lens.

Lenses:
- GIVEN: ascribed attributes
- CHOSEN: self-selected affiliations
- CORE: foundational self-concept
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Union
from enum import Enum


class Lens(str, Enum):
    """Identity lens."""
    GIVEN = "GIVEN"
    CHOSEN = "CHOSEN"
    CORE = "CORE"

    @classmethod
    def parse(cls, value: Union[str, "Lens"]) -> "Lens":
        """Parse a lens name case-insensitively."""
        if isinstance(value, Lens):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown lens: {value!r}") from None


# Canonical iteration order
LENSES = (Lens.GIVEN, Lens.CHOSEN, Lens.CORE)


@dataclass
class TagItem:
    """
    A short categorical label with an importance weight.

    Weights are expected in [1, 3]. They are not validated here; rows are
    checked by the data loading layer before identities are built.

    Attributes:
        value: Tag text, compared case-insensitively after trimming
        weight: Importance weight (1-3)
    """
    value: str
    weight: int

    @property
    def key(self) -> str:
        """Comparison key: trimmed, lowercased value."""
        return self.value.strip().lower()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"value": self.value, "weight": self.weight}


def _empty_lens_map() -> Dict[Lens, list]:
    return {lens: [] for lens in LENSES}


@dataclass
class Identity:
    """
    Identity data for one participant.

    Attributes:
        tags: Weighted tags per lens
        texts: Free-text entries per lens
        participant_id: Optional identifier for the participant
    """
    tags: Dict[Lens, List[TagItem]] = field(default_factory=_empty_lens_map)
    texts: Dict[Lens, List[str]] = field(default_factory=_empty_lens_map)
    participant_id: Optional[str] = None

    def __post_init__(self):
        """Coerce string lens keys and dict tag items, fill missing lenses."""
        tags = _empty_lens_map()
        for lens, items in (self.tags or {}).items():
            tags[Lens.parse(lens)] = [
                TagItem(**item) if isinstance(item, dict) else item
                for item in items or []
            ]
        texts = _empty_lens_map()
        for lens, entries in (self.texts or {}).items():
            texts[Lens.parse(lens)] = list(entries or [])
        self.tags = tags
        self.texts = texts

    def tags_for(self, lens: Union[str, Lens]) -> List[TagItem]:
        return self.tags[Lens.parse(lens)]

    def texts_for(self, lens: Union[str, Lens]) -> List[str]:
        return self.texts[Lens.parse(lens)]

    def has_data(self, lens: Union[str, Lens]) -> bool:
        """True when the lens holds at least one tag or text."""
        lens = Lens.parse(lens)
        return bool(self.tags[lens]) or bool(self.texts[lens])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "participant_id": self.participant_id,
            "tags": {lens.value: [t.to_dict() for t in self.tags[lens]] for lens in LENSES},
            "texts": {lens.value: list(self.texts[lens]) for lens in LENSES}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Identity":
        """Create from dictionary."""
        return cls(
            tags=data.get("tags", {}),
            texts=data.get("texts", {}),
            participant_id=data.get("participant_id")
        )


@dataclass
class LensSimilarityResult:
    """
    Similarity result for one lens.

    Attributes:
        score: Blended tag/text similarity [0, 1]
        overlap_tags: Tag keys present on both sides
        unique_to_a: Tag keys present only for participant A
        unique_to_b: Tag keys present only for participant B
        top_weights: Up to three highest-weighted tag keys across both sides
    """
    score: float
    overlap_tags: List[str] = field(default_factory=list)
    unique_to_a: List[str] = field(default_factory=list)
    unique_to_b: List[str] = field(default_factory=list)
    top_weights: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "overlap_tags": list(self.overlap_tags),
            "unique_to_a": list(self.unique_to_a),
            "unique_to_b": list(self.unique_to_b),
            "top_weights": list(self.top_weights)
        }


@dataclass
class SimilarityResult:
    """
    Result of comparing two identities.

    Attributes:
        scores: Lens score per lens [0, 1]
        score_overall: Weighted average of the lens scores [0, 1]
        explanations: Tag-level explanation per lens
    """
    scores: Dict[Lens, float]
    score_overall: float
    explanations: Dict[Lens, LensSimilarityResult]

    def score_for(self, scope: Union[str, Lens]) -> float:
        """Return the overall score for scope "overall", else the lens score."""
        if isinstance(scope, str) and not isinstance(scope, Lens) and scope.strip().lower() == "overall":
            return self.score_overall
        return self.scores[Lens.parse(scope)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "scores": {lens.value: self.scores[lens] for lens in LENSES},
            "score_overall": self.score_overall,
            "explanations": {lens.value: self.explanations[lens].to_dict() for lens in LENSES}
        }
