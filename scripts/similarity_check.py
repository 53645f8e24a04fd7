"""
Smoke check for the similarity engine.

Checks:
1. Weighted Jaccard on identical, disjoint and partially overlapping tags
2. Text Jaccard on tokenized free text
3. Symmetry: compare(A, B) == compare(B, A)
4. Score ranges are within [0, 1]
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from identity_map.schema import Identity, TagItem, LENSES
from identity_map.preprocessing import tokenize
from identity_map.feature_engineering import weighted_jaccard, text_jaccard
from identity_map.scoring import compute_similarity

TOLERANCE = 1e-6


def create_identity_a() -> Identity:
    return Identity(
        tags={
            "GIVEN": [TagItem("music", 2), TagItem("art", 1)],
            "CHOSEN": [TagItem("runner", 3)],
        },
        texts={
            "GIVEN": ["Loves jazz and painting"],
            "CHOSEN": ["Runs marathons every year"],
        },
        participant_id="identity_a"
    )


def create_identity_b() -> Identity:
    return Identity(
        tags={
            "GIVEN": [TagItem("music", 1), TagItem("sports", 2)],
            "CHOSEN": [TagItem("reader", 2)],
        },
        texts={
            "GIVEN": ["Enjoys music and painting"],
            "CHOSEN": ["Reading fiction"],
        },
        participant_id="identity_b"
    )


def check_weighted_jaccard() -> bool:
    """Identical tags score 1, disjoint 0, the partial example 1/7."""
    print("\n" + "=" * 60)
    print("CHECK 1: Weighted Jaccard")
    print("=" * 60)

    base = [TagItem("music", 3), TagItem("sports", 2)]
    cases = [
        ("identical", base, [TagItem("music", 3), TagItem("sports", 2)], 1.0),
        ("no overlap", base, [TagItem("art", 1)], 0.0),
        ("partial", base, [TagItem("music", 1), TagItem("travel", 2)], 1 / 7),
    ]

    all_passed = True
    for label, tags_a, tags_b, expected in cases:
        score = weighted_jaccard(tags_a, tags_b)
        passed = abs(score - expected) <= TOLERANCE
        print(f"  {label}: {score:.6f} (expected {expected:.6f}) [{'PASS' if passed else 'FAIL'}]")
        all_passed = all_passed and passed

    return all_passed


def check_text_jaccard() -> bool:
    """Text Jaccard equals |intersection| / |union| of the token sets."""
    print("\n" + "=" * 60)
    print("CHECK 2: Text Jaccard")
    print("=" * 60)

    tokens_a = tokenize("Loves hiking and swimming in the ocean")
    tokens_b = tokenize("Hiking is my favorite activity by the sea")
    expected = len(set(tokens_a) & set(tokens_b)) / len(set(tokens_a) | set(tokens_b))
    score = text_jaccard(tokens_a, tokens_b)

    print(f"  Tokens A: {tokens_a}")
    print(f"  Tokens B: {tokens_b}")
    print(f"  Score: {score:.6f} (expected {expected:.6f})")

    return abs(score - expected) <= TOLERANCE


def check_symmetry() -> bool:
    print("\n" + "=" * 60)
    print("CHECK 3: Symmetry (A,B == B,A)")
    print("=" * 60)

    result_ab = compute_similarity(create_identity_a(), create_identity_b())
    result_ba = compute_similarity(create_identity_b(), create_identity_a())

    is_symmetric = abs(result_ab.score_overall - result_ba.score_overall) <= TOLERANCE
    for lens in LENSES:
        diff = abs(result_ab.scores[lens] - result_ba.scores[lens])
        print(f"  {lens.value}: {result_ab.scores[lens]:.6f} vs {result_ba.scores[lens]:.6f}")
        is_symmetric = is_symmetric and diff <= TOLERANCE
    print(f"  Overall: {result_ab.score_overall:.6f} vs {result_ba.score_overall:.6f}")

    return is_symmetric


def check_bounds() -> bool:
    print("\n" + "=" * 60)
    print("CHECK 4: Score Ranges")
    print("=" * 60)

    cases = [
        (Identity(), Identity(), "empty vs empty"),
        (create_identity_a(), create_identity_b(), "A vs B"),
        (create_identity_a(), create_identity_a(), "A vs A"),
    ]

    all_passed = True
    for identity_a, identity_b, label in cases:
        result = compute_similarity(identity_a, identity_b)
        in_range = 0 <= result.score_overall <= 1 and all(
            0 <= result.scores[lens] <= 1 for lens in LENSES
        )
        print(f"  {label}: overall={result.score_overall:.4f} [{'PASS' if in_range else 'FAIL'}]")
        all_passed = all_passed and in_range

    return all_passed


def main():
    print("=" * 60)
    print("IDENTITY MAP SIMILARITY CHECK")
    print("=" * 60)

    results = [
        ("Weighted Jaccard", check_weighted_jaccard()),
        ("Text Jaccard", check_text_jaccard()),
        ("Symmetry", check_symmetry()),
        ("Score Ranges", check_bounds()),
    ]

    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    for name, passed in results:
        print(f"  {name}: {'PASSED' if passed else 'FAILED'}")

    if all(passed for _, passed in results):
        print("\nAll similarity checks passed")
        return 0
    print("\nSome similarity checks failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
