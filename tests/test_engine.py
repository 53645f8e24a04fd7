import pytest

from identity_map.fusion.lens_fusion import SimilarityConfig
from identity_map.preprocessing.text import tokenize
from identity_map.feature_engineering.set_similarity import text_jaccard
from identity_map.schema import Identity, Lens, LENSES, TagItem
from identity_map.scoring import SimilarityEngine, compute_similarity, create_engine, lens_score, overall_score


def test_similarity_is_symmetric(identity_a, identity_b) -> None:
    ab = compute_similarity(identity_a, identity_b)
    ba = compute_similarity(identity_b, identity_a)

    assert ab.score_overall == pytest.approx(ba.score_overall)
    for lens in LENSES:
        assert ab.scores[lens] == pytest.approx(ba.scores[lens])
        assert ab.explanations[lens].overlap_tags == ba.explanations[lens].overlap_tags
        assert ab.explanations[lens].unique_to_a == ba.explanations[lens].unique_to_b


def test_scores_are_bounded(identity_a, identity_b, full_identity) -> None:
    for a, b in [(identity_a, identity_b), (identity_a, full_identity), (Identity(), full_identity)]:
        result = compute_similarity(a, b)
        assert 0.0 <= result.score_overall <= 1.0
        for lens in LENSES:
            assert 0.0 <= result.scores[lens] <= 1.0


def test_identity_with_self_scores_one(full_identity) -> None:
    result = compute_similarity(full_identity, full_identity)

    for lens in LENSES:
        assert result.scores[lens] == pytest.approx(1.0)
    assert result.score_overall == pytest.approx(1.0)


def test_tags_only_lens_against_itself_scores_tag_weight() -> None:
    identity = Identity(tags={"CORE": [TagItem("introvert", 3)]})

    result = compute_similarity(identity, identity)

    assert result.scores[Lens.CORE] == pytest.approx(0.7)
    assert result.scores[Lens.GIVEN] == 0.0


def test_no_overlap_yields_zero() -> None:
    a = Identity(tags={"GIVEN": [TagItem("female", 2)]}, texts={"GIVEN": ["Loves painting"]})
    b = Identity(tags={"GIVEN": [TagItem("male", 2)]}, texts={"GIVEN": ["Plays chess"]})

    assert compute_similarity(a, b).scores[Lens.GIVEN] == 0.0


def test_empty_vs_empty_is_zero() -> None:
    result = compute_similarity(Identity(), Identity())

    for lens in LENSES:
        assert result.scores[lens] == 0.0
        assert result.explanations[lens].overlap_tags == []
    assert result.score_overall == 0.0


def test_weighted_jaccard_example_through_engine() -> None:
    a = Identity(tags={"GIVEN": [TagItem("music", 3), TagItem("sports", 2)]})
    b = Identity(tags={"GIVEN": [TagItem("music", 1), TagItem("travel", 2)]})

    result = compute_similarity(a, b)

    assert result.scores[Lens.GIVEN] == pytest.approx(0.7 / 7)
    assert result.score_overall == pytest.approx(0.1 * 0.8 / 3.0)
    assert result.explanations[Lens.GIVEN].top_weights == ["music", "sports", "travel"]


def test_uniform_lens_scores_overall() -> None:
    assert overall_score({"GIVEN": 0.5, "CHOSEN": 0.5, "CORE": 0.5}) == pytest.approx(0.5)


def test_given_lens_end_to_end_scenario() -> None:
    a = Identity(tags={"GIVEN": [TagItem("female", 2)]}, texts={"GIVEN": ["Loves hiking"]})
    b = Identity(tags={"GIVEN": [TagItem("male", 2)]}, texts={"GIVEN": ["Hiking is my favorite activity"]})

    result = compute_similarity(a, b)
    given = result.explanations[Lens.GIVEN]

    text_score = text_jaccard(tokenize("Loves hiking"), tokenize("Hiking is my favorite activity"))
    assert text_score == pytest.approx(1 / 5)
    assert result.scores[Lens.GIVEN] == pytest.approx(0.3 * text_score)
    assert given.score == result.scores[Lens.GIVEN]
    assert given.overlap_tags == []
    assert given.unique_to_a == ["female"]
    assert given.unique_to_b == ["male"]


def test_lens_score_pools_all_text_entries() -> None:
    score = lens_score([], ["Loves hiking", "Reads books"], [], ["Reading and hiking"])
    # {love, hik, read, book} vs {read, hik}
    assert score == pytest.approx(0.3 * 2 / 4)


def test_engine_does_not_mutate_inputs(identity_a, identity_b) -> None:
    before_a = identity_a.to_dict()
    before_b = identity_b.to_dict()

    first = compute_similarity(identity_a, identity_b)
    second = compute_similarity(identity_a, identity_b)

    assert identity_a.to_dict() == before_a
    assert identity_b.to_dict() == before_b
    assert first.to_dict() == second.to_dict()


def test_custom_weights() -> None:
    config = SimilarityConfig(tag_weight=1.0, text_weight=0.0,
                              lens_weights={"GIVEN": 0.0, "CHOSEN": 0.0, "CORE": 1.0})
    a = Identity(tags={"CORE": [TagItem("curious", 3)]}, texts={"CORE": ["hello"]})

    result = SimilarityEngine(config).compare(a, a)

    assert result.scores[Lens.CORE] == pytest.approx(1.0)
    assert result.score_overall == pytest.approx(1.0)


def test_result_accessors_and_serialization(identity_a, identity_b) -> None:
    result = compute_similarity(identity_a, identity_b)

    assert result.score_for("overall") == result.score_overall
    assert result.score_for("core") == result.scores[Lens.CORE]
    assert result.score_for(Lens.GIVEN) == result.scores[Lens.GIVEN]

    data = result.to_dict()
    assert set(data["scores"]) == {"GIVEN", "CHOSEN", "CORE"}
    assert set(data["explanations"]["GIVEN"]) == {
        "score", "overlap_tags", "unique_to_a", "unique_to_b", "top_weights"
    }
    assert data["explanations"]["GIVEN"]["overlap_tags"] == ["music"]


def test_identity_from_dict_coerces_lenses_and_tags() -> None:
    identity = Identity.from_dict({
        "participant_id": "p1",
        "tags": {"given": [{"value": "Music", "weight": 2}]},
        "texts": {"Core": ["Quiet thinker"]},
    })

    assert identity.tags_for(Lens.GIVEN) == [TagItem("Music", 2)]
    assert identity.texts_for("CORE") == ["Quiet thinker"]
    assert identity.tags_for("CHOSEN") == []
    assert identity.has_data("GIVEN") and not identity.has_data("CHOSEN")
    assert Identity.from_dict(identity.to_dict()) == identity


def test_compare_batch_matches_single_comparisons(identity_a, identity_b, full_identity) -> None:
    engine = create_engine()
    pairs = [(identity_a, identity_b), (identity_b, full_identity)]

    results = engine.compare_batch(pairs)

    assert [r.score_overall for r in results] == [
        engine.compare(a, b).score_overall for a, b in pairs
    ]
