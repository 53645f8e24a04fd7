import pandas as pd
import pytest

from identity_map.data_loading import (
    build_identities,
    load_identity_items,
    load_participants,
    select_visible_participants,
    validate_identity_items,
)
from identity_map.schema import Lens, TagItem


ITEMS_CSV = """participant_id,lens,type,value,weight
p1,GIVEN,tag,female,2
p1,GIVEN,text,Loves hiking,
p1,core,tag,Introvert,3
p2,CHOSEN,tag,runner,1
p2,CHOSEN,text,Runs marathons,1
p3,GIVEN,tag,male,2
"""

PARTICIPANTS_CSV = """id,session_id,display_name,is_visible,consent_given
p1,s1,Alice,true,true
p2,s1,Bob,false,true
p3,s2,Charlie,True,false
p4,s1,Dana,yes,true
"""


@pytest.fixture
def items_path(tmp_path):
    path = tmp_path / "identity_items.csv"
    path.write_text(ITEMS_CSV)
    return path


@pytest.fixture
def participants_path(tmp_path):
    path = tmp_path / "participants.csv"
    path.write_text(PARTICIPANTS_CSV)
    return path


def test_build_identities_from_csv(items_path) -> None:
    items = load_identity_items(str(items_path))
    identities = build_identities(items)

    assert set(identities) == {"p1", "p2", "p3"}
    p1 = identities["p1"]
    assert p1.participant_id == "p1"
    assert p1.tags_for(Lens.GIVEN) == [TagItem("female", 2)]
    assert p1.texts_for(Lens.GIVEN) == ["Loves hiking"]
    assert p1.tags_for(Lens.CORE) == [TagItem("Introvert", 3)]
    assert not p1.has_data(Lens.CHOSEN)
    assert identities["p2"].texts_for(Lens.CHOSEN) == ["Runs marathons"]


def test_build_identities_for_requested_participants(items_path) -> None:
    items = load_identity_items(str(items_path))
    identities = build_identities(items, ["p1", "p9"])

    assert set(identities) == {"p1", "p9"}
    assert not any(identities["p9"].has_data(lens) for lens in Lens)


def test_out_of_range_weight_is_rejected() -> None:
    items = pd.DataFrame([
        {"participant_id": "p1", "lens": "GIVEN", "type": "tag", "value": "music", "weight": 4},
        {"participant_id": "p1", "lens": "GIVEN", "type": "tag", "value": "art", "weight": 1.5},
    ])

    issues = validate_identity_items(items)
    assert len(issues) == 2
    with pytest.raises(ValueError, match="tag weight"):
        build_identities(items)


def test_validation_reports_bad_rows() -> None:
    items = pd.DataFrame([
        {"participant_id": "p1", "lens": "HIDDEN", "type": "tag", "value": "x", "weight": 1},
        {"participant_id": "p1", "lens": "GIVEN", "type": "emoji", "value": "x", "weight": 1},
        {"participant_id": "p1", "lens": "GIVEN", "type": "text", "value": "  ", "weight": 1},
    ])

    issues = validate_identity_items(items)

    assert any("unknown lens" in issue for issue in issues)
    assert any("unknown item type" in issue for issue in issues)
    assert any("empty value" in issue for issue in issues)


def test_validation_reports_missing_columns() -> None:
    issues = validate_identity_items(pd.DataFrame({"participant_id": ["p1"], "value": ["x"]}))
    assert issues == ["Missing required columns: ['lens', 'type', 'weight']"]


def test_missing_and_empty_files(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_identity_items(str(tmp_path / "missing.csv"))

    empty = tmp_path / "empty.csv"
    empty.write_text("participant_id,lens,type,value,weight\n")
    with pytest.raises(ValueError):
        load_identity_items(str(empty))


def test_load_participants_parses_flags(participants_path) -> None:
    participants = load_participants(str(participants_path))

    assert list(participants["id"]) == ["p1", "p2", "p3", "p4"]
    assert list(participants["is_visible"]) == [True, False, True, True]
    assert list(participants["consent_given"]) == [True, True, False, True]


def test_select_visible_participants(participants_path) -> None:
    participants = load_participants(str(participants_path))

    assert list(select_visible_participants(participants)["id"]) == ["p1", "p3", "p4"]
    assert list(select_visible_participants(participants, session_id="s1")["id"]) == ["p1", "p4"]


def test_select_visible_without_flag_column_keeps_everyone() -> None:
    participants = pd.DataFrame({"id": ["p1", "p2"], "display_name": ["A", "B"]})
    assert len(select_visible_participants(participants)) == 2
    with pytest.raises(ValueError):
        select_visible_participants(participants, session_id="s1")


def test_tag_values_that_look_like_missing_markers_are_kept(tmp_path) -> None:
    path = tmp_path / "identity_items.csv"
    path.write_text(
        "participant_id,lens,type,value,weight\n"
        "p1,GIVEN,tag,NA,2\n"
        "p1,CHOSEN,tag,None,1\n"
        "p1,CORE,tag,null,3\n"
        "p1,CORE,text,Quiet,\n"
    )

    identities = build_identities(load_identity_items(str(path)))

    p1 = identities["p1"]
    assert p1.tags_for(Lens.GIVEN) == [TagItem("NA", 2)]
    assert p1.tags_for(Lens.CHOSEN) == [TagItem("None", 1)]
    assert p1.tags_for(Lens.CORE) == [TagItem("null", 3)]
    assert p1.texts_for(Lens.CORE) == ["Quiet"]


def test_validation_handles_duplicated_index() -> None:
    first = pd.DataFrame([
        {"participant_id": "p1", "lens": "GIVEN", "type": "tag", "value": "music", "weight": 2},
        {"participant_id": "p1", "lens": "CHOSEN", "type": "text", "value": "Runs", "weight": None},
    ])
    second = pd.DataFrame([
        {"participant_id": "p2", "lens": "GIVEN", "type": "tag", "value": "art", "weight": 3},
        {"participant_id": "p2", "lens": "CORE", "type": "tag", "value": "calm", "weight": 5},
    ])

    items = pd.concat([first, second])

    issues = validate_identity_items(items)
    assert len(issues) == 1
    assert issues[0].startswith("Row 1: tag weight must be an integer")
    identities = build_identities(pd.concat([first, first]))
    assert identities["p1"].tags_for(Lens.GIVEN) == [TagItem("music", 2), TagItem("music", 2)]
