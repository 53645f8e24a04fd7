import json
import shutil
from pathlib import Path

import pytest
import yaml

from identity_map.run import run_matching

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def config_path(tmp_path):
    for name in ("participants.csv", "identity_items.csv"):
        shutil.copy(REPO_ROOT / "data" / name, tmp_path / name)

    with open(REPO_ROOT / "configs" / "config.yaml") as f:
        config = yaml.safe_load(f)
    config["data"]["participants"]["path"] = str(tmp_path / "participants.csv")
    config["data"]["identity_items"]["path"] = str(tmp_path / "identity_items.csv")
    config["global"]["output_dir"] = str(tmp_path / "artifacts")

    path = tmp_path / "config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(config, f)
    return path


def test_run_matching_overall(config_path, tmp_path) -> None:
    result = run_matching(str(config_path), "p-alice")

    assert result["success"]
    matches = result["matches"]
    assert [m["participant_id"] for m in matches["top_similar"]] == ["p-dana", "p-bob"]
    assert matches["top_similar"][0]["score"] == pytest.approx(0.49)
    assert matches["top_similar"][1]["score"] == pytest.approx(0.066)
    # hidden participants are never ranked
    assert "p-charlie" not in [m["participant_id"] for m in matches["all_matches"]]

    out_dir = tmp_path / "artifacts"
    assert (out_dir / "matches_overall.json").exists()
    assert (out_dir / "similarity_matrix_core.csv").exists()
    report = json.loads((out_dir / "session_report.json").read_text())
    assert report["n_participants"] == 3
    assert json.loads((out_dir / "metadata.json").read_text())["participant_id"] == "p-alice"


def test_run_matching_hidden_requester_and_lens_scope(config_path, tmp_path) -> None:
    out_dir = tmp_path / "custom"
    result = run_matching(str(config_path), "p-charlie", scope="core", output_dir=str(out_dir))

    matches = result["matches"]
    assert matches["scope"] == "CORE"
    assert {m["participant_id"] for m in matches["all_matches"]} == {"p-alice", "p-bob", "p-dana"}
    assert all(m["score"] == 0.0 for m in matches["all_matches"])
    assert (out_dir / "matches_core.json").exists()


def test_run_matching_unknown_participant(config_path) -> None:
    with pytest.raises(KeyError):
        run_matching(str(config_path), "p-nobody")


@pytest.fixture
def two_session_config(config_path, tmp_path):
    with open(tmp_path / "participants.csv", "a") as f:
        f.write("p-zed,other,Zed,true,true\n")
    with open(tmp_path / "identity_items.csv", "a") as f:
        f.write("p-zed,CORE,tag,introvert,3\n")
    return config_path


def test_run_matching_stays_in_requester_session(two_session_config) -> None:
    result = run_matching(str(two_session_config), "p-alice")

    ranked = [m["participant_id"] for m in result["matches"]["all_matches"]]
    assert ranked == ["p-bob", "p-dana"]
    assert result["metadata"]["session_id"] == "demo"

    zed = run_matching(str(two_session_config), "p-zed")
    assert zed["matches"]["all_matches"] == []


def test_run_matching_rejects_foreign_session(two_session_config) -> None:
    with pytest.raises(ValueError, match="belongs to session other"):
        run_matching(str(two_session_config), "p-zed", session_id="demo")
