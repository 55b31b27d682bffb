import json
from pathlib import Path

import pytest

from geohunt.cli import main
from geohunt.config.settings import get_settings

EXAMPLE_SEED = Path(__file__).resolve().parents[1] / "data" / "seed.example.json"


@pytest.fixture
def json_store_env(monkeypatch, tmp_path):
    store_dir = tmp_path / "store"
    monkeypatch.delenv("GEOHUNT_CONFIG_PATH", raising=False)
    monkeypatch.delenv("GEOHUNT_SEED_PATH", raising=False)
    monkeypatch.setenv("GEOHUNT_STORE_BACKEND", "json")
    monkeypatch.setenv("GEOHUNT_STORE_PATH", str(store_dir))
    get_settings.cache_clear()
    yield store_dir
    get_settings.cache_clear()


def test_seed_then_leaderboard(json_store_env, capsys):
    assert main(["seed", str(EXAMPLE_SEED)]) == 0
    assert "3 question(s)" in capsys.readouterr().out

    assert main(["leaderboard", "--json"]) == 0
    teams = json.loads(capsys.readouterr().out)["teams"]
    assert {t["name"] for t in teams} == {"Night Owls", "Compass Rose"}
    assert all(t["points"] == 0 for t in teams)


def test_nearby_lists_questions_in_range(json_store_env, capsys):
    main(["seed", str(EXAMPLE_SEED)])
    capsys.readouterr()

    assert main(["nearby", "--lat", "30.3539", "--lng", "76.3683", "--json"]) == 0
    questions = json.loads(capsys.readouterr().out)["questions"]
    assert [q["id"] for q in questions] == ["q7Lm2Xa9PzR4tBv0KcW1"]
    assert "answer" not in questions[0]


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        main(["teleport"])
