import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from geohunt.catalog.loader import apply_seed, load_seed, parse_seed
from geohunt.config.settings import Settings, StoreSettings
from geohunt.engine.service import build_store
from geohunt.stores.memory import InMemoryStore

EXAMPLE_SEED = Path(__file__).resolve().parents[1] / "data" / "seed.example.json"


def test_example_seed_is_valid():
    seed = load_seed(EXAMPLE_SEED, default_points=75)
    assert len(seed.questions) == 3
    assert all(len(q.id) == 20 for q in seed.questions)
    # The fountain question has no explicit points.
    assert [q.points for q in seed.questions] == [100, 100, 75]
    assert {t.id for t in seed.teams} == {"mirage_320482", "mirage_118233"}


def test_apply_seed_populates_store():
    store = InMemoryStore()
    apply_seed(store, load_seed(EXAMPLE_SEED))
    assert len(store.list_questions()) == 3
    assert store.find_team_by_member("a1B2c3D4e5F6g7H8i9J0k1L2m3N4").name == "Compass Rose"


def test_member_in_two_teams_is_rejected():
    payload = {
        "questions": [],
        "teams": [
            {"id": "A", "members": ["m1"]},
            {"id": "B", "members": ["m2", "m1"]},
        ],
    }
    with pytest.raises(ValueError, match="m1"):
        parse_seed(payload)


def test_question_without_answer_is_rejected():
    payload = {"questions": [{"id": "Q", "lat": 1.0, "lng": 2.0}], "teams": []}
    with pytest.raises(ValidationError):
        parse_seed(payload)


def test_seed_payload_must_be_an_object():
    with pytest.raises(ValueError):
        parse_seed([1, 2, 3])


def test_memory_backend_applies_seed_path():
    store = build_store(Settings(store=StoreSettings(backend="memory", seed_path=str(EXAMPLE_SEED))))
    assert isinstance(store, InMemoryStore)
    assert len(store.list_teams()) == 2


def test_json_backend_is_not_auto_seeded(tmp_path):
    settings = Settings(store=StoreSettings(backend="json", path=str(tmp_path / "s"), seed_path=str(EXAMPLE_SEED)))
    store = build_store(settings)
    assert store.list_teams() == []


def test_seed_file_round_trips_through_json_store(tmp_path):
    seed_path = tmp_path / "seed.json"
    seed_path.write_text(
        json.dumps({"questions": [{"id": "Q", "answer": "a", "lat": 1.0, "lng": 2.0}], "teams": []}),
        encoding="utf-8",
    )
    store = build_store(Settings(store=StoreSettings(backend="json", path=str(tmp_path / "s"))))
    apply_seed(store, load_seed(seed_path))
    assert store.get_points("Q") == 100
