from datetime import datetime, timezone
import random

import pytest

from geohunt.config.settings import AuthSettings, GameSettings, Settings
from geohunt.domain.models import QuestionRecord, Team
from geohunt.engine.service import HuntService
from geohunt.stores.memory import InMemoryStore

OPERATOR_ID = "op" + "x" * 26

QUESTIONS = [
    # (id, lat, lng, answer, hint)
    ("Q1", 30.3539, 76.3683, "seven", "hint for Q1"),
    ("Q2", 30.3551, 76.3662, "quarter past nine", "hint for Q2"),
    ("Q3", 30.3526, 76.3701, "fish", "hint for Q3"),
]


def make_settings(**game) -> Settings:
    base = {"radius_m": 50, "default_points": 100, "decay_step": 10, "points_floor": 20, "hint_window": 5}
    base.update(game)
    return Settings(game=GameSettings(**base), auth=AuthSettings(operator_ids=[OPERATOR_ID]))


def make_store(questions=QUESTIONS, teams=None, **kwargs) -> InMemoryStore:
    store = InMemoryStore(**kwargs)
    for qid, lat, lng, answer, hint in questions:
        store.put_question(
            QuestionRecord(
                id=qid,
                title=f"title {qid}",
                question=f"prompt {qid}",
                answer=answer,
                hint=hint,
                lat=lat,
                lng=lng,
                points=100,
            )
        )
    for team in teams or [Team(id="T1", name="Team One", members=["m1", "m1b"])]:
        store.put_team(team)
    return store


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> InMemoryStore:
    return make_store()


@pytest.fixture
def service(settings, store) -> HuntService:
    svc = HuntService(settings=settings, store=store, rng=random.Random(7))
    svc.start()
    return svc


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2025, 11, 8, 14, 44, 15, tzinfo=timezone.utc)
