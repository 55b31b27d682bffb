import math
import random

import pytest

from geohunt.core.geo import EARTH_RADIUS_M, GeoPoint
from geohunt.domain.errors import Incorrect, OutOfRange
from geohunt.domain.models import Submission

M_PER_DEG_LAT = 2 * math.pi * EARTH_RADIUS_M / 360


def _offset(lat, lng, north_m, east_m):
    return (
        lat + north_m / M_PER_DEG_LAT,
        lng + east_m / (M_PER_DEG_LAT * math.cos(math.radians(lat))),
    )


def test_find_nearby_returns_prompt_and_location_only(service):
    targets = service.finder.find_nearby(GeoPoint(lat=30.3539, lng=76.3683))

    assert [t.id for t in targets] == ["Q1"]
    payload = targets[0].model_dump()
    assert set(payload) == {"id", "title", "question", "lat", "lng"}
    assert payload["question"] == "prompt Q1"
    assert "seven" not in str(payload).lower()


def test_find_nearby_orders_by_distance(service):
    # Just south-east of Q1; a wide radius picks up everything.
    targets = service.finder.find_nearby(GeoPoint(lat=30.3535, lng=76.3690), radius_m=1000)
    assert [t.id for t in targets] == ["Q1", "Q3", "Q2"]


def test_find_nearby_far_away_is_empty(service):
    assert service.finder.find_nearby(GeoPoint(lat=30.400, lng=76.400)) == []


def test_discovery_does_not_touch_the_store(service, monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("store called during discovery")

    for name in ("list_questions", "get_points", "find_team_by_member", "get_team"):
        monkeypatch.setattr(service.store, name, boom)
    assert [t.id for t in service.finder.find_nearby(GeoPoint(lat=30.3539, lng=76.3683))] == ["Q1"]


def test_discovered_targets_are_always_answerable(service):
    """Any question discovered at P is past the proximity gate for a submission from P."""
    rng = random.Random(42)
    radius = service.settings.game.radius_m
    positions = []
    for q in service.index.all():
        for _ in range(60):
            d = rng.uniform(radius - 2, radius + 2)
            bearing = rng.uniform(0, 2 * math.pi)
            positions.append(_offset(q.lat, q.lng, d * math.cos(bearing), d * math.sin(bearing)))

    checked_in = checked_out = 0
    for lat, lng in positions:
        found = {t.id for t in service.finder.find_nearby(GeoPoint(lat=lat, lng=lng))}
        for q in service.index.all():
            sub = Submission(question_id=q.id, answer="not it", lat=lat, lng=lng, member_id="m1")
            if q.id in found:
                with pytest.raises(Incorrect):
                    service.engine.submit(sub)
                checked_in += 1
            else:
                with pytest.raises(OutOfRange):
                    service.engine.submit(sub)
                checked_out += 1

    assert checked_in > 0 and checked_out > 0
