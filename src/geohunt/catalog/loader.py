"""
Seed data loader.

A seed file is a local JSON document holding the authored questions and the
registered teams for one event:

    {"questions": [{"id": ..., "lat": ..., "lng": ..., "answer": ..., ...}],
     "teams": [{"id": ..., "name": ..., "members": [...]}]}

We validate it into typed Pydantic models so stores can assume a consistent shape.
Questions without an explicit `points` value start at `default_points`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from geohunt.core.env import resolve_project_path
from geohunt.domain.models import QuestionRecord, Team
from geohunt.stores.json_file import JsonFileStore
from geohunt.stores.memory import InMemoryStore


_QUESTIONS_ADAPTER = TypeAdapter(list[QuestionRecord])
_TEAMS_ADAPTER = TypeAdapter(list[Team])


@dataclass
class SeedData:
    questions: list[QuestionRecord] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)


def _with_default_points(rows: list[Any], default_points: int) -> list[Any]:
    out = []
    for row in rows:
        if isinstance(row, dict) and row.get("points") is None:
            row = {**row, "points": int(default_points)}
        out.append(row)
    return out


def parse_seed(payload: Any, *, default_points: int = 100) -> SeedData:
    """Validate a decoded seed payload."""
    if not isinstance(payload, dict):
        raise ValueError("Seed payload must be an object with 'questions' and 'teams' lists.")
    questions = _QUESTIONS_ADAPTER.validate_python(
        _with_default_points(list(payload.get("questions") or []), default_points)
    )
    teams = _TEAMS_ADAPTER.validate_python(list(payload.get("teams") or []))

    owners: dict[str, str] = {}
    for team in teams:
        for member in team.members:
            if member in owners and owners[member] != team.id:
                raise ValueError(f"member '{member}' belongs to both '{owners[member]}' and '{team.id}'")
            owners[member] = team.id
    return SeedData(questions=questions, teams=teams)


def load_seed(path: str | Path, *, default_points: int = 100) -> SeedData:
    """Load and validate a seed JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return parse_seed(payload, default_points=default_points)


def apply_seed(store: InMemoryStore | JsonFileStore, seed: SeedData) -> None:
    """Write every seeded question and team into `store` (overwriting same ids)."""
    for question in seed.questions:
        store.put_question(question)
    for team in seed.teams:
        store.put_team(team)
