"""
Process-local document store.

Holds question and team documents as plain dicts, the same shape the JSON file
store writes to disk. Used for local play-tests, demos (seeded from a JSON file)
and the test-suite.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from geohunt.domain.errors import TeamNotFound
from geohunt.domain.models import QuestionRecord, SolveRecord, Team
from geohunt.stores.base import QuestionStore, TeamStore
from geohunt.stores.locks import KeyedLocks

logger = logging.getLogger(__name__)

# Lock key guarding the member -> team index.
MEMBERS = "members"


class InMemoryStore(TeamStore, QuestionStore):
    """Thread-safe in-memory implementation of both store contracts."""

    def __init__(self, *, timeout_seconds: float = 5.0):
        self._locks = KeyedLocks(timeout_seconds)
        self._teams: dict[str, dict[str, Any]] = {}
        self._questions: dict[str, dict[str, Any]] = {}
        self._member_index: dict[str, str] = {}

    # -- seeding -----------------------------------------------------------

    def put_question(self, record: QuestionRecord) -> None:
        with self._locks.hold(f"question:{record.id}"):
            self._questions[record.id] = record.model_dump(mode="json")

    def put_team(self, team: Team) -> None:
        with self._locks.hold(f"team:{team.id}"), self._locks.hold(MEMBERS):
            previous = self._teams.get(team.id)
            for member in (previous or {}).get("members", []):
                self._member_index.pop(member, None)
            self._teams[team.id] = team.model_dump(mode="json")
            for member in team.members:
                self._member_index[member] = team.id

    def get_question(self, question_id: str) -> QuestionRecord | None:
        with self._locks.hold(f"question:{question_id}"):
            doc = self._questions.get(question_id)
            return QuestionRecord.model_validate(doc) if doc is not None else None

    # -- TeamStore ---------------------------------------------------------

    def find_team_by_member(self, member_id: str) -> Team | None:
        with self._locks.hold(MEMBERS):
            team_id = self._member_index.get(member_id)
        if team_id is None:
            return None
        return self.get_team(team_id)

    def get_team(self, team_id: str) -> Team | None:
        with self._locks.hold(f"team:{team_id}"):
            doc = self._teams.get(team_id)
            return Team.model_validate(doc) if doc is not None else None

    def credit(self, team_id: str, question_id: str, points: int) -> bool:
        with self._locks.hold(f"team:{team_id}"):
            doc = self._teams.get(team_id)
            if doc is None:
                raise TeamNotFound(f"team {team_id} vanished before credit")
            if question_id in doc["answered_questions"]:
                return False
            doc["points"] = int(doc["points"]) + int(points)
            doc["answered_questions"].append(question_id)
            return True

    def list_teams(self) -> list[Team]:
        return [Team.model_validate(doc) for doc in copy.deepcopy(list(self._teams.values()))]

    # -- QuestionStore -----------------------------------------------------

    def list_questions(self) -> list[dict[str, Any]]:
        return copy.deepcopy(list(self._questions.values()))

    def get_points(self, question_id: str) -> int | None:
        with self._locks.hold(f"question:{question_id}"):
            doc = self._questions.get(question_id)
            return int(doc["points"]) if doc is not None else None

    def append_solve(self, question_id: str, record: SolveRecord) -> bool:
        with self._locks.hold(f"question:{question_id}"):
            doc = self._questions.get(question_id)
            if doc is None:
                logger.warning("Solve record for unknown question_id=%s dropped", question_id)
                return False
            solves = doc.setdefault("solves", [])
            if any(s.get("team_id") == record.team_id for s in solves):
                return False
            solves.append(record.model_dump(mode="json"))
            return True

    def decay_points(self, question_id: str, step: int, floor: int) -> int:
        with self._locks.hold(f"question:{question_id}"):
            doc = self._questions.get(question_id)
            if doc is None:
                return int(floor)
            current = int(doc["points"])
            if current > floor:
                doc["points"] = max(int(floor), current - int(step))
            return int(doc["points"])
