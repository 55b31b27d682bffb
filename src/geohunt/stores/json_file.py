"""
On-disk JSON document store.

Layout:
- `<base_dir>/questions/<sha256(id)>.json`
- `<base_dir>/teams/<sha256(id)>.json`

Each document carries its own `id`. Writes go through a temporary file + atomic
replace so readers never see a half-written document. Locking is per document and
in-process only: run a single worker process against one store directory.

`timeout_seconds` bounds the wait for a document lock. Local file reads and writes
are not interrupted; an OS error from them surfaces as `StoreUnavailable`.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from hashlib import sha256
from pathlib import Path
from typing import Any, Iterator

from geohunt.domain.errors import StoreUnavailable, TeamNotFound
from geohunt.domain.models import QuestionRecord, SolveRecord, Team
from geohunt.stores.base import QuestionStore, TeamStore
from geohunt.stores.locks import KeyedLocks

logger = logging.getLogger(__name__)

QUESTIONS = "questions"
TEAMS = "teams"


class JsonFileStore(TeamStore, QuestionStore):
    """A filesystem-backed document store keyed by (collection, id)."""

    def __init__(self, base_dir: Path, *, timeout_seconds: float = 5.0):
        self._base_dir = Path(base_dir)
        self._locks = KeyedLocks(timeout_seconds)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _doc_path(self, collection: str, doc_id: str) -> Path:
        """Return the file path for a document (hash-based, so any id is a safe filename)."""
        digest = sha256(doc_id.encode("utf-8")).hexdigest()
        return self._base_dir / collection / f"{digest}.json"

    @contextmanager
    def _io(self, what: str) -> Iterator[None]:
        try:
            yield
        except OSError as exc:
            raise StoreUnavailable(f"{what}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StoreUnavailable(f"{what}: corrupt document ({exc})") from exc

    def _read(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        path = self._doc_path(collection, doc_id)
        with self._io(f"read {collection}/{doc_id}"):
            if not path.exists():
                return None
            return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, collection: str, doc: dict[str, Any]) -> None:
        path = self._doc_path(collection, str(doc["id"]))
        with self._io(f"write {collection}/{doc['id']}"):
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(json.dumps(doc, ensure_ascii=False), encoding="utf-8")
            tmp.replace(path)

    def _scan(self, collection: str) -> list[dict[str, Any]]:
        folder = self._base_dir / collection
        with self._io(f"scan {collection}"):
            if not folder.is_dir():
                return []
            return [json.loads(p.read_text(encoding="utf-8")) for p in sorted(folder.glob("*.json"))]

    # -- seeding -----------------------------------------------------------

    def put_question(self, record: QuestionRecord) -> None:
        with self._locks.hold(f"{QUESTIONS}:{record.id}"):
            self._write(QUESTIONS, record.model_dump(mode="json"))

    def put_team(self, team: Team) -> None:
        with self._locks.hold(f"{TEAMS}:{team.id}"):
            self._write(TEAMS, team.model_dump(mode="json"))

    def get_question(self, question_id: str) -> QuestionRecord | None:
        doc = self._read(QUESTIONS, question_id)
        return QuestionRecord.model_validate(doc) if doc is not None else None

    # -- TeamStore ---------------------------------------------------------

    def find_team_by_member(self, member_id: str) -> Team | None:
        for doc in self._scan(TEAMS):
            if member_id in (doc.get("members") or []):
                return Team.model_validate(doc)
        return None

    def get_team(self, team_id: str) -> Team | None:
        doc = self._read(TEAMS, team_id)
        return Team.model_validate(doc) if doc is not None else None

    def credit(self, team_id: str, question_id: str, points: int) -> bool:
        with self._locks.hold(f"{TEAMS}:{team_id}"):
            doc = self._read(TEAMS, team_id)
            if doc is None:
                raise TeamNotFound(f"team {team_id} vanished before credit")
            answered = list(doc.get("answered_questions") or [])
            if question_id in answered:
                return False
            doc["points"] = int(doc.get("points") or 0) + int(points)
            doc["answered_questions"] = [*answered, question_id]
            self._write(TEAMS, doc)
            return True

    def list_teams(self) -> list[Team]:
        return [Team.model_validate(doc) for doc in self._scan(TEAMS)]

    # -- QuestionStore -----------------------------------------------------

    def list_questions(self) -> list[dict[str, Any]]:
        return self._scan(QUESTIONS)

    def get_points(self, question_id: str) -> int | None:
        doc = self._read(QUESTIONS, question_id)
        return int(doc.get("points") or 0) if doc is not None else None

    def append_solve(self, question_id: str, record: SolveRecord) -> bool:
        with self._locks.hold(f"{QUESTIONS}:{question_id}"):
            doc = self._read(QUESTIONS, question_id)
            if doc is None:
                logger.warning("Solve record for unknown question_id=%s dropped", question_id)
                return False
            solves = list(doc.get("solves") or [])
            if any(s.get("team_id") == record.team_id for s in solves):
                return False
            doc["solves"] = [*solves, record.model_dump(mode="json")]
            self._write(QUESTIONS, doc)
            return True

    def decay_points(self, question_id: str, step: int, floor: int) -> int:
        with self._locks.hold(f"{QUESTIONS}:{question_id}"):
            doc = self._read(QUESTIONS, question_id)
            if doc is None:
                return int(floor)
            current = int(doc.get("points") or 0)
            if current <= floor:
                return current
            doc["points"] = max(int(floor), current - int(step))
            self._write(QUESTIONS, doc)
            return int(doc["points"])
