"""
In-memory question index.

The index is a point-in-time snapshot of every question, keyed by id. It is the
authority for immutable facts (coordinates, answer, hint, prompt); point values in
the snapshot may lag behind the store and must not be used for crediting.

Concurrency:
- readers grab the current snapshot reference and never block;
- `refresh()` builds a complete new snapshot and swaps the reference in one
  assignment, so a reader sees the old or the new snapshot, never a mix;
- concurrent refreshes are serialized.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Iterator, Mapping

from pydantic import TypeAdapter, ValidationError

from geohunt.core.time import utc_now
from geohunt.domain.errors import RefreshError, StoreUnavailable
from geohunt.domain.models import Question
from geohunt.stores.base import QuestionStore

logger = logging.getLogger(__name__)

_QUESTIONS_ADAPTER = TypeAdapter(list[Question])


@dataclass(frozen=True)
class _Snapshot:
    by_id: Mapping[str, Question] = field(default_factory=lambda: MappingProxyType({}))
    ordered: tuple[Question, ...] = ()
    built_at: datetime | None = None


class GeoIndex:
    def __init__(self, store: QuestionStore):
        self._store = store
        self._snapshot = _Snapshot()
        self._refresh_lock = threading.Lock()

    @property
    def refreshed_at(self) -> datetime | None:
        return self._snapshot.built_at

    def __len__(self) -> int:
        return len(self._snapshot.ordered)

    def refresh(self) -> int:
        """Rebuild the snapshot from the store; returns the number of questions loaded.

        Raises:
            RefreshError: store unreachable or a record is malformed. The previous
                snapshot stays in place.
        """
        with self._refresh_lock:
            try:
                raw = self._store.list_questions()
            except StoreUnavailable as exc:
                logger.error("Question refresh failed; store unavailable: %s", exc)
                raise RefreshError(f"store unavailable: {exc}") from exc

            try:
                questions = _QUESTIONS_ADAPTER.validate_python(raw)
            except ValidationError as exc:
                logger.error("Question refresh failed; malformed records: %s", exc)
                raise RefreshError(f"malformed question records: {exc.error_count()} error(s)") from exc

            by_id: dict[str, Question] = {}
            for q in questions:
                if q.id in by_id:
                    logger.error("Question refresh failed; duplicate id=%s", q.id)
                    raise RefreshError(f"duplicate question id '{q.id}'")
                by_id[q.id] = q

            self._snapshot = _Snapshot(
                by_id=MappingProxyType(by_id),
                ordered=tuple(by_id[k] for k in sorted(by_id)),
                built_at=utc_now(),
            )
            logger.info("Question index refreshed: %s question(s)", len(by_id))
            return len(by_id)

    def lookup(self, question_id: str) -> Question | None:
        return self._snapshot.by_id.get(question_id)

    def all(self) -> tuple[Question, ...]:
        """Return the current snapshot's questions in id order."""
        return self._snapshot.ordered

    def __iter__(self) -> Iterator[Question]:
        return iter(self._snapshot.ordered)
