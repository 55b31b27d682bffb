"""
Answer validation and team progression.

`AnswerEngine.submit` runs one submission through the gates in a fixed order:

1. question exists in the index            -> QuestionNotFound
2. submitter is within the radius          -> OutOfRange
3. submitter belongs to a team             -> TeamNotFound
4. team has not solved the question yet    -> AlreadyAnswered
5. normalized answer matches               -> Incorrect
6. conditional credit with the live points -> AlreadyAnswered (lost a race)
7. audit record + point decay, next hint

The duplicate check (4) runs before the answer comparison (5) so a team that already
solved a question cannot use it to probe for the right answer. Exactly-once credit
does not depend on (4): the store's conditional `credit` is the real guard, which is
what makes re-running the whole submission after a timeout safe.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Iterable

from geohunt.config.settings import GameSettings
from geohunt.core.time import utc_now
from geohunt.domain.errors import (
    AlreadyAnswered,
    Incorrect,
    OutOfRange,
    QuestionNotFound,
    StoreUnavailable,
    TeamNotFound,
)
from geohunt.domain.models import AnswerOutcome, Question, SolveRecord, Submission
from geohunt.engine.geo_index import GeoIndex
from geohunt.engine.proximity import ProximityEvaluator
from geohunt.stores.base import QuestionStore, TeamStore

logger = logging.getLogger(__name__)

# Random index positions probed per hint-window slot before falling back to a full scan.
_PROBES_PER_SLOT = 4


def normalize_answer(text: str) -> str:
    """Trim surrounding whitespace and case-fold."""
    return text.strip().casefold()


def answers_match(submitted: str, expected: str) -> bool:
    return normalize_answer(submitted) == normalize_answer(expected)


class AnswerEngine:
    def __init__(
        self,
        *,
        index: GeoIndex,
        proximity: ProximityEvaluator,
        teams: TeamStore,
        questions: QuestionStore,
        game: GameSettings,
        rng: random.Random | None = None,
        clock: Callable = utc_now,
    ):
        self._index = index
        self._proximity = proximity
        self._teams = teams
        self._questions = questions
        self._game = game
        self._rng = rng or random.Random()
        self._clock = clock

    def submit(self, submission: Submission) -> AnswerOutcome:
        qid = submission.question_id

        question = self._index.lookup(qid)
        if question is None:
            logger.info("Rejected question_id=%s member=%s: not found", qid, submission.member_id)
            raise QuestionNotFound()

        if not self._proximity.is_within_radius(question.location, submission.position):
            logger.info("Rejected question_id=%s member=%s: out of range", qid, submission.member_id)
            raise OutOfRange()

        team = self._teams.find_team_by_member(submission.member_id)
        if team is None:
            logger.info("Rejected question_id=%s member=%s: no team", qid, submission.member_id)
            raise TeamNotFound()

        if team.has_solved(qid):
            logger.info("Rejected question_id=%s team=%s: already answered", qid, team.id)
            raise AlreadyAnswered()

        if not answers_match(submission.answer, question.answer):
            logger.info("Rejected question_id=%s team=%s: incorrect", qid, team.id)
            raise Incorrect()

        # The index may hold a stale point value; the store is authoritative.
        points = self._questions.get_points(qid)
        if points is None:
            logger.warning("question_id=%s is indexed but missing from the store", qid)
            raise QuestionNotFound()

        if not self._teams.credit(team.id, qid, points):
            logger.info("Rejected question_id=%s team=%s: credited concurrently", qid, team.id)
            raise AlreadyAnswered()
        logger.info("Credited team=%s question_id=%s points=%s", team.id, qid, points)

        self._record_solve(question, team.id, team.display_name(), points)

        solved = {*team.answered_questions, qid}
        next_question = self.select_next(solved)
        if next_question is None:
            return AnswerOutcome(
                team_id=team.id,
                question_id=qid,
                points_awarded=points,
                next_hint=self._game.completion_message,
                completed=True,
            )
        return AnswerOutcome(
            team_id=team.id,
            question_id=qid,
            points_awarded=points,
            next_hint=next_question.hint,
            next_question_id=next_question.id,
        )

    def _record_solve(self, question: Question, team_id: str, team_name: str, points: int) -> None:
        """Append the audit record and decay the question's value.

        The team has already been credited at this point, so a store failure in either
        step is logged and the player still receives the next hint. The two steps fail
        independently: a missing audit record never skips the decay.
        """
        record = SolveRecord(team_id=team_id, team_name=team_name, solved_at=self._clock(), points=points)
        try:
            self._questions.append_solve(question.id, record)
        except StoreUnavailable as exc:
            logger.error(
                "Solve record failed after crediting team=%s question_id=%s: %s", team_id, question.id, exc
            )

        try:
            new_points = self._questions.decay_points(question.id, self._game.decay_step, self._game.points_floor)
        except StoreUnavailable as exc:
            logger.error(
                "Point decay failed after crediting team=%s question_id=%s: %s", team_id, question.id, exc
            )
            return
        logger.debug("question_id=%s now worth %s point(s)", question.id, new_points)

    def select_next(self, solved: Iterable[str]) -> Question | None:
        """Pick a question the team has not solved, uniformly at random, or None when all are solved.

        Random positions of the index are probed until `hint_window` unsolved
        candidates are found; one is chosen among them. Only when every probe hits a
        solved question is the whole index scanned.
        """
        solved = set(solved)
        questions = self._index.all()
        if not questions:
            return None

        window: list[Question] = []
        probes = min(len(questions), _PROBES_PER_SLOT * self._game.hint_window)
        for i in self._rng.sample(range(len(questions)), probes):
            if questions[i].id in solved:
                continue
            window.append(questions[i])
            if len(window) >= self._game.hint_window:
                break
        if not window:
            window = [q for q in questions if q.id not in solved]
        return self._rng.choice(window) if window else None
