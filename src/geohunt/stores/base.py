"""Abstract base classes for the document store collaborators.

Implementations bound the wait for any lock they take by a timeout and raise
`geohunt.domain.errors.StoreUnavailable` when it expires or the backend fails.
Backend I/O itself is bounded only as far as the backend allows.
"""

from abc import ABC, abstractmethod
from typing import Any

from geohunt.domain.models import SolveRecord, Team


class TeamStore(ABC):
    """Abstract base class for team documents."""

    @abstractmethod
    def find_team_by_member(self, member_id: str) -> Team | None:
        """Return the team whose member list contains `member_id`, or None."""
        ...

    @abstractmethod
    def get_team(self, team_id: str) -> Team | None:
        """Retrieve a team by ID. Returns None if not found."""
        ...

    @abstractmethod
    def credit(self, team_id: str, question_id: str, points: int) -> bool:
        """Add `points` and mark `question_id` solved, as one atomic step.

        Returns False without changing anything if the team already solved the question,
        so retries of the same logical request never double-credit.
        """
        ...

    @abstractmethod
    def list_teams(self) -> list[Team]:
        """List all teams."""
        ...


class QuestionStore(ABC):
    """Abstract base class for question documents."""

    @abstractmethod
    def list_questions(self) -> list[dict[str, Any]]:
        """Return every question document as a raw mapping (validated by the caller)."""
        ...

    @abstractmethod
    def get_points(self, question_id: str) -> int | None:
        """Return the live point value of a question, or None if it does not exist."""
        ...

    @abstractmethod
    def append_solve(self, question_id: str, record: SolveRecord) -> bool:
        """Append to the audit trail. Returns False if the team is already recorded."""
        ...

    @abstractmethod
    def decay_points(self, question_id: str, step: int, floor: int) -> int:
        """Atomically lower the point value by `step`, clamped at `floor`; return the new value.

        A value already at or below `floor` is left unchanged.
        """
        ...
