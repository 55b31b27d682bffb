"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- store records (`QuestionRecord`, `Team`, `SolveRecord`)
- the cached, immutable question facts served by the index (`Question`)
- engine inputs/outputs (`Submission`, `NearbyTarget`)

Keeping these models in one place helps:
- validation (reject malformed store records and requests early),
- typed refactors,
- consistent JSON output across CLI/API.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from geohunt.core.geo import GeoPoint
from geohunt.core.time import ensure_utc


class Question(BaseModel):
    """A geolocated puzzle as held in the in-memory index."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str | None = None
    question: str = ""
    answer: str = Field(..., min_length=1)
    hint: str = ""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    points: int = Field(0, ge=0)
    geohash: str | None = None

    @field_validator("answer")
    @classmethod
    def _require_answer_text(cls, answer: str) -> str:
        if not answer.strip():
            raise ValueError("answer must not be blank")
        return answer

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class SolveRecord(BaseModel):
    """One entry of a question's audit trail."""

    team_id: str
    team_name: str
    solved_at: datetime
    points: int = Field(..., ge=0)

    @field_validator("solved_at")
    @classmethod
    def _normalize_tz(cls, solved_at: datetime) -> datetime:
        return ensure_utc(solved_at)


class QuestionRecord(Question):
    """The authoritative store document for a question (adds mutable audit state)."""

    solves: list[SolveRecord] = Field(default_factory=list)


class Team(BaseModel):
    """A group of members sharing points and a solved-question set."""

    id: str = Field(..., min_length=1)
    name: str = ""
    members: list[str] = Field(default_factory=list)
    points: int = Field(0, ge=0)
    answered_questions: list[str] = Field(default_factory=list)

    @field_validator("members", "answered_questions")
    @classmethod
    def _dedupe(cls, values: list[str]) -> list[str]:
        return list(dict.fromkeys(v for v in values if v))

    def has_solved(self, question_id: str) -> bool:
        return question_id in self.answered_questions

    def display_name(self) -> str:
        return self.name or self.id


class Submission(BaseModel):
    """A single answer attempt, built per request and discarded after the response."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    answer: str
    lat: float
    lng: float
    member_id: str

    @property
    def position(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class NearbyTarget(BaseModel):
    """Discovery payload: prompt and location only, never answer or hint."""

    id: str
    title: str | None = None
    question: str
    lat: float
    lng: float


class AnswerOutcome(BaseModel):
    """Result of an accepted submission."""

    team_id: str
    question_id: str
    points_awarded: int
    next_hint: str
    next_question_id: str | None = None
    completed: bool = False
