"""
API routes.

Endpoints:
- POST `/api/checkAnswer`: submit an answer from the player's current position.
- POST `/api/getTarget`: questions within range of the player (polled by the AR client).
- GET  `/api/leaderboard`: teams by points.
- POST `/api/admin/refresh`: rebuild the question index (operator only).
- GET  `/api/logs`: recent/filtered server log lines (operator only).
- GET  `/`: health + per-route timings.

Handlers are plain `def` so FastAPI runs them in its threadpool: store calls block,
and concurrent submissions must not serialize behind each other.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, ConfigDict, Field

from geohunt.core.geo import GeoPoint
from geohunt.domain.errors import Unauthorized
from geohunt.domain.models import Submission
from geohunt.engine.service import HuntService, leaderboard

QUESTION_ID_LENGTH = 20

router = APIRouter()


class CheckAnswerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(..., alias="questionId", min_length=QUESTION_ID_LENGTH, max_length=QUESTION_ID_LENGTH)
    answer: str = Field(..., max_length=512)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    member_id: str = Field(..., alias="memberId", min_length=1, max_length=128)

    def to_submission(self) -> Submission:
        return Submission(
            question_id=self.question_id,
            answer=self.answer,
            lat=self.lat,
            lng=self.lng,
            member_id=self.member_id,
        )


class GetTargetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    member_id: str = Field(..., alias="memberId", min_length=1, max_length=128)


def get_service(request: Request) -> HuntService:
    return request.app.state.hunt


def require_operator(
    service: HuntService = Depends(get_service),
    x_operator_id: str | None = Header(default=None),
) -> str:
    """Accept only configured operator ids of the expected length."""
    auth = service.settings.auth
    operator_id = (x_operator_id or "").strip()
    if len(operator_id) != auth.operator_id_length or operator_id not in auth.operator_ids:
        raise Unauthorized("missing or unknown operator id")
    return operator_id


@router.get("/")
def health(service: HuntService = Depends(get_service)) -> dict:
    """Return service status, index size and average handler timings."""
    refreshed_at = service.index.refreshed_at
    return {
        "status": "online",
        "questions": len(service.index),
        "refreshedAt": refreshed_at.isoformat() if refreshed_at else None,
        "timings": service.perf.as_dict(),
    }


@router.post("/api/checkAnswer")
def post_check_answer(body: CheckAnswerRequest, service: HuntService = Depends(get_service)) -> dict:
    """Validate an answer; on success return the hint for the team's next target."""
    outcome = service.engine.submit(body.to_submission())
    return {"nextHint": outcome.next_hint}


@router.post("/api/getTarget")
def post_get_target(body: GetTargetRequest, service: HuntService = Depends(get_service)) -> dict:
    """Return prompt + location of questions within range (never answers or hints)."""
    targets = service.finder.find_nearby(GeoPoint(lat=body.lat, lng=body.lng))
    return {"questions": [t.model_dump() for t in targets]}


@router.get("/api/leaderboard")
def get_leaderboard(service: HuntService = Depends(get_service)) -> dict:
    """Return teams ordered by points (desc), then name."""
    return {"teams": leaderboard(service.store)}


@router.post("/api/admin/refresh")
def post_refresh(
    operator_id: str = Depends(require_operator),
    service: HuntService = Depends(get_service),
) -> dict:
    """Reload every question from the store into the in-memory index."""
    count = service.index.refresh()
    refreshed_at = service.index.refreshed_at
    return {"questions": count, "refreshedAt": refreshed_at.isoformat() if refreshed_at else None}


@router.get("/api/logs")
def get_logs(
    q: str | None = None,
    operator_id: str = Depends(require_operator),
    service: HuntService = Depends(get_service),
) -> list[str]:
    """Return the newest 200 buffered log lines, or every line containing `q`."""
    buffer = service.log_buffer
    if q:
        return buffer.search(q)
    return buffer.tail(200)
