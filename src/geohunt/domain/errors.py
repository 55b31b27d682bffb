"""
Error taxonomy.

- `Rejection` subclasses are expected, user-facing outcomes of an answer submission.
  They are final for that submission and carry the HTTP status they map to.
- `StoreUnavailable` / `RefreshError` are infrastructure failures: logged, surfaced
  as 503, and safe for the client to retry with backoff.
"""

from __future__ import annotations


class HuntError(Exception):
    """Base class for every error raised by the hunt engine."""

    code = "HuntError"
    message = "Internal error"
    status_code = 500

    def __init__(self, detail: str | None = None):
        # `detail` is for logs only; clients always receive the fixed `message`.
        super().__init__(detail or self.message)
        self.detail = detail

    def payload(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class Rejection(HuntError):
    """A submission was refused by one of the validation gates."""

    status_code = 400


class QuestionNotFound(Rejection):
    code = "QuestionNotFound"
    message = "Not found"
    status_code = 404


class OutOfRange(Rejection):
    code = "OutOfRange"
    message = "Out of range"
    status_code = 403


class TeamNotFound(Rejection):
    code = "TeamNotFound"
    message = "Team not found"
    status_code = 404


class AlreadyAnswered(Rejection):
    code = "AlreadyAnswered"
    message = "Already answered"
    status_code = 409


class Incorrect(Rejection):
    code = "Incorrect"
    message = "Incorrect"
    status_code = 400


class Unauthorized(HuntError):
    """An operator-only call was made without a recognized operator id."""

    code = "Unauthorized"
    message = "Unauthorized"
    status_code = 401


class StoreUnavailable(HuntError):
    """The document store timed out or could not be reached."""

    code = "StoreUnavailable"
    message = "Service unavailable"
    status_code = 503


class RefreshError(HuntError):
    """The question index could not be rebuilt; the previous snapshot is still served."""

    code = "RefreshError"
    message = "Refresh failed"
    status_code = 503
