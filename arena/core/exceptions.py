# arena/core/exceptions.py
from datetime import datetime
import math


class ArenaError(Exception):
    """Base class for every typed outcome the services raise"""

    status_code = 500
    code = "arena_error"
    default_detail = "Unexpected error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"detail": self.detail, "code": self.code}

    def headers(self) -> dict | None:
        return None


# ===== Vote admission =====

class NotActive(ArenaError):
    status_code = 409
    code = "not_active"
    default_detail = "Contest is not accepting votes right now"


class OnCooldown(ArenaError):
    status_code = 429
    code = "on_cooldown"
    default_detail = "You have already voted for this artwork recently"

    def __init__(
        self,
        detail: str | None = None,
        retry_after: float = 0,
        next_eligible_at: datetime | None = None
    ):
        super().__init__(detail)
        self.retry_after = max(0, math.ceil(retry_after))
        self.next_eligible_at = next_eligible_at

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retry_after_seconds"] = self.retry_after
        body["next_eligible_at"] = (
            self.next_eligible_at.isoformat() if self.next_eligible_at else None
        )
        return body

    def headers(self) -> dict | None:
        return {"Retry-After": str(self.retry_after)}


class DuplicateVote(OnCooldown):
    """Storage-level race caught after the cooldown check passed.

    Reported to callers exactly like OnCooldown.
    """

    default_detail = "You have already voted for this artwork recently"


class UnknownEntry(ArenaError):
    status_code = 404
    code = "unknown_entry"
    default_detail = "Artwork not found"


class StorageTimeout(ArenaError):
    status_code = 503
    code = "storage_timeout"
    default_detail = "Storage is busy, please retry"

    def headers(self) -> dict | None:
        return {"Retry-After": "1"}


class LifecycleAnomaly(ArenaError):
    status_code = 500
    code = "lifecycle_anomaly"
    default_detail = "Contest data is inconsistent"


# ===== Contest administration =====

class ContestNotFound(ArenaError):
    status_code = 404
    code = "contest_not_found"
    default_detail = "Contest not found"


class InvalidContestWindow(ArenaError):
    status_code = 400
    code = "invalid_contest_window"
    default_detail = "end_date must be later than start_date"


class ContestOverlap(ArenaError):
    status_code = 409
    code = "contest_overlap"
    default_detail = "Contest window overlaps an existing contest"


class ContestLocked(ArenaError):
    status_code = 409
    code = "contest_locked"
    default_detail = "Contest can no longer be modified"


class ContestFull(ArenaError):
    status_code = 400
    code = "contest_full"
    default_detail = "Contest already has the maximum number of artworks"
