# arena/services/cooldown_service.py
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from arena.config import settings
from arena.core.exceptions import DuplicateVote
from arena.models.cooldown import VoteCooldown


def cooldown_period() -> timedelta:
    return timedelta(hours=settings.vote_cooldown_hours)


def scope_key(contest_id: str, artwork_id: str) -> str:
    """Cooldown scope for a vote under the configured policy"""
    if settings.cooldown_scope == "contest":
        return contest_id
    return f"{contest_id}:{artwork_id}"


def get_record(db: Session, voter_key: str, scope: str, lock: bool = False) -> VoteCooldown | None:
    query = db.query(VoteCooldown).filter(
        VoteCooldown.voter_key == voter_key,
        VoteCooldown.scope_key == scope
    )
    if lock:
        # row lock on backends that have one (no-op on SQLite)
        query = query.with_for_update()
    return query.first()


def next_eligible_at(record: VoteCooldown | None) -> datetime | None:
    if record is None:
        return None
    return record.last_vote_at + cooldown_period()


def remaining(db: Session, voter_key: str, scope: str, now: datetime) -> timedelta:
    """Time left before the voter may vote again in this scope"""
    return remaining_for(get_record(db, voter_key, scope), now)


def remaining_for(record: VoteCooldown | None, now: datetime) -> timedelta:
    if record is None:
        return timedelta(0)
    return max(timedelta(0), next_eligible_at(record) - now)


def rejection(record: VoteCooldown | None, now: datetime) -> DuplicateVote:
    """DuplicateVote carrying the window left by the write that won"""
    if record is None:
        # winner not visible yet; it voted no earlier than now
        return DuplicateVote(
            retry_after=cooldown_period().total_seconds(),
            next_eligible_at=now + cooldown_period()
        )
    return DuplicateVote(
        retry_after=remaining_for(record, now).total_seconds(),
        next_eligible_at=next_eligible_at(record)
    )


def is_eligible(db: Session, voter_key: str, scope: str, now: datetime) -> bool:
    """True if no record exists or the cooldown has fully elapsed"""
    return remaining(db, voter_key, scope, now) == timedelta(0)


def record_vote(db: Session, voter_key: str, scope: str, now: datetime) -> None:
    """Upsert last_vote_at = now as a conditional write.

    The update only applies while the stored timestamp is still outside the
    cooldown window, so a concurrent writer that got there first makes this
    call fail with DuplicateVote instead of silently overwriting.
    """
    cutoff = now - cooldown_period()

    updated = db.query(VoteCooldown)\
        .filter(
            VoteCooldown.voter_key == voter_key,
            VoteCooldown.scope_key == scope,
            VoteCooldown.last_vote_at <= cutoff
        )\
        .update(
            {
                VoteCooldown.last_vote_at: now,
                VoteCooldown.vote_count: VoteCooldown.vote_count + 1
            },
            synchronize_session=False
        )
    if updated == 1:
        return

    record = get_record(db, voter_key, scope)
    if record is not None:
        db.refresh(record)
        raise rejection(record, now)

    # First vote in this scope; caller rolls back on failure
    db.add(VoteCooldown(
        voter_key=voter_key,
        scope_key=scope,
        last_vote_at=now,
        vote_count=1,
        created_at=now
    ))
    try:
        db.flush()
    except IntegrityError as e:
        raise DuplicateVote() from e
