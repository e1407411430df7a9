# arena/services/vote_service.py
import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from arena.config import settings
from arena.core.exceptions import ArenaError, DuplicateVote, NotActive, OnCooldown, UnknownEntry
from arena.core.locks import vote_locks
from arena.core.logger import logger
from arena.core.storage import retry_storage, storage_guard
from arena.database import utcnow
from arena.models.artwork import Artwork
from arena.models.contest import Contest
from arena.models.vote import Vote
from arena.services import contest_service, cooldown_service, ledger_service


@dataclass(frozen=True)
class VoteReceipt:
    vote_id: str
    artwork_id: str
    contest_id: str
    vote_count: int
    next_eligible_at: datetime


def _short(voter_key: str) -> str:
    return voter_key[:16]


def resolve_contest(db: Session, artwork_id: str, contest_id: str | None, now: datetime) -> Contest:
    """Step 1: the contest must exist and be inside its voting window"""
    if contest_id is None:
        artwork = db.query(Artwork).filter(Artwork.id == artwork_id).first()
        if artwork is None:
            raise UnknownEntry()
        contest_id = artwork.contest_id

    contest = contest_service.get_contest(db, contest_id)
    if contest is None or not contest_service.is_active(contest, now):
        raise NotActive()
    return contest


def _lost_race(db: Session, voter_key: str, scope: str, now: datetime) -> DuplicateVote:
    """Re-read the record written by the winner of a race"""
    with storage_guard():
        record = cooldown_service.get_record(db, voter_key, scope)
    return cooldown_service.rejection(record, now)


@retry_storage
def submit_vote(
    db: Session,
    voter_key: str,
    artwork_id: str,
    contest_id: str | None = None,
    now: datetime | None = None,
    *,
    user_id: str | None = None,
    ip_hash: str | None = None,
    user_agent: str | None = None
) -> VoteReceipt:
    """Admit or reject one vote.

    Cooldown check, ledger append and cooldown update run in one transaction
    while holding the lock for (voter_key, scope_key); of two concurrent
    attempts for the same key at most one is accepted.
    """
    now = now or utcnow()

    try:
        with storage_guard():
            contest = resolve_contest(db, artwork_id, contest_id, now)
            scope = cooldown_service.scope_key(contest.id, artwork_id)

            with vote_locks.hold((voter_key, scope), timeout=settings.vote_lock_timeout_seconds):
                # 2. Cooldown
                record = cooldown_service.get_record(db, voter_key, scope, lock=True)
                wait = cooldown_service.remaining_for(record, now)
                if wait:
                    raise OnCooldown(
                        retry_after=wait.total_seconds(),
                        next_eligible_at=cooldown_service.next_eligible_at(record)
                    )

                # 3. Ledger
                vote = Vote(
                    artwork_id=artwork_id,
                    contest_id=contest.id,
                    voter_key=voter_key,
                    scope_key=scope,
                    sequence=(record.vote_count if record else 0) + 1,
                    user_id=user_id,
                    ip_hash=ip_hash,
                    user_agent=user_agent,
                    voted_at=now
                )
                vote_id = ledger_service.append(db, vote)

                # 4. Cooldown record
                cooldown_service.record_vote(db, voter_key, scope, now)

                # Counted before commit; nothing after the commit may fail and retry
                vote_count = ledger_service.tally(db, artwork_id)
                db.commit()

    except DuplicateVote as e:
        db.rollback()
        logger.info(f"Vote rejected (lost race): voter={_short(voter_key)} artwork={artwork_id}")
        if e.next_eligible_at is not None:
            raise
        raise _lost_race(db, voter_key, scope, now) from e

    except ArenaError as e:
        db.rollback()
        logger.info(f"Vote rejected ({e.code}): voter={_short(voter_key)} artwork={artwork_id}")
        raise

    logger.info(f"Vote accepted: voter={_short(voter_key)} artwork={artwork_id} contest={contest.id}")

    return VoteReceipt(
        vote_id=vote_id,
        artwork_id=artwork_id,
        contest_id=contest.id,
        vote_count=vote_count,
        next_eligible_at=now + cooldown_service.cooldown_period()
    )


def vote_status(
    db: Session,
    voter_key: str,
    artwork_id: str,
    contest_id: str | None = None,
    now: datetime | None = None
) -> dict:
    """Read-only eligibility check"""
    now = now or utcnow()

    with storage_guard():
        try:
            contest = resolve_contest(db, artwork_id, contest_id, now)
        except (NotActive, UnknownEntry) as e:
            return {"can_vote": False, "reason": e.code}

        scope = cooldown_service.scope_key(contest.id, artwork_id)
        record = cooldown_service.get_record(db, voter_key, scope)
        wait = cooldown_service.remaining_for(record, now)

    if wait:
        return {
            "can_vote": False,
            "reason": OnCooldown.code,
            "retry_after_seconds": math.ceil(wait.total_seconds()),
            "next_eligible_at": cooldown_service.next_eligible_at(record),
        }
    return {"can_vote": True}
