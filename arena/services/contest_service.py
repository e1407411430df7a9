# arena/services/contest_service.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from arena.config import settings
from arena.core.exceptions import (
    ContestFull,
    ContestLocked,
    ContestNotFound,
    ContestOverlap,
    InvalidContestWindow,
    LifecycleAnomaly,
    UnknownEntry,
)
from arena.core.locks import schedule_locks
from arena.core.logger import logger
from arena.database import as_utc, utcnow
from arena.models.artwork import Artwork
from arena.models.contest import Contest, ContestStatus
from arena.models.vote import Vote
from arena.schemas.contest import ArtworkCreate, ArtworkUpdate, ContestCreate, ContestUpdate
from arena.services import ledger_service


# One key for every contest window; overlap checks and their writes hold it
SCHEDULE_KEY = "contest-schedule"


@dataclass(frozen=True)
class TickResult:
    activated: List[str] = field(default_factory=list)
    archived: List[str] = field(default_factory=list)


# ===== Queries =====

def get_contest(db: Session, contest_id: str) -> Contest | None:
    return db.query(Contest).filter(Contest.id == contest_id).first()


def get_contest_or_404(db: Session, contest_id: str) -> Contest:
    contest = get_contest(db, contest_id)
    if contest is None:
        raise ContestNotFound()
    return contest


def list_contests(db: Session) -> List[Contest]:
    return db.query(Contest).order_by(Contest.start_date.desc()).all()


def is_active(contest: Contest, now: datetime) -> bool:
    """Derived from the window; the stored status only matters once archived"""
    return (
        contest.status != ContestStatus.ARCHIVED
        and contest.start_date <= now < contest.end_date
    )


def get_active_contest(db: Session, now: datetime | None = None) -> Contest | None:
    """The single contest whose window contains now, or None"""
    now = now or utcnow()

    rows = db.query(Contest)\
        .filter(
            Contest.status != ContestStatus.ARCHIVED,
            Contest.start_date <= now,
            Contest.end_date > now
        )\
        .order_by(Contest.start_date)\
        .limit(2)\
        .all()

    if len(rows) > 1:
        logger.critical(
            f"More than one active contest at {now.isoformat()}: "
            f"{', '.join(c.id for c in rows)}"
        )
        raise LifecycleAnomaly("More than one contest is active")

    return rows[0] if rows else None


def ranked_artworks(db: Session, contest_id: str) -> List[Tuple[Artwork, int]]:
    """Artworks by tally; ties go to the earliest created, then grid position"""
    vote_count = func.count(Vote.id).label("vote_count")
    return db.query(Artwork, vote_count)\
        .outerjoin(Vote, Vote.artwork_id == Artwork.id)\
        .filter(Artwork.contest_id == contest_id)\
        .group_by(Artwork.id)\
        .order_by(
            vote_count.desc(),
            Artwork.created_at.asc(),
            Artwork.position.asc(),
            Artwork.id.asc()
        )\
        .all()


def leaderboard(db: Session, contest_id: str) -> List[dict]:
    get_contest_or_404(db, contest_id)

    return [
        {
            "rank": rank,
            "artwork_id": artwork.id,
            "title": artwork.title,
            "image_url": artwork.image_url,
            "vote_count": count,
            "position": artwork.position,
        }
        for rank, (artwork, count) in enumerate(ranked_artworks(db, contest_id), start=1)
    ]


def list_archived(db: Session, page: int = 1, limit: int = 12) -> Tuple[List[Contest], int]:
    """Archived contests, most recent first"""
    offset = (page - 1) * limit

    contests = db.query(Contest)\
        .filter(Contest.status == ContestStatus.ARCHIVED)\
        .order_by(Contest.end_date.desc())\
        .offset(offset)\
        .limit(limit)\
        .all()

    total = db.query(Contest)\
        .filter(Contest.status == ContestStatus.ARCHIVED)\
        .count()

    return contests, total


# ===== Administration =====

def _check_window(start: datetime, end: datetime) -> None:
    if end <= start:
        raise InvalidContestWindow()


def _check_overlap(db: Session, start: datetime, end: datetime, exclude_id: str | None = None) -> None:
    """Two windows [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1"""
    query = db.query(Contest).filter(
        Contest.start_date < end,
        Contest.end_date > start
    )
    if exclude_id:
        query = query.filter(Contest.id != exclude_id)

    clash = query.first()
    if clash:
        raise ContestOverlap(
            f"Contest window overlaps week {clash.week_number}/{clash.year} ({clash.id})"
        )


def create_contest(db: Session, data: ContestCreate, now: datetime | None = None) -> Contest:
    """Create a contest; overlapping windows are rejected here, never at read time"""
    now = now or utcnow()
    start = as_utc(data.start_date)
    end = as_utc(data.end_date)

    _check_window(start, end)

    with schedule_locks.hold(SCHEDULE_KEY, timeout=settings.vote_lock_timeout_seconds):
        _check_overlap(db, start, end)

        contest = Contest(
            title=data.title,
            week_number=data.week_number,
            year=data.year,
            start_date=start,
            end_date=end,
            status=ContestStatus.ACTIVE if start <= now < end else ContestStatus.SCHEDULED,
            created_at=now,
            updated_at=now
        )
        db.add(contest)
        db.commit()
    db.refresh(contest)

    logger.info(f"Contest created: week {contest.week_number}/{contest.year} ({contest.id}) - {contest.status.value}")
    return contest


def update_contest(db: Session, contest_id: str, data: ContestUpdate, now: datetime | None = None) -> Contest:
    now = now or utcnow()
    contest = get_contest_or_404(db, contest_id)

    if contest.status == ContestStatus.ARCHIVED:
        raise ContestLocked("Archived contests are immutable")

    changes = data.model_dump(exclude_unset=True)
    start = as_utc(changes.get("start_date") or contest.start_date)
    end = as_utc(changes.get("end_date") or contest.end_date)

    with schedule_locks.hold(SCHEDULE_KEY, timeout=settings.vote_lock_timeout_seconds):
        if "start_date" in changes or "end_date" in changes:
            _check_window(start, end)
            _check_overlap(db, start, end, exclude_id=contest.id)

        for key in ("title", "week_number", "year"):
            if changes.get(key) is not None:
                setattr(contest, key, changes[key])
        contest.start_date = start
        contest.end_date = end

        # Moved back into the future
        if contest.status == ContestStatus.ACTIVE and start > now:
            contest.status = ContestStatus.SCHEDULED

        contest.updated_at = now
        db.commit()
    db.refresh(contest)

    logger.info(f"Contest updated: {contest.id} {sorted(changes)}")
    return contest


def delete_contest(db: Session, contest_id: str) -> None:
    """Delete a contest that never received votes (artworks cascade)"""
    contest = get_contest_or_404(db, contest_id)

    if contest.status == ContestStatus.ARCHIVED:
        raise ContestLocked("Archived contests are immutable")
    if ledger_service.contest_vote_count(db, contest.id) > 0:
        raise ContestLocked("Contest already has votes")

    db.delete(contest)
    db.commit()

    logger.info(f"Contest deleted: {contest_id}")


def add_artwork(db: Session, contest_id: str, data: ArtworkCreate) -> Artwork:
    contest = get_contest_or_404(db, contest_id)

    if contest.status == ContestStatus.ARCHIVED:
        raise ContestLocked("Cannot add artworks to an archived contest")

    count = db.query(Artwork).filter(Artwork.contest_id == contest.id).count()
    if count >= settings.max_artworks_per_contest:
        raise ContestFull(
            f"Contest already has {settings.max_artworks_per_contest} artworks"
        )

    artwork = Artwork(
        contest_id=contest.id,
        title=data.title,
        description=data.description,
        image_url=data.image_url,
        prompt=data.prompt,
        artist_name=data.artist_name,
        position=data.position if data.position is not None else count
    )
    db.add(artwork)
    db.commit()
    db.refresh(artwork)

    return artwork


def get_artwork(db: Session, artwork_id: str) -> Artwork | None:
    return db.query(Artwork).filter(Artwork.id == artwork_id).first()


def get_artwork_or_404(db: Session, artwork_id: str) -> Artwork:
    artwork = get_artwork(db, artwork_id)
    if artwork is None:
        raise UnknownEntry()
    return artwork


def list_artworks(db: Session, contest_id: str | None = None) -> List[Artwork]:
    """Artworks, newest first, optionally for one contest"""
    query = db.query(Artwork)
    if contest_id:
        query = query.filter(Artwork.contest_id == contest_id)
    return query.order_by(Artwork.created_at.desc(), Artwork.id).all()


def update_artwork(db: Session, artwork_id: str, data: ArtworkUpdate) -> Artwork:
    """Edit an entry while its contest is still open"""
    artwork = get_artwork_or_404(db, artwork_id)

    if artwork.contest.status == ContestStatus.ARCHIVED:
        raise ContestLocked("Artworks of an archived contest are immutable")

    changes = data.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if value is not None:
            setattr(artwork, key, value)
    db.commit()
    db.refresh(artwork)

    logger.info(f"Artwork updated: {artwork.id} {sorted(changes)}")
    return artwork


def delete_artwork(db: Session, artwork_id: str) -> None:
    """Delete an entry nobody has voted for; the ledger is never rewritten"""
    artwork = get_artwork_or_404(db, artwork_id)

    if artwork.contest.status == ContestStatus.ARCHIVED:
        raise ContestLocked("Artworks of an archived contest are immutable")
    if ledger_service.tally(db, artwork.id) > 0:
        raise ContestLocked("Artwork already has votes")

    db.delete(artwork)
    db.commit()

    logger.info(f"Artwork deleted: {artwork_id}")


# ===== Lifecycle =====

def compute_winner(db: Session, contest: Contest) -> str | None:
    """Highest tally wins; None when nobody voted"""
    ranked = ranked_artworks(db, contest.id)

    recorded = ledger_service.contest_vote_count(db, contest.id)
    counted = sum(count for _, count in ranked)
    if recorded != counted:
        logger.critical(
            f"Tallies for contest {contest.id} do not reconcile: "
            f"{recorded} ledger rows, {counted} attributed to its artworks"
        )
        raise LifecycleAnomaly("Cannot derive tallies for contest")

    if not ranked or ranked[0][1] == 0:
        return None
    return ranked[0][0].id


def archive_contest(db: Session, contest: Contest, now: datetime) -> bool:
    """active -> archived, applied at most once.

    Returns True only for the caller whose conditional update performed the
    transition; redundant callers re-derive the same winner and write nothing.
    """
    if contest.end_date > now:
        return False

    winner_id = compute_winner(db, contest)

    updated = db.query(Contest)\
        .filter(
            Contest.id == contest.id,
            Contest.status != ContestStatus.ARCHIVED
        )\
        .update(
            {
                Contest.status: ContestStatus.ARCHIVED,
                Contest.winner_artwork_id: winner_id,
                Contest.archived_at: now,
                Contest.updated_at: now
            },
            synchronize_session=False
        )
    db.commit()
    db.refresh(contest)

    if updated == 1:
        logger.info(
            f"Contest archived: week {contest.week_number}/{contest.year} ({contest.id}) "
            f"- winner: {winner_id or 'none'}"
        )
        return True
    return False


def tick(db: Session, now: datetime | None = None) -> TickResult:
    """Advance every contest to the state its window implies at `now`"""
    now = now or utcnow()
    result = TickResult()

    # 1. Close past-due contests
    due = db.query(Contest)\
        .filter(
            Contest.status != ContestStatus.ARCHIVED,
            Contest.end_date <= now
        )\
        .order_by(Contest.end_date)\
        .all()

    for contest in due:
        if archive_contest(db, contest, now):
            result.archived.append(contest.id)

    # 2. Open the contest whose window has started
    current = get_active_contest(db, now)
    if current is not None and current.status == ContestStatus.SCHEDULED:
        updated = db.query(Contest)\
            .filter(
                Contest.id == current.id,
                Contest.status == ContestStatus.SCHEDULED
            )\
            .update(
                {Contest.status: ContestStatus.ACTIVE, Contest.updated_at: now},
                synchronize_session=False
            )
        db.commit()
        db.refresh(current)

        if updated == 1:
            logger.info(f"Contest activated: week {current.week_number}/{current.year} ({current.id})")
            result.activated.append(current.id)

    return result
