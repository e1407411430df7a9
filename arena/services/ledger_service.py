# arena/services/ledger_service.py
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from arena.core.exceptions import UnknownEntry, DuplicateVote
from arena.models.artwork import Artwork
from arena.models.contest import Contest, ContestStatus
from arena.models.vote import Vote


def append(db: Session, vote: Vote) -> str:
    """Add a vote to the ledger (flushed, not committed)"""

    # Artwork must exist in the referenced, still-open contest
    artwork = db.query(Artwork)\
        .join(Contest, Contest.id == Artwork.contest_id)\
        .filter(
            Artwork.id == vote.artwork_id,
            Artwork.contest_id == vote.contest_id,
            Contest.status != ContestStatus.ARCHIVED
        )\
        .first()
    if artwork is None:
        raise UnknownEntry()

    db.add(vote)
    try:
        db.flush()
    except IntegrityError as e:
        raise DuplicateVote() from e

    return vote.id


def tally(db: Session, artwork_id: str) -> int:
    """Number of ledger rows for an artwork"""
    return db.query(func.count(Vote.id))\
        .filter(Vote.artwork_id == artwork_id)\
        .scalar() or 0


def tallies(db: Session, contest_id: str) -> dict[str, int]:
    """Tally for every artwork of a contest, zero included"""
    rows = db.query(Artwork.id, func.count(Vote.id))\
        .outerjoin(Vote, Vote.artwork_id == Artwork.id)\
        .filter(Artwork.contest_id == contest_id)\
        .group_by(Artwork.id)\
        .all()
    return {artwork_id: count for artwork_id, count in rows}


def contest_vote_count(db: Session, contest_id: str) -> int:
    """Every ledger row recorded against a contest"""
    return db.query(func.count(Vote.id))\
        .filter(Vote.contest_id == contest_id)\
        .scalar() or 0


def voters(db: Session, artwork_id: str) -> List[Vote]:
    """Votes for one artwork, newest first"""
    return db.query(Vote)\
        .filter(Vote.artwork_id == artwork_id)\
        .order_by(Vote.voted_at.desc(), Vote.id)\
        .all()
