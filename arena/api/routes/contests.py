# arena/api/routes/contests.py
import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from arena.config import settings
from arena.core.storage import storage_bound
from arena.database import get_db, utcnow
from arena.models.artwork import Artwork
from arena.schemas.contest import (
    ActiveContestResponse,
    ArchivedContest,
    ArchivedContestPage,
    ArtworkResponse,
    ContestResponse,
    LeaderboardRow,
)
from arena.services import contest_service, ledger_service

router = APIRouter(prefix="/api/v1/contests", tags=["contests"])

def artwork_response(artwork: Artwork, vote_count: int) -> ArtworkResponse:
    response = ArtworkResponse.model_validate(artwork)
    response.vote_count = vote_count
    return response

@router.get("/active", response_model=ActiveContestResponse)
@storage_bound
def get_active_contest(db: Session = Depends(get_db)):
    """Current contest with its artworks (empty result when none is running)"""

    now = utcnow()

    # Read-path lifecycle check
    if settings.tick_on_read:
        contest_service.tick(db, now)

    contest = contest_service.get_active_contest(db, now)
    if contest is None:
        return ActiveContestResponse(contest=None, artworks=[])

    counts = ledger_service.tallies(db, contest.id)
    artworks = db.query(Artwork)\
        .filter(Artwork.contest_id == contest.id)\
        .order_by(Artwork.position, Artwork.created_at)\
        .all()

    return ActiveContestResponse(
        contest=ContestResponse.model_validate(contest),
        artworks=[artwork_response(a, counts.get(a.id, 0)) for a in artworks],
        time_remaining_seconds=max(0, int((contest.end_date - now).total_seconds()))
    )

@router.get("/archived", response_model=ArchivedContestPage)
@storage_bound
def get_archived_contests(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Archived contests with their winners"""

    contests, total = contest_service.list_archived(db, page, limit)

    items = []
    for contest in contests:
        counts = ledger_service.tallies(db, contest.id)
        item = ArchivedContest.model_validate(contest)
        item.total_votes = sum(counts.values())
        if contest.winner is not None:
            item.winner = artwork_response(contest.winner, counts.get(contest.winner.id, 0))
        items.append(item)

    return ArchivedContestPage(
        contests=items,
        total=total,
        page=page,
        pages=math.ceil(total / limit) if total else 0
    )

@router.get("/{contest_id}/leaderboard", response_model=list[LeaderboardRow])
@storage_bound
def get_leaderboard(contest_id: str, db: Session = Depends(get_db)):
    """Artworks ranked by votes"""

    return contest_service.leaderboard(db, contest_id)
