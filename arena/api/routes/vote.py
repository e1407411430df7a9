# arena/api/routes/vote.py
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from arena.api.deps import Voter, build_voter, get_token_payload, get_voter
from arena.config import settings
from arena.database import get_db
from arena.schemas.vote import VoteRequest, VoteResponse, VoteStatusResponse
from arena.services import vote_service

router = APIRouter(prefix="/api/v1/vote", tags=["vote"])

@router.post("", response_model=VoteResponse)
def cast_vote(
    data: VoteRequest,
    voter: Voter = Depends(get_voter),
    db: Session = Depends(get_db)
):
    """Cast one vote (anonymous or authenticated)"""

    # Server clock only; the request never carries a timestamp
    receipt = vote_service.submit_vote(
        db,
        voter.key,
        data.artwork_id,
        data.contest_id,
        user_id=voter.user_id,
        ip_hash=voter.ip_hash,
        user_agent=voter.user_agent
    )

    return VoteResponse(
        vote_id=receipt.vote_id,
        artwork_id=receipt.artwork_id,
        contest_id=receipt.contest_id,
        vote_count=receipt.vote_count,
        next_eligible_at=receipt.next_eligible_at
    )

@router.get("/status", response_model=VoteStatusResponse)
def get_vote_status(
    request: Request,
    artwork_id: str,
    contest_id: Optional[str] = None,
    payload: Optional[dict] = Depends(get_token_payload),
    db: Session = Depends(get_db)
):
    """Can the current visitor vote for this artwork now?"""

    if payload is None and settings.require_login_to_vote:
        return VoteStatusResponse(can_vote=False, requires_auth=True)

    voter = build_voter(request, payload)
    result = vote_service.vote_status(db, voter.key, artwork_id, contest_id)

    return VoteStatusResponse(**result)
