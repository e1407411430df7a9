# arena/schemas/vote.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class VoteRequest(BaseModel):
    """Vote request"""
    artwork_id: str
    contest_id: Optional[str] = None  # derived from the artwork when omitted

class VoteResponse(BaseModel):
    """Accepted vote"""
    success: bool = True
    vote_id: str
    artwork_id: str
    contest_id: str
    vote_count: int
    next_eligible_at: datetime
    message: str = "Vote recorded successfully"

class VoteStatusResponse(BaseModel):
    """Can this visitor vote for the artwork now?"""
    can_vote: bool
    reason: Optional[str] = None
    retry_after_seconds: int = 0
    next_eligible_at: Optional[datetime] = None
    requires_auth: bool = False

class VoterResponse(BaseModel):
    """Ledger row as shown to admins"""
    id: str
    voter_key: str
    user_id: Optional[str] = None
    voted_at: datetime

    class Config:
        from_attributes = True

class ArtworkVotersResponse(BaseModel):
    """All votes for one artwork"""
    artwork_id: str
    voters: list[VoterResponse]
    total: int
