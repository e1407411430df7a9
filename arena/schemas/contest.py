# arena/schemas/contest.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from arena.models.contest import ContestStatus

class ContestCreate(BaseModel):
    """Create a contest (admin)"""
    title: str = Field(..., min_length=1, max_length=200)
    week_number: int = Field(..., ge=1, le=53)
    year: int = Field(..., ge=2000, le=9999)
    start_date: datetime
    end_date: datetime

class ContestUpdate(BaseModel):
    """Partial contest update (admin)"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    week_number: Optional[int] = Field(None, ge=1, le=53)
    year: Optional[int] = Field(None, ge=2000, le=9999)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class ArtworkCreate(BaseModel):
    """Add an artwork to a contest (admin)"""
    title: str = Field(..., min_length=1, max_length=200)
    image_url: str = Field(..., min_length=1)
    description: Optional[str] = None
    prompt: Optional[str] = None
    artist_name: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)

class ArtworkUpdate(BaseModel):
    """Partial artwork update (admin)"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    image_url: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    prompt: Optional[str] = None
    artist_name: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)

class ArtworkResponse(BaseModel):
    """Artwork with its current tally"""
    id: str
    contest_id: str
    title: str
    description: Optional[str] = None
    image_url: str
    prompt: Optional[str] = None
    artist_name: Optional[str] = None
    position: int
    vote_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True

class ContestResponse(BaseModel):
    """Contest"""
    id: str
    title: str
    week_number: int
    year: int
    start_date: datetime
    end_date: datetime
    status: ContestStatus
    winner_artwork_id: Optional[str] = None
    archived_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ActiveContestResponse(BaseModel):
    """Active contest, or an explicit empty result"""
    contest: Optional[ContestResponse] = None
    artworks: List[ArtworkResponse] = []
    time_remaining_seconds: Optional[int] = None

class ArchivedContest(ContestResponse):
    """Archived contest with its winner"""
    winner: Optional[ArtworkResponse] = None
    total_votes: int = 0

class ArchivedContestPage(BaseModel):
    """Paginated archive"""
    contests: List[ArchivedContest]
    total: int
    page: int
    pages: int

class LeaderboardRow(BaseModel):
    """Leaderboard row"""
    rank: int
    artwork_id: str
    title: str
    image_url: str
    vote_count: int
    position: int

class TickResponse(BaseModel):
    """Lifecycle tick result"""
    activated: List[str]
    archived: List[str]
    ran_at: datetime
