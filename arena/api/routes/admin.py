# arena/api/routes/admin.py
from typing import Optional

from fastapi import APIRouter, Depends, status, Response
from sqlalchemy.orm import Session

from arena.api.deps import require_admin
from arena.core.storage import storage_bound
from arena.database import get_db
from arena.schemas.contest import (
    ArtworkCreate,
    ArtworkResponse,
    ArtworkUpdate,
    ContestCreate,
    ContestResponse,
    ContestUpdate,
)
from arena.schemas.vote import ArtworkVotersResponse, VoterResponse
from arena.services import contest_service, ledger_service

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)]
)

def artwork_response(db: Session, artwork) -> ArtworkResponse:
    response = ArtworkResponse.model_validate(artwork)
    response.vote_count = ledger_service.tally(db, artwork.id)
    return response

# ===== Contests =====

@router.get("/contests", response_model=list[ContestResponse])
@storage_bound
def list_contests(db: Session = Depends(get_db)):
    """All contests, newest window first"""
    return contest_service.list_contests(db)

@router.post("/contests", response_model=ContestResponse, status_code=status.HTTP_201_CREATED)
@storage_bound
def create_contest(data: ContestCreate, db: Session = Depends(get_db)):
    """Create a contest (overlapping windows are rejected)"""
    return contest_service.create_contest(db, data)

@router.get("/contests/{contest_id}", response_model=ContestResponse)
@storage_bound
def get_contest(contest_id: str, db: Session = Depends(get_db)):
    return contest_service.get_contest_or_404(db, contest_id)

@router.patch("/contests/{contest_id}", response_model=ContestResponse)
@storage_bound
def update_contest(contest_id: str, data: ContestUpdate, db: Session = Depends(get_db)):
    """Edit a contest that is not archived"""
    return contest_service.update_contest(db, contest_id, data)

@router.delete("/contests/{contest_id}", status_code=status.HTTP_204_NO_CONTENT)
@storage_bound
def delete_contest(contest_id: str, db: Session = Depends(get_db)):
    """Delete a contest that has no votes"""
    contest_service.delete_contest(db, contest_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# ===== Artworks =====

@router.post(
    "/contests/{contest_id}/artworks",
    response_model=ArtworkResponse,
    status_code=status.HTTP_201_CREATED
)
@storage_bound
def add_artwork(contest_id: str, data: ArtworkCreate, db: Session = Depends(get_db)):
    """Add an artwork to a contest"""
    return contest_service.add_artwork(db, contest_id, data)

@router.get("/artworks", response_model=list[ArtworkResponse])
@storage_bound
def list_artworks(contest_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Artworks, newest first (filter with ?contest_id=)"""
    return [artwork_response(db, a) for a in contest_service.list_artworks(db, contest_id)]

@router.get("/artworks/{artwork_id}", response_model=ArtworkResponse)
@storage_bound
def get_artwork(artwork_id: str, db: Session = Depends(get_db)):
    return artwork_response(db, contest_service.get_artwork_or_404(db, artwork_id))

@router.patch("/artworks/{artwork_id}", response_model=ArtworkResponse)
@storage_bound
def update_artwork(artwork_id: str, data: ArtworkUpdate, db: Session = Depends(get_db)):
    """Edit an artwork while its contest is not archived"""
    artwork = contest_service.update_artwork(db, artwork_id, data)
    return artwork_response(db, artwork)

@router.delete("/artworks/{artwork_id}", status_code=status.HTTP_204_NO_CONTENT)
@storage_bound
def delete_artwork(artwork_id: str, db: Session = Depends(get_db)):
    """Delete an artwork that has no votes"""
    contest_service.delete_artwork(db, artwork_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/artworks/{artwork_id}/voters", response_model=ArtworkVotersResponse)
@storage_bound
def get_artwork_voters(artwork_id: str, db: Session = Depends(get_db)):
    """Ledger rows for one artwork"""

    contest_service.get_artwork_or_404(db, artwork_id)
    votes = ledger_service.voters(db, artwork_id)

    return ArtworkVotersResponse(
        artwork_id=artwork_id,
        voters=[VoterResponse.model_validate(v) for v in votes],
        total=len(votes)
    )
