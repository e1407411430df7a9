# arena/api/routes/cron.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from arena.api.deps import require_cron_secret
from arena.core.storage import storage_bound
from arena.database import get_db, utcnow
from arena.schemas.contest import TickResponse
from arena.services import contest_service

router = APIRouter(
    prefix="/api/v1/cron",
    tags=["cron"],
    dependencies=[Depends(require_cron_secret)]
)

@storage_bound
def _tick(db: Session):
    now = utcnow()
    result = contest_service.tick(db, now)
    return TickResponse(activated=result.activated, archived=result.archived, ran_at=now)

@router.post("/tick", response_model=TickResponse)
def run_tick(db: Session = Depends(get_db)):
    """Archive past-due contests and open the current one (periodic job)"""
    return _tick(db)

# GET as well, for schedulers that can only issue GETs
@router.get("/tick", response_model=TickResponse)
def run_tick_get(db: Session = Depends(get_db)):
    """Same as POST"""
    return _tick(db)
