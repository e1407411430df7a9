import os
import tempfile
from datetime import datetime, timedelta, timezone

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-0123456789")
os.environ.setdefault("CRON_SECRET", "cron-secret")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="arena-logs-"))
os.environ.setdefault("STORAGE_TIMEOUT_SECONDS", "5")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from arena.config import settings
from arena.core.security import create_access_token
from arena.database import Base, get_db
from arena.models import Artwork, Contest, ContestStatus, Vote
from arena.schemas.contest import ContestCreate
from arena.services import contest_service
from main import app


T0 = datetime(2026, 3, 2, 0, 0, tzinfo=timezone.utc)
WEEK = timedelta(days=7)


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'arena.db'}",
        connect_args={"check_same_thread": False, "timeout": 5},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_contest(db):
    """Create a contest through the lifecycle manager"""
    def _make(start=T0, end=None, week_number=10, year=2026, now=None, title="Week"):
        data = ContestCreate(
            title=title,
            week_number=week_number,
            year=year,
            start_date=start,
            end_date=end or start + WEEK,
        )
        return contest_service.create_contest(db, data, now=now or start - timedelta(days=1))
    return _make


@pytest.fixture()
def make_artwork(db):
    """Insert an artwork with a controlled creation time"""
    counter = {"n": 0}

    def _make(contest, created_at=None, title=None):
        counter["n"] += 1
        artwork = Artwork(
            contest_id=contest.id,
            title=title or f"Artwork {counter['n']}",
            image_url=f"https://img.example/{counter['n']}.png",
            position=counter["n"],
            created_at=created_at or contest.start_date - timedelta(days=1) + timedelta(minutes=counter["n"]),
        )
        db.add(artwork)
        db.commit()
        db.refresh(artwork)
        return artwork
    return _make


@pytest.fixture()
def add_votes(db):
    """Write ledger rows directly (distinct voters, first vote each)"""
    def _add(artwork, count, voted_at=None):
        for i in range(count):
            db.add(Vote(
                artwork_id=artwork.id,
                contest_id=artwork.contest_id,
                voter_key=f"anon:bulk-{artwork.id}-{i}",
                scope_key=f"{artwork.contest_id}:{artwork.id}",
                sequence=1,
                voted_at=voted_at or artwork.contest.start_date + timedelta(hours=1),
            ))
        db.commit()
    return _add


@pytest.fixture()
def admin_headers():
    token = create_access_token({"sub": "admin-1", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user_headers():
    def _headers(user_id="user-1"):
        token = create_access_token({"sub": user_id})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture()
def cron_headers():
    return {"Authorization": f"Bearer {settings.cron_secret}"}


def insert_contest(db, start, end, status=ContestStatus.SCHEDULED, week_number=1):
    """Bypass validation (used to simulate corrupted data)"""
    contest = Contest(
        title="raw",
        week_number=week_number,
        year=2026,
        start_date=start,
        end_date=end,
        status=status,
    )
    db.add(contest)
    db.commit()
    db.refresh(contest)
    return contest
