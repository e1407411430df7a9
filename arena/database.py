# arena/database.py
from datetime import datetime, timezone

from sqlalchemy import create_engine, DateTime
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.types import TypeDecorator
from arena.config import settings


def utcnow() -> datetime:
    """Server clock in UTC; the only clock the voting rules trust"""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes on every backend (SQLite drops tzinfo)"""
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            # stored as text, compared lexically
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def engine_options(database_url: str) -> dict:
    """Backend-specific timeouts so no storage call blocks indefinitely"""
    timeout = settings.storage_timeout_seconds
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False, "timeout": timeout},
        }
    options = {"pool_timeout": timeout, "pool_pre_ping": True}
    if database_url.startswith("postgresql"):
        options["connect_args"] = {
            "options": f"-c statement_timeout={int(timeout * 1000)}"
        }
    return options


# Engine
engine = create_engine(
    settings.database_url,
    echo=settings.debug,  # log SQL in debug
    **engine_options(settings.database_url)
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declarative base for all models
Base = declarative_base()

# DB session dependency (FastAPI)
def get_db():
    """Open a session and close it after the request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
