# arena/config.py
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import field_validator

class Settings(BaseSettings):
    """Environment settings"""

    # API
    app_name: str = "Art Arena API"
    debug: bool = False
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database
    database_url: str = "sqlite:///./arena.db"
    storage_timeout_seconds: float = 5.0
    storage_retry_attempts: int = 3

    # JWT (issued by the external auth provider, verified here)
    secret_key: str
    algorithm: str = "HS256"

    # Voting
    fingerprint_salt: str = "arena-fingerprint"
    vote_cooldown_hours: int = 24
    cooldown_scope: Literal["entry", "contest"] = "entry"
    vote_lock_timeout_seconds: float = 5.0
    require_login_to_vote: bool = False

    # Contest lifecycle
    max_artworks_per_contest: int = 6
    tick_on_read: bool = True
    cron_secret: str = ""

    # Logging
    log_dir: str = "logs"

    @field_validator('secret_key')
    def validate_secret_key(cls, v):
        if len(v) < 32:
            raise ValueError('SECRET_KEY must be at least 32 characters long')
        return v

    @field_validator('vote_cooldown_hours', 'storage_retry_attempts')
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError('must be a positive integer')
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False

# singleton
settings = Settings()
