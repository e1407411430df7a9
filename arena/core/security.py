# arena/core/security.py
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError

from arena.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Issue a token (used by tooling and tests; voters get theirs from the auth provider)"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict | None:
    """Verify signature and expiry; None when the token is invalid"""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
