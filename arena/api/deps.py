# arena/api/deps.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from arena.config import settings
from arena.core.security import decode_access_token
from arena.services import fingerprint_service

# Bearer token issued by the external auth provider (optional for voting)
security = HTTPBearer(auto_error=False)

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid authentication credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class Voter:
    """Who is voting, as far as the admission rules care"""
    key: str
    user_id: Optional[str]
    ip_hash: str
    user_agent: Optional[str]


def get_client_ip(request: Request) -> str:
    """Client address, honouring the proxy headers"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def get_token_payload(
    token: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[dict]:
    """Decoded JWT, None for anonymous requests"""
    if token is None:
        return None

    payload = decode_access_token(token.credentials)
    if payload is None or payload.get("sub") is None:
        raise credentials_exception

    return payload


def build_voter(request: Request, payload: Optional[dict]) -> Voter:
    """Voter identity: authenticated user id, else request fingerprint"""
    user_id = str(payload["sub"]) if payload else None

    ip = get_client_ip(request)
    user_agent = request.headers.get("user-agent") or ""

    return Voter(
        key=fingerprint_service.voter_key(user_id, ip, user_agent),
        user_id=user_id,
        ip_hash=fingerprint_service.hash_ip(ip),
        user_agent=user_agent or None,
    )


def get_voter(
    request: Request,
    payload: Optional[dict] = Depends(get_token_payload)
) -> Voter:
    if payload is None and settings.require_login_to_vote:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in to vote",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return build_voter(request, payload)


def require_admin(payload: Optional[dict] = Depends(get_token_payload)) -> dict:
    """Admin token (role claim set by the auth provider)"""
    if payload is None:
        raise credentials_exception

    if payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )

    return payload


def require_cron_secret(request: Request) -> None:
    """Scheduler calls carry `Authorization: Bearer <cron_secret>`"""
    auth_header = request.headers.get("authorization")

    if not settings.cron_secret or auth_header != f"Bearer {settings.cron_secret}":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
