# arena/services/fingerprint_service.py
"""Voter identity.

Everything that decides *who* a voter is lives here, so the privacy policy
can change without touching admission logic. Digests are keyed with
``settings.fingerprint_salt``; without the salt an address cannot be
recovered by hashing candidate IPs.
"""
import hashlib
import hmac

from arena.config import settings

ANONYMOUS_PREFIX = "anon:"
USER_PREFIX = "user:"


def _digest(message: str) -> str:
    return hmac.new(
        settings.fingerprint_salt.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def fingerprint(remote_address: str, user_agent: str | None) -> str:
    """64-char hex digest of (address, user agent)"""
    return _digest(f"{remote_address or ''}:{user_agent or ''}")


def hash_ip(remote_address: str) -> str:
    """Digest of the address alone (stored on votes for analytics)"""
    return _digest(remote_address or "")


def voter_key(user_id: str | None, remote_address: str, user_agent: str | None) -> str:
    """Authenticated id when present, else the request fingerprint"""
    if user_id:
        return f"{USER_PREFIX}{user_id}"
    return f"{ANONYMOUS_PREFIX}{fingerprint(remote_address, user_agent)}"
