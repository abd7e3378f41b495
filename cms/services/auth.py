"""Admin sessions: the shared admin secret is exchanged for a signed,
expiring token that every mutating endpoint checks."""

import hmac
import logging
import secrets
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Header

from cms.config import get_settings
from cms.services.cache import TTLCache
from cms.services.errors import AuthenticationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Revoked token ids, each kept until the token would have expired anyway.
# Unbounded: evicting a live id would make its token valid again.
_revoked = TTLCache(ttl=12 * 3600, max_size=None)

# Signing key used when SESSION_SECRET is not configured
_fallback_secret: str | None = None


def _signing_key() -> str:
    settings = get_settings()
    if settings.session_secret:
        return settings.session_secret
    global _fallback_secret
    if _fallback_secret is None:
        logger.warning(
            "SESSION_SECRET is not set, using a per-process key, "
            "admin sessions end when the server restarts"
        )
        _fallback_secret = secrets.token_urlsafe(32)
    return _fallback_secret


def check_password(candidate: str) -> bool:
    """Constant-time comparison against the configured admin secret."""
    expected = get_settings().admin_password
    if not expected:
        logger.warning("Admin login attempted but ADMIN_PASSWORD is not configured")
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())


def issue_session() -> tuple[str, datetime]:
    """Create a signed admin token. Returns ``(token, expires_at)``."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=settings.session_ttl_minutes)
    claims = {
        "sub": "admin",
        "role": "admin",
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(claims, _signing_key(), algorithm=ALGORITHM)
    return token, expires_at


def decode_session(token: str) -> dict[str, Any] | None:
    """Return the token claims, or None if invalid, expired, or revoked."""
    try:
        claims = jwt.decode(token, _signing_key(), algorithms=[ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    if claims.get("role") != "admin":
        return None
    if claims.get("jti") in _revoked:
        return None
    return claims


def revoke_session(token: str) -> bool:
    """Invalidate *token* before its expiry. False if it was already unusable."""
    claims = decode_session(token)
    if claims is None:
        return False
    remaining = max(float(claims["exp"]) - time.time(), 0.0)
    _revoked.set(claims["jti"], True, ttl=remaining)
    return True


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer ...`` header."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


async def require_admin(
    authorization: str | None = Header(default=None),
) -> dict[str, Any]:
    """FastAPI dependency guarding authoring endpoints."""
    token = bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Not authenticated")
    claims = decode_session(token)
    if claims is None:
        raise AuthenticationError("Session is invalid or has expired")
    return claims
