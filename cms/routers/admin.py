"""Admin session endpoints: log in, log out, check the current session."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Header

from cms.models.auth import LoginRequest, SessionStatus, SessionToken
from cms.services.auth import (
    bearer_token,
    check_password,
    decode_session,
    issue_session,
    revoke_session,
)
from cms.services.errors import AuthenticationError

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=SessionToken)
async def login(credentials: LoginRequest):
    """Exchange the admin secret for a session token."""
    if not check_password(credentials.password):
        logger.warning("Rejected admin login attempt")
        raise AuthenticationError("Invalid password")
    token, expires_at = issue_session()
    logger.info("Admin session issued, expires %s", expires_at.isoformat())
    return SessionToken(token=token, expires_at=expires_at)


@router.post("/logout")
async def logout(authorization: str | None = Header(default=None)):
    """Revoke the presented session. Succeeds even without a valid session."""
    token = bearer_token(authorization)
    if token and revoke_session(token):
        logger.info("Admin session revoked")
    return {"success": True}


@router.get("/session", response_model=SessionStatus)
async def session_status(authorization: str | None = Header(default=None)):
    token = bearer_token(authorization)
    claims = decode_session(token) if token else None
    if claims is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(
        authenticated=True,
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )
