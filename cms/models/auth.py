"""Admin session models."""

from datetime import datetime

from pydantic import Field

from cms.models.common import CamelModel


class LoginRequest(CamelModel):
    password: str = Field(..., max_length=500)


class SessionToken(CamelModel):
    success: bool = True
    token: str
    expires_at: datetime


class SessionStatus(CamelModel):
    authenticated: bool
    expires_at: datetime | None = None
