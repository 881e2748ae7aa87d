"""
Identity Models for Budget Tracker

Users, stored credentials and sessions.

CRITICAL: `StoredUser.password_hash` and `SessionRecord.token_hash`
never leave the server. Only `User` is ever serialized into a response,
and the raw session token exists only in the client's cookie.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from budget_tracker.validation.validator import blank_to_none, normalize_email


class User(BaseModel):
    """Public view of an account holder."""

    id: UUID
    email: str
    display_name: Optional[str] = None


class StoredUser(User):
    """A user row including the password hash. Server-side only."""

    password_hash: str = Field(..., repr=False)

    def to_public(self) -> User:
        return User(id=self.id, email=self.email, display_name=self.display_name)


class SessionRecord(BaseModel):
    """
    A persisted session.

    Only the one-way digest of the token is stored, so reading the
    sessions table does not yield usable tokens.
    """

    token_hash: str = Field(..., repr=False)
    user_id: UUID
    expires_at: datetime
    created_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        """Sessions expire at, not after, their expiry timestamp."""
        return now >= self.expires_at


class SignupRequest(BaseModel):
    """Payload for POST /auth/signup."""

    email: str = ""
    password: str = ""
    display_name: Optional[str] = None

    @field_validator('email', mode='before')
    @classmethod
    def coerce_email(cls, v):
        return normalize_email(v)

    @field_validator('password', mode='before')
    @classmethod
    def coerce_password(cls, v):
        return "" if v is None else str(v)

    @field_validator('display_name', mode='before')
    @classmethod
    def coerce_display_name(cls, v):
        return blank_to_none(v)


class LoginRequest(BaseModel):
    """Payload for POST /auth/login."""

    email: str = ""
    password: str = ""

    @field_validator('email', mode='before')
    @classmethod
    def coerce_email(cls, v):
        return normalize_email(v)

    @field_validator('password', mode='before')
    @classmethod
    def coerce_password(cls, v):
        return "" if v is None else str(v)


class ProfileUpdate(BaseModel):
    """Payload for PUT /auth/me. A blank or null name clears it."""
    model_config = ConfigDict(extra="ignore")

    display_name: Optional[str] = Field(default=None, max_length=200)

    @field_validator('display_name', mode='before')
    @classmethod
    def coerce_display_name(cls, v):
        return blank_to_none(v)


class Profile(BaseModel):
    """Response body of GET/PUT /auth/me."""

    email: str
    display_name: Optional[str] = None
