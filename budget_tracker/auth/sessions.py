"""
Session Manager

A session moves through Created -> Active -> (Expired | Revoked).

The raw token is 256 bits of randomness handed to the client once, in
the session cookie. Only its SHA-256 digest is stored, so reading the
sessions table does not yield usable tokens.

Expiry is lazy: an expired row is deleted when someone presents it.
There is no background reaper, and sessions are not extended on use.
"""

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from budget_tracker.audit.logger import AuditLogger
from budget_tracker.models.audit import AuditEventBuilder
from budget_tracker.models.auth import User
from budget_tracker.services.storage import (
    SessionStorageInterface,
    UserStorageInterface,
    utcnow,
)


logger = structlog.get_logger(__name__)

UNAUTHORIZED = "Unauthorized"
SESSION_EXPIRED = "Session expired"


class UnauthorizedError(Exception):
    """Missing, unknown or expired session."""

    def __init__(self, message: str = UNAUTHORIZED):
        super().__init__(message)
        self.message = message


def generate_session_token() -> str:
    """Opaque 256-bit session token, hex encoded."""
    return secrets.token_hex(32)


def hash_session_token(token: str) -> str:
    """Deterministic one-way digest under which a session is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionManager:
    """
    Issues, resolves and revokes sessions.

    The clock is injectable so expiry can be tested without waiting.
    """

    def __init__(
        self,
        sessions: SessionStorageInterface,
        users: UserStorageInterface,
        audit_logger: AuditLogger,
        max_age: timedelta = timedelta(days=30),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._sessions = sessions
        self._users = users
        self._audit = audit_logger
        self._max_age = max_age
        self._clock = clock

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    def create_session(self, user_id) -> str:
        """
        Persist a new session for a user.

        Returns:
            The raw token, to be set as the session cookie
        """
        token = generate_session_token()
        expires_at = self._clock() + self._max_age
        self._sessions.insert_session(hash_session_token(token), user_id, expires_at)
        logger.debug("session_created", user_id=str(user_id), expires_at=expires_at.isoformat())
        return token

    def resolve_session(self, token: Optional[str]) -> User:
        """
        Map a presented token to its user.

        Raises:
            UnauthorizedError: "Unauthorized" when the token is missing or
                unknown, "Session expired" when it has expired (the row
                is deleted first)
        """
        if not token:
            raise UnauthorizedError(UNAUTHORIZED)

        token_hash = hash_session_token(token)
        record = self._sessions.get_session(token_hash)
        if record is None:
            raise UnauthorizedError(UNAUTHORIZED)

        if record.is_expired(self._clock()):
            self._sessions.delete_session(token_hash)
            self._audit.log(AuditEventBuilder.session_expired(record.user_id))
            raise UnauthorizedError(SESSION_EXPIRED)

        user = self._users.get_user_by_id(record.user_id)
        if user is None:
            raise UnauthorizedError(UNAUTHORIZED)
        return user

    def revoke_session(self, token: Optional[str]) -> bool:
        """
        Delete the session behind a token.

        Idempotent: a missing token or an unknown session is not an error.

        Returns:
            True if a session row was deleted
        """
        revoked = False
        if token:
            revoked = self._sessions.delete_session(hash_session_token(token))
        self._audit.log(AuditEventBuilder.logged_out(revoked))
        return revoked
