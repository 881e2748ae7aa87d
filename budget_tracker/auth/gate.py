"""
Authorization Gate

Every protected endpoint starts by asking the gate who is calling. The
answer is a tagged result, so a view cannot reach the user without first
ruling out the rejected case:

    result = gate.require_authenticated_user(request)
    if isinstance(result, Rejected):
        return result.to_response()
    user = result.user
"""

from dataclasses import dataclass
from typing import Union

from flask import Request, jsonify

from budget_tracker.auth.sessions import SessionManager, UnauthorizedError, hash_session_token
from budget_tracker.models.auth import User


@dataclass(frozen=True)
class Authenticated:
    """The caller holds a live session."""

    user: User
    session_token_hash: str


@dataclass(frozen=True)
class Rejected:
    """The caller must not proceed. `message` is the 401 error text."""

    message: str

    def to_response(self):
        return jsonify({"error": self.message}), 401


AuthResult = Union[Authenticated, Rejected]


class AuthGate:
    """Resolves the session cookie on a request into an AuthResult."""

    def __init__(self, session_manager: SessionManager, cookie_name: str):
        self._sessions = session_manager
        self._cookie_name = cookie_name

    def session_token(self, request: Request):
        return request.cookies.get(self._cookie_name)

    def require_authenticated_user(self, request: Request) -> AuthResult:
        token = self.session_token(request)
        try:
            user = self._sessions.resolve_session(token)
        except UnauthorizedError as e:
            return Rejected(e.message)
        return Authenticated(user=user, session_token_hash=hash_session_token(token))
