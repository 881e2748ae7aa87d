"""Authentication package: passwords, sessions, cookies and the auth gate."""

from budget_tracker.auth.cookies import (
    clear_session_cookie,
    set_session_cookie,
    should_use_secure_cookies,
)
from budget_tracker.auth.credentials import CredentialStore, InvalidCredentialsError
from budget_tracker.auth.gate import Authenticated, AuthGate, AuthResult, Rejected
from budget_tracker.auth.passwords import hash_password, verify_password
from budget_tracker.auth.sessions import (
    SessionManager,
    UnauthorizedError,
    generate_session_token,
    hash_session_token,
)

__all__ = [
    # Passwords
    "hash_password",
    "verify_password",
    # Sessions
    "SessionManager",
    "UnauthorizedError",
    "generate_session_token",
    "hash_session_token",
    # Gate
    "AuthGate",
    "AuthResult",
    "Authenticated",
    "Rejected",
    # Credentials
    "CredentialStore",
    "InvalidCredentialsError",
    # Cookies
    "clear_session_cookie",
    "set_session_cookie",
    "should_use_secure_cookies",
]
