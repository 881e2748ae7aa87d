"""
Credential Store

Signup, login and profile operations over the user table.

IMPORTANT: A failed login never reveals whether the email exists. Both
an unknown email and a wrong password raise the same
InvalidCredentialsError, and an unknown email still pays for one
password derivation.
"""

import secrets
from functools import lru_cache
from uuid import UUID

from budget_tracker.audit.logger import AuditLogger
from budget_tracker.auth.passwords import hash_password, verify_password
from budget_tracker.auth.sessions import UnauthorizedError
from budget_tracker.models.audit import AuditEventBuilder
from budget_tracker.models.auth import LoginRequest, Profile, ProfileUpdate, SignupRequest, User
from budget_tracker.services.storage import NotFoundError, UserStorageInterface
from budget_tracker.validation import InputValidationError


INVALID_CREDENTIALS = "Invalid email or password"


class InvalidCredentialsError(Exception):
    """Login rejected. The message is the same whatever the cause."""

    def __init__(self, message: str = INVALID_CREDENTIALS):
        super().__init__(message)
        self.message = message


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_hex(16))


class CredentialStore:
    """Creates users and checks their passwords."""

    def __init__(
        self,
        users: UserStorageInterface,
        audit_logger: AuditLogger,
        password_min_length: int = 8,
    ):
        self._users = users
        self._audit = audit_logger
        self._password_min_length = password_min_length

    def signup(self, request: SignupRequest) -> User:
        """
        Register a new user.

        Raises:
            InputValidationError: Empty email or short password
            DuplicateError: Email already registered
        """
        if not request.email:
            raise InputValidationError("Email is required", field="email")
        if len(request.password) < self._password_min_length:
            raise InputValidationError(
                f"Password must be at least {self._password_min_length} characters",
                field="password",
            )

        user = self._users.create_user(
            email=request.email,
            password_hash=hash_password(request.password),
            display_name=request.display_name,
        )
        self._audit.log(AuditEventBuilder.user_signed_up(user.id))
        return user

    def authenticate(self, request: LoginRequest) -> User:
        """
        Check a login attempt.

        Raises:
            InputValidationError: Email or password missing
            InvalidCredentialsError: Unknown email or wrong password
        """
        if not request.email or not request.password:
            raise InputValidationError("Email and password are required")

        stored = self._users.get_user_by_email(request.email)
        if stored is None:
            verify_password(request.password, _dummy_hash())
            self._audit.log(AuditEventBuilder.login_failed())
            raise InvalidCredentialsError()

        if not verify_password(request.password, stored.password_hash):
            self._audit.log(AuditEventBuilder.login_failed())
            raise InvalidCredentialsError()

        self._audit.log(AuditEventBuilder.login_succeeded(stored.id))
        return stored.to_public()

    def get_profile(self, user: User) -> Profile:
        return Profile(email=user.email, display_name=user.display_name)

    def update_profile(self, user_id: UUID, update: ProfileUpdate) -> Profile:
        """Set or clear the display name."""
        try:
            user = self._users.update_display_name(user_id, update.display_name)
        except NotFoundError as e:
            # The session outlived its user
            raise UnauthorizedError() from e
        self._audit.log(AuditEventBuilder.profile_updated(user_id))
        return Profile(email=user.email, display_name=user.display_name)
