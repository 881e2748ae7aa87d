"""
Audit Models for Budget Tracker

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of who changed which row
2. Debugging information when things go wrong
3. A record of failed logins without exposing which emails exist

DESIGN DECISION: Audit events are structured log lines, not rows.
They go to the application log and are never written to the datastore.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_SIGNED_UP = "user_signed_up"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"
    SESSION_EXPIRED = "session_expired"
    PROFILE_UPDATED = "profile_updated"

    # Accounts
    ACCOUNTS_SEEDED = "accounts_seeded"
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Months
    MONTH_CREATED = "month_created"
    MONTH_ROLLED_OVER = "month_rolled_over"
    MONTH_UPDATED = "month_updated"
    MONTH_DELETED = "month_deleted"

    # Outgoings
    OUTGOING_CREATED = "outgoing_created"
    OUTGOING_UPDATED = "outgoing_updated"
    OUTGOING_DELETED = "outgoing_deleted"

    # Transfers
    TRANSFER_CREATED = "transfer_created"
    TRANSFER_UPDATED = "transfer_updated"
    TRANSFER_DELETED = "transfer_deleted"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which row, whose row
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'month', 'account', 'session')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID (or account code) of the entity this event relates to"
    )
    user_id: Optional[UUID] = Field(
        default=None,
        description="Owner of the entity / actor of the event"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.

        The request correlation id is not part of the event: it is
        bound into the logging context per request.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": str(self.user_id) if self.user_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


# Row change events keyed by (entity_type, action)
_CHANGE_EVENTS: dict[tuple[str, str], AuditEventType] = {
    ("account", "created"): AuditEventType.ACCOUNT_CREATED,
    ("account", "updated"): AuditEventType.ACCOUNT_UPDATED,
    ("account", "deleted"): AuditEventType.ACCOUNT_DELETED,
    ("month", "created"): AuditEventType.MONTH_CREATED,
    ("month", "updated"): AuditEventType.MONTH_UPDATED,
    ("month", "deleted"): AuditEventType.MONTH_DELETED,
    ("outgoing", "created"): AuditEventType.OUTGOING_CREATED,
    ("outgoing", "updated"): AuditEventType.OUTGOING_UPDATED,
    ("outgoing", "deleted"): AuditEventType.OUTGOING_DELETED,
    ("transfer", "created"): AuditEventType.TRANSFER_CREATED,
    ("transfer", "updated"): AuditEventType.TRANSFER_UPDATED,
    ("transfer", "deleted"): AuditEventType.TRANSFER_DELETED,
}


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_signed_up(user_id)
        event = AuditEventBuilder.row_changed("month", "created", month_id, user_id)
    """

    @staticmethod
    def user_signed_up(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            entity_type="user",
            entity_id=str(user_id),
            user_id=user_id,
            description="New user signed up",
        )

    @staticmethod
    def login_succeeded(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=str(user_id),
            user_id=user_id,
            description="User logged in",
        )

    @staticmethod
    def login_failed() -> AuditEvent:
        # Deliberately carries neither the email nor a user id
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description="Login rejected: invalid email or password",
        )

    @staticmethod
    def logged_out(revoked: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            entity_type="session",
            description="Session revoked" if revoked else "Logout without an active session",
            details={"session_revoked": revoked},
        )

    @staticmethod
    def session_expired(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_EXPIRED,
            entity_type="session",
            user_id=user_id,
            description="Expired session removed on access",
        )

    @staticmethod
    def profile_updated(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="user",
            entity_id=str(user_id),
            user_id=user_id,
            description="Display name updated",
        )

    @staticmethod
    def accounts_seeded(user_id: UUID, codes: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNTS_SEEDED,
            entity_type="account",
            user_id=user_id,
            description="Starter accounts created for first listing",
            details={"codes": codes},
        )

    @staticmethod
    def month_rolled_over(
        user_id: UUID,
        month_id: UUID,
        source_month_id: UUID,
        copied: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_ROLLED_OVER,
            entity_type="month",
            entity_id=str(month_id),
            user_id=user_id,
            description=f"Copied {copied} outgoing(s) from the previous month",
            details={
                "source_month_id": str(source_month_id),
                "copied_outgoings": copied,
            },
        )

    @staticmethod
    def row_changed(
        entity_type: str,
        action: str,
        entity_id: str,
        user_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=_CHANGE_EVENTS[(entity_type, action)],
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            description=f"{entity_type.capitalize()} {action}",
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        user_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="system",
            user_id=user_id,
            description=f"Datastore error during {operation}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="system",
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
