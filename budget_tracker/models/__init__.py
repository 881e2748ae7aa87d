"""
Data Models Package

This package contains all Pydantic models used in the Budget Tracker.
All data flowing through the system must conform to these schemas.
"""

from budget_tracker.models.ledger import (
    STARTER_ACCOUNTS,
    Account,
    AccountCreate,
    AccountUpdate,
    Money,
    Month,
    MonthCreate,
    MonthSummary,
    MonthUpdate,
    Outgoing,
    OutgoingCreate,
    OutgoingUpdate,
    Transfer,
    TransferCreate,
    TransferUpdate,
)
from budget_tracker.models.auth import (
    LoginRequest,
    Profile,
    ProfileUpdate,
    SessionRecord,
    SignupRequest,
    StoredUser,
    User,
)
from budget_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "STARTER_ACCOUNTS",
    "Account",
    "AccountCreate",
    "AccountUpdate",
    "Money",
    "Month",
    "MonthCreate",
    "MonthSummary",
    "MonthUpdate",
    "Outgoing",
    "OutgoingCreate",
    "OutgoingUpdate",
    "Transfer",
    "TransferCreate",
    "TransferUpdate",
    # Identity models
    "LoginRequest",
    "Profile",
    "ProfileUpdate",
    "SessionRecord",
    "SignupRequest",
    "StoredUser",
    "User",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
