"""
Composition Root for Budget Tracker

This module ties together all the components:
datastore client -> store -> session manager / credential store /
ledgers -> auth gate.

DESIGN DECISION: Nothing in the system reaches for a global datastore
client. Every component receives its collaborators here, as constructor
arguments, so tests can assemble the same graph over an in-memory
database.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import structlog

from budget_tracker.audit import AuditLogger
from budget_tracker.auth import AuthGate, CredentialStore, SessionManager
from budget_tracker.config import Settings, get_settings
from budget_tracker.ledger import AccountLedger, MonthLedger, OutgoingLedger, TransferLedger
from budget_tracker.services.storage import DatabaseClient, SQLAlchemyStore, utcnow


logger = structlog.get_logger(__name__)


@dataclass
class AppComponents:
    """Everything the HTTP layer needs, wired together."""

    settings: Settings
    database: DatabaseClient
    store: SQLAlchemyStore
    audit_logger: AuditLogger
    sessions: SessionManager
    gate: AuthGate
    credentials: CredentialStore
    accounts: AccountLedger
    months: MonthLedger
    outgoings: OutgoingLedger
    transfers: TransferLedger


def create_app_components(
    settings: Optional[Settings] = None,
    database: Optional[DatabaseClient] = None,
    clock: Callable[[], datetime] = utcnow,
    create_schema: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use. Defaults to the cached environment settings.
        database: Existing database client, e.g. one bound to a test engine.
        clock: Source of "now" for session expiry.
        create_schema: Create missing tables before returning.

    Returns:
        AppComponents bundle
    """
    settings = settings or get_settings()
    database = database or DatabaseClient(settings.database)
    if create_schema:
        database.create_schema()

    store = SQLAlchemyStore(database)
    audit_logger = AuditLogger()

    sessions = SessionManager(
        sessions=store,
        users=store,
        audit_logger=audit_logger,
        max_age=settings.session.max_age,
        clock=clock,
    )

    logger.info(
        "components_created",
        environment=settings.app.app_environment,
        dialect=database.connect().dialect.name,
    )

    return AppComponents(
        settings=settings,
        database=database,
        store=store,
        audit_logger=audit_logger,
        sessions=sessions,
        gate=AuthGate(sessions, settings.session.cookie_name),
        credentials=CredentialStore(
            users=store,
            audit_logger=audit_logger,
            password_min_length=settings.app.password_min_length,
        ),
        accounts=AccountLedger(store, audit_logger),
        months=MonthLedger(store, audit_logger),
        outgoings=OutgoingLedger(store, audit_logger),
        transfers=TransferLedger(store, audit_logger),
    )
