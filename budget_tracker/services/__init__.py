"""Services package."""

from budget_tracker.services.storage import (
    ConnectionError,
    DatabaseClient,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    SessionStorageInterface,
    SQLAlchemyStore,
    StorageError,
    UserStorageInterface,
)

__all__ = [
    "ConnectionError",
    "DatabaseClient",
    "DuplicateError",
    "LedgerStorageInterface",
    "NotFoundError",
    "SessionStorageInterface",
    "SQLAlchemyStore",
    "StorageError",
    "UserStorageInterface",
]
