"""
Storage Services Package

Provides abstract interfaces and a concrete implementation for data storage.
Currently implements a relational backend through SQLAlchemy, but business
logic only ever sees the interfaces.
"""

from budget_tracker.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    SessionStorageInterface,
    StorageError,
    UserStorageInterface,
)
from budget_tracker.services.storage.sqlalchemy_store import (
    Base,
    DatabaseClient,
    SQLAlchemyStore,
    utcnow,
)

__all__ = [
    # Interfaces
    "LedgerStorageInterface",
    "SessionStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # SQLAlchemy implementation
    "Base",
    "DatabaseClient",
    "SQLAlchemyStore",
    "utcnow",
]
