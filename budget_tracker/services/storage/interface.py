"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Run against SQLite locally and PostgreSQL in deployment
2. Use an in-memory database for testing
3. Keep business logic decoupled from storage implementation

Every ledger method takes the owning user id and filters by it.
This is the only multi-tenancy mechanism in the system: a row owned by
someone else behaves exactly like a row that does not exist.

Update and delete methods raise NotFoundError when zero rows match;
they never succeed silently.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence
from uuid import UUID

from budget_tracker.models.auth import SessionRecord, StoredUser, User
from budget_tracker.models.ledger import (
    Account,
    Month,
    MonthCreate,
    Outgoing,
    OutgoingCreate,
    Transfer,
    TransferCreate,
)


class UserStorageInterface(ABC):
    """Persistence of user records."""

    @abstractmethod
    def create_user(
        self,
        email: str,
        password_hash: str,
        display_name: Optional[str],
    ) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateError: If the email is already registered
        """
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[StoredUser]:
        """Fetch a user (with password hash) by normalized email."""
        pass

    @abstractmethod
    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Fetch the public view of a user."""
        pass

    @abstractmethod
    def update_display_name(self, user_id: UUID, display_name: Optional[str]) -> User:
        """
        Set or clear a user's display name.

        Raises:
            NotFoundError: If the user does not exist
        """
        pass


class SessionStorageInterface(ABC):
    """
    Persistence of sessions.

    Sessions are created and deleted, never updated.
    """

    @abstractmethod
    def insert_session(self, token_hash: str, user_id: UUID, expires_at: datetime) -> SessionRecord:
        """Persist a new session digest."""
        pass

    @abstractmethod
    def get_session(self, token_hash: str) -> Optional[SessionRecord]:
        """Look up a session by token digest."""
        pass

    @abstractmethod
    def delete_session(self, token_hash: str) -> bool:
        """
        Delete a session by token digest.

        Returns:
            True if a row was deleted, False if none matched
        """
        pass


class LedgerStorageInterface(ABC):
    """
    Persistence of accounts, months, outgoings and transfers.

    Any storage implementation must implement these methods.
    """

    # -- Accounts -------------------------------------------------------------

    @abstractmethod
    def list_accounts(self, user_id: UUID) -> list[Account]:
        """List a user's accounts ordered by code ascending."""
        pass

    @abstractmethod
    def insert_account(self, user_id: UUID, code: str, bank_name: str) -> Account:
        """
        Insert one account.

        Raises:
            DuplicateError: If the user already has an account with this code
        """
        pass

    @abstractmethod
    def insert_accounts_ignoring_conflicts(
        self,
        user_id: UUID,
        accounts: Sequence[tuple[str, str]],
    ) -> int:
        """
        Insert (code, bank_name) pairs, skipping codes the user already has.

        Safe to run concurrently for the same user.

        Returns:
            Number of rows actually inserted
        """
        pass

    @abstractmethod
    def update_account(self, user_id: UUID, code: str, bank_name: Optional[str]) -> Account:
        """
        Rename an account. A None name leaves the row unchanged.

        Raises:
            NotFoundError: If the user has no account with this code
        """
        pass

    @abstractmethod
    def delete_account(self, user_id: UUID, code: str) -> str:
        """
        Delete an account.

        Returns:
            The deleted code

        Raises:
            NotFoundError: If the user has no account with this code
        """
        pass

    # -- Months ---------------------------------------------------------------

    @abstractmethod
    def list_months(self, user_id: UUID) -> list[Month]:
        """List a user's months, most recently created first."""
        pass

    @abstractmethod
    def get_month(self, user_id: UUID, month_id: UUID) -> Optional[Month]:
        """Fetch one of the user's months."""
        pass

    @abstractmethod
    def get_latest_month(self, user_id: UUID, exclude_id: Optional[UUID] = None) -> Optional[Month]:
        """Fetch the user's most recently created month, optionally skipping one."""
        pass

    @abstractmethod
    def insert_month(
        self,
        user_id: UUID,
        month: MonthCreate,
        carried_outgoings: Sequence[OutgoingCreate] = (),
        month_id: Optional[UUID] = None,
    ) -> Month:
        """
        Insert a month together with outgoings carried over into it.

        Pass month_id to fix the new row's id up front; the carried
        outgoings are attached to the new month whatever month_id they carry.
        Both inserts happen in one transaction: either the month and
        every carried outgoing are persisted, or nothing is.
        """
        pass

    @abstractmethod
    def update_month(self, user_id: UUID, month_id: UUID, changes: dict[str, Any]) -> Month:
        """
        Apply field changes to a month.

        Raises:
            NotFoundError: If the user has no such month
        """
        pass

    @abstractmethod
    def delete_month(self, user_id: UUID, month_id: UUID) -> UUID:
        """
        Delete a month and, by cascade, its outgoings and transfers.

        Raises:
            NotFoundError: If the user has no such month
        """
        pass

    # -- Outgoings ------------------------------------------------------------

    @abstractmethod
    def list_outgoings(self, user_id: UUID, month_id: UUID) -> list[Outgoing]:
        """List a month's outgoings ordered by due day ascending."""
        pass

    @abstractmethod
    def insert_outgoing(self, user_id: UUID, outgoing: OutgoingCreate) -> Outgoing:
        """Insert one outgoing. The caller has checked month ownership."""
        pass

    @abstractmethod
    def update_outgoing(self, user_id: UUID, outgoing_id: UUID, changes: dict[str, Any]) -> Outgoing:
        """
        Apply field changes to an outgoing.

        Raises:
            NotFoundError: If the user has no such outgoing
        """
        pass

    @abstractmethod
    def delete_outgoing(self, user_id: UUID, outgoing_id: UUID) -> UUID:
        """
        Delete an outgoing.

        Raises:
            NotFoundError: If the user has no such outgoing
        """
        pass

    # -- Transfers ------------------------------------------------------------

    @abstractmethod
    def list_transfers(self, user_id: UUID, month_id: UUID) -> list[Transfer]:
        """List a month's transfers in creation order."""
        pass

    @abstractmethod
    def insert_transfer(self, user_id: UUID, transfer: TransferCreate) -> Transfer:
        """Insert one transfer. The caller has checked month ownership."""
        pass

    @abstractmethod
    def update_transfer(self, user_id: UUID, transfer_id: UUID, changes: dict[str, Any]) -> Transfer:
        """
        Apply field changes to a transfer.

        Raises:
            NotFoundError: If the user has no such transfer
        """
        pass

    @abstractmethod
    def delete_transfer(self, user_id: UUID, transfer_id: UUID) -> UUID:
        """
        Delete a transfer.

        Raises:
            NotFoundError: If the user has no such transfer
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage (or owned by someone else)."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
