"""
Account Ledger

Accounts are keyed per user by their code. A user who lists accounts
while having none gets the three starter accounts first.
"""

from uuid import UUID

import structlog

from budget_tracker.audit.logger import AuditLogger
from budget_tracker.models.audit import AuditEventBuilder
from budget_tracker.models.ledger import STARTER_ACCOUNTS, Account, AccountCreate, AccountUpdate
from budget_tracker.services.storage import LedgerStorageInterface
from budget_tracker.validation import normalize_code


logger = structlog.get_logger(__name__)


class AccountLedger:
    """CRUD over a user's accounts."""

    def __init__(self, store: LedgerStorageInterface, audit_logger: AuditLogger):
        self._store = store
        self._audit = audit_logger

    def list_accounts(self, user_id: UUID) -> list[Account]:
        """
        List accounts ordered by code, seeding starters on first use.

        Seeding tolerates concurrent first calls: conflicting inserts are
        skipped by the datastore, and the list is read again afterwards.
        """
        accounts = self._store.list_accounts(user_id)
        if accounts:
            return accounts

        inserted = self._store.insert_accounts_ignoring_conflicts(user_id, STARTER_ACCOUNTS)
        if inserted:
            self._audit.log(AuditEventBuilder.accounts_seeded(
                user_id, [code for code, _ in STARTER_ACCOUNTS]
            ))
        else:
            logger.debug("account_seed_skipped", user_id=str(user_id))

        return self._store.list_accounts(user_id)

    def create_account(self, user_id: UUID, request: AccountCreate) -> Account:
        account = self._store.insert_account(user_id, request.code, request.bank_name)
        self._audit.log_row_changed("account", "created", account.code, user_id)
        return account

    def update_account(self, user_id: UUID, code: str, request: AccountUpdate) -> Account:
        account = self._store.update_account(user_id, normalize_code(code), request.bank_name)
        self._audit.log_row_changed("account", "updated", account.code, user_id)
        return account

    def delete_account(self, user_id: UUID, code: str) -> str:
        deleted = self._store.delete_account(user_id, normalize_code(code))
        self._audit.log_row_changed("account", "deleted", deleted, user_id)
        return deleted
