"""Transfer ledger."""

from typing import Optional
from uuid import UUID

from budget_tracker.audit.logger import AuditLogger
from budget_tracker.models.ledger import Transfer, TransferCreate, TransferUpdate
from budget_tracker.services.storage import LedgerStorageInterface, NotFoundError


class TransferLedger:
    """CRUD over the transfers recorded in a user's months."""

    def __init__(self, store: LedgerStorageInterface, audit_logger: AuditLogger):
        self._store = store
        self._audit = audit_logger

    def list_transfers(self, user_id: UUID, month_id: UUID) -> list[Transfer]:
        return self._store.list_transfers(user_id, month_id)

    def create_transfer(self, user_id: UUID, request: TransferCreate) -> Transfer:
        if self._store.get_month(user_id, request.month_id) is None:
            raise NotFoundError("Month not found")
        transfer = self._store.insert_transfer(user_id, request)
        self._audit.log_row_changed("transfer", "created", transfer.id, user_id)
        return transfer

    def update_transfer(
        self,
        user_id: UUID,
        transfer_id: Optional[UUID],
        request: TransferUpdate,
    ) -> Transfer:
        if transfer_id is None:
            raise NotFoundError("Transfer not found")
        transfer = self._store.update_transfer(
            user_id, transfer_id, request.model_dump(exclude_unset=True)
        )
        self._audit.log_row_changed("transfer", "updated", transfer.id, user_id)
        return transfer

    def delete_transfer(self, user_id: UUID, transfer_id: Optional[UUID]) -> UUID:
        if transfer_id is None:
            raise NotFoundError("Transfer not found")
        deleted = self._store.delete_transfer(user_id, transfer_id)
        self._audit.log_row_changed("transfer", "deleted", deleted, user_id)
        return deleted
