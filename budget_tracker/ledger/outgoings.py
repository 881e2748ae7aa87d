"""Outgoing (expense item) ledger."""

from typing import Optional
from uuid import UUID

from budget_tracker.audit.logger import AuditLogger
from budget_tracker.models.ledger import Outgoing, OutgoingCreate, OutgoingUpdate
from budget_tracker.services.storage import LedgerStorageInterface, NotFoundError


class OutgoingLedger:
    """CRUD over the outgoings of a user's months."""

    def __init__(self, store: LedgerStorageInterface, audit_logger: AuditLogger):
        self._store = store
        self._audit = audit_logger

    def list_outgoings(self, user_id: UUID, month_id: UUID) -> list[Outgoing]:
        return self._store.list_outgoings(user_id, month_id)

    def create_outgoing(self, user_id: UUID, request: OutgoingCreate) -> Outgoing:
        """
        Add an outgoing to one of the user's months.

        Raises:
            NotFoundError: The month is absent or owned by someone else
        """
        if self._store.get_month(user_id, request.month_id) is None:
            raise NotFoundError("Month not found")
        outgoing = self._store.insert_outgoing(user_id, request)
        self._audit.log_row_changed("outgoing", "created", outgoing.id, user_id)
        return outgoing

    def update_outgoing(
        self,
        user_id: UUID,
        outgoing_id: Optional[UUID],
        request: OutgoingUpdate,
    ) -> Outgoing:
        if outgoing_id is None:
            raise NotFoundError("Monthly outgoing not found")
        outgoing = self._store.update_outgoing(
            user_id, outgoing_id, request.model_dump(exclude_unset=True)
        )
        self._audit.log_row_changed("outgoing", "updated", outgoing.id, user_id)
        return outgoing

    def delete_outgoing(self, user_id: UUID, outgoing_id: Optional[UUID]) -> UUID:
        if outgoing_id is None:
            raise NotFoundError("Monthly outgoing not found")
        deleted = self._store.delete_outgoing(user_id, outgoing_id)
        self._audit.log_row_changed("outgoing", "deleted", deleted, user_id)
        return deleted
