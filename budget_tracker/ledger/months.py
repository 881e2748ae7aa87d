"""
Month Ledger and Rollover

Creating a month copies every outgoing of the user's most recently
created month into it. The new month and its copies are written in one
transaction, so a failed copy leaves no half-created month behind.

Transfers are never copied, and a user's first month starts empty.
"""

from typing import Optional
from uuid import UUID, uuid4

from budget_tracker.audit.logger import AuditLogger
from budget_tracker.ledger.summary import summarize_month
from budget_tracker.models.audit import AuditEventBuilder
from budget_tracker.models.ledger import Month, MonthCreate, MonthSummary, MonthUpdate
from budget_tracker.services.storage import LedgerStorageInterface, NotFoundError


class MonthLedger:
    """CRUD over a user's months, plus rollover and the month summary."""

    def __init__(self, store: LedgerStorageInterface, audit_logger: AuditLogger):
        self._store = store
        self._audit = audit_logger

    def list_months(self, user_id: UUID) -> list[Month]:
        return self._store.list_months(user_id)

    def get_month(self, user_id: UUID, month_id: Optional[UUID]) -> Month:
        """
        Fetch one of the user's months.

        Raises:
            NotFoundError: Absent, not owned, or not a valid id
        """
        month = self._store.get_month(user_id, month_id) if month_id else None
        if month is None:
            raise NotFoundError("Month not found")
        return month

    def create_month(self, user_id: UUID, request: MonthCreate) -> Month:
        """Create a month, rolling over the previous month's outgoings."""
        month_id = uuid4()
        previous = self._store.get_latest_month(user_id, exclude_id=month_id)

        carried = []
        if previous is not None:
            carried = [
                outgoing.carry_into(month_id)
                for outgoing in self._store.list_outgoings(user_id, previous.id)
            ]

        month = self._store.insert_month(user_id, request, carried, month_id=month_id)

        self._audit.log_row_changed("month", "created", month.id, user_id)
        if previous is not None:
            self._audit.log(AuditEventBuilder.month_rolled_over(
                user_id=user_id,
                month_id=month.id,
                source_month_id=previous.id,
                copied=len(carried),
            ))
        return month

    def update_month(self, user_id: UUID, month_id: Optional[UUID], request: MonthUpdate) -> Month:
        if month_id is None:
            raise NotFoundError("Month not found")
        month = self._store.update_month(user_id, month_id, request.model_dump(exclude_unset=True))
        self._audit.log_row_changed("month", "updated", month.id, user_id)
        return month

    def delete_month(self, user_id: UUID, month_id: Optional[UUID]) -> UUID:
        """Delete a month. Its outgoings and transfers go with it."""
        if month_id is None:
            raise NotFoundError("Month not found")
        deleted = self._store.delete_month(user_id, month_id)
        self._audit.log_row_changed("month", "deleted", deleted, user_id)
        return deleted

    def summarize(self, user_id: UUID, month_id: Optional[UUID]) -> MonthSummary:
        month = self.get_month(user_id, month_id)
        return summarize_month(
            month,
            self._store.list_outgoings(user_id, month.id),
            self._store.list_transfers(user_id, month.id),
        )
