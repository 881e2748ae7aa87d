"""Tests for the month summary aggregator."""

import pytest
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from budget_tracker.ledger import summarize_month
from budget_tracker.models.ledger import Month, Outgoing, Transfer


def _month(wage="1200", float_amount="200"):
    wage, float_amount = Decimal(wage), Decimal(float_amount)
    return Month(
        id=uuid4(),
        month_label="March 2025",
        wage=wage,
        float_amount=float_amount,
        starting_point=wage - float_amount,
        created_at=datetime(2025, 3, 1),
    )


def _outgoing(month, account_code, amount):
    return Outgoing(
        id=uuid4(),
        month_id=month.id,
        name=f"Paid from {account_code}",
        due_day=1,
        account_code=account_code,
        amount=Decimal(amount),
        is_recurring=True,
        created_at=datetime(2025, 3, 1),
    )


def _transfer(month, amount):
    return Transfer(
        id=uuid4(),
        month_id=month.id,
        to_account_code="B",
        amount=Decimal(amount),
        created_at=datetime(2025, 3, 1),
    )


class TestSummarizeMonth:
    """Tests for summarize_month."""

    def test_worked_example(self):
        """Starting point 1000, float 200, outgoings on B, N and C."""
        month = _month(wage="1200", float_amount="200")
        outgoings = [
            _outgoing(month, "B", "300"),
            _outgoing(month, "N", "100"),
            _outgoing(month, "C", "50"),
        ]

        summary = summarize_month(month, outgoings)

        assert summary.starting_point == Decimal("1000")
        assert summary.total_out == Decimal("450")
        assert summary.transfer_to_b == Decimal("300")
        assert summary.transfer_to_n == Decimal("100")
        assert summary.transfer_to_c == Decimal("200")
        assert summary.transfer_to_l == Decimal("550")
        assert summary.total_transfers == Decimal("1150")

    def test_c_is_the_float_not_c_outgoings(self):
        """Outgoings booked on C count towards total_out only."""
        month = _month(float_amount="75")
        summary = summarize_month(month, [_outgoing(month, "C", "500")])
        assert summary.transfer_to_c == Decimal("75")
        assert summary.total_out == Decimal("500")

    def test_no_outgoings(self):
        """Sums default to zero; the leftover is the whole starting point."""
        month = _month(wage="800", float_amount="100")

        summary = summarize_month(month, [])

        assert summary.total_out == Decimal("0")
        assert summary.transfer_to_b == Decimal("0")
        assert summary.transfer_to_n == Decimal("0")
        assert summary.transfer_to_l == Decimal("700")
        assert summary.total_transfers == Decimal("800")

    def test_leftover_can_go_negative(self):
        month = _month(wage="100", float_amount="0")
        summary = summarize_month(month, [_outgoing(month, "N", "150")])
        assert summary.transfer_to_l == Decimal("-50")

    def test_recorded_transfers_total(self):
        """Recorded transfer rows are summed separately from the derived totals."""
        month = _month()
        summary = summarize_month(month, [], [_transfer(month, "40"), _transfer(month, "2.50")])
        assert summary.recorded_transfers_total == Decimal("42.50")
        assert summary.month_id == month.id


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
