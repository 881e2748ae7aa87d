"""Ledger operations over accounts, months, outgoings and transfers."""

from budget_tracker.ledger.accounts import AccountLedger
from budget_tracker.ledger.months import MonthLedger
from budget_tracker.ledger.outgoings import OutgoingLedger
from budget_tracker.ledger.summary import summarize_month
from budget_tracker.ledger.transfers import TransferLedger

__all__ = [
    "AccountLedger",
    "MonthLedger",
    "OutgoingLedger",
    "TransferLedger",
    "summarize_month",
]
