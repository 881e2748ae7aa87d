"""
Ledger Data Models for Budget Tracker

These models define the schemas for everything a user records:
accounts, months, outgoings (expense items) and transfers.

Two families of models live here:
1. Entity models (Account, Month, Outgoing, Transfer) - what storage returns
2. Request models (*Create, *Update) - what clients send, with coercion

DESIGN DECISION: Money is Decimal everywhere inside the system and is
only turned into a JSON number at the edge. Summing floats for a
budget drifts by cents; summing Decimals does not.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from budget_tracker.validation.validator import blank_to_none, normalize_code


# =============================================================================
# SHARED TYPES
# =============================================================================

Money = Annotated[
    Decimal,
    Field(ge=0, max_digits=12, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Outgoing and transfer amounts may be negative (refunds, reversals)
SignedMoney = Annotated[
    Decimal,
    Field(max_digits=12, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Values read back from storage are not re-checked against input bounds
StoredMoney = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

DueDay = Annotated[int, Field(ge=1, le=31, description="Day of month the outgoing is due")]

STARTER_ACCOUNTS: tuple[tuple[str, str], ...] = (
    ("N", "Account N"),
    ("B", "Account B"),
    ("C", "Account C"),
)


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(BaseModel):
    """A named bank account, identified per user by a short code."""

    code: str
    bank_name: str


class AccountCreate(BaseModel):
    """Payload for POST /accounts."""
    model_config = ConfigDict(str_strip_whitespace=True)

    code: str = Field(
        ...,
        min_length=1,
        max_length=32,
        description="Short user-chosen identifier, unique per user"
    )
    bank_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name of the bank account"
    )

    @field_validator('code', mode='before')
    @classmethod
    def coerce_code(cls, v):
        return normalize_code(v)

    @field_validator('bank_name', mode='before')
    @classmethod
    def coerce_bank_name(cls, v):
        return "" if v is None else str(v)


class AccountUpdate(BaseModel):
    """Payload for PUT /accounts/{code}. Only the display name can change."""
    model_config = ConfigDict(str_strip_whitespace=True)

    bank_name: Optional[str] = Field(default=None, min_length=1, max_length=200)


# =============================================================================
# MONTHS
# =============================================================================

class Month(BaseModel):
    """
    One budgeting month.

    `starting_point` is derived by the data layer (wage minus float)
    and is never written by clients.
    """

    id: UUID
    month_label: str
    wage: StoredMoney
    float_amount: StoredMoney
    starting_point: StoredMoney
    created_at: datetime


class MonthCreate(BaseModel):
    """Payload for POST /months."""
    model_config = ConfigDict(str_strip_whitespace=True)

    month_label: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-form label, e.g. 'March 2025'"
    )
    wage: Money = Field(..., description="Income for the month")
    float_amount: Money = Field(..., description="Fixed reserve kept on account C")


class MonthUpdate(BaseModel):
    """Payload for PUT /months/{id}. Every field is optional."""
    model_config = ConfigDict(str_strip_whitespace=True)

    month_label: Optional[str] = Field(default=None, min_length=1, max_length=100)
    wage: Optional[Money] = None
    float_amount: Optional[Money] = None


# =============================================================================
# OUTGOINGS (EXPENSE ITEMS)
# =============================================================================

class Outgoing(BaseModel):
    """A single outgoing (expense item) inside a month."""

    id: UUID
    month_id: UUID
    name: str
    due_day: int
    account_code: str
    amount: StoredMoney
    is_recurring: bool
    created_at: datetime

    def carry_into(self, month_id: UUID) -> "OutgoingCreate":
        """
        Build the copy of this outgoing for another month.

        Everything except identity and the month reference is preserved.
        """
        return OutgoingCreate(
            month_id=month_id,
            name=self.name,
            due_day=self.due_day,
            account_code=self.account_code,
            amount=self.amount,
            is_recurring=self.is_recurring,
        )


class OutgoingCreate(BaseModel):
    """Payload for POST /expenses."""
    model_config = ConfigDict(str_strip_whitespace=True)

    month_id: UUID = Field(..., description="Month the outgoing belongs to")
    name: str = Field(..., min_length=1, max_length=200)
    due_day: DueDay
    account_code: str = Field(..., min_length=1, max_length=32)
    amount: SignedMoney
    is_recurring: bool = Field(
        default=True,
        description="Recurring outgoings are templates for the following months"
    )

    @field_validator('account_code', mode='before')
    @classmethod
    def coerce_account_code(cls, v):
        return normalize_code(v)


class OutgoingUpdate(BaseModel):
    """Payload for PUT /expenses/{id}."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    due_day: Optional[DueDay] = None
    account_code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    amount: Optional[SignedMoney] = None
    is_recurring: Optional[bool] = None

    @field_validator('account_code', mode='before')
    @classmethod
    def coerce_account_code(cls, v):
        return None if v is None else normalize_code(v)


# =============================================================================
# TRANSFERS
# =============================================================================

class Transfer(BaseModel):
    """Money moved to one of the user's accounts within a month."""

    id: UUID
    month_id: UUID
    to_account_code: str
    amount: StoredMoney
    note: Optional[str] = None
    created_at: datetime


class TransferCreate(BaseModel):
    """Payload for POST /transfers."""
    model_config = ConfigDict(str_strip_whitespace=True)

    month_id: UUID
    to_account_code: str = Field(..., min_length=1, max_length=32)
    amount: SignedMoney
    note: Optional[str] = Field(default=None, max_length=500)

    @field_validator('to_account_code', mode='before')
    @classmethod
    def coerce_account_code(cls, v):
        return normalize_code(v)

    @field_validator('note', mode='before')
    @classmethod
    def coerce_note(cls, v):
        return blank_to_none(v)


class TransferUpdate(BaseModel):
    """Payload for PUT /transfers/{id}."""
    model_config = ConfigDict(str_strip_whitespace=True)

    to_account_code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    amount: Optional[SignedMoney] = None
    note: Optional[str] = Field(default=None, max_length=500)

    @field_validator('to_account_code', mode='before')
    @classmethod
    def coerce_account_code(cls, v):
        return None if v is None else normalize_code(v)

    @field_validator('note', mode='before')
    @classmethod
    def coerce_note(cls, v):
        return blank_to_none(v)


# =============================================================================
# SUMMARY (DERIVED, NEVER STORED)
# =============================================================================

class MonthSummary(BaseModel):
    """
    Read-time totals for one month.

    transfer_to_c is the month's float, not the outgoings booked on C.
    transfer_to_l is the leftover: starting point minus all outgoings.
    """

    month_id: Optional[UUID] = None
    total_out: StoredMoney = Decimal("0")
    starting_point: StoredMoney = Decimal("0")
    transfer_to_b: StoredMoney = Decimal("0")
    transfer_to_n: StoredMoney = Decimal("0")
    transfer_to_c: StoredMoney = Decimal("0")
    transfer_to_l: StoredMoney = Decimal("0")
    total_transfers: StoredMoney = Decimal("0")
    recorded_transfers_total: StoredMoney = Decimal("0")
