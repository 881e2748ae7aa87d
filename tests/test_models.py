"""
Tests for Budget Tracker models

Test strategy:
1. Unit tests for request coercion (codes, emails, blank text, numbers)
2. Unit tests for entity helpers and audit events
3. No datastore in this module
"""

import pytest
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from budget_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budget_tracker.models.auth import ProfileUpdate, SessionRecord, SignupRequest
from budget_tracker.models.ledger import (
    AccountCreate,
    MonthCreate,
    MonthSummary,
    Outgoing,
    OutgoingCreate,
    TransferCreate,
    TransferUpdate,
)
from budget_tracker.validation import (
    InputValidationError,
    parse_payload,
    parse_row_id,
    require_month_id,
)


class TestLedgerRequestModels:
    """Tests for coercion in ledger request payloads."""

    def test_account_code_trimmed_and_upper_cased(self):
        """Account codes are normalized before storage."""
        account = AccountCreate(code="  b ", bank_name="  Main bank ")
        assert account.code == "B"
        assert account.bank_name == "Main bank"

    def test_account_blank_code_rejected(self):
        """A code that is blank after trimming is invalid."""
        with pytest.raises(ValidationError):
            AccountCreate(code="   ", bank_name="Main bank")

    def test_month_amounts_parsed_from_strings(self):
        """Numeric fields accept numeric strings."""
        month = MonthCreate(month_label="March 2025", wage="1000.50", float_amount=200)
        assert month.wage == Decimal("1000.50")
        assert month.float_amount == Decimal("200")

    def test_month_rejects_non_numeric_wage(self):
        """Non-numeric amounts are invalid."""
        with pytest.raises(ValidationError):
            MonthCreate(month_label="March 2025", wage="lots", float_amount=0)

    def test_month_rejects_negative_amount(self):
        """Negative amounts are rejected."""
        with pytest.raises(ValidationError):
            MonthCreate(month_label="March 2025", wage=Decimal("-1"), float_amount=0)

    def test_outgoing_defaults_to_recurring(self):
        """is_recurring defaults to true when omitted."""
        outgoing = OutgoingCreate(
            month_id=uuid4(),
            name="Rent",
            due_day=1,
            account_code=" n ",
            amount="750",
        )
        assert outgoing.is_recurring is True
        assert outgoing.account_code == "N"

    @pytest.mark.parametrize("due_day", [0, 32])
    def test_outgoing_due_day_bounds(self, due_day):
        """Due day must fall within 1..31."""
        with pytest.raises(ValidationError):
            OutgoingCreate(
                month_id=uuid4(),
                name="Rent",
                due_day=due_day,
                account_code="N",
                amount=1,
            )

    def test_outgoing_and_transfer_amounts_may_be_negative(self):
        """Refunds and reversals are recorded as negative amounts."""
        refund = OutgoingCreate(
            month_id=uuid4(), name="Refund", due_day=3, account_code="N", amount="-20"
        )
        reversal = TransferCreate(month_id=uuid4(), to_account_code="B", amount=-5.5)
        assert refund.amount == Decimal("-20")
        assert reversal.amount == Decimal("-5.5")
        assert TransferUpdate(amount="-1").amount == Decimal("-1")

    @pytest.mark.parametrize("amount", ["10.005", "1234567890123"])
    def test_amount_must_fit_storage_precision(self, amount):
        """Amounts are stored with two decimals and at most twelve digits."""
        with pytest.raises(ValidationError):
            OutgoingCreate(
                month_id=uuid4(), name="Rent", due_day=1, account_code="N", amount=amount
            )

    def test_transfer_blank_note_becomes_none(self):
        """Blank free text is stored as null."""
        transfer = TransferCreate(month_id=uuid4(), to_account_code="b", amount=10, note="   ")
        assert transfer.note is None
        assert transfer.to_account_code == "B"

    def test_transfer_update_only_dumps_sent_fields(self):
        """Partial updates carry only the fields the client sent."""
        update = TransferUpdate(note="")
        assert update.model_dump(exclude_unset=True) == {"note": None}


class TestEntityModels:
    """Tests for entity helpers."""

    def test_carry_into_preserves_everything_but_identity(self):
        """A carried outgoing keeps its fields and moves to the new month."""
        source = Outgoing(
            id=uuid4(),
            month_id=uuid4(),
            name="Gym",
            due_day=15,
            account_code="B",
            amount=Decimal("35.00"),
            is_recurring=False,
            created_at=datetime(2025, 2, 1),
        )
        target_month = uuid4()

        copy = source.carry_into(target_month)

        assert copy.month_id == target_month
        assert (copy.name, copy.due_day, copy.account_code, copy.amount, copy.is_recurring) == (
            "Gym", 15, "B", Decimal("35.00"), False
        )

    def test_month_summary_serializes_money_as_numbers(self):
        """Decimals become JSON numbers at the edge."""
        summary = MonthSummary(total_out=Decimal("450.00"), transfer_to_l=Decimal("550"))
        dumped = summary.model_dump(mode="json")
        assert dumped["total_out"] == 450.0
        assert dumped["transfer_to_l"] == 550.0
        assert dumped["transfer_to_b"] == 0.0

    def test_session_expires_at_expiry_instant(self):
        """A session is expired at, not only after, its expiry time."""
        expires_at = datetime(2025, 3, 31, 12, 0, 0)
        record = SessionRecord(token_hash="x", user_id=uuid4(), expires_at=expires_at)
        assert record.is_expired(expires_at)
        assert not record.is_expired(datetime(2025, 3, 31, 11, 59, 59))


class TestIdentityModels:
    """Tests for signup and profile payloads."""

    def test_signup_email_normalized(self):
        """Emails are trimmed and lower-cased."""
        request = SignupRequest(email="  Alice@Example.COM ", password="secret123")
        assert request.email == "alice@example.com"

    def test_signup_blank_display_name_is_none(self):
        request = SignupRequest(email="a@b.c", password="secret123", display_name="  ")
        assert request.display_name is None

    def test_profile_update_null_clears_name(self):
        """JSON null and blank both clear the display name."""
        assert ProfileUpdate(display_name=None).display_name is None
        assert ProfileUpdate(display_name="").display_name is None
        assert ProfileUpdate(display_name=" Al ").display_name == "Al"


class TestPayloadParsing:
    """Tests for request body and id parsing."""

    def test_non_object_body_rejected(self):
        """Only JSON objects are accepted as bodies."""
        with pytest.raises(InputValidationError) as exc_info:
            parse_payload(MonthCreate, [1, 2, 3])
        assert exc_info.value.message == "Request body must be a JSON object"

    def test_validation_error_names_field(self):
        """The first offending field is named in the message."""
        with pytest.raises(InputValidationError) as exc_info:
            parse_payload(MonthCreate, {"month_label": "March", "wage": "x", "float_amount": 0})
        assert exc_info.value.field == "wage"
        assert exc_info.value.message.startswith("wage: ")

    def test_missing_month_id_rejected(self):
        with pytest.raises(InputValidationError) as exc_info:
            require_month_id(None)
        assert exc_info.value.message == "month_id query param is required"

    def test_invalid_row_id_is_none(self):
        """A path id that is not a UUID can never match a row."""
        assert parse_row_id("not-a-uuid") is None
        row_id = uuid4()
        assert parse_row_id(str(row_id)) == row_id


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.MONTH_CREATED,
            description="Month created",
        )
        assert event.event_id is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        user_id = uuid4()
        event = AuditEventBuilder.row_changed("transfer", "deleted", "abc", user_id)
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transfer_deleted"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["user_id"] == str(user_id)

    def test_login_failure_does_not_identify_user(self):
        """Failed logins carry no user id."""
        event = AuditEventBuilder.login_failed()
        assert event.user_id is None
        assert event.severity == AuditSeverity.WARNING

    def test_rollover_event_records_count(self):
        event = AuditEventBuilder.month_rolled_over(uuid4(), uuid4(), uuid4(), copied=3)
        assert event.event_type == AuditEventType.MONTH_ROLLED_OVER
        assert event.details["copied_outgoings"] == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
