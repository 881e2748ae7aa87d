"""
Tests for ledger operations over a real (in-memory) datastore.

Covers account seeding, month rollover, ownership isolation, partial
updates and cascading deletes.
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from budget_tracker.models.ledger import (
    AccountCreate,
    AccountUpdate,
    MonthCreate,
    MonthUpdate,
    Outgoing,
    OutgoingCreate,
    OutgoingUpdate,
    TransferCreate,
    TransferUpdate,
)
from budget_tracker.services.storage import DuplicateError, NotFoundError, StorageError


def _month(label="March 2025", wage="1000", float_amount="200"):
    return MonthCreate(month_label=label, wage=wage, float_amount=float_amount)


def _outgoing(month_id, name="Rent", due_day=1, account_code="N", amount="100", **kwargs):
    return OutgoingCreate(
        month_id=month_id,
        name=name,
        due_day=due_day,
        account_code=account_code,
        amount=amount,
        **kwargs,
    )


class TestAccountLedger:
    """Tests for accounts and starter seeding."""

    def test_first_listing_seeds_starter_accounts(self, components, make_user):
        """A brand-new user gets exactly N, B and C, ordered by code."""
        user = make_user()

        accounts = components.accounts.list_accounts(user.id)

        assert [a.code for a in accounts] == ["B", "C", "N"]
        assert {a.bank_name for a in accounts} == {"Account N", "Account B", "Account C"}

    def test_seeding_is_idempotent(self, components, store, make_user):
        """Listing twice, or seeding again, never duplicates starters."""
        user = make_user()
        components.accounts.list_accounts(user.id)

        assert store.insert_accounts_ignoring_conflicts(user.id, [("N", "Again")]) == 0
        assert len(components.accounts.list_accounts(user.id)) == 3

    def test_no_seeding_when_user_has_accounts(self, components, make_user):
        user = make_user()
        components.accounts.create_account(user.id, AccountCreate(code="x", bank_name="Extra"))

        accounts = components.accounts.list_accounts(user.id)

        assert [a.code for a in accounts] == ["X"]

    def test_duplicate_code_rejected_per_user(self, components, make_user):
        """Codes are unique per user, not globally."""
        alice, bob = make_user(), make_user()
        components.accounts.create_account(alice.id, AccountCreate(code="S", bank_name="Savings"))
        components.accounts.create_account(bob.id, AccountCreate(code="S", bank_name="Savings"))

        with pytest.raises(DuplicateError) as exc_info:
            components.accounts.create_account(alice.id, AccountCreate(code="s", bank_name="Other"))
        assert str(exc_info.value) == "Account code already exists"

    def test_rename_and_delete_by_code(self, components, make_user):
        user = make_user()
        components.accounts.list_accounts(user.id)

        renamed = components.accounts.update_account(user.id, "b", AccountUpdate(bank_name="Bills"))
        assert renamed.bank_name == "Bills"

        assert components.accounts.delete_account(user.id, "C") == "C"
        assert [a.code for a in components.accounts.list_accounts(user.id)] == ["B", "N"]

    def test_other_users_account_not_found(self, components, make_user):
        alice, bob = make_user(), make_user()
        components.accounts.list_accounts(alice.id)
        components.accounts.create_account(bob.id, AccountCreate(code="Z", bank_name="Bob's"))

        with pytest.raises(NotFoundError):
            components.accounts.update_account(alice.id, "Z", AccountUpdate(bank_name="Mine"))
        with pytest.raises(NotFoundError):
            components.accounts.delete_account(alice.id, "Z")


class TestMonthRollover:
    """Tests for copying outgoings into a newly created month."""

    def test_first_month_starts_empty(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month())
        assert components.outgoings.list_outgoings(user.id, month.id) == []

    def test_second_month_copies_every_outgoing(self, components, make_user):
        """Every field except identity and month reference is preserved."""
        user = make_user()
        march = components.months.create_month(user.id, _month("March"))
        components.outgoings.create_outgoing(user.id, _outgoing(march.id, "Rent", 1, "N", "750"))
        components.outgoings.create_outgoing(
            user.id, _outgoing(march.id, "Gym", 15, "B", "35.50", is_recurring=False)
        )

        april = components.months.create_month(user.id, _month("April"))

        source = components.outgoings.list_outgoings(user.id, march.id)
        copied = components.outgoings.list_outgoings(user.id, april.id)
        assert len(copied) == 2

        def fields(o):
            return (o.name, o.due_day, o.account_code, o.amount, o.is_recurring)

        assert [fields(o) for o in copied] == [fields(o) for o in source]
        assert all(o.month_id == april.id for o in copied)
        assert {o.id for o in copied}.isdisjoint({o.id for o in source})

    def test_rollover_copies_from_most_recent_month_only(self, components, make_user):
        user = make_user()
        jan = components.months.create_month(user.id, _month("January"))
        components.outgoings.create_outgoing(user.id, _outgoing(jan.id, "Old"))
        feb = components.months.create_month(user.id, _month("February"))
        components.outgoings.create_outgoing(user.id, _outgoing(feb.id, "New", due_day=2))

        march = components.months.create_month(user.id, _month("March"))

        names = [o.name for o in components.outgoings.list_outgoings(user.id, march.id)]
        assert names == ["Old", "New"]

    def test_transfers_are_never_copied(self, components, make_user):
        user = make_user()
        march = components.months.create_month(user.id, _month("March"))
        components.transfers.create_transfer(
            user.id, TransferCreate(month_id=march.id, to_account_code="B", amount=50)
        )

        april = components.months.create_month(user.id, _month("April"))

        assert components.transfers.list_transfers(user.id, april.id) == []

    def test_rollover_ignores_other_users_months(self, components, make_user):
        alice, bob = make_user(), make_user()
        bob_month = components.months.create_month(bob.id, _month())
        components.outgoings.create_outgoing(bob.id, _outgoing(bob_month.id))

        alice_month = components.months.create_month(alice.id, _month())

        assert components.outgoings.list_outgoings(alice.id, alice_month.id) == []

    def test_failed_copy_leaves_no_month(self, store, make_user):
        """A month whose copied outgoings cannot be written is not kept."""
        user = make_user()
        unwritable = OutgoingCreate.model_construct(
            month_id=uuid4(), name=None, due_day=1, account_code="N",
            amount=Decimal("10"), is_recurring=True,
        )

        with pytest.raises(StorageError):
            store.insert_month(user.id, _month(), [unwritable])

        assert store.list_months(user.id) == []

    def test_failed_rollover_keeps_only_previous_month(self, components, make_user, monkeypatch):
        user = make_user()
        march = components.months.create_month(user.id, _month("March"))
        components.outgoings.create_outgoing(user.id, _outgoing(march.id))

        def unwritable_copy(self, month_id):
            return OutgoingCreate.model_construct(
                month_id=month_id, name=None, due_day=self.due_day,
                account_code=self.account_code, amount=self.amount,
                is_recurring=self.is_recurring,
            )

        monkeypatch.setattr(Outgoing, "carry_into", unwritable_copy)

        with pytest.raises(StorageError):
            components.months.create_month(user.id, _month("April"))

        assert [m.id for m in components.months.list_months(user.id)] == [march.id]
        assert len(components.outgoings.list_outgoings(user.id, march.id)) == 1


class TestMonthLedger:
    """Tests for month CRUD."""

    def test_starting_point_is_wage_minus_float(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month(wage="1200", float_amount="200"))
        assert month.starting_point == Decimal("1000")

    def test_months_listed_newest_first(self, components, make_user):
        user = make_user()
        for label in ("January", "February", "March"):
            components.months.create_month(user.id, _month(label))

        labels = [m.month_label for m in components.months.list_months(user.id)]

        assert labels == ["March", "February", "January"]

    def test_partial_update_keeps_other_fields(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month(wage="1000", float_amount="200"))

        updated = components.months.update_month(user.id, month.id, MonthUpdate(wage="1500"))

        assert updated.wage == Decimal("1500")
        assert updated.float_amount == Decimal("200")
        assert updated.month_label == month.month_label
        assert updated.starting_point == Decimal("1300")

    def test_delete_cascades_to_children(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month())
        outgoing = components.outgoings.create_outgoing(user.id, _outgoing(month.id))
        transfer = components.transfers.create_transfer(
            user.id, TransferCreate(month_id=month.id, to_account_code="N", amount=10)
        )

        assert components.months.delete_month(user.id, month.id) == month.id

        with pytest.raises(NotFoundError):
            components.outgoings.delete_outgoing(user.id, outgoing.id)
        with pytest.raises(NotFoundError):
            components.transfers.delete_transfer(user.id, transfer.id)

    def test_unknown_month_not_found(self, components, make_user):
        user = make_user()
        with pytest.raises(NotFoundError) as exc_info:
            components.months.update_month(user.id, uuid4(), MonthUpdate(wage="1"))
        assert str(exc_info.value) == "Month not found"

    def test_invalid_id_not_found(self, components, make_user):
        """An unparseable id reaches the ledger as None."""
        user = make_user()
        with pytest.raises(NotFoundError):
            components.months.delete_month(user.id, None)


class TestOwnershipIsolation:
    """Another user's rows behave exactly like missing rows."""

    @pytest.fixture
    def bob_rows(self, components, make_user):
        bob = make_user()
        month = components.months.create_month(bob.id, _month())
        outgoing = components.outgoings.create_outgoing(bob.id, _outgoing(month.id))
        transfer = components.transfers.create_transfer(
            bob.id, TransferCreate(month_id=month.id, to_account_code="B", amount=20)
        )
        return bob, month, outgoing, transfer

    def test_cannot_update_or_delete_other_users_month(self, components, make_user, bob_rows):
        alice = make_user()
        _, month, _, _ = bob_rows

        with pytest.raises(NotFoundError):
            components.months.update_month(alice.id, month.id, MonthUpdate(month_label="Mine"))
        with pytest.raises(NotFoundError):
            components.months.delete_month(alice.id, month.id)

    def test_cannot_add_rows_to_other_users_month(self, components, make_user, bob_rows):
        alice = make_user()
        _, month, _, _ = bob_rows

        with pytest.raises(NotFoundError) as exc_info:
            components.outgoings.create_outgoing(alice.id, _outgoing(month.id))
        assert str(exc_info.value) == "Month not found"
        with pytest.raises(NotFoundError):
            components.transfers.create_transfer(
                alice.id, TransferCreate(month_id=month.id, to_account_code="B", amount=1)
            )

    def test_cannot_touch_other_users_outgoing(self, components, make_user, bob_rows):
        alice = make_user()
        _, _, outgoing, _ = bob_rows

        with pytest.raises(NotFoundError) as exc_info:
            components.outgoings.update_outgoing(alice.id, outgoing.id, OutgoingUpdate(amount="1"))
        assert str(exc_info.value) == "Monthly outgoing not found"
        with pytest.raises(NotFoundError):
            components.outgoings.delete_outgoing(alice.id, outgoing.id)

    def test_cannot_touch_other_users_transfer(self, components, make_user, bob_rows):
        alice = make_user()
        _, _, _, transfer = bob_rows

        with pytest.raises(NotFoundError) as exc_info:
            components.transfers.update_transfer(alice.id, transfer.id, TransferUpdate(amount="1"))
        assert str(exc_info.value) == "Transfer not found"
        with pytest.raises(NotFoundError):
            components.transfers.delete_transfer(alice.id, transfer.id)

    def test_other_users_rows_not_listed(self, components, make_user, bob_rows):
        alice = make_user()
        _, month, _, _ = bob_rows

        assert components.months.list_months(alice.id) == []
        assert components.outgoings.list_outgoings(alice.id, month.id) == []
        assert components.transfers.list_transfers(alice.id, month.id) == []


class TestOutgoingsAndTransfers:
    """Tests for child row ordering and updates."""

    def test_outgoings_ordered_by_due_day(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month())
        for name, day in (("Phone", 20), ("Rent", 1), ("Gym", 15)):
            components.outgoings.create_outgoing(user.id, _outgoing(month.id, name, day))

        names = [o.name for o in components.outgoings.list_outgoings(user.id, month.id)]

        assert names == ["Rent", "Gym", "Phone"]

    def test_transfers_in_creation_order(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month())
        for code in ("C", "A", "B"):
            components.transfers.create_transfer(
                user.id, TransferCreate(month_id=month.id, to_account_code=code, amount=1)
            )

        codes = [t.to_account_code for t in components.transfers.list_transfers(user.id, month.id)]

        assert codes == ["C", "A", "B"]

    def test_outgoing_partial_update(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month())
        outgoing = components.outgoings.create_outgoing(user.id, _outgoing(month.id, amount="100"))

        updated = components.outgoings.update_outgoing(
            user.id, outgoing.id, OutgoingUpdate(account_code="b", is_recurring=False)
        )

        assert updated.account_code == "B"
        assert updated.is_recurring is False
        assert updated.amount == Decimal("100")
        assert updated.name == "Rent"

    def test_transfer_note_can_be_cleared(self, components, make_user):
        user = make_user()
        month = components.months.create_month(user.id, _month())
        transfer = components.transfers.create_transfer(
            user.id, TransferCreate(month_id=month.id, to_account_code="B", amount=5, note="rent")
        )

        updated = components.transfers.update_transfer(user.id, transfer.id, TransferUpdate(note=""))

        assert updated.note is None
        assert updated.amount == Decimal("5")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
