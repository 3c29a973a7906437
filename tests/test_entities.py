"""Tests for domain entities."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from moneymind.domain.entities import (
    Account,
    DuplicateDetectionResult,
    DuplicateGroup,
    SyncAccount,
    SyncMode,
    SyncTransaction,
    Transaction,
)


def make_transaction(txn_id, description="Coffee", amount="10.00", day=date(2024, 1, 5), **kwargs):
    return Transaction(
        id=txn_id,
        account_id=1,
        date=day,
        amount=Decimal(amount),
        description=description,
        **kwargs,
    )


class TestAccount:
    """Tests for Account entity."""

    def test_create_account(self):
        """Test creating an Account entity."""
        account = Account(
            id=1,
            name="Checking",
            initial_balance=Decimal("100.00"),
            icon="💳",
            color="#6750A4",
            created_at=datetime.now(UTC),
        )
        assert account.id == 1
        assert account.name == "Checking"
        assert account.initial_balance == Decimal("100.00")

    def test_account_immutability(self):
        """Test that Account entities are immutable."""
        account = Account(
            id=1,
            name="Checking",
            initial_balance=Decimal("0"),
            icon=None,
            color=None,
            created_at=datetime.now(UTC),
        )
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            account.name = "New Name"


class TestTransaction:
    """Tests for Transaction entity."""

    def test_defaults(self):
        """Test optional fields default to None."""
        transaction = make_transaction(1)
        assert transaction.reason is None
        assert transaction.category is None
        assert transaction.modified_at is None
        assert isinstance(transaction.created_at, datetime)

    @pytest.mark.parametrize(
        "category,expected",
        [(None, False), ("", False), ("   ", False), ("Groceries", True)],
    )
    def test_is_classified(self, category, expected):
        """Test a transaction is classified only with a non-blank category."""
        assert make_transaction(1, category=category).is_classified is expected


class TestDuplicateGroup:
    """Tests for DuplicateGroup entity."""

    def test_keeps_first_member_by_default(self):
        """Test that the first member is kept when none is selected."""
        members = [make_transaction(1), make_transaction(2), make_transaction(3)]
        group = DuplicateGroup(group_id=1, transactions=members)

        assert group.selected_to_keep == members[0]
        assert [t.id for t in group.to_delete] == [2, 3]

    def test_to_delete_excludes_selected(self):
        """Test that changing the kept member changes the delete set."""
        members = [make_transaction(1), make_transaction(2), make_transaction(3)]
        group = DuplicateGroup(group_id=1, transactions=members)
        group.selected_to_keep = members[1]

        assert len(group.to_delete) == group.transaction_count - 1
        assert members[1] not in group.to_delete

    def test_shared_fields_come_from_first_member(self):
        """Test date, amount and description accessors."""
        group = DuplicateGroup(group_id=1, transactions=[make_transaction(1), make_transaction(2)])

        assert group.date == date(2024, 1, 5)
        assert group.amount == Decimal("10.00")
        assert group.description == "Coffee"


class TestDuplicateDetectionResult:
    """Tests for DuplicateDetectionResult."""

    def test_failure_message(self):
        """Test that failed results report their error."""
        result = DuplicateDetectionResult(success=False, error="boom")
        assert "boom" in result.message


class TestSyncMode:
    """Tests for SyncMode."""

    def test_only_replace_is_destructive(self):
        """Test that only REPLACE deletes existing data."""
        assert SyncMode.REPLACE.is_destructive
        assert not SyncMode.MERGE.is_destructive
        assert not SyncMode.NEW_ONLY.is_destructive
        assert not SyncMode.CREATE_NEW.is_destructive

    def test_values(self):
        """Test that modes are built from their string values."""
        assert SyncMode("new_only") is SyncMode.NEW_ONLY


class TestSyncAccount:
    """Tests for SyncAccount serialization."""

    def test_from_dict_defaults(self):
        """Test that missing optional fields get defaults."""
        account = SyncAccount.from_dict(
            {
                "id": 7,
                "name": "Checking",
                "transactions": [{"date": "2024-01-05", "amount": "-10.00", "description": "Coffee"}],
            }
        )

        assert account.id == 7
        assert account.initial_balance == Decimal("0")
        assert account.transaction_count == 1
        assert account.target_account_id is None
        txn = account.transactions[0]
        assert txn.amount == Decimal("-10.00")
        assert txn.reason == ""
        assert txn.created_at is None

    def test_to_dict_keeps_amounts_exact(self):
        """Test that amounts are written as strings and read back unchanged."""
        account = SyncAccount(
            id=1,
            name="Checking",
            initial_balance=Decimal("0.10"),
            transactions=[
                SyncTransaction(
                    date="2024-01-05",
                    amount=Decimal("0.30"),
                    created_at=datetime(2024, 1, 5, 9, 30, tzinfo=UTC),
                )
            ],
            target_account_id=3,
        )

        data = account.to_dict()
        assert data["initial_balance"] == "0.10"
        assert data["transactions"][0]["amount"] == "0.30"

        restored = SyncAccount.from_dict(data)
        assert restored.target_account_id == 3
        assert restored.transactions[0].amount == Decimal("0.30")
        assert restored.transactions[0].created_at == datetime(2024, 1, 5, 9, 30, tzinfo=UTC)
