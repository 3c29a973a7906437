"""Tests for account synchronization."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal
from pathlib import Path

from moneymind.backup.base import BackupService
from moneymind.cli.main import cli
from moneymind.database.factories import create_sqlite_database
from moneymind.domain.entities import (
    BackupResult,
    SyncAccount,
    SyncAccountResult,
    SyncDirection,
    SyncMode,
    SyncTransaction,
    Transaction,
)
from moneymind.domain.errors import ValidationError
from moneymind.domain.sync import (
    SyncService,
    dump_snapshot,
    filter_newer_than,
    generate_sync_message,
    generate_warning_message,
    is_sync_duplicate,
    latest_transaction_date,
    load_snapshot,
    to_sync_transaction,
    to_transaction_fields,
)

D2M = SyncDirection.DESKTOP_TO_MOBILE
M2D = SyncDirection.MOBILE_TO_DESKTOP


def sync_txn(day, amount="-10.00", description="Coffee", reason=""):
    return SyncTransaction(date=day, amount=Decimal(amount), description=description, reason=reason)


def snapshot(transactions, target=None, name="Desktop Checking", classified=0, account_id=1):
    dates = [t.date for t in transactions]
    return SyncAccount(
        id=account_id,
        name=name,
        initial_balance=Decimal("50.00"),
        icon="🏦",
        color="#112233",
        transaction_count=len(transactions),
        latest_transaction_date=max(dates) if dates else None,
        transactions=list(transactions),
        classified_count=classified,
        target_account_id=target,
    )


def ledger_txn(txn_id, day, description="Coffee", amount="-10.00"):
    return Transaction(
        id=txn_id,
        account_id=1,
        date=date.fromisoformat(day),
        amount=Decimal(amount),
        description=description,
    )


class FailingBackupService(BackupService):
    """Backup service that always fails."""

    def __init__(self):
        self.calls = 0

    def create_backup(self, account_ids=None, reason="manual", direction=None):
        self.calls += 1
        return BackupResult(success=False, error="no space left")

    def list_backups(self):
        return []

    def restore_backup(self, backup_path):
        return False

    def cleanup_old_backups(self, keep_count=5):
        return 0


class RaisingBackupService(FailingBackupService):
    """Backup service whose create_backup raises."""

    def create_backup(self, account_ids=None, reason="manual", direction=None):
        self.calls += 1
        raise OSError("disk full")


class TestHelpers:
    """Tests for sync helper functions."""

    def test_sync_duplicate_ignores_amount_and_reason(self):
        """Test that only day and description are compared."""
        source = sync_txn("2024-01-05", amount="99.00", description=" COFFEE ", reason="other")
        assert is_sync_duplicate(source, ledger_txn(1, "2024-01-05"))

    def test_sync_duplicate_different_day(self):
        """Test that a different day never matches."""
        assert not is_sync_duplicate(sync_txn("2024-01-06"), ledger_txn(1, "2024-01-05"))

    def test_sync_duplicate_unparseable_date(self):
        """Test that a malformed source date never matches."""
        assert not is_sync_duplicate(sync_txn("05/01/2024x"), ledger_txn(1, "2024-01-05"))

    def test_conversion_roundtrip_loses_only_identity(self):
        """Test ledger -> portable -> ledger keeps every field but the id."""
        created = datetime(2024, 1, 5, 10, 0, tzinfo=UTC)
        original = Transaction(
            id=42,
            account_id=1,
            date=date(2024, 1, 5),
            amount=Decimal("-3.50"),
            description="Coffee",
            reason=None,
            created_at=created,
        )

        portable = to_sync_transaction(original)
        assert portable.date == "2024-01-05"
        assert portable.reason == ""

        fields = to_transaction_fields(portable)
        assert fields == {
            "date": date(2024, 1, 5),
            "amount": Decimal("-3.50"),
            "description": "Coffee",
            "reason": None,
            "created_at": created,
            "modified_at": None,
        }

    def test_to_transaction_fields_defaults_created_at(self):
        """Test that a missing creation time is set to now."""
        fields = to_transaction_fields(sync_txn("2024-01-05"))
        assert isinstance(fields["created_at"], datetime)

    def test_to_transaction_fields_invalid_date(self):
        """Test that a malformed date is rejected."""
        with pytest.raises(ValidationError):
            to_transaction_fields(sync_txn("not a date"))

    def test_latest_transaction_date(self):
        """Test max day over a list, None when empty."""
        assert latest_transaction_date([]) is None
        transactions = [ledger_txn(1, "2024-01-05"), ledger_txn(2, "2024-03-01"), ledger_txn(3, "2024-02-01")]
        assert latest_transaction_date(transactions) == date(2024, 3, 1)

    def test_filter_newer_than(self):
        """Test strict cutoff and exclusion of malformed dates."""
        transactions = [sync_txn("2024-01-05"), sync_txn("2024-01-06"), sync_txn("garbage"), sync_txn("2024-01-07")]

        newer = filter_newer_than(transactions, date(2024, 1, 6))

        assert [t.date for t in newer] == ["2024-01-07"]

    def test_filter_newer_than_without_cutoff(self):
        """Test that everything passes without a cutoff."""
        transactions = [sync_txn("2024-01-05"), sync_txn("garbage")]
        assert filter_newer_than(transactions, None) == transactions

    def test_warning_destination_newer(self):
        """Test one warning with both dates when the destination is newer."""
        warning = generate_warning_message(10, "2024-01-05", 10, "2024-02-10")

        assert warning is not None
        assert ". " not in warning
        assert "05/01/2024" in warning
        assert "10/02/2024" in warning

    def test_warning_destination_has_more(self):
        """Test the count warning."""
        assert generate_warning_message(3, "2024-01-05", 5, "2024-01-05") == "Destination has 2 more transactions"

    def test_warnings_joined(self):
        """Test that multiple warnings are joined with '. '."""
        warning = generate_warning_message(3, "2024-01-05", 5, "2024-01-06")
        assert warning.startswith("Destination has 2 more transactions. Destination has newer data")

    @pytest.mark.parametrize(
        "source_latest,dest_latest",
        [("2024-01-05", "2024-01-05"), ("2024-02-01", "2024-01-05"), (None, "2024-01-05"), ("bad", "2024-01-05")],
    )
    def test_no_warning(self, source_latest, dest_latest):
        """Test no warning when the destination is not ahead."""
        assert generate_warning_message(3, source_latest, 3, dest_latest) is None

    def test_sync_message(self):
        """Test summary messages per mode."""
        results = [
            SyncAccountResult(account_id=1, account_name="A", status="merged", new_only_added=3, duplicates_skipped=2),
            SyncAccountResult(account_id=2, account_name="B", status="error", error_message="boom"),
        ]

        assert generate_sync_message(SyncMode.MERGE, results) == "Merged 3 transactions, 2 duplicates skipped (1 errors)"
        assert generate_sync_message(SyncMode.REPLACE, results).startswith("Replaced transactions in 1/2 accounts")


class TestExport:
    """Tests for exporting accounts."""

    def test_export_account_statistics(self, sync_service, sample_account, add_transaction, temp_db):
        """Test snapshot counts, dates and classification stats."""
        add_transaction(sample_account.id, "2024-01-07", "-3.50", "Coffee", category="Food")
        add_transaction(sample_account.id, "2024-01-05", "-20.00", "Groceries", reason="POS", category="food ")
        add_transaction(sample_account.id, "2024-01-06", "1000.00", "Salary")

        account = sync_service.export_account(sample_account.id, target_account_id=9)

        assert account.id == sample_account.id
        assert account.name == "Test Account"
        assert account.initial_balance == Decimal("100.00")
        assert account.transaction_count == 3
        assert account.latest_transaction_date == "2024-01-07"
        assert [t.date for t in account.transactions] == ["2024-01-05", "2024-01-06", "2024-01-07"]
        assert account.transactions[0].reason == "POS"
        assert account.classified_count == 2
        assert account.unique_category_count == 1
        assert account.target_account_id == 9

    def test_export_empty_account(self, sync_service, sample_account):
        """Test an account without transactions."""
        account = sync_service.export_account(sample_account.id)
        assert account.transaction_count == 0
        assert account.latest_transaction_date is None
        assert account.latest_modified_at is None

    def test_export_accounts_all(self, sync_service, account_service, sample_account):
        """Test exporting every account."""
        account_service.create_account(name="Savings")
        assert sorted(a.name for a in sync_service.export_accounts()) == ["Savings", "Test Account"]

    def test_snapshot_file_roundtrip(self, sync_service, sample_account, add_transaction, tmp_path):
        """Test writing and reading a snapshot file."""
        add_transaction(sample_account.id, "2024-01-05", "-3.50", "Caffè")
        path = tmp_path / "snapshot.json"

        dump_snapshot(sync_service.export_accounts(), path)
        accounts = load_snapshot(path)

        assert len(accounts) == 1
        assert accounts[0].transactions[0].description == "Caffè"
        assert accounts[0].transactions[0].amount == Decimal("-3.50")

    @pytest.mark.parametrize("content", ["not json", "[]", '{"accounts": [{"name": "no id"}]}'])
    def test_invalid_snapshot(self, tmp_path, content):
        """Test malformed snapshot files are rejected."""
        path = tmp_path / "snapshot.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValidationError):
            load_snapshot(path)


class TestPrepare:
    """Tests for SyncService.prepare."""

    def test_destination_newer_warning(self, sync_service, sample_account, add_transaction):
        """Test a later destination date produces one warning with both dates."""
        add_transaction(sample_account.id, "2024-02-10", "-3.50", "Coffee")
        source = snapshot([sync_txn("2024-01-04"), sync_txn("2024-01-05")], target=sample_account.id)

        response = sync_service.prepare(D2M, SyncMode.MERGE, [source])

        assert response.success
        comparison = response.comparisons[0]
        assert comparison.has_warning
        assert "05/01/2024" in comparison.warning_message
        assert "10/02/2024" in comparison.warning_message
        assert comparison.source_transaction_count == 2
        assert comparison.dest_transaction_count == 1
        assert comparison.dest_latest_date == "2024-02-10"
        assert response.requires_confirmation

    def test_no_warning_no_confirmation(self, sync_service, sample_account, add_transaction):
        """Test that a non-destructive sync without warnings needs no confirmation."""
        add_transaction(sample_account.id, "2024-01-01", "-3.50", "Coffee")
        source = snapshot([sync_txn("2024-01-05")], target=sample_account.id)

        response = sync_service.prepare(D2M, SyncMode.MERGE, [source])

        assert response.success
        assert not response.comparisons[0].has_warning
        assert not response.requires_confirmation

    def test_replace_requires_confirmation(self, sync_service, sample_account):
        """Test that destructive modes always need confirmation."""
        source = snapshot([sync_txn("2024-01-05")], target=sample_account.id)

        response = sync_service.prepare(D2M, SyncMode.REPLACE, [source])

        assert not response.comparisons[0].has_warning
        assert response.requires_confirmation

    def test_missing_destination(self, sync_service):
        """Test unmapped or unknown targets compare against an empty ledger."""
        response = sync_service.prepare(
            D2M,
            SyncMode.CREATE_NEW,
            [snapshot([sync_txn("2024-01-05")]), snapshot([sync_txn("2024-01-05")], target=404)],
        )

        assert response.success
        for comparison in response.comparisons:
            assert comparison.dest_transaction_count == 0
            assert comparison.dest_latest_date is None

    def test_classification_warning(self, sync_service, sample_account):
        """Test replacing classified data from mobile is flagged."""
        sources = [
            snapshot([sync_txn("2024-01-05")], target=sample_account.id, classified=4),
            snapshot([sync_txn("2024-01-05")], target=None, classified=2, account_id=2, name="Savings"),
        ]

        response = sync_service.prepare(M2D, SyncMode.REPLACE, sources)

        assert response.has_classification_warning
        assert response.total_classified_transactions == 6
        assert response.comparisons[0].has_warning
        assert "4 classified transactions" in response.comparisons[0].warning_message
        assert response.comparisons[0].dest_classified_count == 4

    def test_no_classification_warning_for_merge(self, sync_service, sample_account):
        """Test that non-destructive modes do not flag classifications."""
        source = snapshot([sync_txn("2024-01-05")], target=sample_account.id, classified=4)

        response = sync_service.prepare(M2D, SyncMode.MERGE, [source])

        assert not response.has_classification_warning
        assert response.total_classified_transactions == 0

    def test_backup_taken(self, sync_service, sample_account, backup_dir):
        """Test that prepare backs up the ledger first."""
        response = sync_service.prepare(D2M, SyncMode.MERGE, [snapshot([], target=sample_account.id)])

        assert response.backup_created
        assert response.backup_path.startswith(str(backup_dir))

    def test_backup_failure_is_not_fatal(self, temp_db, sample_account):
        """Test that a failed backup is reported but prepare succeeds."""
        service = SyncService(temp_db, FailingBackupService())

        response = service.prepare(D2M, SyncMode.MERGE, [snapshot([], target=sample_account.id)])

        assert response.success
        assert not response.backup_created
        assert response.backup_path is None

    def test_raising_backup_is_not_fatal(self, temp_db, sample_account, add_transaction):
        """Test that a backup service that raises does not stop the comparison."""
        add_transaction(sample_account.id, "2024-01-05", "-3.50", "Coffee")
        service = SyncService(temp_db, RaisingBackupService())

        response = service.prepare(D2M, SyncMode.MERGE, [snapshot([sync_txn("2024-01-05")], target=sample_account.id)])

        assert response.success
        assert response.error is None
        assert not response.backup_created
        assert response.backup_path is None
        assert len(response.comparisons) == 1
        assert response.comparisons[0].dest_transaction_count == 1

    def test_errors_reported(self, temp_db):
        """Test unexpected errors become success=False."""

        class BrokenDatabase:
            database_path = None

            def get_account(self, account_id):
                raise RuntimeError("database is locked")

        service = SyncService(BrokenDatabase(), FailingBackupService())

        response = service.prepare(D2M, SyncMode.MERGE, [snapshot([], target=1)])

        assert not response.success
        assert response.error == "database is locked"


class TestExecute:
    """Tests for SyncService.execute."""

    def test_merge_counts(self, sync_service, temp_db, sample_account, add_transaction):
        """Test merge skips day+description duplicates and adds the rest."""
        add_transaction(sample_account.id, "2024-01-05", "-3.50", "Coffee")
        add_transaction(sample_account.id, "2024-01-06", "-20.00", "Groceries")
        dest_before = 2
        source = snapshot(
            [
                sync_txn("2024-01-05", amount="-4.00", description="coffee"),
                sync_txn("2024-01-06", description="Groceries "),
                sync_txn("2024-01-06", description="Bakery"),
                sync_txn("2024-01-07", description="Coffee"),
            ],
            target=sample_account.id,
        )

        response = sync_service.execute(D2M, SyncMode.MERGE, False, [source])

        assert response.success
        result = response.results[0]
        assert result.status == "merged"
        assert result.duplicates_skipped == 2
        assert result.new_only_added == 2
        assert result.duplicates_skipped + result.new_only_added == len(source.transactions)
        assert result.previous_transaction_count == dest_before
        assert result.new_transaction_count == dest_before + len(source.transactions) - result.duplicates_skipped
        assert temp_db.get_account_transaction_count(sample_account.id) == result.new_transaction_count
        assert response.total_duplicates_skipped == 2
        assert response.total_new_added == 2
        assert response.message == "Merged 2 transactions, 2 duplicates skipped"

    def test_merge_does_not_match_within_source(self, sync_service, temp_db, sample_account):
        """Test that source rows are only checked against pre-existing rows."""
        source = snapshot([sync_txn("2024-01-05"), sync_txn("2024-01-05")], target=sample_account.id)

        response = sync_service.execute(D2M, SyncMode.MERGE, False, [source])

        assert response.results[0].new_only_added == 2
        assert temp_db.get_account_transaction_count(sample_account.id) == 2

    def test_new_only(self, sync_service, temp_db, sample_account, add_transaction):
        """Test only transactions after the destination's latest day are added."""
        add_transaction(sample_account.id, "2024-01-05", "-3.50", "Coffee")
        source = snapshot(
            [
                sync_txn("2024-01-04", description="Old"),
                sync_txn("2024-01-05", description="Same day"),
                sync_txn("2024-01-06", description="New"),
                sync_txn("garbage", description="Broken"),
            ],
            target=sample_account.id,
        )

        response = sync_service.execute(D2M, SyncMode.NEW_ONLY, False, [source])

        result = response.results[0]
        assert result.status == "new_only"
        assert result.new_only_added == 1
        assert result.new_transaction_count == 2
        inserted = [t for t in temp_db.list_transactions(account_id=sample_account.id) if t.description != "Coffee"]
        assert [t.description for t in inserted] == ["New"]
        assert all(t.date > date(2024, 1, 5) for t in inserted)
        assert response.message == "Added 1 new transactions"

    def test_new_only_empty_destination(self, sync_service, temp_db, sample_account):
        """Test every source transaction is added to an empty destination."""
        source = snapshot([sync_txn("2024-01-04"), sync_txn("2024-01-06")], target=sample_account.id)

        response = sync_service.execute(D2M, SyncMode.NEW_ONLY, False, [source])

        assert response.results[0].new_only_added == 2
        assert temp_db.get_account_transaction_count(sample_account.id) == 2

    def test_replace(self, sync_service, temp_db, sample_account, add_transaction):
        """Test destination ends up with exactly the source transactions."""
        for d in range(1, 4):
            add_transaction(sample_account.id, f"2024-01-0{d}", "-1.00", "Old")
        source = snapshot(
            [sync_txn("2024-02-01", description="New 1", reason="POS"), sync_txn("2024-02-02", description="New 2")],
            target=sample_account.id,
        )

        response = sync_service.execute(D2M, SyncMode.REPLACE, True, [source])

        result = response.results[0]
        assert result.status == "replaced"
        assert result.previous_transaction_count == 3
        assert result.new_transaction_count == 2
        remaining = temp_db.list_transactions(account_id=sample_account.id)
        assert len(remaining) == len(source.transactions)
        assert sorted(t.description for t in remaining) == ["New 1", "New 2"]
        assert {t.reason for t in remaining} == {"POS", None}

    def test_failed_replace_keeps_destination(self, sync_service, temp_db, sample_account, add_transaction):
        """Test a replace that fails midway leaves the old transactions untouched."""
        for d in range(1, 4):
            add_transaction(sample_account.id, f"2024-01-0{d}", "-1.00", "Old")
        source = snapshot(
            [sync_txn("2024-02-01", description="New 1"), SyncTransaction(date="2024-02-02", amount=None)],
            target=sample_account.id,
        )

        response = sync_service.execute(D2M, SyncMode.REPLACE, True, [source])

        assert response.results[0].status == "error"
        remaining = temp_db.list_transactions(account_id=sample_account.id)
        assert len(remaining) == 3
        assert {t.description for t in remaining} == {"Old"}

    def test_replace_requires_confirmation(self, sync_service, temp_db, sample_account, add_transaction):
        """Test an unconfirmed destructive sync changes nothing."""
        add_transaction(sample_account.id, "2024-01-05", "-3.50", "Coffee")
        source = snapshot([], target=sample_account.id)

        response = sync_service.execute(D2M, SyncMode.REPLACE, False, [source])

        assert not response.success
        assert "Confirmation required" in response.error
        assert response.results == []
        assert not response.backup_created
        assert temp_db.get_account_transaction_count(sample_account.id) == 1

    def test_create_new(self, sync_service, temp_db, sample_account):
        """Test a new account is created from the snapshot metadata."""
        source = snapshot([sync_txn("2024-01-05"), sync_txn("2024-01-06")], target=sample_account.id, name="Imported")

        response = sync_service.execute(D2M, SyncMode.CREATE_NEW, False, [source])

        result = response.results[0]
        assert result.status == "created"
        assert result.target_account_id != sample_account.id
        account = temp_db.get_account(result.target_account_id)
        assert account.name == "Imported"
        assert account.initial_balance == Decimal("50.00")
        assert account.icon == "🏦"
        assert account.color == "#112233"
        assert temp_db.get_account_transaction_count(account.id) == 2
        assert temp_db.get_account_transaction_count(sample_account.id) == 0

    def test_unmapped_account_is_created(self, sync_service, temp_db):
        """Test that a missing target creates the account in any mode."""
        source = snapshot([sync_txn("2024-01-05")], target=None, name="Fresh")

        response = sync_service.execute(D2M, SyncMode.MERGE, False, [source])

        assert response.results[0].status == "created"
        assert [a.name for a in temp_db.list_accounts()] == ["Fresh"]

    def test_per_account_errors_are_isolated(self, sync_service, temp_db, sample_account):
        """Test that one failing account does not stop the others."""
        sources = [
            snapshot([sync_txn("2024-01-05")], target=404, name="Missing"),
            snapshot([sync_txn("not a date")], target=sample_account.id, name="Broken", account_id=2),
            snapshot([sync_txn("2024-01-05")], target=sample_account.id, name="Good", account_id=3),
        ]

        response = sync_service.execute(D2M, SyncMode.MERGE, False, sources)

        assert response.success
        statuses = [r.status for r in response.results]
        assert statuses == ["error", "error", "merged"]
        assert response.results[0].error_message == "Target account ID=404 not found"
        assert "not a date" in response.results[1].error_message
        assert temp_db.get_account_transaction_count(sample_account.id) == 1
        assert response.total_transactions_processed == 1
        assert response.message.endswith("(2 errors)")

    def test_backup_taken_before_mutation(self, sync_service, temp_db, sample_account, add_transaction):
        """Test the backup holds the ledger as it was before the sync."""
        add_transaction(sample_account.id, "2024-01-05", "-3.50", "Coffee")
        source = snapshot([], target=sample_account.id)

        response = sync_service.execute(D2M, SyncMode.REPLACE, True, [source])

        assert response.backup_created
        assert temp_db.get_account_transaction_count(sample_account.id) == 0

        backup_file = next(Path(response.backup_path).glob("*.db"))
        backup_db = create_sqlite_database(database_path=str(backup_file))
        try:
            assert backup_db.get_account_transaction_count(sample_account.id) == 1
        finally:
            backup_db.disconnect()

    def test_backup_failure_is_not_fatal(self, temp_db, sample_account):
        """Test that execute proceeds without a backup but reports it."""
        backup = FailingBackupService()
        service = SyncService(temp_db, backup)

        response = service.execute(D2M, SyncMode.MERGE, False, [snapshot([sync_txn("2024-01-05")], target=sample_account.id)])

        assert response.success
        assert backup.calls == 1
        assert not response.backup_created
        assert temp_db.get_account_transaction_count(sample_account.id) == 1

    def test_raising_backup_is_not_fatal(self, temp_db, sample_account):
        """Test that execute still syncs when the backup service raises."""
        backup = RaisingBackupService()
        service = SyncService(temp_db, backup)

        response = service.execute(D2M, SyncMode.MERGE, False, [snapshot([sync_txn("2024-01-05")], target=sample_account.id)])

        assert response.success
        assert backup.calls == 1
        assert not response.backup_created
        assert [r.status for r in response.results] == ["merged"]
        assert temp_db.get_account_transaction_count(sample_account.id) == 1


def test_sync_cli_roundtrip(cli_runner, tmp_path):
    """Test exporting from one ledger and merging into another."""
    desktop = str(tmp_path / "desktop.db")
    mobile = str(tmp_path / "mobile.db")
    snapshot_file = str(tmp_path / "snapshot.json")
    backups = str(tmp_path / "backups")

    def run(db_path, *args, **kwargs):
        return cli_runner.invoke(cli, ["--db-path", db_path, "--backup-dir", backups, *args], **kwargs)

    assert run(desktop, "account", "create", "Checking").exit_code == 0
    assert run(mobile, "account", "create", "Phone").exit_code == 0
    for day, desc in (("2024-01-05", "Coffee"), ("2024-01-06", "Rent")):
        result = run(desktop, "add", "--account", "Checking", "--date", day, "--amount", "-5", "--description", desc)
        assert result.exit_code == 0
    result = run(mobile, "add", "--account", "Phone", "--date", "2024-01-05", "--amount", "-5", "--description", "coffee")
    assert result.exit_code == 0

    result = run(desktop, "sync", "export", "Checking", "--output", snapshot_file, "--target", "1")
    assert result.exit_code == 0
    assert "Exported 1 account(s), 2 transaction(s)" in result.output

    result = run(mobile, "sync", "prepare", snapshot_file, "--mode", "merge")
    assert result.exit_code == 0
    assert "Backup created:" in result.output
    assert "Checking" in result.output

    result = run(mobile, "sync", "execute", snapshot_file, "--mode", "merge")
    assert result.exit_code == 0
    assert "Merged 1 transactions, 1 duplicates skipped" in result.output

    result = run(mobile, "transaction", "list")
    assert "Found 2 transaction(s)" in result.output


def test_sync_cli_replace_declined(cli_runner, temp_db, sample_account, add_transaction, sync_service, tmp_path):
    """Test that declining the replace prompt leaves the ledger alone."""
    add_transaction(sample_account.id, "2024-01-05", "-3.50", "Coffee")
    snapshot_file = tmp_path / "snapshot.json"
    dump_snapshot([snapshot([], target=sample_account.id)], snapshot_file)

    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "--backup-dir", str(tmp_path / "b"),
         "sync", "execute", str(snapshot_file), "--mode", "replace"],
        input="n\n",
    )

    assert result.exit_code == 0
    assert "Sync cancelled." in result.output
    assert temp_db.get_account_transaction_count(sample_account.id) == 1


def test_sync_cli_export_target_needs_single_account(cli_runner, temp_db, tmp_path):
    """Test --target is refused for multiple accounts."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "sync", "export", "A", "B",
         "--output", str(tmp_path / "s.json"), "--target", "1"],
    )

    assert result.exit_code == 1
    assert "--target requires exactly one account" in result.output
