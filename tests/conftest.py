"""Shared pytest fixtures for moneymind tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from moneymind.backup.file_backup import FileBackupService
from moneymind.database.factories import create_sqlite_database
from moneymind.domain.account import AccountService
from moneymind.domain.duplicates import DuplicateDetectionService
from moneymind.domain.sync import SyncService
from moneymind.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def duplicate_service(temp_db):
    """Create a DuplicateDetectionService with a temporary database."""
    return DuplicateDetectionService(temp_db)


@pytest.fixture
def backup_dir(tmp_path):
    """Directory receiving backups."""
    return tmp_path / "backups"


@pytest.fixture
def backup_service(temp_db, backup_dir):
    """Create a FileBackupService writing to a temporary directory."""
    return FileBackupService(temp_db, backup_dir)


@pytest.fixture
def sync_service(temp_db, backup_service):
    """Create a SyncService with a temporary database."""
    return SyncService(temp_db, backup_service)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    account_id = account_service.create_account(name="Test Account", initial_balance=Decimal("100.00"))
    return account_service.get_account(account_id)


@pytest.fixture
def add_transaction(temp_db):
    """Insert a transaction directly into the ledger and return its ID."""

    def _add(account_id, day, amount, description, reason=None, category=None):
        return temp_db.create_transaction(
            account_id=account_id,
            date=day if isinstance(day, date) else date.fromisoformat(day),
            amount=Decimal(amount),
            description=description,
            reason=reason,
            category=category,
        )

    return _add


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
