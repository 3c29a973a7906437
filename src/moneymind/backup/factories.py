"""Backup service factory functions."""

import os
from pathlib import Path
from typing import Optional

from moneymind.backup.file_backup import FileBackupService
from moneymind.database.base import Database
from moneymind.database.factories import DEFAULT_DATA_DIR


def create_backup_service(db: Database, backup_dir: Optional[str] = None) -> FileBackupService:
    """Create a file backup service for a ledger.

    Args:
        db: Ledger to back up
        backup_dir: Backup directory. If None, checks MONEYMIND_BACKUP_DIR
            environment variable, then defaults to a ``backups`` folder next
            to the database file (or ~/.moneymind/backups)

    Returns:
        FileBackupService instance
    """
    if backup_dir is None:
        backup_dir = os.environ.get("MONEYMIND_BACKUP_DIR")

    if backup_dir is None:
        if db.database_path:
            backup_dir = str(Path(db.database_path).parent / "backups")
        else:
            backup_dir = str(DEFAULT_DATA_DIR / "backups")

    return FileBackupService(db, backup_dir)
