"""Ledger backup services."""

from moneymind.backup.base import BackupService
from moneymind.backup.file_backup import FileBackupService
from moneymind.backup.factories import create_backup_service

__all__ = ["BackupService", "FileBackupService", "create_backup_service"]
