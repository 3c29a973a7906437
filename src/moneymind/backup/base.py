"""Abstract backup service interface."""

from abc import ABC, abstractmethod
from typing import Optional

from moneymind.domain.entities import BackupInfo, BackupResult


class BackupService(ABC):
    """Takes recoverable snapshots of the ledger before it is mutated.

    ``create_backup`` must report failures through ``BackupResult`` rather
    than raise, so callers can carry on and warn the user.
    """

    @abstractmethod
    def create_backup(
        self,
        account_ids: Optional[list[int]] = None,
        reason: str = "manual",
        direction: Optional[str] = None,
    ) -> BackupResult:
        """Snapshot the ledger. ``account_ids=None`` covers every account."""
        pass

    @abstractmethod
    def list_backups(self) -> list[BackupInfo]:
        """List available backups, newest first."""
        pass

    @abstractmethod
    def restore_backup(self, backup_path: str) -> bool:
        """Restore the ledger from a backup. Returns True on success."""
        pass

    @abstractmethod
    def cleanup_old_backups(self, keep_count: int = 5) -> int:
        """Delete all but the newest ``keep_count`` backups. Returns the number deleted."""
        pass
