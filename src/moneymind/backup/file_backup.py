"""File-copy backup of the SQLite ledger.

Each backup is a folder ``moneymind_backup_<timestamp>`` holding a copy of
the database file and a ``backup_info.json`` manifest.
"""

import json
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from moneymind import __version__
from moneymind.backup.base import BackupService
from moneymind.database.base import Database
from moneymind.domain.entities import BackupAccountInfo, BackupInfo, BackupResult
from moneymind.utils.date_parser import format_iso_date
from moneymind.utils.logger import get_logger

logger = get_logger(__name__)

BACKUP_FOLDER_PREFIX = "moneymind_backup_"
MANIFEST_NAME = "backup_info.json"


class FileBackupService(BackupService):
    """Backup service that copies the ledger database file."""

    def __init__(self, db: Database, backup_dir: str | Path):
        """Initialize file backup service.

        Args:
            db: Ledger whose database file is backed up
            backup_dir: Directory that holds the backup folders
        """
        self.db = db
        self.backup_dir = Path(backup_dir)

    def create_backup(
        self,
        account_ids: Optional[list[int]] = None,
        reason: str = "manual",
        direction: Optional[str] = None,
    ) -> BackupResult:
        result = BackupResult()

        try:
            source = self._ledger_file()

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            backup_folder = self.backup_dir / f"{BACKUP_FOLDER_PREFIX}{timestamp}"
            backup_folder.mkdir(parents=True, exist_ok=False)
            logger.info(f"Creating backup in: {backup_folder}")

            destination = backup_folder / source.name
            shutil.copy2(source, destination)
            result.files_backed_up.append(source.name)
            result.total_size_bytes += destination.stat().st_size

            info = BackupInfo(
                created_at=datetime.now(),
                reason=reason,
                path=str(backup_folder),
                sync_direction=direction,
                accounts_backed_up=tuple(self._account_infos(account_ids)),
                app_version=__version__,
            )
            (backup_folder / MANIFEST_NAME).write_text(
                json.dumps(_info_to_dict(info), indent=2), encoding="utf-8"
            )

            result.success = True
            result.path = str(backup_folder)
            logger.info(
                f"Backup created successfully: {len(result.files_backed_up)} files, "
                f"{result.total_size_bytes / 1024.0:.1f} KB"
            )
        except Exception as e:
            logger.exception("Error creating backup")
            result.success = False
            result.error = str(e)

        return result

    def list_backups(self) -> list[BackupInfo]:
        backups: list[BackupInfo] = []
        for folder in self._backup_folders():
            manifest = folder / MANIFEST_NAME
            if not manifest.is_file():
                continue
            try:
                data = json.loads(manifest.read_text(encoding="utf-8"))
                backups.append(_info_from_dict(data, folder))
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Skipping unreadable backup manifest {manifest}: {e}")
        return backups

    def restore_backup(self, backup_path: str) -> bool:
        folder = Path(backup_path)
        if not folder.is_dir():
            logger.error(f"Backup path not found: {backup_path}")
            return False

        try:
            target = self._ledger_file(must_exist=False)
            candidates = sorted(folder.glob("*.db"))
            if not candidates:
                logger.error(f"No database file in backup: {backup_path}")
                return False

            # Drop open connections before the file is replaced
            self.db.disconnect()
            shutil.copy2(candidates[0], target)
            logger.info(f"Backup restored from: {backup_path}")
            return True
        except Exception:
            logger.exception("Error restoring backup")
            return False

    def cleanup_old_backups(self, keep_count: int = 5) -> int:
        deleted_count = 0
        for folder in self._backup_folders()[max(keep_count, 0):]:
            try:
                shutil.rmtree(folder)
            except OSError:
                logger.exception(f"Error deleting old backup {folder.name}")
                continue
            deleted_count += 1
            logger.info(f"Deleted old backup: {folder.name}")
        return deleted_count

    def _ledger_file(self, must_exist: bool = True) -> Path:
        if not self.db.database_path:
            raise FileNotFoundError("Ledger has no database file to back up")
        path = Path(self.db.database_path)
        if must_exist and not path.is_file():
            raise FileNotFoundError(f"Ledger database file not found: {path}")
        return path

    def _backup_folders(self) -> list[Path]:
        """Backup folders, newest first (timestamps sort lexically)."""
        if not self.backup_dir.is_dir():
            return []
        folders = [
            p for p in self.backup_dir.iterdir()
            if p.is_dir() and p.name.startswith(BACKUP_FOLDER_PREFIX)
        ]
        return sorted(folders, key=lambda p: p.name, reverse=True)

    def _account_infos(self, account_ids: Optional[list[int]]) -> list[BackupAccountInfo]:
        if account_ids is None:
            accounts = self.db.list_accounts()
        else:
            accounts = [a for a in (self.db.get_account(i) for i in account_ids) if a is not None]

        infos = []
        for account in accounts:
            transactions = self.db.list_transactions(account_id=account.id)
            latest = max((t.date for t in transactions), default=None)
            infos.append(
                BackupAccountInfo(
                    id=account.id,
                    name=account.name,
                    transaction_count=len(transactions),
                    latest_transaction=format_iso_date(latest),
                )
            )
        return infos


def _info_to_dict(info: BackupInfo) -> dict[str, Any]:
    return {
        "created_at": info.created_at.isoformat(),
        "reason": info.reason,
        "sync_direction": info.sync_direction,
        "accounts_backed_up": [
            {
                "id": a.id,
                "name": a.name,
                "transaction_count": a.transaction_count,
                "latest_transaction": a.latest_transaction,
            }
            for a in info.accounts_backed_up
        ],
        "app_version": info.app_version,
    }


def _info_from_dict(data: dict[str, Any], folder: Path) -> BackupInfo:
    return BackupInfo(
        created_at=datetime.fromisoformat(data["created_at"]),
        reason=data.get("reason", ""),
        path=str(folder),
        sync_direction=data.get("sync_direction"),
        accounts_backed_up=tuple(
            BackupAccountInfo(
                id=int(a["id"]),
                name=a.get("name", ""),
                transaction_count=int(a.get("transaction_count", 0)),
                latest_transaction=a.get("latest_transaction"),
            )
            for a in data.get("accounts_backed_up", [])
        ),
        app_version=data.get("app_version", ""),
    )
