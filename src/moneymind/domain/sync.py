"""Account synchronization between two ledgers.

The local ledger is always the destination: a snapshot exported from the
other device (see ``export_accounts``) is compared against it in
``prepare`` and applied to it in ``execute``. The destination is backed up
before anything is mutated.

Merge mode uses a coarser duplicate rule than in-ledger duplicate
detection: only the day and the description are compared, amount and
reason are ignored.
"""

import json
from datetime import date, datetime, UTC
from pathlib import Path
from typing import Any, Optional

from moneymind import __version__
from moneymind.backup.base import BackupService
from moneymind.database.base import Database
from moneymind.domain.account import AccountService
from moneymind.domain.entities import (
    SyncAccount,
    SyncAccountResult,
    SyncComparison,
    SyncDirection,
    SyncExecuteResponse,
    SyncMode,
    SyncPrepareResponse,
    SyncTransaction,
    Transaction,
)
from moneymind.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    confirmation_required,
    target_account_not_found,
)
from moneymind.utils.date_parser import (
    format_display_date,
    format_iso_date,
    parse_iso_date,
    to_day,
)
from moneymind.utils.logger import get_logger

logger = get_logger(__name__)

SNAPSHOT_VERSION = 1

STATUS_REPLACED = "replaced"
STATUS_MERGED = "merged"
STATUS_NEW_ONLY = "new_only"
STATUS_CREATED = "created"
STATUS_ERROR = "error"


def is_sync_duplicate(source: SyncTransaction, dest: Transaction) -> bool:
    """Return True if a snapshot transaction already exists in the destination.

    Matches on calendar day and on description (trimmed, case-insensitive).
    An unparseable source date never matches.
    """
    source_day = parse_iso_date(source.date)
    if source_day is None:
        return False

    if source_day != to_day(dest.date):
        return False

    return (source.description or "").strip().casefold() == (dest.description or "").strip().casefold()


def to_sync_transaction(transaction: Transaction) -> SyncTransaction:
    """Convert a ledger transaction to its portable form (id is dropped)."""
    return SyncTransaction(
        date=format_iso_date(transaction.date),
        amount=transaction.amount,
        description=transaction.description,
        reason=transaction.reason or "",
        created_at=transaction.created_at,
        modified_at=transaction.modified_at,
    )


def to_transaction_fields(sync_transaction: SyncTransaction) -> dict[str, Any]:
    """Convert a portable transaction to ``Database.create_transaction`` keyword arguments.

    Raises:
        ValidationError: If the date is not a valid ISO date
    """
    day = parse_iso_date(sync_transaction.date)
    if day is None:
        raise ValidationError(f"Invalid transaction date '{sync_transaction.date}'")

    return {
        "date": day,
        "amount": sync_transaction.amount,
        "description": sync_transaction.description or "",
        "reason": sync_transaction.reason or None,
        "created_at": sync_transaction.created_at or datetime.now(UTC),
        "modified_at": sync_transaction.modified_at,
    }


def latest_transaction_date(transactions: list[Transaction]) -> Optional[date]:
    """Latest calendar day over a list of transactions, or None if empty."""
    if not transactions:
        return None
    return max(to_day(t.date) for t in transactions)


def filter_newer_than(
    transactions: list[SyncTransaction], cutoff: Optional[date]
) -> list[SyncTransaction]:
    """Keep transactions dated strictly after ``cutoff``.

    Without a cutoff everything passes. With one, unparseable dates are
    dropped.
    """
    if cutoff is None:
        return list(transactions)

    newer = []
    for txn in transactions:
        day = parse_iso_date(txn.date)
        if day is not None and day > cutoff:
            newer.append(txn)
    return newer


def generate_warning_message(
    source_count: int,
    source_latest_date: Optional[str],
    dest_count: int,
    dest_latest_date: Optional[str],
) -> Optional[str]:
    """Describe what the destination would lose, or None if nothing."""
    warnings = []

    if dest_count > source_count:
        warnings.append(f"Destination has {dest_count - source_count} more transactions")

    source_day = parse_iso_date(source_latest_date)
    dest_day = parse_iso_date(dest_latest_date)
    if source_day is not None and dest_day is not None and dest_day > source_day:
        warnings.append(
            f"Destination has newer data ({format_display_date(dest_day)} "
            f"vs {format_display_date(source_day)})"
        )

    return ". ".join(warnings) if warnings else None


def generate_sync_message(mode: SyncMode, results: list[SyncAccountResult]) -> str:
    """Human-readable summary of an executed sync."""
    total_accounts = len(results)
    error_count = sum(1 for r in results if r.status == STATUS_ERROR)
    success_count = total_accounts - error_count

    if mode == SyncMode.REPLACE:
        message = f"Replaced transactions in {success_count}/{total_accounts} accounts"
    elif mode == SyncMode.MERGE:
        merged = sum(r.new_only_added for r in results)
        skipped = sum(r.duplicates_skipped for r in results)
        message = f"Merged {merged} transactions, {skipped} duplicates skipped"
    elif mode == SyncMode.NEW_ONLY:
        message = f"Added {sum(r.new_only_added for r in results)} new transactions"
    else:
        created = sum(1 for r in results if r.status == STATUS_CREATED)
        message = f"Created {created}/{total_accounts} accounts"

    if error_count > 0:
        message += f" ({error_count} errors)"

    return message


def dump_snapshot(accounts: list[SyncAccount], path: str | Path) -> None:
    """Write accounts to a JSON snapshot file."""
    payload = {
        "version": SNAPSHOT_VERSION,
        "app_version": __version__,
        "exported_at": datetime.now(UTC).isoformat(),
        "accounts": [a.to_dict() for a in accounts],
    }
    Path(path).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def load_snapshot(path: str | Path) -> list[SyncAccount]:
    """Read accounts from a JSON snapshot file.

    Raises:
        ValidationError: If the file is not a valid snapshot
    """
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid snapshot file '{path}': {e}")

    if not isinstance(payload, dict) or not isinstance(payload.get("accounts"), list):
        raise ValidationError(f"Invalid snapshot file '{path}': missing accounts list")

    try:
        return [SyncAccount.from_dict(a) for a in payload["accounts"]]
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise ValidationError(f"Invalid snapshot file '{path}': {e}")


class SyncService:
    """Service for exporting, comparing and applying ledger snapshots."""

    def __init__(self, db: Database, backup_service: BackupService):
        """Initialize sync service.

        Args:
            db: Destination ledger
            backup_service: Backup taken before the ledger is touched
        """
        self.db = db
        self.backup_service = backup_service

    def export_account(self, account_id: int, target_account_id: Optional[int] = None) -> SyncAccount:
        """Build a portable snapshot of one local account.

        Args:
            account_id: Local account to export
            target_account_id: Account on the other ledger that the snapshot
                should be applied to (None to create a new one there)

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        transactions = sorted(
            self.db.list_transactions(account_id=account_id),
            key=lambda t: (to_day(t.date), t.id),
        )
        modified = [t.modified_at for t in transactions if t.modified_at is not None]
        categories = {t.category.strip().casefold() for t in transactions if t.is_classified}

        return SyncAccount(
            id=account.id,
            name=account.name,
            initial_balance=account.initial_balance,
            icon=account.icon,
            color=account.color,
            transaction_count=len(transactions),
            latest_transaction_date=format_iso_date(latest_transaction_date(transactions)),
            latest_modified_at=max(modified) if modified else None,
            transactions=[to_sync_transaction(t) for t in transactions],
            classified_count=sum(1 for t in transactions if t.is_classified),
            unique_category_count=len(categories),
            target_account_id=target_account_id,
        )

    def export_accounts(self, account_ids: Optional[list[int]] = None) -> list[SyncAccount]:
        """Export several accounts (all of them when ``account_ids`` is None)."""
        if account_ids is None:
            account_ids = [a.id for a in self.db.list_accounts()]
        return [self.export_account(account_id) for account_id in account_ids]

    def prepare(
        self,
        direction: SyncDirection,
        mode: SyncMode,
        source_accounts: list[SyncAccount],
    ) -> SyncPrepareResponse:
        """Compare a snapshot with the local ledger without changing it.

        A backup is taken first; a failed backup is reported, not fatal.

        Returns:
            SyncPrepareResponse. Never raises; failures are reported with
            ``success=False``.
        """
        response = SyncPrepareResponse()

        try:
            logger.info(
                f"Sync prepare: direction={direction.value}, mode={mode.value}, "
                f"accounts={len(source_accounts)}"
            )

            self._take_backup(response, source_accounts, "pre_sync", direction)

            for source in source_accounts:
                comparison = self._compare(direction, mode, source)
                if self._loses_classifications(direction, mode, source):
                    response.has_classification_warning = True
                    response.total_classified_transactions += source.classified_count
                response.comparisons.append(comparison)

            response.requires_confirmation = mode.is_destructive or any(
                c.has_warning for c in response.comparisons
            )
            response.success = True
        except Exception as e:
            logger.exception("Error preparing sync")
            response.success = False
            response.error = str(e)

        return response

    def execute(
        self,
        direction: SyncDirection,
        mode: SyncMode,
        confirmed: bool,
        accounts: list[SyncAccount],
    ) -> SyncExecuteResponse:
        """Apply a snapshot to the local ledger.

        Destructive modes need ``confirmed=True``. Each account is applied
        independently; a failing account is reported with status ``error``
        and the others still run.

        Returns:
            SyncExecuteResponse. Never raises; failures are reported with
            ``success=False``.
        """
        response = SyncExecuteResponse()

        if mode.is_destructive and not confirmed:
            response.error = confirmation_required(mode.value)
            logger.warning(response.error)
            return response

        try:
            logger.info(
                f"Sync execute: direction={direction.value}, mode={mode.value}, "
                f"accounts={len(accounts)}"
            )

            self._take_backup(response, accounts, f"pre_sync_{mode.value}", direction)

            for account in accounts:
                result = self._sync_account(account, mode)
                response.results.append(result)

                if result.status != STATUS_ERROR:
                    response.total_transactions_processed += len(account.transactions)
                response.total_duplicates_skipped += result.duplicates_skipped
                response.total_new_added += result.new_only_added

            response.message = generate_sync_message(mode, response.results)
            response.success = True
            logger.info(
                f"Sync completed: {len(response.results)} accounts, "
                f"{response.total_new_added} new transactions, "
                f"{response.total_duplicates_skipped} duplicates skipped"
            )
        except Exception as e:
            logger.exception("Error executing sync")
            response.success = False
            response.error = str(e)

        return response

    def _take_backup(
        self,
        response: SyncPrepareResponse | SyncExecuteResponse,
        accounts: list[SyncAccount],
        reason: str,
        direction: SyncDirection,
    ) -> None:
        """Back up the destination accounts; a failed or raising backup never stops the sync."""
        try:
            backup = self.backup_service.create_backup(self._target_ids(accounts), reason, direction.value)
        except Exception:
            logger.exception("Pre-sync backup raised, continuing without backup")
            response.backup_created = False
            response.backup_path = None
            return

        response.backup_created = backup.success
        response.backup_path = backup.path
        if not backup.success:
            logger.warning(f"Pre-sync backup failed, continuing: {backup.error}")

    def _compare(self, direction: SyncDirection, mode: SyncMode, source: SyncAccount) -> SyncComparison:
        dest_transactions = self._destination_transactions(source.target_account_id)
        dest_count = len(dest_transactions)
        dest_latest = format_iso_date(latest_transaction_date(dest_transactions))

        warning = generate_warning_message(
            source.transaction_count,
            source.latest_transaction_date,
            dest_count,
            dest_latest,
        )
        if warning is None and self._loses_classifications(direction, mode, source):
            warning = f"Destination has {source.classified_count} classified transactions that will be lost"

        return SyncComparison(
            account_id=source.id,
            account_name=source.name,
            source_transaction_count=source.transaction_count,
            source_latest_date=source.latest_transaction_date,
            dest_transaction_count=dest_count,
            dest_latest_date=dest_latest,
            dest_classified_count=source.classified_count,
            has_warning=warning is not None,
            warning_message=warning,
        )

    def _destination_transactions(self, target_account_id: Optional[int]) -> list[Transaction]:
        if target_account_id is None or self.db.get_account(target_account_id) is None:
            return []
        return self.db.list_transactions(account_id=target_account_id)

    def _sync_account(self, source: SyncAccount, mode: SyncMode) -> SyncAccountResult:
        result = SyncAccountResult(
            account_id=source.id,
            account_name=source.name,
            target_account_id=source.target_account_id,
        )

        try:
            if mode == SyncMode.CREATE_NEW or source.target_account_id is None:
                self._create_account(source, result)
            else:
                target = self.db.get_account(source.target_account_id)
                if target is None:
                    result.status = STATUS_ERROR
                    result.error_message = target_account_not_found(source.target_account_id)
                    logger.error(f"Target account {source.target_account_id} not found for '{source.name}'")
                    return result

                existing = self.db.list_transactions(account_id=target.id)
                result.previous_transaction_count = len(existing)

                if mode == SyncMode.REPLACE:
                    self._replace(source, target.id, result)
                elif mode == SyncMode.MERGE:
                    self._merge(source, target.id, existing, result)
                else:
                    self._new_only(source, target.id, existing, result)

            logger.info(
                f"Account '{source.name}' synced: status={result.status}, "
                f"prev={result.previous_transaction_count}, new={result.new_transaction_count}, "
                f"skipped={result.duplicates_skipped}"
            )
        except Exception as e:
            logger.exception(f"Error syncing account {source.id}")
            result.status = STATUS_ERROR
            result.error_message = str(e)

        return result

    def _create_account(self, source: SyncAccount, result: SyncAccountResult) -> None:
        rows = [to_transaction_fields(t) for t in source.transactions]

        account_id = AccountService(self.db).create_account(
            name=source.name,
            initial_balance=source.initial_balance,
            icon=source.icon,
            color=source.color,
        )
        self._insert(account_id, rows)

        result.target_account_id = account_id
        result.new_transaction_count = len(rows)
        result.new_only_added = len(rows)
        result.status = STATUS_CREATED

    def _replace(self, source: SyncAccount, account_id: int, result: SyncAccountResult) -> None:
        rows = [to_transaction_fields(t) for t in source.transactions]

        deleted = self.db.replace_transactions(account_id, rows)
        logger.info(f"Replaced {deleted} existing transactions with {len(rows)}")

        result.new_transaction_count = len(rows)
        result.new_only_added = len(rows)
        result.status = STATUS_REPLACED

    def _merge(
        self,
        source: SyncAccount,
        account_id: int,
        existing: list[Transaction],
        result: SyncAccountResult,
    ) -> None:
        to_add = []
        skipped = 0
        for txn in source.transactions:
            if any(is_sync_duplicate(txn, dest) for dest in existing):
                skipped += 1
            else:
                to_add.append(to_transaction_fields(txn))

        self._insert(account_id, to_add)

        result.new_transaction_count = len(existing) + len(to_add)
        result.duplicates_skipped = skipped
        result.new_only_added = len(to_add)
        result.status = STATUS_MERGED

    def _new_only(
        self,
        source: SyncAccount,
        account_id: int,
        existing: list[Transaction],
        result: SyncAccountResult,
    ) -> None:
        cutoff = latest_transaction_date(existing)
        rows = [to_transaction_fields(t) for t in filter_newer_than(source.transactions, cutoff)]

        self._insert(account_id, rows)
        logger.info(f"New-only: {len(rows)} added (cutoff: {format_iso_date(cutoff) or 'none'})")

        result.new_transaction_count = len(existing) + len(rows)
        result.new_only_added = len(rows)
        result.status = STATUS_NEW_ONLY

    def _insert(self, account_id: int, rows: list[dict[str, Any]]) -> None:
        for row in rows:
            self.db.create_transaction(account_id=account_id, **row)

    @staticmethod
    def _loses_classifications(direction: SyncDirection, mode: SyncMode, source: SyncAccount) -> bool:
        return (
            direction == SyncDirection.MOBILE_TO_DESKTOP
            and mode == SyncMode.REPLACE
            and source.classified_count > 0
        )

    @staticmethod
    def _target_ids(accounts: list[SyncAccount]) -> list[int]:
        return [a.target_account_id for a in accounts if a.target_account_id is not None]
