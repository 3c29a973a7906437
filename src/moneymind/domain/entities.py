"""Domain model entities for moneymind.

These are pure data classes representing business concepts, independent of
database schema. Ledger entities (accounts, transactions) are immutable;
report objects produced by duplicate detection and sync are plain mutable
records that live only for the duration of an operation.
"""

from dataclasses import dataclass, field
from datetime import datetime, date, timedelta, UTC
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from dateutil import parser as date_parser


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    name: str
    initial_balance: Decimal
    icon: Optional[str]
    color: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``reason`` is the bank-supplied payment reason (causale), ``category`` a
    free-text classification. A transaction is classified when it has a
    non-empty category.
    """

    id: int
    account_id: int
    date: date
    amount: Decimal
    description: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    modified_at: Optional[datetime] = None

    @property
    def is_classified(self) -> bool:
        return bool(self.category and self.category.strip())


# Duplicate detection


@dataclass
class DuplicateGroup:
    """A set of transactions judged identical, sharing one kept representative."""

    group_id: int
    transactions: list[Transaction]
    similarity_score: float = 1.0
    selected_to_keep: Optional[Transaction] = None

    def __post_init__(self):
        if self.selected_to_keep is None and self.transactions:
            self.selected_to_keep = self.transactions[0]

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def date(self) -> Optional[date]:
        return self.transactions[0].date if self.transactions else None

    @property
    def amount(self) -> Decimal:
        return self.transactions[0].amount if self.transactions else Decimal("0")

    @property
    def description(self) -> str:
        return self.transactions[0].description if self.transactions else ""

    def keeps_member(self) -> bool:
        """Whether the kept representative is one of the group's transactions."""
        keep = self.selected_to_keep
        return keep is not None and any(t.id == keep.id for t in self.transactions)

    @property
    def to_delete(self) -> list[Transaction]:
        """Members that are not the kept representative.

        A kept transaction from outside the group counts as no selection,
        so the first member survives.
        """
        if not self.transactions:
            return []
        keep = self.selected_to_keep if self.keeps_member() else self.transactions[0]
        return [t for t in self.transactions if t.id != keep.id]


@dataclass
class DuplicateDetectionResult:
    """Outcome of a duplicate scan. ``success=False`` means the result is unusable."""

    success: bool = False
    total_transactions: int = 0
    groups: list[DuplicateGroup] = field(default_factory=list)
    duplicate_groups_found: int = 0
    total_duplicates: int = 0
    elapsed_time: timedelta = field(default_factory=timedelta)
    error: Optional[str] = None

    @property
    def message(self) -> str:
        if not self.success:
            return f"Duplicate detection failed: {self.error or 'unknown error'}"
        return (
            f"Found {self.duplicate_groups_found} group(s) "
            f"({self.total_duplicates} duplicate(s)) in {self.elapsed_time.total_seconds():.1f}s"
        )


# Synchronization


class SyncMode(str, Enum):
    """How source transactions are applied to a destination account."""

    REPLACE = "replace"
    MERGE = "merge"
    NEW_ONLY = "new_only"
    CREATE_NEW = "create_new"

    @property
    def is_destructive(self) -> bool:
        return self is SyncMode.REPLACE


class SyncDirection(str, Enum):
    """Which device holds the source ledger."""

    DESKTOP_TO_MOBILE = "desktop_to_mobile"
    MOBILE_TO_DESKTOP = "mobile_to_desktop"


def _decimal_to_str(value: Decimal) -> str:
    return str(value)


def _datetime_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return date_parser.isoparse(value)


@dataclass
class SyncTransaction:
    """Portable form of a transaction. Identity is structural, not an id."""

    date: str  # yyyy-mm-dd
    amount: Decimal
    description: str = ""
    reason: str = ""
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "amount": _decimal_to_str(self.amount),
            "description": self.description,
            "reason": self.reason,
            "created_at": _datetime_to_str(self.created_at),
            "modified_at": _datetime_to_str(self.modified_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncTransaction":
        return cls(
            date=str(data.get("date", "")),
            amount=Decimal(str(data.get("amount", "0"))),
            description=data.get("description") or "",
            reason=data.get("reason") or "",
            created_at=_parse_datetime(data.get("created_at")),
            modified_at=_parse_datetime(data.get("modified_at")),
        )


@dataclass
class SyncAccount:
    """Portable snapshot of one account and its transactions.

    ``target_account_id`` maps the snapshot onto an existing destination
    account; when it is None the destination account must be created.
    ``classified_count`` and ``unique_category_count`` describe the source
    ledger only and are never changed by a sync.
    """

    id: int
    name: str
    initial_balance: Decimal = Decimal("0")
    icon: Optional[str] = None
    color: Optional[str] = None
    transaction_count: int = 0
    latest_transaction_date: Optional[str] = None
    latest_modified_at: Optional[datetime] = None
    transactions: list[SyncTransaction] = field(default_factory=list)
    classified_count: int = 0
    unique_category_count: int = 0
    target_account_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "initial_balance": _decimal_to_str(self.initial_balance),
            "icon": self.icon,
            "color": self.color,
            "transaction_count": self.transaction_count,
            "latest_transaction_date": self.latest_transaction_date,
            "latest_modified_at": _datetime_to_str(self.latest_modified_at),
            "transactions": [t.to_dict() for t in self.transactions],
            "classified_count": self.classified_count,
            "unique_category_count": self.unique_category_count,
            "target_account_id": self.target_account_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncAccount":
        transactions = [SyncTransaction.from_dict(t) for t in data.get("transactions") or []]
        target = data.get("target_account_id")
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            initial_balance=Decimal(str(data.get("initial_balance", "0"))),
            icon=data.get("icon"),
            color=data.get("color"),
            transaction_count=int(data.get("transaction_count", len(transactions))),
            latest_transaction_date=data.get("latest_transaction_date"),
            latest_modified_at=_parse_datetime(data.get("latest_modified_at")),
            transactions=transactions,
            classified_count=int(data.get("classified_count", 0)),
            unique_category_count=int(data.get("unique_category_count", 0)),
            target_account_id=int(target) if target is not None else None,
        )


@dataclass
class SyncComparison:
    """Source vs destination comparison for a single account."""

    account_id: int
    account_name: str
    source_transaction_count: int = 0
    source_latest_date: Optional[str] = None
    dest_transaction_count: int = 0
    dest_latest_date: Optional[str] = None
    dest_classified_count: int = 0
    has_warning: bool = False
    warning_message: Optional[str] = None


@dataclass
class SyncPrepareResponse:
    """Outcome of the prepare phase."""

    success: bool = False
    error: Optional[str] = None
    backup_created: bool = False
    backup_path: Optional[str] = None
    comparisons: list[SyncComparison] = field(default_factory=list)
    requires_confirmation: bool = False
    has_classification_warning: bool = False
    total_classified_transactions: int = 0


@dataclass
class SyncAccountResult:
    """Outcome of the execute phase for a single account.

    ``status`` is one of: replaced, merged, new_only, created, error.
    """

    account_id: int
    account_name: str
    target_account_id: Optional[int] = None
    previous_transaction_count: int = 0
    new_transaction_count: int = 0
    duplicates_skipped: int = 0
    new_only_added: int = 0
    status: str = ""
    error_message: Optional[str] = None


@dataclass
class SyncExecuteResponse:
    """Outcome of the execute phase."""

    success: bool = False
    error: Optional[str] = None
    results: list[SyncAccountResult] = field(default_factory=list)
    message: Optional[str] = None
    total_transactions_processed: int = 0
    total_duplicates_skipped: int = 0
    total_new_added: int = 0
    backup_created: bool = False
    backup_path: Optional[str] = None


# Backups


@dataclass
class BackupResult:
    """Outcome of a backup attempt."""

    success: bool = False
    path: Optional[str] = None
    files_backed_up: list[str] = field(default_factory=list)
    total_size_bytes: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class BackupAccountInfo:
    """Per-account entry of a backup manifest."""

    id: int
    name: str
    transaction_count: int
    latest_transaction: Optional[str] = None


@dataclass(frozen=True)
class BackupInfo:
    """Backup manifest, stored as backup_info.json inside each backup folder."""

    created_at: datetime
    reason: str
    path: str
    sync_direction: Optional[str] = None
    accounts_backed_up: tuple[BackupAccountInfo, ...] = ()
    app_version: str = ""
