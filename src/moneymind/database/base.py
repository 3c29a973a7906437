"""Abstract ledger database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from moneymind.domain.entities import Account, Transaction


class Database(ABC):
    """Abstract database interface for moneymind.

    Implementations expose ``database_path`` (the file holding the ledger,
    or None for in-memory stores) so the backup service can snapshot it.
    """

    database_path: Optional[str] = None

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        initial_balance: Decimal = Decimal("0"),
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        initial_balance: Optional[Decimal] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> None:
        """Update account fields that are not None."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Get count of transactions associated with an account."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount: Decimal,
        description: str = "",
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        category: Optional[str] = None,
        created_at: Optional[datetime] = None,
        modified_at: Optional[datetime] = None,
    ) -> int:
        """Insert a transaction. The store assigns and returns the new ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            account_id: Optional account ID filter
            start_date: Optional start date filter
            end_date: Optional end date filter
        """
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        date: Optional[date] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        category: Optional[str] = None,
    ) -> None:
        """Update transaction fields that are not None and stamp modified_at."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def delete_all_transactions(self, account_id: int) -> int:
        """Delete every transaction of an account. Returns the number deleted."""
        pass

    @abstractmethod
    def replace_transactions(self, account_id: int, transactions: list[dict[str, Any]]) -> int:
        """Swap an account's transactions for new ones in a single commit.

        Args:
            account_id: Account whose transactions are replaced
            transactions: ``create_transaction`` keyword arguments, one dict per row

        Returns:
            Number of transactions deleted. On failure nothing is changed.
        """
        pass
