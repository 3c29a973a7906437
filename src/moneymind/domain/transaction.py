"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal
from moneymind.database.base import Database
from moneymind.domain.entities import Transaction as TransactionEntity
from moneymind.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    transaction_not_found,
)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount: Decimal,
        description: str,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        category: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Args:
            account_id: Account ID
            date: Transaction date
            amount: Signed transaction amount (negative for expenses)
            description: Transaction description
            reason: Optional payment reason (causale)
            notes: Optional notes
            category: Optional classification

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If account doesn't exist
            ValidationError: If description is empty
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        description = (description or "").strip()
        if not description:
            raise ValidationError("Transaction description cannot be empty")

        return self.db.create_transaction(
            account_id=account_id,
            date=date,
            amount=amount,
            description=description,
            reason=reason,
            notes=notes,
            category=category,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID, or None if not found."""
        return self.db.get_transaction(transaction_id)

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
        """Update transaction fields.

        Fields left as None are unchanged; an empty string clears reason,
        notes or category.

        Raises:
            NotFoundError: If transaction doesn't exist
            ValidationError: If description is set to an empty string
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if description is not None and not description.strip():
            raise ValidationError("Transaction description cannot be empty")

        self.db.update_transaction(
            transaction_id=transaction_id,
            date=date,
            amount=amount,
            description=description.strip() if description is not None else None,
            reason=reason,
            notes=notes,
            category=category,
        )

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        self.db.delete_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first."""
        return self.db.list_transactions(
            account_id=account_id,
            start_date=start_date,
            end_date=end_date,
        )
