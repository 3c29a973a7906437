"""Account domain service."""

from decimal import Decimal
from typing import Optional
from moneymind.database.base import Database
from moneymind.domain.entities import Account as AccountEntity
from moneymind.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_name,
)
from moneymind.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ICON = "💳"
DEFAULT_COLOR = "#6750A4"


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        initial_balance: Decimal = Decimal("0"),
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> int:
        """Create a new account.

        Args:
            name: Account name
            initial_balance: Opening balance of the account
            icon: Optional icon (emoji), defaults to a card icon
            color: Optional hex color (#RRGGBB)

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name cannot be empty")

        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(duplicate_account_name(name))

        account_id = self.db.create_account(
            name=name,
            initial_balance=initial_balance,
            icon=icon or DEFAULT_ICON,
            color=color or DEFAULT_COLOR,
        )
        logger.info(f"Created account '{name}' (ID: {account_id})")
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID, or None if not found."""
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID.

        Raises:
            NotFoundError: If account not found
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts."""
        return self.db.list_accounts()

    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        initial_balance: Optional[Decimal] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> None:
        """Update an account.

        Only the fields that are provided are changed.

        Raises:
            NotFoundError: If account not found
            ConflictError: If the new name already exists
        """
        self.require_account(account_id)

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name cannot be empty")
            for acc in self.db.list_accounts():
                if acc.id != account_id and acc.name == name:
                    raise ConflictError(duplicate_account_name(name))

        self.db.update_account(
            account_id=account_id,
            name=name,
            initial_balance=initial_balance,
            icon=icon,
            color=color,
        )

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If account not found
            DependencyError: If the account still has transactions
        """
        self.require_account(account_id)

        transaction_count = self.db.get_account_transaction_count(account_id)
        if transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(account_id)
        logger.info(f"Deleted account {account_id}")

    def get_balance(self, account_id: int) -> Decimal:
        """Current balance: initial balance plus the sum of all transactions."""
        account = self.require_account(account_id)
        total = sum((t.amount for t in self.db.list_transactions(account_id=account_id)), Decimal("0"))
        return account.initial_balance + total
