"""Generic SQLAlchemy database implementation."""

from typing import Any, Optional
from datetime import date, datetime, UTC
from decimal import Decimal
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from moneymind.database.base import Database
from moneymind.database.models import (
    Account,
    Transaction,
    create_database_engine,
)
from moneymind.database.mappers import (
    account_to_domain,
    transaction_to_domain,
)
from moneymind.domain.entities import (
    Account as DomainAccount,
    Transaction as DomainTransaction,
)
from moneymind.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_name,
    transaction_not_found,
)


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        database = make_url(database_url).database
        # In-memory SQLite has no file to back up
        self.database_path = database if database and database != ":memory:" else None
        self.engine = create_database_engine(database_url)
        self.session_factory = sessionmaker(bind=self.engine)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database and release pooled connections."""
        if self._session is not None:
            self._session.close()
            self._session = None
        self.engine.dispose()

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_database_engine
        pass

    # Account operations
    def create_account(
        self,
        name: str,
        initial_balance: Decimal = Decimal("0"),
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        session = self._get_session()
        existing = session.query(Account).filter(Account.name == name).first()
        if existing is not None:
            raise ConflictError(duplicate_account_name(name))

        account = Account(name=name, initial_balance=initial_balance, icon=icon, color=color)
        session.add(account)
        session.commit()
        return account.id

    def get_account(self, account_id: int) -> Optional[DomainAccount]:
        """Get account by ID."""
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            return None
        return account_to_domain(account)

    def list_accounts(self) -> list[DomainAccount]:
        """List all accounts."""
        session = self._get_session()
        accounts = session.query(Account).order_by(Account.name).all()
        return [account_to_domain(acc) for acc in accounts]

    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        initial_balance: Optional[Decimal] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> None:
        """Update account fields that are not None."""
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        if name is not None:
            # Check for duplicate name (excluding current account)
            existing = session.query(Account).filter(Account.name == name, Account.id != account_id).first()
            if existing is not None:
                raise ConflictError(duplicate_account_name(name))
            account.name = name
        if initial_balance is not None:
            account.initial_balance = initial_balance
        if icon is not None:
            account.icon = icon
        if color is not None:
            account.color = color
        session.commit()

    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        transaction_count = session.query(Transaction).filter(Transaction.account_id == account_id).count()
        if transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        session.delete(account)
        session.commit()

    def get_account_transaction_count(self, account_id: int) -> int:
        """Get count of transactions associated with an account."""
        session = self._get_session()
        return session.query(Transaction).filter(Transaction.account_id == account_id).count()

    # Transaction operations
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
        """Insert a transaction. Returns the newly assigned transaction ID."""
        session = self._get_session()
        transaction = self._new_transaction(
            account_id,
            date=date,
            amount=amount,
            description=description,
            reason=reason,
            notes=notes,
            category=category,
            created_at=created_at,
            modified_at=modified_at,
        )
        session.add(transaction)
        session.commit()
        return transaction.id

    def get_transaction(self, transaction_id: int) -> Optional[DomainTransaction]:
        """Get transaction by ID."""
        session = self._get_session()
        txn = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if txn is None:
            return None
        return transaction_to_domain(txn)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[DomainTransaction]:
        """List transactions with optional filters."""
        session = self._get_session()
        query = session.query(Transaction)

        if account_id is not None:
            query = query.filter(Transaction.account_id == account_id)
        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)

        transactions = query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()
        return [transaction_to_domain(txn) for txn in transactions]

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
        session = self._get_session()
        transaction = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if date is not None:
            transaction.date = date
        if amount is not None:
            transaction.amount = amount
        if description is not None:
            transaction.description = description
        if reason is not None:
            transaction.reason = reason or None
        if notes is not None:
            transaction.notes = notes or None
        if category is not None:
            transaction.category = category or None
        transaction.modified_at = datetime.now(UTC)

        session.commit()

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        session = self._get_session()
        transaction = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        session.delete(transaction)
        session.commit()

    def delete_all_transactions(self, account_id: int) -> int:
        """Delete every transaction of an account. Returns the number deleted."""
        session = self._get_session()
        deleted = (
            session.query(Transaction)
            .filter(Transaction.account_id == account_id)
            .delete(synchronize_session="fetch")
        )
        session.commit()
        return deleted

    def replace_transactions(self, account_id: int, transactions: list[dict[str, Any]]) -> int:
        """Delete and re-insert an account's transactions in one commit."""
        session = self._get_session()
        try:
            deleted = (
                session.query(Transaction)
                .filter(Transaction.account_id == account_id)
                .delete(synchronize_session="fetch")
            )
            for fields in transactions:
                session.add(self._new_transaction(account_id, **fields))
            session.commit()
        except Exception:
            session.rollback()
            raise
        return deleted

    @staticmethod
    def _new_transaction(
        account_id: int,
        date: date,
        amount: Decimal,
        description: str = "",
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        category: Optional[str] = None,
        created_at: Optional[datetime] = None,
        modified_at: Optional[datetime] = None,
    ) -> Transaction:
        transaction = Transaction(
            account_id=account_id,
            date=date,
            amount=amount,
            description=description or "",
            reason=reason,
            notes=notes,
            category=category,
            modified_at=modified_at,
        )
        if created_at is not None:
            transaction.created_at = created_at
        return transaction
