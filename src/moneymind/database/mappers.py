"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, so the domain entities stay stable
when the database schema changes.
"""

from decimal import Decimal

from moneymind.domain import entities as domain
from moneymind.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        initial_balance=Decimal(orm_account.initial_balance or 0),
        icon=orm_account.icon,
        color=orm_account.color,
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        description=orm_transaction.description or "",
        reason=orm_transaction.reason,
        notes=orm_transaction.notes,
        category=orm_transaction.category,
        created_at=orm_transaction.created_at,
        modified_at=orm_transaction.modified_at,
    )
