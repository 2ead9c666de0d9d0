"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from finance_tracker.models.base import Base
from finance_tracker.models.enums import AccountType, TransactionKind
from finance_tracker.models.user import User
from finance_tracker.models.budget import Budget, Category
from finance_tracker.models.account import Account
from finance_tracker.models.transaction import Transaction

__all__ = [
    "Base",
    "AccountType",
    "TransactionKind",
    "User",
    "Budget",
    "Category",
    "Account",
    "Transaction",
]
