"""Business logic services."""

from finance_tracker.services.account_balance import AccountBalanceMutator
from finance_tracker.services.ownership import OwnershipValidator
from finance_tracker.services.transaction_service import TransactionService

__all__ = ["AccountBalanceMutator", "OwnershipValidator", "TransactionService"]
