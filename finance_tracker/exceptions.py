"""
Ledger exceptions.

Every failure a ledger operation can report is one of three
kinds. The first two are the caller's problem and subclass
ValueError, so callers that only care about "bad input" can
keep catching ValueError. StorageError is ours: it hides the
database error text from clients and is safe to retry.
"""


class LedgerError(Exception):
    """Base class for errors raised by the ledger services."""


class InvalidCombinationError(LedgerError, ValueError):
    """The kind and account fields contradict each other."""


class NotFoundError(LedgerError, ValueError):
    """A category, account or transaction is missing or not owned by the user."""


class StorageError(LedgerError):
    """The database failed (unreachable, lock timeout, constraint violation)."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message)
