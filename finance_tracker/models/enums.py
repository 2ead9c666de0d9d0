"""
Shared enumerations for database models.

Enums are stored as plain text columns with a CHECK
constraint, so the database rejects unknown values while
the code only ever sees the enum members.
"""

import enum


class TransactionKind(str, enum.Enum):
    """What a transaction does to the balance of its account(s)."""
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class AccountType(str, enum.Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values ("expense") rather than names ("EXPENSE")."""
    return [member.value for member in enum_cls]
