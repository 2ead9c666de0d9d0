"""
Balance effects of a transaction.

Pure functions, no database access. Given a transaction's
kind, amount and accounts, work out how much each account
balance moves:

    EXPENSE   source      -amount
    INCOME    source      +amount
    TRANSFER  source      -amount
              destination +amount

A missing account means "not tied to a tracked account"
(cash, for example) and simply has no effect.

Reversing an effect is negating it. Decimal negation is
exact, so applying effects and then their reversal always
lands on the starting balance to the cent.
"""

import uuid
from decimal import Decimal
from typing import Iterable, NamedTuple

from finance_tracker.exceptions import InvalidCombinationError
from finance_tracker.models.enums import TransactionKind


class BalanceEffect(NamedTuple):
    account_id: uuid.UUID
    delta: Decimal


def compute_effects(
    kind: TransactionKind,
    amount: Decimal,
    source_account_id: uuid.UUID | None,
    destination_account_id: uuid.UUID | None = None,
) -> list[BalanceEffect]:
    """Return the balance changes a transaction causes, source first."""
    effects = []

    if kind == TransactionKind.EXPENSE:
        if source_account_id is not None:
            effects.append(BalanceEffect(source_account_id, -amount))
    elif kind == TransactionKind.INCOME:
        if source_account_id is not None:
            effects.append(BalanceEffect(source_account_id, amount))
    elif kind == TransactionKind.TRANSFER:
        if source_account_id is not None:
            effects.append(BalanceEffect(source_account_id, -amount))
        if destination_account_id is not None:
            effects.append(BalanceEffect(destination_account_id, amount))
    else:
        raise ValueError(f"Unknown transaction kind: {kind!r}")

    return effects


def reverse_effects(effects: Iterable[BalanceEffect]) -> list[BalanceEffect]:
    """Negate every effect. reverse(compute(...)) undoes compute(...)."""
    return [BalanceEffect(e.account_id, -e.delta) for e in effects]


def validate_account_combination(
    kind: TransactionKind,
    source_account_id: uuid.UUID | None,
    destination_account_id: uuid.UUID | None,
) -> None:
    """
    Check that the account fields make sense for the kind.

    Only transfers may have a destination account, and a
    transfer can't move money from an account to itself.
    """
    if kind != TransactionKind.TRANSFER:
        if destination_account_id is not None:
            raise InvalidCombinationError(
                "Destination account is only allowed for transfers"
            )
        return

    if (
        source_account_id is not None
        and source_account_id == destination_account_id
    ):
        raise InvalidCombinationError(
            "Cannot transfer to the same account"
        )
