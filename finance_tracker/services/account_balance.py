"""
Account balance mutator.

The only code allowed to change Account.balance. Every change
happens inside the caller's open database transaction and
only after the account row is locked with SELECT ... FOR
UPDATE, so two concurrent ledger operations on the same
account serialize instead of both reading the same old
balance and one of the updates getting lost.

Locks are always taken in sorted account-id order. Two
transfers between the same pair of accounts in opposite
directions would otherwise lock A-then-B and B-then-A and
deadlock.
"""

import logging
import uuid
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from finance_tracker.exceptions import NotFoundError
from finance_tracker.models.account import Account
from finance_tracker.services.balance_effects import BalanceEffect

logger = logging.getLogger(__name__)


class AccountBalanceMutator:

    def __init__(self, db: Session):
        self.db = db

    def lock(self, account_id: uuid.UUID) -> Account | None:
        """
        Lock one account row and return it (None if it doesn't exist).

        populate_existing forces the balance to be re-read from
        the locked row even if the Account is already in the
        session's identity map with an older value.
        """
        return self.db.execute(
            select(Account)
            .where(Account.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def lock_accounts(
        self, account_ids: Iterable[uuid.UUID]
    ) -> dict[uuid.UUID, Account]:
        """Lock each distinct account once, in sorted order. Missing ids are left out."""
        locked = {}
        for account_id in sorted(set(account_ids), key=str):
            account = self.lock(account_id)
            if account is not None:
                locked[account_id] = account
        return locked

    def apply_effects(
        self,
        effects: Iterable[BalanceEffect],
        locked: dict[uuid.UUID, Account] | None = None,
        skip_missing: bool = False,
    ) -> None:
        """
        Add each effect's delta to its account balance.

        Pass locked to reuse rows already locked in this
        transaction; otherwise the accounts are locked here.
        With skip_missing, effects on accounts that no longer
        exist are dropped (used when reversing: a deleted
        account has no balance left to correct). Without it a
        missing account is an error.
        """
        effects = list(effects)
        if locked is None:
            locked = self.lock_accounts(e.account_id for e in effects)

        for effect in effects:
            account = locked.get(effect.account_id)
            if account is None:
                if skip_missing:
                    logger.warning(
                        "Skipping balance change of %s on deleted account %s",
                        effect.delta, effect.account_id,
                    )
                    continue
                raise NotFoundError(f"Account {effect.account_id} not found")

            if effect.delta != 0:
                account.balance = account.balance + effect.delta

        self.db.flush()

    def adjust(self, account_id: uuid.UUID, delta: Decimal) -> Account:
        """Lock one account and add delta to its balance."""
        account = self.lock(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        self.apply_effects(
            [BalanceEffect(account_id, delta)],
            locked={account_id: account},
        )
        return account
