"""
Ownership checks for categories and accounts.

Run these on the same session (and so the same database
transaction) as the write that depends on them, right
before the write.
"""

import uuid
from typing import Collection

from sqlalchemy import select, exists, func
from sqlalchemy.orm import Session

from finance_tracker.models.account import Account
from finance_tracker.models.budget import Budget, Category


class OwnershipValidator:

    def __init__(self, db: Session):
        self.db = db

    def category_owned_by(
        self, category_id: uuid.UUID, user_id: uuid.UUID
    ) -> bool:
        """True if the category exists and its budget belongs to the user."""
        return self.db.execute(
            select(
                exists()
                .where(Category.id == category_id)
                .where(Category.budget_id == Budget.id)
                .where(Budget.owner_id == user_id)
            )
        ).scalar()

    def account_owned_by(
        self, account_id: uuid.UUID, user_id: uuid.UUID
    ) -> bool:
        """True if the account exists and belongs to the user."""
        return self.db.execute(
            select(
                exists()
                .where(Account.id == account_id)
                .where(Account.owner_id == user_id)
            )
        ).scalar()

    def categories_owned_by(
        self, category_ids: Collection[uuid.UUID], user_id: uuid.UUID
    ) -> bool:
        """True if every one of the categories belongs to the user."""
        distinct_ids = set(category_ids)
        owned = self.db.execute(
            select(func.count(func.distinct(Category.id)))
            .select_from(Category)
            .join(Budget, Category.budget_id == Budget.id)
            .where(Category.id.in_(distinct_ids))
            .where(Budget.owner_id == user_id)
        ).scalar()
        return owned == len(distinct_ids)
