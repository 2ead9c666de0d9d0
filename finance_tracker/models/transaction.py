"""
Transaction model (the ledger record).

A transaction is an expense, an income or a transfer filed
under one budget category, optionally tied to one account
(or two, for transfers). The amount is always positive; the
direction of the balance change comes from the kind.

Rows are only written by TransactionService, which applies
the matching balance change to the referenced accounts in
the same database transaction.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey, CheckConstraint,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_tracker.models.base import Base, utcnow
from finance_tracker.models.enums import TransactionKind, enum_values


DESCRIPTION_MAX_LENGTH = 200


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="chk_transactions_amount"),
        CheckConstraint(
            "kind = 'transfer' OR destination_account_id IS NULL",
            name="chk_transfer_destination",
        ),
        CheckConstraint(
            "source_account_id IS NULL OR destination_account_id IS NULL "
            "OR source_account_id <> destination_account_id",
            name="chk_transfer_distinct_accounts",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    # Deleting a category deletes its transactions; deleting an
    # account only detaches it, so history survives.
    category_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    destination_account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    kind: Mapped[TransactionKind] = mapped_column(
        SAEnum(
            TransactionKind,
            name="transaction_kind",
            native_enum=False,
            length=10,
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
        default=TransactionKind.EXPENSE,
    )
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.kind.value} {self.amount}>"
