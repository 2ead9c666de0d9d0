"""
Account model.

A checking, savings or credit account owned by one user.
Unlike a pure double-entry ledger, the balance IS stored on
the row: it is a running total that only the ledger engine
(AccountBalanceMutator) changes, under a row lock, as a side
effect of creating, updating and deleting transactions.

Balances may go negative (credit cards, overdrafts).
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_tracker.models.base import Base, utcnow
from finance_tracker.models.enums import AccountType, enum_values


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(
            AccountType,
            name="account_type",
            native_enum=False,
            length=10,
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )
    color_hex: Mapped[str] = mapped_column(
        String(7), nullable=False, default="#64748b"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<Account {self.name} "
            f"{self.account_type.value} {self.balance} {self.currency}>"
        )
