"""
Budget and category models.

A budget is one user's plan for one month. Categories split
the budget into spending buckets, and every transaction
belongs to exactly one category. Ownership of a transaction
is therefore decided by category -> budget -> owner.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, SmallInteger, ForeignKey,
    CheckConstraint, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finance_tracker.models.base import Base, utcnow


class Budget(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        # Month is 0-indexed (0=January) to match the web client
        CheckConstraint("month >= 0 AND month <= 11", name="chk_budgets_month"),
        CheckConstraint("year >= 2000 AND year <= 2100", name="chk_budgets_year"),
        CheckConstraint("total_income >= 0", name="chk_budgets_income"),
        CheckConstraint(
            "savings_rate >= 0 AND savings_rate <= 100",
            name="chk_budgets_savings_rate",
        ),
        UniqueConstraint("owner_id", "month", "year", name="uq_budgets_owner_month_year"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    month: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    year: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    total_income: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    savings_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    categories: Mapped[list["Category"]] = relationship(
        back_populates="budget", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Budget {self.year}-{self.month + 1:02d} owner={self.owner_id}>"


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        CheckConstraint("allocated_amount >= 0", name="chk_categories_allocated"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    budget_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    allocated_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
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

    budget: Mapped["Budget"] = relationship(back_populates="categories")

    def __repr__(self) -> str:
        return f"<Category {self.name}>"
