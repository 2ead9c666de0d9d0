"""Initial schema: users, budgets, categories, accounts, transactions

Revision ID: 0001
Revises:
Create Date: 2026-01-11 00:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )

    op.create_table(
        "budgets",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("month", sa.SmallInteger(), nullable=False),
        sa.Column("year", sa.SmallInteger(), nullable=False),
        sa.Column("total_income", sa.Numeric(12, 2), nullable=False,
                  server_default="0"),
        sa.Column("savings_rate", sa.Numeric(5, 2), nullable=False,
                  server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("month >= 0 AND month <= 11", name="chk_budgets_month"),
        sa.CheckConstraint("year >= 2000 AND year <= 2100", name="chk_budgets_year"),
        sa.CheckConstraint("total_income >= 0", name="chk_budgets_income"),
        sa.CheckConstraint("savings_rate >= 0 AND savings_rate <= 100",
                           name="chk_budgets_savings_rate"),
        sa.UniqueConstraint("owner_id", "month", "year",
                            name="uq_budgets_owner_month_year"),
    )
    op.create_index("ix_budgets_owner_id", "budgets", ["owner_id"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("budget_id", sa.Uuid(),
                  sa.ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("allocated_amount", sa.Numeric(12, 2), nullable=False,
                  server_default="0"),
        sa.Column("color_hex", sa.String(7), nullable=False,
                  server_default="#64748b"),
        *_timestamps(),
        sa.CheckConstraint("allocated_amount >= 0", name="chk_categories_allocated"),
    )
    op.create_index("ix_categories_budget_id", "categories", ["budget_id"])

    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("account_type", sa.String(10), nullable=False),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("color_hex", sa.String(7), nullable=False,
                  server_default="#64748b"),
        *_timestamps(),
        sa.CheckConstraint("account_type IN ('checking', 'savings', 'credit')",
                           name="account_type"),
    )
    op.create_index("ix_accounts_owner_id", "accounts", ["owner_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("category_id", sa.Uuid(),
                  sa.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("source_account_id", sa.Uuid(),
                  sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("destination_account_id", sa.Uuid(),
                  sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("kind", sa.String(10), nullable=False, server_default="expense"),
        sa.Column("transaction_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="chk_transactions_amount"),
        sa.CheckConstraint("kind IN ('expense', 'income', 'transfer')",
                           name="transaction_kind"),
        sa.CheckConstraint("kind = 'transfer' OR destination_account_id IS NULL",
                           name="chk_transfer_destination"),
        sa.CheckConstraint(
            "source_account_id IS NULL OR destination_account_id IS NULL "
            "OR source_account_id <> destination_account_id",
            name="chk_transfer_distinct_accounts",
        ),
    )
    op.create_index("ix_transactions_category_id", "transactions", ["category_id"])
    op.create_index("ix_transactions_source_account_id", "transactions",
                    ["source_account_id"])
    op.create_index("ix_transactions_destination_account_id", "transactions",
                    ["destination_account_id"])
    op.create_index("ix_transactions_transaction_date", "transactions",
                    ["transaction_date"])


def downgrade() -> None:
    op.drop_table("transactions")
    op.drop_table("accounts")
    op.drop_table("categories")
    op.drop_table("budgets")
    op.drop_table("users")
