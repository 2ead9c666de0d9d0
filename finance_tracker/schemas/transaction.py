"""
Pydantic schemas for transaction operations.

These check field shapes only (positive amount, description
length). Rules that need the database, such as ownership and
whether the accounts fit the kind, are enforced by
TransactionService.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_tracker.models.enums import AccountType, TransactionKind
from finance_tracker.models.transaction import DESCRIPTION_MAX_LENGTH
from finance_tracker.schemas.field_update import FieldUpdate, field_update


# --- Request Schemas ---

class TransactionCreate(BaseModel):
    category_id: uuid.UUID
    source_account_id: uuid.UUID | None = None
    destination_account_id: uuid.UUID | None = None
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    kind: TransactionKind = TransactionKind.EXPENSE
    transaction_date: datetime
    description: str | None = Field(
        default=None, max_length=DESCRIPTION_MAX_LENGTH
    )


class TransactionUpdate(BaseModel):
    """
    Partial update (PATCH). Omitted fields keep their value.

    For the two account fields an explicit null clears the
    reference; for every other field null is the same as
    leaving the field out.
    """
    category_id: uuid.UUID | None = None
    source_account_id: uuid.UUID | None = None
    destination_account_id: uuid.UUID | None = None
    amount: Decimal | None = Field(
        default=None, gt=0, max_digits=12, decimal_places=2
    )
    kind: TransactionKind | None = None
    transaction_date: datetime | None = None
    description: str | None = Field(
        default=None, max_length=DESCRIPTION_MAX_LENGTH
    )

    @property
    def source_account_update(self) -> FieldUpdate:
        return field_update(
            self.model_fields_set, "source_account_id", self.source_account_id
        )

    @property
    def destination_account_update(self) -> FieldUpdate:
        return field_update(
            self.model_fields_set,
            "destination_account_id",
            self.destination_account_id,
        )


class TransactionFilters(BaseModel):
    """Query filters for listing transactions."""
    start_date: datetime | None = None
    end_date: datetime | None = None
    category_id: uuid.UUID | None = None
    account_id: uuid.UUID | None = None
    kind: TransactionKind | None = None
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class SummaryFilters(BaseModel):
    start_date: datetime | None = None
    end_date: datetime | None = None
    account_id: uuid.UUID | None = None


class CategoriesQuery(BaseModel):
    """Body for fetching the transactions of several categories at once."""
    category_ids: list[uuid.UUID]


# --- Response Schemas ---

class TransactionResponse(BaseModel):
    id: uuid.UUID
    category_id: uuid.UUID
    source_account_id: uuid.UUID | None
    destination_account_id: uuid.UUID | None
    amount: Decimal
    kind: TransactionKind
    transaction_date: datetime
    description: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PaginatedTransactionResponse(BaseModel):
    data: list[TransactionResponse]
    total: int
    limit: int
    offset: int


class CategorySummary(BaseModel):
    category_id: uuid.UUID
    category_name: str
    category_color_hex: str
    total_amount: Decimal
    transaction_count: int


class TransactionSummary(BaseModel):
    """Income/expense totals plus the expense breakdown by category."""
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    transaction_count: int
    by_category: list[CategorySummary]


# --- Detailed listing ---

class CategoryInfo(BaseModel):
    id: uuid.UUID
    name: str
    color_hex: str

    model_config = {"from_attributes": True}


class AccountInfo(BaseModel):
    id: uuid.UUID
    name: str
    account_type: AccountType
    currency: str
    color_hex: str

    model_config = {"from_attributes": True}


class TransactionDetailResponse(BaseModel):
    """
    A transaction with its category and accounts inlined.

    An account that was never set, or has since been deleted,
    comes back as null.
    """
    id: uuid.UUID
    amount: Decimal
    kind: TransactionKind
    transaction_date: datetime
    description: str | None
    created_at: datetime
    updated_at: datetime
    category: CategoryInfo
    source_account: AccountInfo | None
    destination_account: AccountInfo | None


class PaginatedTransactionDetailResponse(BaseModel):
    data: list[TransactionDetailResponse]
    total: int
    limit: int
    offset: int
