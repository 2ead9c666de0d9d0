"""
Tests for request validation and three-way PATCH fields.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from finance_tracker.models.enums import TransactionKind
from finance_tracker.schemas.field_update import Keep, Clear, Set, resolve
from finance_tracker.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionFilters,
)


def valid_create(**overrides):
    data = {
        "category_id": uuid.uuid4(),
        "amount": "12.50",
        "transaction_date": datetime(2026, 3, 1, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return TransactionCreate(**data)


class TestTransactionCreate:

    def test_defaults_to_expense(self):
        request = valid_create()
        assert request.kind == TransactionKind.EXPENSE
        assert request.amount == Decimal("12.50")
        assert request.source_account_id is None

    @pytest.mark.parametrize("amount", ["0", "-5.00"])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValidationError):
            valid_create(amount=amount)

    def test_amount_limited_to_cents(self):
        with pytest.raises(ValidationError):
            valid_create(amount="1.005")

    def test_description_length(self):
        valid_create(description="x" * 200)
        with pytest.raises(ValidationError):
            valid_create(description="x" * 201)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            valid_create(kind="refund")


class TestTransactionUpdate:

    def test_omitted_account_is_keep(self):
        update = TransactionUpdate(amount=Decimal("5.00"))
        assert update.source_account_update == Keep()
        assert update.destination_account_update == Keep()

    def test_explicit_null_is_clear(self):
        update = TransactionUpdate.model_validate({"source_account_id": None})
        assert update.source_account_update == Clear()
        assert update.destination_account_update == Keep()

    def test_value_is_set(self):
        account_id = uuid.uuid4()
        update = TransactionUpdate(destination_account_id=account_id)
        assert update.destination_account_update == Set(account_id)

    def test_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            TransactionUpdate(amount=Decimal("0"))


class TestResolve:

    def test_resolve(self):
        current = uuid.uuid4()
        new = uuid.uuid4()
        assert resolve(Keep(), current) == current
        assert resolve(Clear(), current) is None
        assert resolve(Set(new), current) == new


class TestTransactionFilters:

    def test_defaults(self):
        filters = TransactionFilters()
        assert (filters.limit, filters.offset) == (50, 0)

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit):
        with pytest.raises(ValidationError):
            TransactionFilters(limit=limit)
