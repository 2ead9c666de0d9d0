"""
Tests for the transaction API endpoints.

These test the HTTP layer: status codes, response format,
the X-User-Id header and error mapping. Ledger behavior is
tested in test_transaction_service.py.
"""

import uuid
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from finance_tracker.services.account_balance import AccountBalanceMutator


def headers(user):
    return {"X-User-Id": str(user.id)}


def payload(category, **overrides):
    data = {
        "category_id": str(category.id),
        "amount": "50.00",
        "transaction_date": "2026-01-15T12:00:00Z",
    }
    data.update(overrides)
    return data


class TestCreate:

    def test_create_returns_201(self, client, user, category, make_account, balance_of):
        account = make_account(user, "100.00")

        response = client.post(
            "/transactions",
            json=payload(category, source_account_id=str(account.id)),
            headers=headers(user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["kind"] == "expense"
        assert Decimal(data["amount"]) == Decimal("50.00")
        assert data["source_account_id"] == str(account.id)
        assert balance_of(account) == Decimal("50.00")

    def test_foreign_category_returns_404(self, client, user, other_category):
        response = client.post(
            "/transactions", json=payload(other_category), headers=headers(user)
        )
        assert response.status_code == 404
        assert "Category not found" in response.json()["detail"]

    def test_same_account_transfer_returns_400(
        self, client, user, category, make_account
    ):
        account = make_account(user, "100.00")

        response = client.post(
            "/transactions",
            json=payload(
                category,
                kind="transfer",
                source_account_id=str(account.id),
                destination_account_id=str(account.id),
            ),
            headers=headers(user),
        )

        assert response.status_code == 400
        assert "same account" in response.json()["detail"]

    def test_invalid_amount_returns_422(self, client, user, category):
        response = client.post(
            "/transactions", json=payload(category, amount="-1"), headers=headers(user)
        )
        assert response.status_code == 422

    def test_storage_failure_returns_generic_500(
        self, client, user, category, make_account, monkeypatch
    ):
        account = make_account(user, "100.00")

        def failing_apply(*args, **kwargs):
            raise OperationalError(
                "UPDATE accounts", {}, Exception("password authentication failed")
            )

        monkeypatch.setattr(AccountBalanceMutator, "apply_effects", failing_apply)

        response = client.post(
            "/transactions",
            json=payload(category, source_account_id=str(account.id)),
            headers=headers(user),
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"


class TestIdentity:

    def test_missing_header_returns_422(self, client):
        response = client.get("/transactions")
        assert response.status_code == 422

    def test_malformed_header_returns_401(self, client):
        response = client.get("/transactions", headers={"X-User-Id": "not-a-uuid"})
        assert response.status_code == 401


class TestReadAndModify:

    def _create(self, client, user, category, **overrides):
        response = client.post(
            "/transactions", json=payload(category, **overrides), headers=headers(user)
        )
        assert response.status_code == 201
        return response.json()

    def test_get_transaction(self, client, user, category):
        created = self._create(client, user, category)

        response = client.get(f"/transactions/{created['id']}", headers=headers(user))

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_get_other_users_transaction_returns_404(
        self, client, user, other_user, category
    ):
        created = self._create(client, user, category)

        response = client.get(
            f"/transactions/{created['id']}", headers=headers(other_user)
        )
        assert response.status_code == 404

    def test_get_unknown_returns_404(self, client, user):
        response = client.get(f"/transactions/{uuid.uuid4()}", headers=headers(user))
        assert response.status_code == 404

    def test_patch_null_detaches_account(
        self, client, user, category, make_account, balance_of
    ):
        account = make_account(user, "100.00")
        created = self._create(
            client, user, category, source_account_id=str(account.id)
        )

        response = client.patch(
            f"/transactions/{created['id']}",
            json={"source_account_id": None},
            headers=headers(user),
        )

        assert response.status_code == 200
        assert response.json()["source_account_id"] is None
        assert balance_of(account) == Decimal("100.00")

    def test_patch_amount_keeps_account(
        self, client, user, category, make_account, balance_of
    ):
        account = make_account(user, "100.00")
        created = self._create(
            client, user, category, source_account_id=str(account.id)
        )

        response = client.patch(
            f"/transactions/{created['id']}",
            json={"amount": "20.00"},
            headers=headers(user),
        )

        assert response.status_code == 200
        assert response.json()["source_account_id"] == str(account.id)
        assert balance_of(account) == Decimal("80.00")

    def test_delete_returns_204_and_restores_balance(
        self, client, user, category, make_account, balance_of
    ):
        account = make_account(user, "100.00")
        created = self._create(
            client, user, category, source_account_id=str(account.id)
        )

        response = client.delete(
            f"/transactions/{created['id']}", headers=headers(user)
        )

        assert response.status_code == 204
        assert balance_of(account) == Decimal("100.00")
        missing = client.get(f"/transactions/{created['id']}", headers=headers(user))
        assert missing.status_code == 404

    def test_list_is_paginated(self, client, user, category):
        for day in range(1, 4):
            self._create(
                client, user, category, transaction_date=f"2026-01-0{day}T12:00:00Z"
            )

        response = client.get(
            "/transactions", params={"limit": 2}, headers=headers(user)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["limit"] == 2
        assert len(data["data"]) == 2
        assert data["data"][0]["transaction_date"].startswith("2026-01-03")

    def test_list_limit_out_of_range_returns_422(self, client, user):
        response = client.get(
            "/transactions", params={"limit": 500}, headers=headers(user)
        )
        assert response.status_code == 422

    def test_account_transactions(self, client, user, category, make_account):
        acct_a = make_account(user, "100.00", name="A")
        acct_b = make_account(user, "0.00", name="B")
        self._create(
            client, user, category,
            kind="transfer",
            source_account_id=str(acct_a.id),
            destination_account_id=str(acct_b.id),
        )

        response = client.get(
            f"/accounts/{acct_b.id}/transactions", headers=headers(user)
        )

        assert response.status_code == 200
        assert response.json()["total"] == 1

    def test_summary(self, client, user, category):
        self._create(client, user, category, amount="40.00")
        self._create(client, user, category, amount="100.00", kind="income")

        response = client.get("/transactions/summary", headers=headers(user))

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_income"]) == Decimal("100.00")
        assert Decimal(data["total_expenses"]) == Decimal("40.00")
        assert Decimal(data["net"]) == Decimal("60.00")
        assert data["by_category"][0]["category_name"] == "Groceries"

    def test_detailed_listing(self, client, user, category, make_account):
        account = make_account(user, "100.00")
        self._create(client, user, category, source_account_id=str(account.id))

        response = client.get("/transactions/detailed", headers=headers(user))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        item = data["data"][0]
        assert item["category"]["name"] == "Groceries"
        assert item["source_account"]["name"] == "Checking"
        assert item["source_account"]["account_type"] == "checking"
        assert item["destination_account"] is None

    def test_by_categories(self, client, user, category, make_category):
        dining = make_category(user, name="Dining", month=1)
        self._create(client, user, category)
        self._create(client, user, dining)

        response = client.post(
            "/transactions/categories",
            json={"category_ids": [str(category.id), str(dining.id)]},
            headers=headers(user),
        )

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_by_categories_foreign_category_returns_404(
        self, client, user, category, other_category
    ):
        response = client.post(
            "/transactions/categories",
            json={"category_ids": [str(category.id), str(other_category.id)]},
            headers=headers(user),
        )
        assert response.status_code == 404
