"""
Transaction API endpoints.

The API layer is thin: it parses the request, calls
TransactionService and turns ledger errors into status
codes. The service commits or rolls back on its own.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from finance_tracker.api.deps import get_current_user_id, to_http_exception
from finance_tracker.exceptions import LedgerError
from finance_tracker.models.base import get_db
from finance_tracker.services.transaction_service import TransactionService
from finance_tracker.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionFilters,
    SummaryFilters,
    TransactionResponse,
    PaginatedTransactionResponse,
    TransactionSummary,
    CategoriesQuery,
    PaginatedTransactionDetailResponse,
)

router = APIRouter(tags=["Transactions"])


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request: TransactionCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Record a transaction and update the account balance(s).

    Expenses decrease the source account, income increases
    it, transfers move the amount from source to destination.
    """
    service = TransactionService(db)
    try:
        return service.create_transaction(user_id, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/transactions", response_model=PaginatedTransactionResponse)
def list_transactions(
    filters: Annotated[TransactionFilters, Query()],
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the user's transactions, newest first."""
    service = TransactionService(db)
    items, total = service.list_transactions(user_id, filters)
    return PaginatedTransactionResponse(
        data=[TransactionResponse.model_validate(t) for t in items],
        total=total,
        limit=filters.limit,
        offset=filters.offset,
    )


@router.get("/transactions/summary", response_model=TransactionSummary)
def get_summary(
    filters: Annotated[SummaryFilters, Query()],
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Income and expense totals with the expense breakdown per category."""
    service = TransactionService(db)
    return service.get_summary(user_id, filters)


@router.get("/transactions/detailed", response_model=PaginatedTransactionDetailResponse)
def list_transactions_detailed(
    filters: Annotated[TransactionFilters, Query()],
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Same as GET /transactions, with category and account details inlined."""
    service = TransactionService(db)
    items, total = service.list_transactions_detailed(user_id, filters)
    return PaginatedTransactionDetailResponse(
        data=items,
        total=total,
        limit=filters.limit,
        offset=filters.offset,
    )


@router.post("/transactions/categories", response_model=list[TransactionResponse])
def get_by_categories(
    request: CategoriesQuery,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Transactions of several categories, all of which must be the user's."""
    service = TransactionService(db)
    try:
        return service.get_by_categories(user_id, request.category_ids)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get transaction details."""
    service = TransactionService(db)
    try:
        return service.get_transaction(user_id, transaction_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.patch("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: uuid.UUID,
    request: TransactionUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Partially update a transaction.

    {"source_account_id": null} detaches the account, while
    leaving the field out keeps it. Same for
    destination_account_id.
    """
    service = TransactionService(db)
    try:
        return service.update_transaction(user_id, transaction_id, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a transaction and restore the account balance(s)."""
    service = TransactionService(db)
    try:
        service.delete_transaction(user_id, transaction_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return Response(status_code=204)


@router.get(
    "/accounts/{account_id}/transactions",
    response_model=PaginatedTransactionResponse,
)
def list_account_transactions(
    account_id: uuid.UUID,
    filters: Annotated[TransactionFilters, Query()],
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Transactions touching an account, as source or destination."""
    service = TransactionService(db)
    try:
        items, total = service.list_account_transactions(
            user_id, account_id, filters
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return PaginatedTransactionResponse(
        data=[TransactionResponse.model_validate(t) for t in items],
        total=total,
        limit=filters.limit,
        offset=filters.offset,
    )
