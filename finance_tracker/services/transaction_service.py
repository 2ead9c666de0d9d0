"""
Transaction service: the ledger engine.

Creating, updating and deleting a transaction also moves the
balance of the account(s) it references. Each operation runs
as one atomic unit on the injected session:

1. Validate the kind/account combination (no I/O needed)
2. Check the user owns the category and accounts involved
3. Lock the affected account rows
4. Write the transaction row and apply the balance changes
5. Commit

If anything fails, the whole unit is rolled back: no
transaction row without its balance change, and no balance
change without its row. For every account, the balance stays
equal to its opening balance plus the effects of all
transactions that reference it.

Updates reverse ALL effects of the old version and then
apply ALL effects of the new one. That handles every mix of
amount, kind and account changes without special cases.
"""

import logging
import uuid
from contextlib import contextmanager
from decimal import Decimal

from sqlalchemy import select, func, or_, case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from finance_tracker.exceptions import NotFoundError, StorageError
from finance_tracker.models.account import Account
from finance_tracker.models.base import utcnow
from finance_tracker.models.budget import Budget, Category
from finance_tracker.models.enums import TransactionKind
from finance_tracker.models.transaction import Transaction
from finance_tracker.schemas.field_update import (
    FieldUpdate, Keep, Clear, resolve,
)
from finance_tracker.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionFilters,
    SummaryFilters,
    TransactionSummary,
    CategorySummary,
    TransactionDetailResponse,
    CategoryInfo,
    AccountInfo,
)
from finance_tracker.services.account_balance import AccountBalanceMutator
from finance_tracker.services.balance_effects import (
    compute_effects,
    reverse_effects,
    validate_account_combination,
)
from finance_tracker.services.ownership import OwnershipValidator

logger = logging.getLogger(__name__)


class TransactionService:
    """
    All transaction writes pass through this service.

    The session is injected, never looked up globally, so
    tests can hand in a SQLite session. Unlike the read-only
    helpers, the write operations own the commit: each one
    commits on success and rolls back on any error.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ownership = OwnershipValidator(db)
        self.balances = AccountBalanceMutator(db)

    @contextmanager
    def _atomic(self, operation: str):
        """
        Run the body as one database transaction.

        Commit is inside the try, so a failing commit is rolled
        back too. Database errors are logged and re-raised as
        StorageError without their text.
        """
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Storage failure during %s", operation)
            raise StorageError() from e
        except Exception:
            self.db.rollback()
            raise

    # --- Queries shared by the write paths ---

    def _owned_transaction_query(self, user_id: uuid.UUID):
        """Transactions whose category's budget belongs to user_id."""
        return (
            select(Transaction)
            .join(Category, Transaction.category_id == Category.id)
            .join(Budget, Category.budget_id == Budget.id)
            .where(Budget.owner_id == user_id)
        )

    def _lock_owned_transaction(
        self, user_id: uuid.UUID, transaction_id: uuid.UUID
    ) -> Transaction:
        """Load and lock a transaction, scoped to its owner."""
        txn = self.db.execute(
            self._owned_transaction_query(user_id)
            .where(Transaction.id == transaction_id)
            .with_for_update(of=Transaction)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not txn:
            raise NotFoundError("Transaction not found")
        return txn

    def _require_category(
        self, category_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        if not self.ownership.category_owned_by(category_id, user_id):
            raise NotFoundError("Category not found or access denied")

    def _require_account(
        self, account_id: uuid.UUID, user_id: uuid.UUID, role: str
    ) -> None:
        if not self.ownership.account_owned_by(account_id, user_id):
            raise NotFoundError(
                f"{role.capitalize()} account not found or access denied"
            )

    # --- Writes ---

    def create_transaction(
        self, user_id: uuid.UUID, request: TransactionCreate
    ) -> Transaction:
        """
        Record a transaction and apply its balance change.

        Raises InvalidCombinationError before touching the
        database, NotFoundError if the category or an account
        isn't the user's, StorageError if the database fails.
        """
        validate_account_combination(
            request.kind,
            request.source_account_id,
            request.destination_account_id,
        )

        with self._atomic("create"):
            self._require_category(request.category_id, user_id)
            if request.source_account_id is not None:
                self._require_account(request.source_account_id, user_id, "source")
            if request.destination_account_id is not None:
                self._require_account(
                    request.destination_account_id, user_id, "destination"
                )

            txn = Transaction(
                category_id=request.category_id,
                source_account_id=request.source_account_id,
                destination_account_id=request.destination_account_id,
                amount=request.amount,
                kind=request.kind,
                transaction_date=request.transaction_date,
                description=request.description,
            )
            self.db.add(txn)
            self.db.flush()

            self.balances.apply_effects(compute_effects(
                txn.kind,
                txn.amount,
                txn.source_account_id,
                txn.destination_account_id,
            ))

        logger.info(
            "Created %s transaction %s of %s for user %s",
            txn.kind.value, txn.id, txn.amount, user_id,
        )
        return txn

    def delete_transaction(
        self, user_id: uuid.UUID, transaction_id: uuid.UUID
    ) -> None:
        """
        Undo a transaction's balance change, then delete it.

        Accounts deleted since the transaction was recorded are
        skipped: there is no balance left to restore.
        """
        with self._atomic("delete"):
            txn = self._lock_owned_transaction(user_id, transaction_id)

            self.balances.apply_effects(
                reverse_effects(compute_effects(
                    txn.kind,
                    txn.amount,
                    txn.source_account_id,
                    txn.destination_account_id,
                )),
                skip_missing=True,
            )

            self.db.delete(txn)
            self.db.flush()

        logger.info("Deleted transaction %s for user %s", transaction_id, user_id)

    def update_transaction(
        self,
        user_id: uuid.UUID,
        transaction_id: uuid.UUID,
        request: TransactionUpdate,
    ) -> Transaction:
        """
        Apply a partial update and reconcile balances.

        Omitted fields keep their value. The account fields
        can also be cleared with an explicit null. The final
        state is validated as a whole, then the old effects
        are reversed and the new ones applied.
        """
        with self._atomic("update"):
            txn = self._lock_owned_transaction(user_id, transaction_id)

            old_effects = compute_effects(
                txn.kind,
                txn.amount,
                txn.source_account_id,
                txn.destination_account_id,
            )

            # --- Resolve the final values ---
            category_id = txn.category_id
            if request.category_id is not None:
                self._require_category(request.category_id, user_id)
                category_id = request.category_id

            source_update = request.source_account_update
            destination_update = request.destination_account_update
            source_id = self._resolve_account(
                source_update, txn.source_account_id, user_id, "source"
            )
            destination_id = self._resolve_account(
                destination_update, txn.destination_account_id, user_id, "destination"
            )

            kind = request.kind if request.kind is not None else txn.kind
            amount = request.amount if request.amount is not None else txn.amount

            validate_account_combination(kind, source_id, destination_id)

            # --- Lock every account either version touches ---
            new_effects = compute_effects(kind, amount, source_id, destination_id)
            locked = self.balances.lock_accounts(
                [e.account_id for e in old_effects]
                + [e.account_id for e in new_effects]
            )

            # A kept reference to an account deleted in the meantime
            # behaves like ON DELETE SET NULL: the link is dropped.
            if isinstance(source_update, Keep) and source_id is not None \
                    and source_id not in locked:
                logger.warning(
                    "Transaction %s: source account %s no longer exists, clearing",
                    txn.id, source_id,
                )
                source_id = None
            if isinstance(destination_update, Keep) and destination_id is not None \
                    and destination_id not in locked:
                logger.warning(
                    "Transaction %s: destination account %s no longer exists, clearing",
                    txn.id, destination_id,
                )
                destination_id = None
            new_effects = compute_effects(kind, amount, source_id, destination_id)

            # --- Reverse the old version, apply the new one ---
            self.balances.apply_effects(
                reverse_effects(old_effects), locked=locked, skip_missing=True
            )
            self.balances.apply_effects(new_effects, locked=locked)

            # --- Write the record ---
            txn.category_id = category_id
            txn.source_account_id = source_id
            txn.destination_account_id = destination_id
            txn.amount = amount
            txn.kind = kind
            if request.transaction_date is not None:
                txn.transaction_date = request.transaction_date
            if request.description is not None:
                txn.description = request.description
            # Refreshed even when no column changed
            txn.updated_at = utcnow()
            self.db.flush()

        logger.info("Updated transaction %s for user %s", transaction_id, user_id)
        return txn

    def _resolve_account(
        self,
        update: FieldUpdate,
        current: uuid.UUID | None,
        user_id: uuid.UUID,
        role: str,
    ) -> uuid.UUID | None:
        """Final account id for an update; a newly set id must be the user's."""
        if not isinstance(update, (Keep, Clear)):
            self._require_account(update.value, user_id, role)
        return resolve(update, current)

    # --- Reads ---

    def get_transaction(
        self, user_id: uuid.UUID, transaction_id: uuid.UUID
    ) -> Transaction:
        """Get one of the user's transactions by ID."""
        txn = self.db.execute(
            self._owned_transaction_query(user_id)
            .where(Transaction.id == transaction_id)
        ).scalar_one_or_none()
        if not txn:
            raise NotFoundError("Transaction not found")
        return txn

    def list_transactions(
        self, user_id: uuid.UUID, filters: TransactionFilters
    ) -> tuple[list[Transaction], int]:
        """Return one page of the user's transactions and the total match count."""
        conditions = self._filter_conditions(filters)
        if filters.account_id is not None:
            conditions.append(Transaction.source_account_id == filters.account_id)

        return self._paginate(
            self._owned_transaction_query(user_id).where(*conditions),
            filters,
        )

    def list_account_transactions(
        self,
        user_id: uuid.UUID,
        account_id: uuid.UUID,
        filters: TransactionFilters,
    ) -> tuple[list[Transaction], int]:
        """Transactions where the account is the source or the destination."""
        if not self.ownership.account_owned_by(account_id, user_id):
            raise NotFoundError("Account not found or access denied")

        query = select(Transaction).where(
            or_(
                Transaction.source_account_id == account_id,
                Transaction.destination_account_id == account_id,
            ),
            *self._filter_conditions(filters),
        )
        return self._paginate(query, filters)

    def get_by_categories(
        self, user_id: uuid.UUID, category_ids: list[uuid.UUID]
    ) -> list[Transaction]:
        """
        All transactions in any of the given categories, newest first.

        Fails with NotFoundError unless the user owns every one
        of the categories. No ids means no transactions.
        """
        if not category_ids:
            return []
        if not self.ownership.categories_owned_by(category_ids, user_id):
            raise NotFoundError("One or more categories not found or access denied")

        items = self.db.execute(
            select(Transaction)
            .where(Transaction.category_id.in_(set(category_ids)))
            .order_by(
                Transaction.transaction_date.desc(),
                Transaction.created_at.desc(),
            )
        ).scalars().all()
        return list(items)

    def list_transactions_detailed(
        self, user_id: uuid.UUID, filters: TransactionFilters
    ) -> tuple[list[TransactionDetailResponse], int]:
        """
        Like list_transactions, with the category and both
        accounts joined in so clients don't have to look them up.
        """
        conditions = self._filter_conditions(filters)
        if filters.account_id is not None:
            conditions.append(Transaction.source_account_id == filters.account_id)

        total = self._count(
            self._owned_transaction_query(user_id).where(*conditions)
        )

        source = aliased(Account)
        destination = aliased(Account)
        rows = self.db.execute(
            select(Transaction, Category, source, destination)
            .join(Category, Transaction.category_id == Category.id)
            .join(Budget, Category.budget_id == Budget.id)
            .outerjoin(source, Transaction.source_account_id == source.id)
            .outerjoin(
                destination, Transaction.destination_account_id == destination.id
            )
            .where(Budget.owner_id == user_id, *conditions)
            .order_by(
                Transaction.transaction_date.desc(),
                Transaction.created_at.desc(),
            )
            .limit(filters.limit)
            .offset(filters.offset)
        ).all()

        details = [
            TransactionDetailResponse(
                id=txn.id,
                amount=txn.amount,
                kind=txn.kind,
                transaction_date=txn.transaction_date,
                description=txn.description,
                created_at=txn.created_at,
                updated_at=txn.updated_at,
                category=CategoryInfo.model_validate(category),
                source_account=(
                    AccountInfo.model_validate(src) if src is not None else None
                ),
                destination_account=(
                    AccountInfo.model_validate(dst) if dst is not None else None
                ),
            )
            for txn, category, src, dst in rows
        ]
        return details, total

    def get_summary(
        self, user_id: uuid.UUID, filters: SummaryFilters
    ) -> TransactionSummary:
        """
        Totals for the user's transactions in a date range.

        Transfers count towards transaction_count but not
        towards income or expenses. The category breakdown only
        covers expenses, largest first.
        """
        conditions = [Budget.owner_id == user_id]
        if filters.start_date is not None:
            conditions.append(Transaction.transaction_date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Transaction.transaction_date <= filters.end_date)
        if filters.account_id is not None:
            conditions.append(Transaction.source_account_id == filters.account_id)

        def amount_of(kind: TransactionKind):
            return func.coalesce(func.sum(
                case((Transaction.kind == kind, Transaction.amount), else_=0)
            ), 0)

        totals = self.db.execute(
            select(
                amount_of(TransactionKind.INCOME),
                amount_of(TransactionKind.EXPENSE),
                func.count(Transaction.id),
            )
            .select_from(Transaction)
            .join(Category, Transaction.category_id == Category.id)
            .join(Budget, Category.budget_id == Budget.id)
            .where(*conditions)
        ).one()

        total_amount = func.sum(Transaction.amount)
        rows = self.db.execute(
            select(
                Category.id,
                Category.name,
                Category.color_hex,
                total_amount,
                func.count(Transaction.id),
            )
            .select_from(Transaction)
            .join(Category, Transaction.category_id == Category.id)
            .join(Budget, Category.budget_id == Budget.id)
            .where(Transaction.kind == TransactionKind.EXPENSE, *conditions)
            .group_by(Category.id, Category.name, Category.color_hex)
            .order_by(total_amount.desc())
        ).all()

        total_income = _to_decimal(totals[0])
        total_expenses = _to_decimal(totals[1])
        return TransactionSummary(
            total_income=total_income,
            total_expenses=total_expenses,
            net=total_income - total_expenses,
            transaction_count=totals[2],
            by_category=[
                CategorySummary(
                    category_id=row[0],
                    category_name=row[1],
                    category_color_hex=row[2],
                    total_amount=_to_decimal(row[3]),
                    transaction_count=row[4],
                )
                for row in rows
            ],
        )

    def ledger_balance(
        self, user_id: uuid.UUID, account_id: uuid.UUID
    ) -> Decimal:
        """
        Replay an account's balance from its transactions.

        This is what Account.balance must equal for an account
        opened at zero whose balance was never set directly.
        Comparing the two is an integrity check.
        """
        if not self.ownership.account_owned_by(account_id, user_id):
            raise NotFoundError("Account not found or access denied")

        signed = case(
            (
                (Transaction.destination_account_id == account_id)
                & (Transaction.kind == TransactionKind.TRANSFER),
                Transaction.amount,
            ),
            (Transaction.kind == TransactionKind.INCOME, Transaction.amount),
            else_=-Transaction.amount,
        )
        total = self.db.execute(
            select(func.coalesce(func.sum(signed), 0)).where(
                or_(
                    Transaction.source_account_id == account_id,
                    Transaction.destination_account_id == account_id,
                )
            )
        ).scalar()
        return _to_decimal(total)

    # --- Query helpers ---

    @staticmethod
    def _filter_conditions(filters: TransactionFilters) -> list:
        conditions = []
        if filters.start_date is not None:
            conditions.append(Transaction.transaction_date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Transaction.transaction_date <= filters.end_date)
        if filters.category_id is not None:
            conditions.append(Transaction.category_id == filters.category_id)
        if filters.kind is not None:
            conditions.append(Transaction.kind == filters.kind)
        return conditions

    def _count(self, query) -> int:
        return self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar()

    def _paginate(
        self, query, filters: TransactionFilters
    ) -> tuple[list[Transaction], int]:
        total = self._count(query)
        items = self.db.execute(
            query
            .order_by(
                Transaction.transaction_date.desc(),
                Transaction.created_at.desc(),
            )
            .limit(filters.limit)
            .offset(filters.offset)
        ).scalars().all()
        return list(items), total


def _to_decimal(value) -> Decimal:
    """Aggregates come back as int, float or Decimal depending on the driver."""
    return Decimal(str(value)).quantize(Decimal("0.01"))
