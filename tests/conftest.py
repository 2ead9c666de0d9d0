"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so no test data persists.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import sessionmaker

from finance_tracker.main import app
from finance_tracker.models import (
    Base, User, Budget, Category, Account, AccountType,
)
from finance_tracker.models.base import get_db


# Use SQLite for tests, no external database needed.
# SQLite ignores FOR UPDATE, so locking itself is not
# exercised here; everything else about the ledger is.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Domain fixtures ---

def create_user(db_session, email):
    user = User(email=email)
    db_session.add(user)
    db_session.commit()
    return user


def create_category(db_session, user, name="Groceries", month=0, year=2026):
    budget = Budget(owner_id=user.id, month=month, year=year)
    db_session.add(budget)
    db_session.flush()
    category = Category(budget_id=budget.id, name=name)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def user(db_session):
    return create_user(db_session, "owner@test.com")


@pytest.fixture
def other_user(db_session):
    return create_user(db_session, "other@test.com")


@pytest.fixture
def category(db_session, user):
    return create_category(db_session, user)


@pytest.fixture
def other_category(db_session, other_user):
    return create_category(db_session, other_user, name="Not mine")


@pytest.fixture
def make_account(db_session):
    """Factory: make_account(owner, balance="100.00") -> committed Account."""
    def _make(owner, balance="0.00", name="Checking"):
        account = Account(
            owner_id=owner.id,
            name=name,
            account_type=AccountType.CHECKING,
            balance=Decimal(balance),
        )
        db_session.add(account)
        db_session.commit()
        return account
    return _make


@pytest.fixture
def balance_of(db_session):
    """Read an account's balance fresh from the database."""
    def _balance(account):
        db_session.refresh(account)
        return account.balance
    return _balance


@pytest.fixture
def make_category(db_session):
    """Factory: make_category(owner, name, month) -> committed Category."""
    return lambda owner, name="Groceries", month=0: create_category(
        db_session, owner, name=name, month=month
    )


@pytest.fixture
def postgres_sql(db_session, monkeypatch):
    """
    Every statement run on db_session, rendered as PostgreSQL SQL.

    The SQLite compiler leaves FOR UPDATE out, so row locks
    only show up in the PostgreSQL rendering.
    """
    rendered = []
    real_execute = db_session.execute

    def recording_execute(statement, *args, **kwargs):
        rendered.append(str(statement.compile(dialect=postgresql.dialect())))
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", recording_execute)
    return rendered
