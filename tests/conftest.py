"""Pytest fixtures shared by the wheel tracker test suite.

This module provides an in-memory database session, a unit of work bound
to it, account fixtures, and FastAPI test clients.
"""

import os
import tempfile

# Keep the application's own engine (used by startup and /api/v1/info) off
# the user's real ledger. Must run before wheeltracker is imported.
os.environ.setdefault(
    "WHEELTRACKER_DATABASE_PATH",
    os.path.join(tempfile.mkdtemp(prefix="wheeltracker-tests-"), "ledger.db"),
)

from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from wheeltracker.server.database.session import Base, configure_engine, get_db
from wheeltracker.server.main import app
from wheeltracker.server.models.account import AccountCreate
from wheeltracker.server.models.trade import DepositRequest
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.accounts import AccountService
from wheeltracker.server.services.trade_entry import TradeEntryService

# Import all models to ensure they're registered with Base
from wheeltracker.server.database.models import (  # noqa: F401
    Account,
    LedgerEntry,
    OptionLeg,
    ReinvestSignal,
    StockLot,
    StrategyInstance,
    Underlying,
    WealthWheelClassification,
    WealthWheelTarget,
)


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """Create a test database session.

    Creates an in-memory SQLite database for testing that is
    destroyed after each test function completes.

    Yields:
        SQLAlchemy session for testing
    """
    # Keep one connection alive for the in-memory database
    engine = configure_engine(
        create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def uow(test_db: Session) -> UnitOfWork:
    """Unit of work bound to the test session."""
    return UnitOfWork(test_db)


@pytest.fixture
def account_id(uow: UnitOfWork) -> str:
    """Create an empty account and return its ID."""
    account = AccountService(uow).create_account(AccountCreate(name="Test Account"))
    return account.id


@pytest.fixture
def trades(uow: UnitOfWork) -> TradeEntryService:
    return TradeEntryService(uow)


@pytest.fixture
def funded_account_id(account_id: str, trades: TradeEntryService) -> str:
    """Account holding $10,000.00 of cash."""
    trades.deposit(account_id, DepositRequest(amount=Decimal("10000.00")))
    return account_id


@pytest.fixture(scope="function")
def client(test_db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with test database.

    Creates a FastAPI TestClient that uses the test database
    instead of the real database.

    Args:
        test_db: Test database session fixture

    Yields:
        FastAPI TestClient for making test requests
    """

    def override_get_db():
        """Override database dependency with test database."""
        # Return the same session for all requests in a test
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    # Clear overrides and rollback any uncommitted changes
    test_db.rollback()
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client_no_db() -> Generator[TestClient, None, None]:
    """Create a test client without database mocking.

    Useful for testing endpoints that don't need database access.
    """
    with TestClient(app) as test_client:
        yield test_client
