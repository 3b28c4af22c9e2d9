# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- TestClient with the database dependency overridden
- Sample data factories (asset types, assets, prices, ledger entries)

Environment variables are set before any portfolio_ledger import so the
settings singleton is built in test mode with rate limiting disabled.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio_ledger.database import get_db
from portfolio_ledger.main import app
from portfolio_ledger.models import (
    Base,
    Asset,
    AssetType,
    PriceDaily,
    Transaction,
    TransactionType,
)
from portfolio_ledger.services.ledger import TransactionEngine


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db: Session) -> Iterator[TestClient]:
    """TestClient whose requests share the test session."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def create_asset_type(
        db: Session,
        name: str = "Stock",
        unit: str | None = "shares",
        description: str | None = None,
) -> AssetType:
    asset_type = AssetType(name=name, unit=unit, description=description)
    db.add(asset_type)
    db.commit()
    db.refresh(asset_type)
    return asset_type


def create_asset(
        db: Session,
        asset_type: AssetType,
        code: str = "AAPL",
        name: str | None = None,
        is_settlement_account: bool = False,
) -> Asset:
    """Create an asset with a zero holding; use post() to give it one."""
    asset = Asset(
        name=name or f"{code} asset",
        code=code,
        asset_type_id=asset_type.id,
        quantity=Decimal("0"),
        is_settlement_account=is_settlement_account,
    )
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


def create_price(db: Session, asset: Asset, day: date, price: str | Decimal) -> PriceDaily:
    record = PriceDaily(asset_id=asset.id, date=day, price=Decimal(str(price)))
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def post(
        db: Session,
        asset: Asset,
        quantity: str | Decimal,
        day: date,
        transaction_type: TransactionType = TransactionType.IN,
        price: str | Decimal = "1",
) -> Transaction:
    """Record a manual ledger entry through the engine (keeps holdings consistent)."""
    return TransactionEngine().record_transaction(
        db,
        asset_id=asset.id,
        transaction_type=transaction_type,
        quantity=Decimal(str(quantity)),
        price=Decimal(str(price)),
        transaction_date=day,
    )


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def ledger() -> TransactionEngine:
    return TransactionEngine()


@pytest.fixture
def cash_type(db: Session) -> AssetType:
    return create_asset_type(db, name="Cash", unit="USD")


@pytest.fixture
def stock_type(db: Session) -> AssetType:
    return create_asset_type(db, name="Stock", unit="shares")


@pytest.fixture
def cash_account(db: Session, cash_type: AssetType) -> Asset:
    return create_asset(db, cash_type, code="CASH001", name="Cash Account", is_settlement_account=True)


@pytest.fixture
def stock(db: Session, stock_type: AssetType) -> Asset:
    return create_asset(db, stock_type, code="AAPL", name="Apple Inc.")


@pytest.fixture
def funded_cash(db: Session, cash_account: Asset) -> Asset:
    """Settlement account holding 10,000.00 since 2024-01-01."""
    post(db, cash_account, "10000", date(2024, 1, 1))
    db.refresh(cash_account)
    return cash_account
