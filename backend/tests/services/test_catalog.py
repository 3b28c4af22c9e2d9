# tests/services/test_catalog.py
"""
Tests for CatalogService (asset types, assets, daily prices, seeding).
"""

from datetime import date
from decimal import Decimal

import pytest

from portfolio_ledger.models import Asset, AssetType, PriceDaily
from portfolio_ledger.services.catalog import CatalogService
from portfolio_ledger.services.constants import DEFAULT_ASSET_TYPES
from portfolio_ledger.services.exceptions import (
    AssetNotFoundError,
    AssetTypeNotFoundError,
    DuplicateResourceError,
    PriceRecordNotFoundError,
    ReferentialConflictError,
    ValidationError,
)
from tests.conftest import create_asset, create_price, post


@pytest.fixture
def catalog() -> CatalogService:
    return CatalogService()


class TestAssetTypes:

    def test_create_and_list(self, db, catalog):
        created = catalog.create_asset_type(db, "Bond", unit="units")

        assert created.id is not None
        assert [t.name for t in catalog.list_asset_types(db)] == ["Bond"]

    def test_duplicate_name(self, db, catalog, stock_type):
        with pytest.raises(DuplicateResourceError):
            catalog.create_asset_type(db, "Stock")

    def test_update_ignores_missing_fields(self, db, catalog, stock_type):
        updated = catalog.update_asset_type(db, stock_type.id, description="Equities")

        assert updated.name == "Stock"
        assert updated.unit == "shares"
        assert updated.description == "Equities"

    def test_rename_to_existing_name(self, db, catalog, stock_type, cash_type):
        with pytest.raises(DuplicateResourceError):
            catalog.update_asset_type(db, stock_type.id, name="Cash")

    def test_delete_type_in_use(self, db, catalog, stock_type, stock):
        with pytest.raises(ReferentialConflictError):
            catalog.delete_asset_type(db, stock_type.id)

    def test_delete_unused_type(self, db, catalog, stock_type):
        catalog.delete_asset_type(db, stock_type.id)

        with pytest.raises(AssetTypeNotFoundError):
            catalog.get_asset_type(db, stock_type.id)


class TestAssets:

    def test_create_starts_at_zero(self, db, catalog, stock_type):
        asset = catalog.create_asset(db, "Apple Inc.", "AAPL", stock_type.id)

        assert asset.quantity == Decimal("0")
        assert asset.is_settlement_account is False
        assert asset.asset_type_name == "Stock"

    def test_unknown_type(self, db, catalog):
        with pytest.raises(AssetTypeNotFoundError):
            catalog.create_asset(db, "Apple Inc.", "AAPL", 999)

    def test_duplicate_code(self, db, catalog, stock_type, stock):
        with pytest.raises(DuplicateResourceError):
            catalog.create_asset(db, "Another", "AAPL", stock_type.id)

    def test_single_settlement_account(self, db, catalog, cash_type, cash_account):
        with pytest.raises(DuplicateResourceError):
            catalog.create_asset(db, "Second", "CASH002", cash_type.id, is_settlement_account=True)

    def test_list_filters_and_counts(self, db, catalog, stock_type, cash_type):
        create_asset(db, stock_type, code="AAPL", name="Apple Inc.")
        create_asset(db, stock_type, code="MSFT", name="Microsoft")
        create_asset(db, cash_type, code="CASH001", name="Cash Account")

        assets, total = catalog.list_assets(db, skip=0, limit=10, asset_type_id=stock_type.id)
        assert total == 2
        assert [a.code for a in assets] == ["AAPL", "MSFT"]

        assets, total = catalog.list_assets(db, skip=0, limit=10, search="app")
        assert total == 1
        assert assets[0].code == "AAPL"

        assets, total = catalog.list_assets(db, skip=2, limit=2)
        assert total == 3
        assert [a.code for a in assets] == ["CASH001"]

    def test_search_treats_wildcards_literally(self, db, catalog, stock_type):
        create_asset(db, stock_type, code="AAPL", name="Apple Inc.")

        _, total = catalog.list_assets(db, skip=0, limit=10, search="%")

        assert total == 0

    def test_update_code(self, db, catalog, stock):
        updated = catalog.update_asset(db, stock.id, code="AAPL.US")
        assert updated.code == "AAPL.US"

    def test_update_never_touches_quantity(self, db, catalog, stock):
        post(db, stock, "10", date(2024, 1, 1))

        updated = catalog.update_asset(db, stock.id, name="Apple", quantity=Decimal("99"))

        assert updated.name == "Apple"
        assert updated.quantity == Decimal("10")

    def test_delete_asset_with_transactions(self, db, catalog, stock):
        post(db, stock, "10", date(2024, 1, 1))

        with pytest.raises(ReferentialConflictError):
            catalog.delete_asset(db, stock.id)

    def test_delete_asset_removes_prices(self, db, catalog, stock):
        create_price(db, stock, date(2024, 1, 1), "150")

        catalog.delete_asset(db, stock.id)

        assert db.get(Asset, stock.id) is None
        assert db.query(PriceDaily).count() == 0


class TestPrices:

    def test_upsert_creates_then_updates(self, db, catalog, stock):
        first, created = catalog.upsert_price(db, stock.id, date(2024, 1, 1), Decimal("150"))
        assert created is True

        second, created = catalog.upsert_price(db, stock.id, date(2024, 1, 1), Decimal("151.5"))

        assert created is False
        assert second.id == first.id
        assert second.price == Decimal("151.5")
        assert db.query(PriceDaily).count() == 1

    def test_upsert_rounds_to_four_places(self, db, catalog, stock):
        record, _ = catalog.upsert_price(db, stock.id, date(2024, 1, 1), Decimal("12.34567"))
        assert record.price == Decimal("12.3457")

    def test_negative_price(self, db, catalog, stock):
        with pytest.raises(ValidationError):
            catalog.upsert_price(db, stock.id, date(2024, 1, 1), Decimal("-1"))

    def test_unknown_asset(self, db, catalog):
        with pytest.raises(AssetNotFoundError):
            catalog.upsert_price(db, 999, date(2024, 1, 1), Decimal("1"))

    def test_list_newest_first(self, db, catalog, stock):
        for day in (1, 3, 2):
            create_price(db, stock, date(2024, 1, day), "100")

        rows, total = catalog.list_prices(db, skip=0, limit=10, asset_id=stock.id)

        assert total == 3
        assert [r.date.day for r in rows] == [3, 2, 1]

    def test_delete_price(self, db, catalog, stock):
        record = create_price(db, stock, date(2024, 1, 1), "100")

        catalog.delete_price(db, record.id)

        with pytest.raises(PriceRecordNotFoundError):
            catalog.get_price(db, record.id)


class TestSeedReferenceData:

    def test_seed_is_idempotent(self, db, catalog):
        first = catalog.seed_reference_data(db)
        second = catalog.seed_reference_data(db)

        assert first == {"asset_types": len(DEFAULT_ASSET_TYPES), "settlement_accounts": 1}
        assert second == {"asset_types": 0, "settlement_accounts": 0}
        assert db.query(AssetType).count() == len(DEFAULT_ASSET_TYPES)

        account = db.query(Asset).filter(Asset.is_settlement_account.is_(True)).one()
        assert account.code == "CASH001"
        assert account.asset_type_name == "Cash"

    def test_existing_cash_account_is_flagged(self, db, catalog, cash_type):
        existing = create_asset(db, cash_type, code="CASH001")

        catalog.seed_reference_data(db)

        db.refresh(existing)
        assert existing.is_settlement_account is True
        assert db.query(Asset).count() == 1
