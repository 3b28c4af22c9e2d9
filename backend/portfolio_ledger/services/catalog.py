# backend/portfolio_ledger/services/catalog.py
"""
Catalog Service - asset types, assets and daily prices.

Plain CRUD around the ledger. Two rules live here:
- Referential guards: an asset type with assets, or an asset with
  transactions, cannot be deleted (ReferentialConflictError)
- Price upsert: one row per (asset_id, date); writing an existing pair
  updates the price in place

Asset.quantity is never written here; new assets start at 0 and only the
transaction engine changes their holding.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from portfolio_ledger.models import Asset, AssetType, PriceDaily
from portfolio_ledger.services.constants import (
    DEFAULT_ASSET_TYPES,
    SETTLEMENT_ACCOUNT_CODE,
    SETTLEMENT_ACCOUNT_NAME,
)
from portfolio_ledger.services.exceptions import (
    AssetNotFoundError,
    AssetTypeNotFoundError,
    PriceRecordNotFoundError,
    ReferentialConflictError,
    DuplicateResourceError,
    StorageError,
    ValidationError,
)
from portfolio_ledger.services.ledger import store
from portfolio_ledger.utils.financial import is_valid_currency, round_price
from portfolio_ledger.utils.sql import escape_like_pattern, LIKE_ESCAPE_CHAR

logger = logging.getLogger(__name__)


def _commit(db: Session, operation: str) -> None:
    """Commit, converting database failures into StorageError after rollback."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Storage failure during '{operation}'", exc_info=True)
        raise StorageError(operation) from exc


class CatalogService:
    """CRUD for asset types, assets and daily prices."""

    # =========================================================================
    # ASSET TYPES
    # =========================================================================

    def list_asset_types(self, db: Session) -> list[AssetType]:
        return list(db.scalars(select(AssetType).order_by(AssetType.id)).all())

    def get_asset_type(self, db: Session, asset_type_id: int) -> AssetType:
        asset_type = db.get(AssetType, asset_type_id)
        if asset_type is None:
            raise AssetTypeNotFoundError(asset_type_id)
        return asset_type

    def create_asset_type(
            self,
            db: Session,
            name: str,
            unit: str | None = None,
            description: str | None = None,
    ) -> AssetType:
        self._ensure_type_name_free(db, name)
        asset_type = AssetType(name=name, unit=unit, description=description)
        db.add(asset_type)
        _commit(db, "create asset type")
        db.refresh(asset_type)
        logger.info(f"Created asset type {asset_type.id} '{name}'")
        return asset_type

    def update_asset_type(self, db: Session, asset_type_id: int, **changes) -> AssetType:
        """Update name, unit and/or description (None values are ignored)."""
        asset_type = self.get_asset_type(db, asset_type_id)
        name = changes.get("name")
        if name is not None and name != asset_type.name:
            self._ensure_type_name_free(db, name, exclude_id=asset_type_id)

        for field in ("name", "unit", "description"):
            value = changes.get(field)
            if value is not None:
                setattr(asset_type, field, value)

        _commit(db, "update asset type")
        db.refresh(asset_type)
        return asset_type

    def delete_asset_type(self, db: Session, asset_type_id: int) -> None:
        asset_type = self.get_asset_type(db, asset_type_id)
        asset_count = db.scalar(
            select(func.count(Asset.id)).where(Asset.asset_type_id == asset_type_id)
        ) or 0
        if asset_count:
            raise ReferentialConflictError(
                f"Cannot delete asset type {asset_type_id}: {asset_count} asset(s) still use it",
                resource_type="AssetType",
                resource_id=asset_type_id,
            )
        db.delete(asset_type)
        _commit(db, "delete asset type")
        logger.info(f"Deleted asset type {asset_type_id}")

    # =========================================================================
    # ASSETS
    # =========================================================================

    def list_assets(
            self,
            db: Session,
            skip: int,
            limit: int,
            asset_type_id: int | None = None,
            search: str | None = None,
    ) -> tuple[list[Asset], int]:
        """
        One page of assets ordered by id, with their asset type loaded.

        ``search`` matches name or code (case-insensitive substring).
        """
        query = select(Asset).options(joinedload(Asset.asset_type))
        count_query = select(func.count(Asset.id))

        filters = []
        if asset_type_id is not None:
            filters.append(Asset.asset_type_id == asset_type_id)
        if search:
            pattern = f"%{escape_like_pattern(search)}%"
            filters.append(
                or_(
                    Asset.name.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    Asset.code.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                )
            )
        for condition in filters:
            query = query.where(condition)
            count_query = count_query.where(condition)

        total = db.scalar(count_query) or 0
        assets = db.scalars(query.order_by(Asset.id).offset(skip).limit(limit)).all()
        return list(assets), total

    def get_asset(self, db: Session, asset_id: int) -> Asset:
        asset = db.get(Asset, asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def create_asset(
            self,
            db: Session,
            name: str,
            code: str,
            asset_type_id: int,
            description: str | None = None,
            is_settlement_account: bool = False,
    ) -> Asset:
        """
        Register a new asset with a zero holding.

        Raises:
            AssetTypeNotFoundError: Unknown asset type
            DuplicateResourceError: Code taken, or a settlement account already exists
        """
        self.get_asset_type(db, asset_type_id)
        self._ensure_code_free(db, code)
        if is_settlement_account and store.get_settlement_account(db) is not None:
            raise DuplicateResourceError("Settlement account", "flag", "is_settlement_account")

        asset = Asset(
            name=name,
            code=code,
            asset_type_id=asset_type_id,
            description=description,
            quantity=Decimal("0"),
            is_settlement_account=is_settlement_account,
        )
        db.add(asset)
        _commit(db, "create asset")
        db.refresh(asset)
        logger.info(f"Created asset {asset.id} '{code}'")
        return asset

    def update_asset(self, db: Session, asset_id: int, **changes) -> Asset:
        """Update name, code and/or description; other attributes are immutable here."""
        asset = self.get_asset(db, asset_id)
        code = changes.get("code")
        if code is not None and code != asset.code:
            self._ensure_code_free(db, code, exclude_id=asset_id)

        for field in ("name", "code", "description"):
            value = changes.get(field)
            if value is not None:
                setattr(asset, field, value)

        _commit(db, "update asset")
        db.refresh(asset)
        return asset

    def delete_asset(self, db: Session, asset_id: int) -> None:
        """Delete an asset without transactions (its price rows go with it)."""
        asset = self.get_asset(db, asset_id)
        txn_count = store.count_transactions(db, asset_id)
        if txn_count:
            raise ReferentialConflictError(
                f"Cannot delete asset {asset_id}: it has {txn_count} transaction(s)",
                resource_type="Asset",
                resource_id=asset_id,
            )
        db.delete(asset)
        _commit(db, "delete asset")
        logger.info(f"Deleted asset {asset_id}")

    # =========================================================================
    # DAILY PRICES
    # =========================================================================

    def list_prices(
            self,
            db: Session,
            skip: int,
            limit: int,
            asset_id: int | None = None,
    ) -> tuple[list[PriceDaily], int]:
        """One page of price rows, newest date first."""
        query = select(PriceDaily)
        count_query = select(func.count(PriceDaily.id))
        if asset_id is not None:
            query = query.where(PriceDaily.asset_id == asset_id)
            count_query = count_query.where(PriceDaily.asset_id == asset_id)

        total = db.scalar(count_query) or 0
        rows = db.scalars(
            query.order_by(PriceDaily.date.desc(), PriceDaily.id.desc()).offset(skip).limit(limit)
        ).all()
        return list(rows), total

    def get_price(self, db: Session, price_id: int) -> PriceDaily:
        record = db.get(PriceDaily, price_id)
        if record is None:
            raise PriceRecordNotFoundError(price_id)
        return record

    def upsert_price(
            self,
            db: Session,
            asset_id: int,
            price_date: date,
            price: Decimal,
    ) -> tuple[PriceDaily, bool]:
        """
        Insert or update the price of an asset on a date.

        Returns:
            (record, created) where created is False for an in-place update

        Raises:
            AssetNotFoundError: Unknown asset
            ValidationError: Negative or non-finite price
        """
        if not is_valid_currency(price):
            raise ValidationError(f"Price must be at least 0, got {price}", field="price")
        self.get_asset(db, asset_id)
        value = round_price(price)

        record = self._price_row(db, asset_id, price_date)
        created = record is None
        if created:
            record = PriceDaily(asset_id=asset_id, date=price_date, price=value)
            db.add(record)
        else:
            record.price = value

        try:
            db.commit()
        except IntegrityError:
            # A concurrent writer inserted the same (asset_id, date) first
            db.rollback()
            record = self._price_row(db, asset_id, price_date)
            if record is None:
                raise StorageError("upsert price")
            record.price = value
            created = False
            _commit(db, "upsert price")
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Storage failure during 'upsert price'", exc_info=True)
            raise StorageError("upsert price") from exc

        db.refresh(record)
        logger.info(
            f"{'Created' if created else 'Updated'} price of asset {asset_id} "
            f"on {price_date}: {value}"
        )
        return record, created

    def delete_price(self, db: Session, price_id: int) -> None:
        record = self.get_price(db, price_id)
        db.delete(record)
        _commit(db, "delete price")
        logger.info(f"Deleted price record {price_id}")

    # =========================================================================
    # REFERENCE DATA
    # =========================================================================

    def seed_reference_data(self, db: Session) -> dict[str, int]:
        """
        Create the default asset types and the CASH001 settlement account.

        Idempotent: existing types (by name) and an existing settlement
        account are left untouched.

        Returns:
            Counts of created asset types and settlement accounts
        """
        existing = set(db.scalars(select(AssetType.name)).all())
        created_types = 0
        for name, unit, description in DEFAULT_ASSET_TYPES:
            if name not in existing:
                db.add(AssetType(name=name, unit=unit, description=description))
                created_types += 1
        db.flush()

        created_accounts = 0
        if store.get_settlement_account(db) is None:
            cash_type = db.scalar(select(AssetType).where(AssetType.name == DEFAULT_ASSET_TYPES[0][0]))
            account = db.scalar(select(Asset).where(Asset.code == SETTLEMENT_ACCOUNT_CODE))
            if account is not None:
                account.is_settlement_account = True
            else:
                db.add(
                    Asset(
                        name=SETTLEMENT_ACCOUNT_NAME,
                        code=SETTLEMENT_ACCOUNT_CODE,
                        asset_type_id=cash_type.id,
                        quantity=Decimal("0"),
                        description="Settlement account for buy/sell trades",
                        is_settlement_account=True,
                    )
                )
            created_accounts = 1

        _commit(db, "seed reference data")
        logger.info(
            f"Seeded reference data: {created_types} asset types, "
            f"{created_accounts} settlement account"
        )
        return {"asset_types": created_types, "settlement_accounts": created_accounts}

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _price_row(db: Session, asset_id: int, price_date: date) -> PriceDaily | None:
        return db.scalar(
            select(PriceDaily).where(
                PriceDaily.asset_id == asset_id,
                PriceDaily.date == price_date,
            )
        )

    @staticmethod
    def _ensure_type_name_free(db: Session, name: str, exclude_id: int | None = None) -> None:
        query = select(AssetType.id).where(AssetType.name == name)
        if exclude_id is not None:
            query = query.where(AssetType.id != exclude_id)
        if db.scalar(query) is not None:
            raise DuplicateResourceError("Asset type", "name", name)

    @staticmethod
    def _ensure_code_free(db: Session, code: str, exclude_id: int | None = None) -> None:
        query = select(Asset.id).where(Asset.code == code)
        if exclude_id is not None:
            query = query.where(Asset.id != exclude_id)
        if db.scalar(query) is not None:
            raise DuplicateResourceError("Asset", "code", code)
