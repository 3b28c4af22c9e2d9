# backend/portfolio_ledger/models.py
import enum
import datetime as dt
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Date, DateTime, ForeignKey, Enum, Numeric, UniqueConstraint, Boolean, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TransactionType(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssetType(Base):
    """
    Category of assets (Cash, Stock, Bond, Crypto, ...).

    The normalized ``type_key`` (lower-cased name without whitespace) is the
    grouping key for cross-asset aggregation.
    """
    __tablename__ = "asset_types"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    assets: Mapped[list["Asset"]] = relationship(back_populates="asset_type")

    @property
    def type_key(self) -> str:
        return "".join(self.name.lower().split())


class Asset(Base):
    """
    A holdable instrument identified by its unique business ``code``.

    ``quantity`` is a cached projection of the ledger: it always equals the
    ``holding`` of the asset's latest transaction in (transaction_date, id)
    order, and is written only by the transaction engine.
    """
    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True)  # e.g. "CASH001", "AAPL"
    asset_type_id: Mapped[int] = mapped_column(ForeignKey("asset_types.id"), index=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(20, 6), default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Settlement (cash) account that buy/sell trades post their offsetting entry against
    is_settlement_account: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    asset_type: Mapped["AssetType"] = relationship(back_populates="assets")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="asset")
    prices: Mapped[list["PriceDaily"]] = relationship(
        back_populates="asset",
        cascade="all, delete-orphan",
    )

    @property
    def asset_type_name(self) -> str | None:
        return self.asset_type.name if self.asset_type else None

    @property
    def unit(self) -> str | None:
        return self.asset_type.unit if self.asset_type else None


class Transaction(Base):
    """
    One immutable ledger entry.

    ``holding`` is the asset's balance after this entry. It is fixed when the
    entry is written and is the source of truth for historical replay.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        # Ledger order for one asset: (transaction_date, id)
        # Used by replay, latest-holding lookups and chain recompute
        Index('ix_transaction_asset_date_id', 'asset_id', 'transaction_date', 'id'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), index=True)
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType))
    quantity: Mapped[Decimal] = mapped_column(Numeric(20, 6))
    price: Mapped[Decimal] = mapped_column(Numeric(20, 4))
    transaction_date: Mapped[dt.date] = mapped_column(Date, index=True)
    holding: Mapped[Decimal] = mapped_column(Numeric(20, 6))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    asset: Mapped["Asset"] = relationship(back_populates="transactions")

    @property
    def signed_quantity(self) -> Decimal:
        return self.quantity if self.transaction_type == TransactionType.IN else -self.quantity


class PriceDaily(Base):
    """
    Closing price of one asset on one calendar date.

    At most one row per (asset_id, date); writes to an existing pair update
    the row in place.
    """
    __tablename__ = "price_daily"
    __table_args__ = (
        UniqueConstraint('asset_id', 'date', name='uq_price_daily_asset_date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(20, 4))
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    asset: Mapped["Asset"] = relationship(back_populates="prices")
