"""SQLAlchemy table mappings and engine setup.

Rows are plain persistence records; repositories translate them to and
from the domain dataclasses, so nothing outside this package ever sees a
mapped object.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, hands back timezone-aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class LocationRow(Base):
    __tablename__ = "inventory_location"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(32), nullable=False)
    address = Column(Text)
    city = Column(String(120))
    state = Column(String(120))
    country = Column(String(120))
    postal_code = Column(String(32))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


class ItemRow(Base):
    __tablename__ = "inventory_item"
    __table_args__ = (
        UniqueConstraint("sku", "location_id", name="uq_inventory_item_sku_location"),
        CheckConstraint("quantity >= 0", name="ck_inventory_item_quantity"),
        CheckConstraint("reserved_quantity >= 0", name="ck_inventory_item_reserved"),
        CheckConstraint("available_quantity >= 0", name="ck_inventory_item_available"),
        Index("ix_inventory_item_product", "product_id"),
    )

    id = Column(String(32), primary_key=True)
    product_id = Column(String(64), nullable=False)
    sku = Column(String(128), nullable=False)
    location_id = Column(
        String(32),
        ForeignKey("inventory_location.id", ondelete="RESTRICT"),
        nullable=False,
    )
    quantity = Column(Integer, nullable=False, default=0)
    reserved_quantity = Column(Integer, nullable=False, default=0)
    available_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False)
    reorder_point = Column(Integer, nullable=False)
    reorder_quantity = Column(Integer, nullable=False)
    last_restock_date = Column(UTCDateTime)
    ledger_sequence = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


class TransactionRow(Base):
    __tablename__ = "inventory_transaction"
    __table_args__ = (
        UniqueConstraint("inventory_id", "sequence", name="uq_inventory_transaction_item_sequence"),
        Index("ix_inventory_transaction_reference", "reference"),
    )

    id = Column(String(32), primary_key=True)
    inventory_id = Column(
        String(32),
        ForeignKey("inventory_item.id", ondelete="RESTRICT"),
        nullable=False,
    )
    transaction_type = Column(String(32), nullable=False)
    quantity = Column(Integer, nullable=False)
    source_location_id = Column(String(32))
    destination_location_id = Column(String(32))
    reference = Column(String(255))
    notes = Column(Text)
    created_by = Column(String(255), nullable=False)
    created_at = Column(UTCDateTime, nullable=False)
    sequence = Column(Integer, nullable=False)


class ReservationRow(Base):
    __tablename__ = "inventory_reservation"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_inventory_reservation_quantity"),
        Index("ix_inventory_reservation_status_expiry", "status", "expires_at"),
        Index("ix_inventory_reservation_cart", "cart_id"),
        Index("ix_inventory_reservation_order", "order_id"),
    )

    id = Column(String(32), primary_key=True)
    inventory_id = Column(
        String(32),
        ForeignKey("inventory_item.id", ondelete="RESTRICT"),
        nullable=False,
    )
    order_id = Column(String(255))
    cart_id = Column(String(255))
    quantity = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default="active")
    expires_at = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


# --- Engine -------------------------------------------------------------------


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, sqlite_busy_timeout: float = 30.0) -> Engine:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True)

    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False, "timeout": sqlite_busy_timeout},
    )
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)
