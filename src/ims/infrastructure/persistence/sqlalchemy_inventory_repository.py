"""SQLAlchemy-backed implementation of InventoryRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, delete, exists, select, update
from sqlalchemy.orm import Session

from ims.domain.model.inventory import InventoryItem, ItemFilter
from ims.domain.repository.inventory_repository import InventoryRepository
from ims.infrastructure.persistence.orm import ItemRow


def _clamped(expr):
    """SQL ``max(0, expr)``."""
    return case((expr < 0, 0), else_=expr)


class SqlAlchemyInventoryRepository(InventoryRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- Reads ----------------------------------------------------------------

    def get(self, inventory_id: str) -> InventoryItem | None:
        row = self._session.get(ItemRow, inventory_id, populate_existing=True)
        return self._to_domain(row) if row else None

    def get_by_sku(self, sku: str, location_id: str | None = None) -> InventoryItem | None:
        stmt = select(ItemRow).where(ItemRow.sku == sku)
        if location_id is not None:
            stmt = stmt.where(ItemRow.location_id == location_id)
        stmt = stmt.order_by(ItemRow.created_at).limit(1)
        row = self._session.scalars(stmt.execution_options(populate_existing=True)).first()
        return self._to_domain(row) if row else None

    def list_by_product(self, product_id: str) -> list[InventoryItem]:
        return self._fetch(select(ItemRow).where(ItemRow.product_id == product_id))

    def list_by_location(self, location_id: str) -> list[InventoryItem]:
        return self._fetch(select(ItemRow).where(ItemRow.location_id == location_id))

    def list_low_stock(self) -> list[InventoryItem]:
        return self._fetch(
            select(ItemRow).where(ItemRow.available_quantity <= ItemRow.low_stock_threshold)
        )

    def list_out_of_stock(self) -> list[InventoryItem]:
        return self._fetch(select(ItemRow).where(ItemRow.available_quantity <= 0))

    def list_page(
        self,
        item_filter: ItemFilter | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[InventoryItem]:
        item_filter = item_filter or ItemFilter()
        stmt = select(ItemRow)
        if item_filter.location_id:
            stmt = stmt.where(ItemRow.location_id == item_filter.location_id)
        if item_filter.low_stock:
            stmt = stmt.where(ItemRow.available_quantity <= ItemRow.low_stock_threshold)
        if item_filter.out_of_stock:
            stmt = stmt.where(ItemRow.available_quantity <= 0)
        stmt = stmt.order_by(ItemRow.updated_at.desc()).limit(limit).offset(offset)
        return self._scalars(stmt)

    def exists_for_location(self, location_id: str) -> bool:
        stmt = select(exists().where(ItemRow.location_id == location_id))
        return bool(self._session.scalar(stmt))

    # --- Writes ---------------------------------------------------------------

    def add(self, item: InventoryItem) -> None:
        self._session.add(self._to_row(item))
        self._session.flush()

    def save_metadata(self, item: InventoryItem) -> None:
        self._session.execute(
            update(ItemRow)
            .where(ItemRow.id == item.id)
            .values(
                low_stock_threshold=item.low_stock_threshold,
                reorder_point=item.reorder_point,
                reorder_quantity=item.reorder_quantity,
                last_restock_date=item.last_restock_date,
                updated_at=item.updated_at,
            )
            .execution_options(synchronize_session=False)
        )

    def delete(self, inventory_id: str) -> None:
        self._session.execute(delete(ItemRow).where(ItemRow.id == inventory_id))

    def apply_posting(
        self,
        inventory_id: str,
        quantity_delta: int,
        reserved_delta: int,
        at: datetime,
        require_available: int | None = None,
        restocked_at: datetime | None = None,
    ) -> InventoryItem | None:
        # Every SET expression reads the pre-update row, so this is the
        # same arithmetic as domain.model.inventory.apply_deltas.
        new_quantity = _clamped(ItemRow.quantity + quantity_delta)
        new_reserved = _clamped(ItemRow.reserved_quantity + reserved_delta)
        values = {
            "quantity": new_quantity,
            "reserved_quantity": new_reserved,
            "available_quantity": _clamped(new_quantity - new_reserved),
            "ledger_sequence": ItemRow.ledger_sequence + 1,
            "updated_at": at,
        }
        if restocked_at is not None:
            values["last_restock_date"] = restocked_at

        stmt = update(ItemRow).where(ItemRow.id == inventory_id)
        if require_available is not None:
            stmt = stmt.where(ItemRow.available_quantity >= require_available)
        result = self._session.execute(
            stmt.values(values).execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return self.get(inventory_id)

    # --- Mapping --------------------------------------------------------------

    def _fetch(self, stmt) -> list[InventoryItem]:
        return self._scalars(stmt.order_by(ItemRow.sku, ItemRow.location_id))

    def _scalars(self, stmt) -> list[InventoryItem]:
        rows = self._session.scalars(stmt.execution_options(populate_existing=True))
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_row(item: InventoryItem) -> ItemRow:
        return ItemRow(
            id=item.id,
            product_id=item.product_id,
            sku=item.sku,
            location_id=item.location_id,
            quantity=item.quantity,
            reserved_quantity=item.reserved_quantity,
            available_quantity=item.available_quantity,
            low_stock_threshold=item.low_stock_threshold,
            reorder_point=item.reorder_point,
            reorder_quantity=item.reorder_quantity,
            last_restock_date=item.last_restock_date,
            ledger_sequence=item.ledger_sequence,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )

    @staticmethod
    def _to_domain(row: ItemRow) -> InventoryItem:
        return InventoryItem(
            id=row.id,
            product_id=row.product_id,
            sku=row.sku,
            location_id=row.location_id,
            quantity=row.quantity,
            reserved_quantity=row.reserved_quantity,
            available_quantity=row.available_quantity,
            low_stock_threshold=row.low_stock_threshold,
            reorder_point=row.reorder_point,
            reorder_quantity=row.reorder_quantity,
            last_restock_date=row.last_restock_date,
            ledger_sequence=row.ledger_sequence,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
