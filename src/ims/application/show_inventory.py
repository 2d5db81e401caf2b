"""Application service: inventory item queries."""

from __future__ import annotations

from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.inventory import InventoryItem, ItemFilter
from ims.domain.repository.unit_of_work import UnitOfWork


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        item_filter: ItemFilter | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[InventoryItem]:
        """Return a page of items, most recently updated first."""
        if limit <= 0 or offset < 0:
            raise ValidationError("limit must be positive and offset non-negative")
        with self._uow:
            return self._uow.items.list_page(item_filter, limit=limit, offset=offset)

    def find(self, inventory_id: str) -> InventoryItem:
        with self._uow:
            item = self._uow.items.get(inventory_id)
        if item is None:
            raise EntityNotFoundError(f"Inventory item '{inventory_id}' not found")
        return item

    def find_by_sku(self, sku: str, location_id: str | None = None) -> InventoryItem:
        with self._uow:
            item = self._uow.items.get_by_sku(sku, location_id)
        if item is None:
            where = f" at location {location_id}" if location_id else ""
            raise EntityNotFoundError(f"No inventory item with SKU {sku}{where}")
        return item

    def by_product(self, product_id: str) -> list[InventoryItem]:
        with self._uow:
            return self._uow.items.list_by_product(product_id)

    def by_location(self, location_id: str) -> list[InventoryItem]:
        with self._uow:
            return self._uow.items.list_by_location(location_id)

    def low_stock(self) -> list[InventoryItem]:
        with self._uow:
            return self._uow.items.list_low_stock()

    def out_of_stock(self) -> list[InventoryItem]:
        with self._uow:
            return self._uow.items.list_out_of_stock()
