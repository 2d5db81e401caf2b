"""Abstract repository for InventoryItem aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ims.domain.model.inventory import InventoryItem, ItemFilter


class InventoryRepository(ABC):

    @abstractmethod
    def get(self, inventory_id: str) -> InventoryItem | None:
        """Return the item with this ID, or None."""

    @abstractmethod
    def get_by_sku(self, sku: str, location_id: str | None = None) -> InventoryItem | None:
        """Return the first item with this SKU, optionally at one location."""

    @abstractmethod
    def list_by_product(self, product_id: str) -> list[InventoryItem]:
        """Return the product's items across every location."""

    @abstractmethod
    def list_by_location(self, location_id: str) -> list[InventoryItem]:
        """Return every item stocked at a location."""

    @abstractmethod
    def list_low_stock(self) -> list[InventoryItem]:
        """Return items with ``available_quantity <= low_stock_threshold``."""

    @abstractmethod
    def list_out_of_stock(self) -> list[InventoryItem]:
        """Return items with nothing left to sell."""

    @abstractmethod
    def list_page(
        self,
        item_filter: ItemFilter | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[InventoryItem]:
        """Return a page of items, most recently updated first."""

    @abstractmethod
    def exists_for_location(self, location_id: str) -> bool:
        """True if any item references the location."""

    @abstractmethod
    def add(self, item: InventoryItem) -> None:
        """Persist a new item; ConflictError on a duplicate (sku, location)."""

    @abstractmethod
    def save_metadata(self, item: InventoryItem) -> None:
        """Persist threshold/reorder fields only; quantities are untouched."""

    @abstractmethod
    def delete(self, inventory_id: str) -> None:
        """Remove an item; ConflictError while history references it."""

    @abstractmethod
    def apply_posting(
        self,
        inventory_id: str,
        quantity_delta: int,
        reserved_delta: int,
        at: datetime,
        require_available: int | None = None,
        restocked_at: datetime | None = None,
    ) -> InventoryItem | None:
        """Atomically apply a posting's deltas to one item.

        The read-compute-write happens as one step in the store, so two
        concurrent postings never start from the same snapshot.  When
        ``require_available`` is given, the write only happens if the
        item's current ``available_quantity`` is at least that much.
        Each applied posting advances ``ledger_sequence`` by one.

        Returns the updated item, or None when the item is missing or
        the availability guard did not hold.
        """
