"""Abstract repository for the append-only transaction ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.transaction import InventoryTransaction


class TransactionRepository(ABC):

    @abstractmethod
    def add(self, transaction: InventoryTransaction) -> None:
        """Append a ledger entry. There is no update and no delete."""

    @abstractmethod
    def get(self, transaction_id: str) -> InventoryTransaction | None:
        """Return a ledger entry by ID, or None."""

    @abstractmethod
    def list_by_item(self, inventory_id: str) -> list[InventoryTransaction]:
        """Return an item's entries, highest ``sequence`` first."""

    @abstractmethod
    def list_by_reference(self, reference: str) -> list[InventoryTransaction]:
        """Return entries carrying this reference, newest first."""

    @abstractmethod
    def exists_for_item(self, inventory_id: str) -> bool:
        """True if any entry references the item."""
