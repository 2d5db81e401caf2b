"""Abstract repository for InventoryReservation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ims.domain.model.reservation import InventoryReservation, ReservationStatus


class ReservationRepository(ABC):

    @abstractmethod
    def add(self, reservation: InventoryReservation) -> None:
        """Persist a new reservation."""

    @abstractmethod
    def get(self, reservation_id: str) -> InventoryReservation | None:
        """Return a reservation by ID, or None."""

    @abstractmethod
    def list_active_by_item(self, inventory_id: str) -> list[InventoryReservation]:
        """Return the active reservations held against an item."""

    @abstractmethod
    def list_by_order(self, order_id: str) -> list[InventoryReservation]:
        """Return an order's reservations in any status."""

    @abstractmethod
    def list_active_by_cart(self, cart_id: str) -> list[InventoryReservation]:
        """Return a cart's active reservations."""

    @abstractmethod
    def list_lapsed(self, now: datetime) -> list[InventoryReservation]:
        """Return active reservations whose ``expires_at`` is before ``now``."""

    @abstractmethod
    def exists_for_item(self, inventory_id: str) -> bool:
        """True if any reservation, in any status, references the item."""

    @abstractmethod
    def compare_and_set_status(
        self,
        reservation_id: str,
        expected: ReservationStatus,
        new_status: ReservationStatus,
        at: datetime,
    ) -> bool:
        """Move ``expected -> new_status`` only if the row is still ``expected``.

        Returns False when another writer changed the status first.
        """
