"""Application service: reservation queries."""

from __future__ import annotations

from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.reservation import InventoryReservation
from ims.domain.repository.unit_of_work import UnitOfWork


class ShowReservationsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def find(self, reservation_id: str) -> InventoryReservation:
        with self._uow:
            reservation = self._uow.reservations.get(reservation_id)
        if reservation is None:
            raise EntityNotFoundError(f"Reservation '{reservation_id}' not found")
        return reservation

    def by_item(self, inventory_id: str) -> list[InventoryReservation]:
        """Active holds against an item."""
        with self._uow:
            return self._uow.reservations.list_active_by_item(inventory_id)

    def by_order(self, order_id: str) -> list[InventoryReservation]:
        """Every reservation of an order, whatever its status."""
        with self._uow:
            return self._uow.reservations.list_by_order(order_id)

    def by_cart(self, cart_id: str) -> list[InventoryReservation]:
        """Active holds of a cart."""
        with self._uow:
            return self._uow.reservations.list_active_by_cart(cart_id)
