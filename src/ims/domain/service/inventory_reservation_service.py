"""Domain service: Inventory Reservation.

This service drives the reservation state machine and keeps it in step
with the ledger.  A hold is a ``reservation`` posting; giving it back
is a ``release`` posting.  Both happen inside the caller's unit of work,
together with the reservation row, so either everything persists or
nothing does.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from ims.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    InvalidTransitionError,
)
from ims.domain.model.reservation import InventoryReservation, ReservationStatus
from ims.domain.model.transaction import TransactionType
from ims.domain.repository.unit_of_work import UnitOfWork
from ims.domain.service.ledger import InventoryLedger

logger = structlog.get_logger(__name__)


class InventoryReservationService:

    def __init__(self, uow: UnitOfWork, fulfilment_posts_sale: bool = True) -> None:
        self._uow = uow
        self._ledger = InventoryLedger(uow)
        self._fulfilment_posts_sale = fulfilment_posts_sale

    def create(
        self,
        inventory_id: str,
        quantity: int,
        expires_at: datetime | None,
        order_id: str | None = None,
        cart_id: str | None = None,
        created_by: str | None = None,
    ) -> InventoryReservation:
        """Hold ``quantity`` units of an item for a cart or an order.

        Check-then-act in two layers:
          1. a fast pre-check against the item as read, for a clear error;
          2. the ``reservation`` posting carries ``require_available``, so
             the store re-checks availability in the same statement that
             moves the units.
        """
        reservation = InventoryReservation.create(
            inventory_id=inventory_id,
            quantity=quantity,
            expires_at=expires_at,
            order_id=order_id,
            cart_id=cart_id,
        )

        item = self._uow.items.get(inventory_id)
        if item is None:
            raise EntityNotFoundError(f"Inventory item '{inventory_id}' not found")
        if item.available_quantity < reservation.quantity:
            logger.warning(
                "Reservation rejected, not enough available inventory",
                inventory_id=inventory_id,
                requested=reservation.quantity,
                available=item.available_quantity,
            )
            raise ConflictError(
                f"Not enough available inventory for SKU {item.sku} "
                f"(need {reservation.quantity}, have {item.available_quantity} available)"
            )

        self._uow.reservations.add(reservation)
        self._ledger.post(
            inventory_id,
            TransactionType.RESERVATION,
            reservation.quantity,
            reference=reservation.id,
            notes=_holder_note(reservation),
            created_by=created_by,
            require_available=reservation.quantity,
        )

        logger.info(
            "Reservation created",
            reservation_id=reservation.id,
            inventory_id=inventory_id,
            quantity=reservation.quantity,
            order_id=reservation.order_id,
            cart_id=reservation.cart_id,
            expires_at=reservation.expires_at.isoformat(),
        )
        return reservation

    def transition(
        self,
        reservation_id: str,
        new_status: ReservationStatus | str,
        created_by: str | None = None,
        at: datetime | None = None,
    ) -> InventoryReservation:
        """Move an active reservation to a terminal status.

        ``cancelled``/``expired`` post a ``release`` of the held quantity.
        ``fulfilled`` posts a ``sale`` when sale-on-fulfilment is enabled,
        otherwise it only changes the status and the order flow posts the
        sale itself.
        """
        new_status = ReservationStatus.parse(new_status)
        at = at or datetime.now(timezone.utc)

        reservation = self._uow.reservations.get(reservation_id)
        if reservation is None:
            raise EntityNotFoundError(f"Reservation '{reservation_id}' not found")
        reservation.transition_to(new_status, at)

        # The status swap is conditional on the row still being active, so
        # a concurrent sweep or cancel cannot release the same hold twice.
        swapped = self._uow.reservations.compare_and_set_status(
            reservation_id, ReservationStatus.ACTIVE, new_status, at
        )
        if not swapped:
            current = self._uow.reservations.get(reservation_id)
            raise InvalidTransitionError(
                current.status.value if current else "unknown", new_status.value
            )

        if new_status.releases_hold:
            self._ledger.post(
                reservation.inventory_id,
                TransactionType.RELEASE,
                reservation.quantity,
                reference=reservation.id,
                notes=f"Reservation {new_status.value}",
                created_by=created_by,
            )
        elif new_status is ReservationStatus.FULFILLED and self._fulfilment_posts_sale:
            self._ledger.post(
                reservation.inventory_id,
                TransactionType.SALE,
                reservation.quantity,
                reference=reservation.id,
                notes="Reservation fulfilled",
                created_by=created_by,
            )

        logger.info(
            "Reservation transitioned",
            reservation_id=reservation_id,
            inventory_id=reservation.inventory_id,
            status=new_status.value,
        )
        return reservation


def _holder_note(reservation: InventoryReservation) -> str:
    if reservation.order_id:
        return f"Held for order {reservation.order_id}"
    return f"Held for cart {reservation.cart_id}"
