"""Application services: reservation status changes.

Cancelling or expiring gives the held units back through a ``release``
posting; fulfilling consumes them through a ``sale`` posting unless
sale-on-fulfilment is switched off.
"""

from __future__ import annotations

import structlog

from ims.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from ims.domain.exceptions import ConcurrencyConflictError, InvalidTransitionError
from ims.domain.model.reservation import InventoryReservation, ReservationStatus
from ims.domain.repository.unit_of_work import UnitOfWork
from ims.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

logger = structlog.get_logger(__name__)


class TransitionReservationHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        fulfilment_posts_sale: bool = True,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._uow = uow
        self._fulfilment_posts_sale = fulfilment_posts_sale
        self._max_attempts = max_attempts

    def handle(
        self,
        reservation_id: str,
        new_status: ReservationStatus | str,
        created_by: str | None = None,
    ) -> InventoryReservation:
        def _transition() -> InventoryReservation:
            with self._uow:
                svc = InventoryReservationService(
                    self._uow, fulfilment_posts_sale=self._fulfilment_posts_sale
                )
                reservation = svc.transition(reservation_id, new_status, created_by=created_by)
                self._uow.commit()
            return reservation

        return run_with_retry(_transition, self._max_attempts)


class ReleaseCartReservationsHandler:
    """Cancel every active hold of an abandoned cart."""

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(self, cart_id: str, created_by: str | None = None) -> int:
        with self._uow:
            reservation_ids = [r.id for r in self._uow.reservations.list_active_by_cart(cart_id)]

        transition = TransitionReservationHandler(self._uow, max_attempts=self._max_attempts)
        released = 0
        for reservation_id in reservation_ids:
            try:
                transition.handle(reservation_id, ReservationStatus.CANCELLED, created_by=created_by)
            except InvalidTransitionError as exc:
                # Already moved on by someone else; nothing left to release.
                logger.info(
                    "Cart reservation no longer active",
                    reservation_id=reservation_id,
                    status=exc.current,
                )
                continue
            except ConcurrencyConflictError as exc:
                logger.warning(
                    "Cart reservation still contended, not released",
                    reservation_id=reservation_id,
                    error=str(exc),
                )
                continue
            released += 1

        logger.info("Cart reservations released", cart_id=cart_id, released=released)
        return released
