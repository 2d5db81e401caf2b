"""Application service: Create Reservation use case.

The reservation row, the ``reservation`` ledger entry and the item's
reserved/available change commit together or not at all.
"""

from __future__ import annotations

from datetime import datetime

from ims.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from ims.domain.model.reservation import InventoryReservation
from ims.domain.repository.unit_of_work import UnitOfWork
from ims.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)


class CreateReservationHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        inventory_id: str,
        quantity: int,
        expires_at: datetime | None,
        order_id: str | None = None,
        cart_id: str | None = None,
        created_by: str | None = None,
    ) -> InventoryReservation:
        def _create() -> InventoryReservation:
            with self._uow:
                svc = InventoryReservationService(self._uow)
                reservation = svc.create(
                    inventory_id,
                    quantity,
                    expires_at,
                    order_id=order_id,
                    cart_id=cart_id,
                    created_by=created_by,
                )
                self._uow.commit()
            return reservation

        return run_with_retry(_create, self._max_attempts)
