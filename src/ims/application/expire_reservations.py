"""Reservation expiry sweep.

Nothing inside the system flips a reservation to ``expired`` on its own.
An external scheduler (cron, a k8s CronJob, ``ims reservation sweep``)
runs this periodically.  Each lapsed reservation is expired in its own
unit of work, and the conditional status swap means a reservation that
was cancelled or fulfilled meanwhile is skipped instead of being
released twice.  A reservation that stays contended after its retries
is counted as skipped and picked up again by the next run.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from ims.application.dto import SweepResultDTO
from ims.application.retry import DEFAULT_MAX_ATTEMPTS
from ims.application.transition_reservation import TransitionReservationHandler
from ims.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    InvalidTransitionError,
)
from ims.domain.model.reservation import ReservationStatus
from ims.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class ExpireReservationsHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(self, now: datetime | None = None, created_by: str | None = None) -> SweepResultDTO:
        now = now or datetime.now(timezone.utc)
        logger.info("Checking for lapsed reservations", as_of=now.isoformat())

        with self._uow:
            lapsed = [r.id for r in self._uow.reservations.list_lapsed(now)]

        if not lapsed:
            logger.info("No lapsed reservations found")
            return SweepResultDTO(examined=0, expired=0, skipped=0)

        transition = TransitionReservationHandler(self._uow, max_attempts=self._max_attempts)
        expired = 0
        skipped = 0
        for reservation_id in lapsed:
            try:
                transition.handle(
                    reservation_id,
                    ReservationStatus.EXPIRED,
                    created_by=created_by,
                )
            except (InvalidTransitionError, EntityNotFoundError) as exc:
                skipped += 1
                logger.warning(
                    "Skipped lapsed reservation",
                    reservation_id=reservation_id,
                    error=str(exc),
                )
                continue
            except ConcurrencyConflictError as exc:
                skipped += 1
                logger.warning(
                    "Lapsed reservation still contended, left for the next sweep",
                    reservation_id=reservation_id,
                    error=str(exc),
                )
                continue
            expired += 1
            logger.info("Expired lapsed reservation", reservation_id=reservation_id)

        logger.info(
            "Reservation sweep complete",
            examined=len(lapsed),
            expired=expired,
            skipped=skipped,
        )
        return SweepResultDTO(examined=len(lapsed), expired=expired, skipped=skipped)
