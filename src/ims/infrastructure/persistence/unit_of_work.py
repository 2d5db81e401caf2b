"""SQLAlchemy Unit of Work: one session, one database transaction per block."""

from __future__ import annotations

import structlog
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from ims.domain.exceptions import ConcurrencyConflictError, ConflictError
from ims.domain.repository.unit_of_work import UnitOfWork
from ims.infrastructure.persistence.sqlalchemy_inventory_repository import (
    SqlAlchemyInventoryRepository,
)
from ims.infrastructure.persistence.sqlalchemy_location_repository import (
    SqlAlchemyLocationRepository,
)
from ims.infrastructure.persistence.sqlalchemy_reservation_repository import (
    SqlAlchemyReservationRepository,
)
from ims.infrastructure.persistence.sqlalchemy_transaction_repository import (
    SqlAlchemyTransactionRepository,
)

logger = structlog.get_logger(__name__)

_CONTENTION_MARKERS = (
    "database is locked",
    "database table is locked",
    "deadlock",
    "could not serialize",
    "lock wait timeout",
)


def _is_contention(exc: OperationalError) -> bool:
    message = str(exc.orig).lower()
    return any(marker in message for marker in _CONTENTION_MARKERS)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.locations = SqlAlchemyLocationRepository(self._session)
        self.items = SqlAlchemyInventoryRepository(self._session)
        self.transactions = SqlAlchemyTransactionRepository(self._session)
        self.reservations = SqlAlchemyReservationRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._session.close()
            self._session = None

        # Storage errors leave this block as domain errors.
        if isinstance(exc, IntegrityError):
            logger.warning("Write rejected by storage constraint", error=str(exc.orig))
            raise ConflictError(f"Write rejected by a storage constraint: {exc.orig}") from exc
        if isinstance(exc, OperationalError) and _is_contention(exc):
            raise ConcurrencyConflictError(f"Concurrent write conflict: {exc.orig}") from exc

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
