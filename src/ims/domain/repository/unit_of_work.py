"""Abstract Unit of Work.

Groups the repositories so a multi-step operation (reservation row +
ledger entry + item mutation) is committed or rolled back as one unit.
Use it as a context manager; leaving the block without ``commit()``
rolls everything back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.repository.inventory_repository import InventoryRepository
from ims.domain.repository.location_repository import LocationRepository
from ims.domain.repository.reservation_repository import ReservationRepository
from ims.domain.repository.transaction_repository import TransactionRepository


class UnitOfWork(ABC):

    locations: LocationRepository
    items: InventoryRepository
    transactions: TransactionRepository
    reservations: ReservationRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change in this unit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes. A no-op after ``commit()``."""
