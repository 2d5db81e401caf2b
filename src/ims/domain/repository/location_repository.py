"""Abstract repository for InventoryLocation aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory)
live in the infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.location import InventoryLocation


class LocationRepository(ABC):

    @abstractmethod
    def get(self, location_id: str) -> InventoryLocation | None:
        """Return a location by its ID, or None if not found."""

    @abstractmethod
    def list_all(self, include_inactive: bool = False) -> list[InventoryLocation]:
        """Return locations ordered by name; active ones only by default."""

    @abstractmethod
    def add(self, location: InventoryLocation) -> None:
        """Persist a new location."""

    @abstractmethod
    def save(self, location: InventoryLocation) -> None:
        """Persist changes to an existing location."""

    @abstractmethod
    def delete(self, location_id: str) -> None:
        """Remove a location.

        Implementations refuse (ConflictError) while items reference it.
        """
