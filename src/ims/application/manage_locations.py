"""Application services: Location Registry use cases."""

from __future__ import annotations

import structlog

from ims.domain.exceptions import ConflictError, EntityNotFoundError
from ims.domain.model.location import InventoryLocation, LocationPatch, LocationType
from ims.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class CreateLocationHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        type: LocationType | str,
        address: str | None = None,
        city: str | None = None,
        state: str | None = None,
        country: str | None = None,
        postal_code: str | None = None,
        is_active: bool = True,
    ) -> InventoryLocation:
        location = InventoryLocation.create(
            name=name,
            type=type,
            address=address,
            city=city,
            state=state,
            country=country,
            postal_code=postal_code,
            is_active=is_active,
        )
        with self._uow:
            self._uow.locations.add(location)
            self._uow.commit()

        logger.info("Location created", location_id=location.id, name=location.name)
        return location


class UpdateLocationHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, location_id: str, patch: LocationPatch) -> InventoryLocation:
        with self._uow:
            location = self._uow.locations.get(location_id)
            if location is None:
                raise EntityNotFoundError(f"Location '{location_id}' not found")
            location.apply(patch)
            self._uow.locations.save(location)
            self._uow.commit()
        return location


class DeleteLocationHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, location_id: str) -> None:
        """Remove a location that no item references.

        The pre-check gives a readable error; the store's foreign key is
        what actually holds the line if an item sneaks in concurrently.
        """
        with self._uow:
            location = self._uow.locations.get(location_id)
            if location is None:
                raise EntityNotFoundError(f"Location '{location_id}' not found")
            if self._uow.items.exists_for_location(location_id):
                raise ConflictError(
                    f"Location '{location.name}' has associated inventory items"
                )
            self._uow.locations.delete(location_id)
            self._uow.commit()

        logger.info("Location deleted", location_id=location_id)


class ListLocationsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, include_inactive: bool = False) -> list[InventoryLocation]:
        with self._uow:
            return self._uow.locations.list_all(include_inactive=include_inactive)

    def find(self, location_id: str) -> InventoryLocation:
        with self._uow:
            location = self._uow.locations.get(location_id)
        if location is None:
            raise EntityNotFoundError(f"Location '{location_id}' not found")
        return location
