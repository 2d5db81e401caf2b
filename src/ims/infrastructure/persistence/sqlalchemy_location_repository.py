"""SQLAlchemy-backed implementation of LocationRepository."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ims.domain.model.location import InventoryLocation, LocationType
from ims.domain.repository.location_repository import LocationRepository
from ims.infrastructure.persistence.orm import LocationRow


class SqlAlchemyLocationRepository(LocationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- LocationRepository interface -----------------------------------------

    def get(self, location_id: str) -> InventoryLocation | None:
        row = self._session.get(LocationRow, location_id, populate_existing=True)
        return self._to_domain(row) if row else None

    def list_all(self, include_inactive: bool = False) -> list[InventoryLocation]:
        stmt = select(LocationRow).order_by(LocationRow.name)
        if not include_inactive:
            stmt = stmt.where(LocationRow.is_active.is_(True))
        rows = self._session.scalars(stmt.execution_options(populate_existing=True))
        return [self._to_domain(row) for row in rows]

    def add(self, location: InventoryLocation) -> None:
        self._session.add(self._to_row(location))
        self._session.flush()

    def save(self, location: InventoryLocation) -> None:
        row = self._session.get(LocationRow, location.id)
        if row is None:
            self.add(location)
            return
        for attr in (
            "name",
            "address",
            "city",
            "state",
            "country",
            "postal_code",
            "is_active",
            "updated_at",
        ):
            setattr(row, attr, getattr(location, attr))
        row.type = location.type.value
        self._session.flush()

    def delete(self, location_id: str) -> None:
        # inventory_item.location_id is ON DELETE RESTRICT
        self._session.execute(delete(LocationRow).where(LocationRow.id == location_id))

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(location: InventoryLocation) -> LocationRow:
        return LocationRow(
            id=location.id,
            name=location.name,
            type=location.type.value,
            address=location.address,
            city=location.city,
            state=location.state,
            country=location.country,
            postal_code=location.postal_code,
            is_active=location.is_active,
            created_at=location.created_at,
            updated_at=location.updated_at,
        )

    @staticmethod
    def _to_domain(row: LocationRow) -> InventoryLocation:
        return InventoryLocation(
            id=row.id,
            name=row.name,
            type=LocationType(row.type),
            address=row.address,
            city=row.city,
            state=row.state,
            country=row.country,
            postal_code=row.postal_code,
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
