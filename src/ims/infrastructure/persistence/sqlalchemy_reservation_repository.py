"""SQLAlchemy-backed implementation of ReservationRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session

from ims.domain.model.reservation import InventoryReservation, ReservationStatus
from ims.domain.repository.reservation_repository import ReservationRepository
from ims.infrastructure.persistence.orm import ReservationRow

_ACTIVE = ReservationStatus.ACTIVE.value


class SqlAlchemyReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, reservation: InventoryReservation) -> None:
        self._session.add(
            ReservationRow(
                id=reservation.id,
                inventory_id=reservation.inventory_id,
                order_id=reservation.order_id,
                cart_id=reservation.cart_id,
                quantity=reservation.quantity,
                status=reservation.status.value,
                expires_at=reservation.expires_at,
                created_at=reservation.created_at,
                updated_at=reservation.updated_at,
            )
        )
        self._session.flush()

    def get(self, reservation_id: str) -> InventoryReservation | None:
        row = self._session.get(ReservationRow, reservation_id, populate_existing=True)
        return self._to_domain(row) if row else None

    def list_active_by_item(self, inventory_id: str) -> list[InventoryReservation]:
        return self._fetch(
            select(ReservationRow).where(
                ReservationRow.inventory_id == inventory_id,
                ReservationRow.status == _ACTIVE,
            )
        )

    def list_by_order(self, order_id: str) -> list[InventoryReservation]:
        return self._fetch(select(ReservationRow).where(ReservationRow.order_id == order_id))

    def list_active_by_cart(self, cart_id: str) -> list[InventoryReservation]:
        return self._fetch(
            select(ReservationRow).where(
                ReservationRow.cart_id == cart_id,
                ReservationRow.status == _ACTIVE,
            )
        )

    def list_lapsed(self, now: datetime) -> list[InventoryReservation]:
        stmt = (
            select(ReservationRow)
            .where(ReservationRow.status == _ACTIVE, ReservationRow.expires_at < now)
            .order_by(ReservationRow.expires_at)
        )
        return self._scalars(stmt)

    def exists_for_item(self, inventory_id: str) -> bool:
        stmt = select(exists().where(ReservationRow.inventory_id == inventory_id))
        return bool(self._session.scalar(stmt))

    def compare_and_set_status(
        self,
        reservation_id: str,
        expected: ReservationStatus,
        new_status: ReservationStatus,
        at: datetime,
    ) -> bool:
        result = self._session.execute(
            update(ReservationRow)
            .where(
                ReservationRow.id == reservation_id,
                ReservationRow.status == expected.value,
            )
            .values(status=new_status.value, updated_at=at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Mapping --------------------------------------------------------------

    def _fetch(self, stmt) -> list[InventoryReservation]:
        return self._scalars(stmt.order_by(ReservationRow.created_at.desc()))

    def _scalars(self, stmt) -> list[InventoryReservation]:
        rows = self._session.scalars(stmt.execution_options(populate_existing=True))
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(row: ReservationRow) -> InventoryReservation:
        return InventoryReservation(
            id=row.id,
            inventory_id=row.inventory_id,
            quantity=row.quantity,
            expires_at=row.expires_at,
            order_id=row.order_id,
            cart_id=row.cart_id,
            status=ReservationStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
