"""SQLAlchemy-backed implementation of the append-only TransactionRepository."""

from __future__ import annotations

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from ims.domain.model.transaction import InventoryTransaction, TransactionType
from ims.domain.repository.transaction_repository import TransactionRepository
from ims.infrastructure.persistence.orm import TransactionRow


class SqlAlchemyTransactionRepository(TransactionRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, transaction: InventoryTransaction) -> None:
        self._session.add(
            TransactionRow(
                id=transaction.id,
                inventory_id=transaction.inventory_id,
                transaction_type=transaction.transaction_type.value,
                quantity=transaction.quantity,
                source_location_id=transaction.source_location_id,
                destination_location_id=transaction.destination_location_id,
                reference=transaction.reference,
                notes=transaction.notes,
                created_by=transaction.created_by,
                created_at=transaction.created_at,
                sequence=transaction.sequence,
            )
        )
        self._session.flush()

    def get(self, transaction_id: str) -> InventoryTransaction | None:
        row = self._session.get(TransactionRow, transaction_id)
        return self._to_domain(row) if row else None

    def list_by_item(self, inventory_id: str) -> list[InventoryTransaction]:
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.inventory_id == inventory_id)
            .order_by(TransactionRow.sequence.desc())
        )
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def list_by_reference(self, reference: str) -> list[InventoryTransaction]:
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.reference == reference)
            .order_by(
                TransactionRow.created_at.desc(),
                TransactionRow.inventory_id,
                TransactionRow.sequence.desc(),
            )
        )
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def exists_for_item(self, inventory_id: str) -> bool:
        stmt = select(exists().where(TransactionRow.inventory_id == inventory_id))
        return bool(self._session.scalar(stmt))

    @staticmethod
    def _to_domain(row: TransactionRow) -> InventoryTransaction:
        return InventoryTransaction(
            id=row.id,
            inventory_id=row.inventory_id,
            transaction_type=TransactionType(row.transaction_type),
            quantity=row.quantity,
            source_location_id=row.source_location_id,
            destination_location_id=row.destination_location_id,
            reference=row.reference,
            notes=row.notes,
            created_by=row.created_by,
            created_at=row.created_at,
            sequence=row.sequence,
        )
