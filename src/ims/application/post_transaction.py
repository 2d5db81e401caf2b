"""Application service: ledger postings and history."""

from __future__ import annotations

from ims.application.dto import ReplayDTO
from ims.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.transaction import InventoryTransaction, TransactionType
from ims.domain.repository.unit_of_work import UnitOfWork
from ims.domain.service.ledger import InventoryLedger


class PostTransactionHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        inventory_id: str,
        transaction_type: TransactionType | str,
        quantity: int,
        reference: str | None = None,
        notes: str | None = None,
        created_by: str | None = None,
        source_location_id: str | None = None,
        destination_location_id: str | None = None,
    ) -> InventoryTransaction:
        def _post() -> InventoryTransaction:
            with self._uow:
                txn = InventoryLedger(self._uow).post(
                    inventory_id,
                    transaction_type,
                    quantity,
                    reference=reference,
                    notes=notes,
                    created_by=created_by,
                    source_location_id=source_location_id,
                    destination_location_id=destination_location_id,
                )
                self._uow.commit()
            return txn

        return run_with_retry(_post, self._max_attempts)


class TransactionHistoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def by_item(self, inventory_id: str) -> list[InventoryTransaction]:
        with self._uow:
            return self._uow.transactions.list_by_item(inventory_id)

    def by_reference(self, reference: str) -> list[InventoryTransaction]:
        with self._uow:
            return self._uow.transactions.list_by_reference(reference)

    def find(self, transaction_id: str) -> InventoryTransaction:
        with self._uow:
            txn = self._uow.transactions.get(transaction_id)
        if txn is None:
            raise EntityNotFoundError(f"Transaction '{transaction_id}' not found")
        return txn

    def replay(self, inventory_id: str) -> ReplayDTO:
        """Compare an item's stored quantities with a replay of its ledger."""
        with self._uow:
            quantity, reserved = InventoryLedger(self._uow).replay_item(inventory_id)
            item = self._uow.items.get(inventory_id)
        return ReplayDTO(
            inventory_id=inventory_id,
            quantity=item.quantity,
            reserved_quantity=item.reserved_quantity,
            replayed_quantity=quantity,
            replayed_reserved_quantity=reserved,
        )
