"""Domain service: Inventory Ledger (transaction poster).

The ledger is the only path through which an item's quantity fields
change.  A posting is projected onto the item as a single atomic store
operation and recorded as one immutable transaction, numbered by the
position that operation gave it in the item's history.

The ledger itself validates almost nothing: over-reservation is
prevented by the caller passing ``require_available``, which the store
evaluates in the same statement as the mutation.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from ims.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from ims.domain.model.inventory import apply_deltas
from ims.domain.model.transaction import InventoryTransaction, TransactionType
from ims.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)

# (quantity_delta, reserved_delta) per unit posted
_DELTA_SIGNS: dict[TransactionType, tuple[int, int]] = {
    TransactionType.RESTOCK: (1, 0),
    TransactionType.SALE: (-1, -1),
    TransactionType.RETURN: (1, 0),
    TransactionType.ADJUSTMENT: (1, 0),
    TransactionType.RESERVATION: (0, 1),
    TransactionType.RELEASE: (0, -1),
}


def posting_deltas(transaction_type: TransactionType, quantity: int) -> tuple[int, int]:
    """Return ``(quantity_delta, reserved_delta)`` for a posting."""
    try:
        q_sign, r_sign = _DELTA_SIGNS[transaction_type]
    except KeyError:
        raise ValidationError(
            f"'{transaction_type.value}' postings are not supported"
        ) from None
    return q_sign * quantity, r_sign * quantity


def replay(transactions: Iterable[InventoryTransaction]) -> tuple[int, int]:
    """Fold ledger entries (oldest first) from zero.

    Returns ``(quantity, reserved_quantity)`` exactly as the postings
    left them, clamping included.
    """
    quantity, reserved = 0, 0
    for txn in transactions:
        dq, dr = posting_deltas(txn.transaction_type, txn.quantity)
        quantity, reserved, _ = apply_deltas(quantity, reserved, dq, dr)
    return quantity, reserved


class InventoryLedger:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def post(
        self,
        inventory_id: str,
        transaction_type: TransactionType | str,
        quantity: int,
        reference: str | None = None,
        notes: str | None = None,
        created_by: str | None = None,
        source_location_id: str | None = None,
        destination_location_id: str | None = None,
        require_available: int | None = None,
    ) -> InventoryTransaction:
        """Apply a posting to the item and append its transaction.

        Must run inside an open unit of work; the caller commits.

        Steps:
        1. Resolve the item (EntityNotFoundError if missing).
        2. Apply the type's deltas to the item in one atomic store step.
           The same step advances the item's ``ledger_sequence``.
        3. Record the immutable transaction at that sequence, so the
           ledger order is the order postings were applied in.
        """
        transaction_type = TransactionType.parse(transaction_type)
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError(
                f"Transaction quantity must be an integer, got {type(quantity).__name__}"
            )
        quantity_delta, reserved_delta = posting_deltas(transaction_type, quantity)

        item = self._uow.items.get(inventory_id)
        if item is None:
            raise EntityNotFoundError(f"Inventory item '{inventory_id}' not found")

        at = datetime.now(timezone.utc)
        updated = self._uow.items.apply_posting(
            inventory_id,
            quantity_delta,
            reserved_delta,
            at=at,
            require_available=require_available,
            restocked_at=at if transaction_type is TransactionType.RESTOCK else None,
        )
        if updated is None:
            if require_available is not None:
                logger.warning(
                    "Posting rejected, not enough available inventory",
                    inventory_id=inventory_id,
                    requested=require_available,
                )
                raise ConflictError(
                    f"Not enough available inventory for item '{inventory_id}' "
                    f"(requested {require_available})"
                )
            raise EntityNotFoundError(f"Inventory item '{inventory_id}' not found")

        txn = InventoryTransaction.record(
            inventory_id=inventory_id,
            transaction_type=transaction_type,
            quantity=quantity,
            source_location_id=source_location_id,
            destination_location_id=destination_location_id,
            reference=reference,
            notes=notes,
            created_by=created_by,
            sequence=updated.ledger_sequence,
            created_at=at,
        )
        self._uow.transactions.add(txn)

        logger.info(
            "Ledger posting applied",
            transaction_id=txn.id,
            inventory_id=inventory_id,
            transaction_type=transaction_type.value,
            quantity=quantity,
            sequence=txn.sequence,
            on_hand=updated.quantity,
            reserved=updated.reserved_quantity,
            available=updated.available_quantity,
        )
        return txn

    def replay_item(self, inventory_id: str) -> tuple[int, int]:
        """Rebuild an item's ``(quantity, reserved_quantity)`` from its ledger."""
        if self._uow.items.get(inventory_id) is None:
            raise EntityNotFoundError(f"Inventory item '{inventory_id}' not found")
        history = self._uow.transactions.list_by_item(inventory_id)
        return replay(reversed(history))
