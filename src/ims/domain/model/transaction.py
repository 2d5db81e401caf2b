"""InventoryTransaction — one immutable ledger entry.

Every event that changes an item's quantities is recorded as exactly one
transaction.  Entries are never updated or deleted.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ims.domain.exceptions import ValidationError

SYSTEM_ACTOR = "system"


class TransactionType(Enum):
    RESTOCK = "restock"
    SALE = "sale"
    RETURN = "return"
    ADJUSTMENT = "adjustment"
    TRANSFER = "transfer"
    RESERVATION = "reservation"
    RELEASE = "release"

    @staticmethod
    def parse(raw: str | TransactionType) -> TransactionType:
        if isinstance(raw, TransactionType):
            return raw
        try:
            return TransactionType(str(raw).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(t.value for t in TransactionType)
            raise ValidationError(
                f"Unknown transaction type '{raw}' (expected one of: {allowed})"
            ) from exc


@dataclass(frozen=True)
class InventoryTransaction:
    id: str
    inventory_id: str
    transaction_type: TransactionType
    quantity: int
    source_location_id: str | None = None
    destination_location_id: str | None = None
    reference: str | None = None
    notes: str | None = None
    created_by: str = SYSTEM_ACTOR
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # position in the item's ledger, assigned when the posting is applied
    sequence: int = 0

    @staticmethod
    def record(
        inventory_id: str,
        transaction_type: TransactionType,
        quantity: int,
        source_location_id: str | None = None,
        destination_location_id: str | None = None,
        reference: str | None = None,
        notes: str | None = None,
        created_by: str | None = None,
        sequence: int = 0,
        created_at: datetime | None = None,
    ) -> InventoryTransaction:
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError(
                f"Transaction quantity must be an integer, got {type(quantity).__name__}"
            )
        return InventoryTransaction(
            id=uuid.uuid4().hex,
            inventory_id=inventory_id,
            transaction_type=transaction_type,
            quantity=quantity,
            source_location_id=source_location_id,
            destination_location_id=destination_location_id,
            reference=reference,
            notes=notes,
            created_by=created_by or SYSTEM_ACTOR,
            created_at=created_at or datetime.now(timezone.utc),
            sequence=sequence,
        )
