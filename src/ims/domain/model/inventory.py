"""InventoryItem aggregate — stock for one SKU at one location.

Each (sku, location) pair has exactly one InventoryItem that knows how
many units are on hand and how many of them are held by reservations.

The three quantity fields are derived state: they only change through
ledger postings (see ``ims.domain.service.ledger``), never by assigning
to them directly.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ims.domain.exceptions import ValidationError

DEFAULT_LOW_STOCK_THRESHOLD = 10
DEFAULT_REORDER_POINT = 5
DEFAULT_REORDER_QUANTITY = 20


def compute_available(quantity: int, reserved_quantity: int) -> int:
    return max(0, quantity - reserved_quantity)


def apply_deltas(
    quantity: int,
    reserved_quantity: int,
    quantity_delta: int,
    reserved_delta: int,
) -> tuple[int, int, int]:
    """Project a posting onto the three quantity fields.

    Returns ``(quantity, reserved_quantity, available_quantity)``; both
    inputs are clamped at zero before ``available`` is derived.  The SQL
    repository evaluates the same expressions inside a single UPDATE.
    """
    new_quantity = max(0, quantity + quantity_delta)
    new_reserved = max(0, reserved_quantity + reserved_delta)
    return new_quantity, new_reserved, compute_available(new_quantity, new_reserved)


@dataclass(frozen=True)
class ItemPatch:
    """Closed set of fields a caller may change on an item.

    ``quantity`` and ``reserved_quantity`` are not written as-is: the
    update handler turns a change into ledger postings of the difference.
    ``None`` means "leave unchanged".
    """

    quantity: int | None = None
    reserved_quantity: int | None = None
    low_stock_threshold: int | None = None
    reorder_point: int | None = None
    reorder_quantity: int | None = None
    last_restock_date: datetime | None = None

    def validate(self) -> None:
        for name in (
            "quantity",
            "reserved_quantity",
            "low_stock_threshold",
            "reorder_point",
            "reorder_quantity",
        ):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name} cannot be negative (got {value})")

    @property
    def touches_metadata(self) -> bool:
        return any(
            v is not None
            for v in (
                self.low_stock_threshold,
                self.reorder_point,
                self.reorder_quantity,
                self.last_restock_date,
            )
        )


@dataclass(frozen=True)
class ItemFilter:
    location_id: str | None = None
    low_stock: bool = False
    out_of_stock: bool = False


@dataclass
class InventoryItem:
    """Aggregate root for stock at a location.

    Invariants:
    - ``available_quantity == max(0, quantity - reserved_quantity)``
    - ``quantity >= 0`` and ``reserved_quantity >= 0``
    """

    id: str
    product_id: str
    sku: str
    location_id: str
    quantity: int = 0
    reserved_quantity: int = 0
    available_quantity: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    reorder_point: int = DEFAULT_REORDER_POINT
    reorder_quantity: int = DEFAULT_REORDER_QUANTITY
    last_restock_date: datetime | None = None
    # number of postings applied so far
    ledger_sequence: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW items only) ------------------------------------

    @staticmethod
    def create(
        product_id: str,
        sku: str,
        location_id: str,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        reorder_point: int = DEFAULT_REORDER_POINT,
        reorder_quantity: int = DEFAULT_REORDER_QUANTITY,
        last_restock_date: datetime | None = None,
    ) -> InventoryItem:
        """Create an empty stock record.

        Starting stock is never set here: the caller posts it through the
        ledger in the same unit of work so the history is complete.
        """
        for name, value in (("product_id", product_id), ("sku", sku), ("location_id", location_id)):
            if not value or not str(value).strip():
                raise ValidationError(f"{name} is required")
        for name, value in (
            ("low_stock_threshold", low_stock_threshold),
            ("reorder_point", reorder_point),
            ("reorder_quantity", reorder_quantity),
        ):
            if value < 0:
                raise ValidationError(f"{name} cannot be negative (got {value})")

        return InventoryItem(
            id=uuid.uuid4().hex,
            product_id=str(product_id).strip(),
            sku=sku.strip(),
            location_id=location_id,
            low_stock_threshold=low_stock_threshold,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
            last_restock_date=last_restock_date,
        )

    # --- Computed properties --------------------------------------------------

    @property
    def is_low_stock(self) -> bool:
        return self.available_quantity <= self.low_stock_threshold

    @property
    def is_out_of_stock(self) -> bool:
        return self.available_quantity <= 0

    @property
    def needs_reorder(self) -> bool:
        return self.available_quantity <= self.reorder_point

    def satisfies_invariant(self) -> bool:
        return (
            self.quantity >= 0
            and self.reserved_quantity >= 0
            and self.available_quantity
            == compute_available(self.quantity, self.reserved_quantity)
        )

    # --- Metadata -------------------------------------------------------------

    def apply_metadata(self, patch: ItemPatch) -> None:
        """Merge threshold/reorder fields; quantities are left to the ledger."""
        patch.validate()
        if patch.low_stock_threshold is not None:
            self.low_stock_threshold = patch.low_stock_threshold
        if patch.reorder_point is not None:
            self.reorder_point = patch.reorder_point
        if patch.reorder_quantity is not None:
            self.reorder_quantity = patch.reorder_quantity
        if patch.last_restock_date is not None:
            self.last_restock_date = patch.last_restock_date
        self.updated_at = datetime.now(timezone.utc)
