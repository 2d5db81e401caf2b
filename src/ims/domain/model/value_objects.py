"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass

from ims.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot hold zero or negative units.
    """

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass but never a meaningful unit count
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StockTotals:
    """Cross-location totals for one product, recomputed on every read."""

    product_id: str
    total_quantity: int
    total_available: int
    location_count: int

    def covers(self, quantity_needed: int) -> bool:
        return self.total_available >= quantity_needed
