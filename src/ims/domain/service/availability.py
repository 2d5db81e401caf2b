"""Domain service: cross-location availability.

Pure read-side aggregation over a product's items.  Totals are summed on
every call and never cached.
"""

from __future__ import annotations

from ims.domain.exceptions import ValidationError
from ims.domain.model.value_objects import StockTotals
from ims.domain.repository.inventory_repository import InventoryRepository


class AvailabilityAggregator:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def totals_for_product(self, product_id: str) -> StockTotals:
        items = self._inventory_repo.list_by_product(product_id)
        return StockTotals(
            product_id=product_id,
            total_quantity=sum(item.quantity for item in items),
            total_available=sum(item.available_quantity for item in items),
            location_count=len({item.location_id for item in items}),
        )

    def is_available(self, product_id: str, quantity_needed: int) -> bool:
        if quantity_needed < 0:
            raise ValidationError("Requested quantity cannot be negative")
        return self.totals_for_product(product_id).covers(quantity_needed)
