"""Application service: Check Availability use case (query)."""

from __future__ import annotations

from ims.application.dto import AvailabilityDTO
from ims.domain.exceptions import ValidationError
from ims.domain.model.value_objects import StockTotals
from ims.domain.repository.unit_of_work import UnitOfWork
from ims.domain.service.availability import AvailabilityAggregator


class CheckAvailabilityHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, quantity: int = 1) -> AvailabilityDTO:
        """Can ``quantity`` units of the product be sold from any location."""
        if quantity < 0:
            raise ValidationError("Requested quantity cannot be negative")
        with self._uow:
            totals = AvailabilityAggregator(self._uow.items).totals_for_product(product_id)
        return AvailabilityDTO(
            product_id=product_id,
            requested_quantity=quantity,
            available=totals.covers(quantity),
            total_quantity=totals.total_quantity,
            total_available=totals.total_available,
        )

    def totals(self, product_id: str) -> StockTotals:
        with self._uow:
            return AvailabilityAggregator(self._uow.items).totals_for_product(product_id)
