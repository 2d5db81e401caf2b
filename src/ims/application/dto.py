"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AvailabilityDTO:
    """Output: can ``requested_quantity`` of a product be sold anywhere."""

    product_id: str
    requested_quantity: int
    available: bool
    total_quantity: int
    total_available: int


@dataclass(frozen=True)
class ReplayDTO:
    """Output: an item's stored quantities next to its ledger replay."""

    inventory_id: str
    quantity: int
    reserved_quantity: int
    replayed_quantity: int
    replayed_reserved_quantity: int

    @property
    def consistent(self) -> bool:
        return (
            self.quantity == self.replayed_quantity
            and self.reserved_quantity == self.replayed_reserved_quantity
        )


@dataclass(frozen=True)
class SweepResultDTO:
    """Output: what one pass of the reservation-expiry sweep did."""

    examined: int
    expired: int
    skipped: int
