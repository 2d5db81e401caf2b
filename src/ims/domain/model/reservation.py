"""InventoryReservation — a time-bounded hold against one item.

State machine::

    active ──> fulfilled
           ├─> expired
           └─> cancelled

Every state other than ``active`` is terminal.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ims.domain.exceptions import InvalidTransitionError, ValidationError
from ims.domain.model.value_objects import Quantity


class ReservationStatus(Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not ReservationStatus.ACTIVE

    @property
    def releases_hold(self) -> bool:
        return self in (ReservationStatus.EXPIRED, ReservationStatus.CANCELLED)

    @staticmethod
    def parse(raw: str | ReservationStatus) -> ReservationStatus:
        if isinstance(raw, ReservationStatus):
            return raw
        try:
            return ReservationStatus(str(raw).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(s.value for s in ReservationStatus)
            raise ValidationError(
                f"Unknown reservation status '{raw}' (expected one of: {allowed})"
            ) from exc


@dataclass
class InventoryReservation:
    """A hold for a single cart or a single order, never both."""

    id: str
    inventory_id: str
    quantity: int
    expires_at: datetime
    order_id: str | None = None
    cart_id: str | None = None
    status: ReservationStatus = ReservationStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW reservations only) -----------------------------

    @staticmethod
    def create(
        inventory_id: str,
        quantity: int,
        expires_at: datetime | None,
        order_id: str | None = None,
        cart_id: str | None = None,
    ) -> InventoryReservation:
        qty = Quantity(quantity)
        if not order_id and not cart_id:
            raise ValidationError("Either order_id or cart_id is required")
        if order_id and cart_id:
            raise ValidationError("A reservation belongs to an order or a cart, not both")
        if expires_at is None:
            raise ValidationError("expires_at is required")
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return InventoryReservation(
            id=uuid.uuid4().hex,
            inventory_id=inventory_id,
            quantity=qty.value,
            expires_at=expires_at,
            order_id=order_id or None,
            cart_id=cart_id or None,
        )

    # --- State transitions ----------------------------------------------------

    def check_transition(self, new_status: ReservationStatus) -> None:
        """Raise InvalidTransitionError unless ``active -> terminal``."""
        if self.status is not ReservationStatus.ACTIVE or not new_status.is_terminal:
            raise InvalidTransitionError(self.status.value, new_status.value)

    def transition_to(self, new_status: ReservationStatus, at: datetime | None = None) -> None:
        self.check_transition(new_status)
        self.status = new_status
        self.updated_at = at or datetime.now(timezone.utc)

    # --- Queries --------------------------------------------------------------

    def is_lapsed(self, now: datetime) -> bool:
        return self.status is ReservationStatus.ACTIVE and self.expires_at < now
