"""InventoryLocation aggregate — a place where stock is kept.

Locations are referenced by inventory items; a location that still has
items cannot be removed (referential guard, never a cascading delete).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ims.domain.exceptions import ValidationError


class LocationType(Enum):
    WAREHOUSE = "warehouse"
    STORE = "store"
    FULFILLMENT_CENTER = "fulfillment_center"
    SUPPLIER = "supplier"
    OTHER = "other"

    @staticmethod
    def parse(raw: str | LocationType) -> LocationType:
        if isinstance(raw, LocationType):
            return raw
        try:
            return LocationType(str(raw).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(t.value for t in LocationType)
            raise ValidationError(
                f"Unknown location type '{raw}' (expected one of: {allowed})"
            ) from exc


@dataclass(frozen=True)
class LocationPatch:
    """Closed set of updatable location fields.

    ``None`` means "leave unchanged".
    """

    name: str | None = None
    type: LocationType | str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    is_active: bool | None = None


@dataclass
class InventoryLocation:
    id: str
    name: str
    type: LocationType
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        name: str,
        type: LocationType | str,
        address: str | None = None,
        city: str | None = None,
        state: str | None = None,
        country: str | None = None,
        postal_code: str | None = None,
        is_active: bool = True,
    ) -> InventoryLocation:
        """Create a new location. Active unless told otherwise."""
        if not name or not name.strip():
            raise ValidationError("Location name is required")
        return InventoryLocation(
            id=uuid.uuid4().hex,
            name=name.strip(),
            type=LocationType.parse(type),
            address=address,
            city=city,
            state=state,
            country=country,
            postal_code=postal_code,
            is_active=is_active,
        )

    def apply(self, patch: LocationPatch) -> None:
        """Merge the provided fields into this location."""
        if patch.name is not None:
            if not patch.name.strip():
                raise ValidationError("Location name cannot be blank")
            self.name = patch.name.strip()
        if patch.type is not None:
            self.type = LocationType.parse(patch.type)
        for attr in ("address", "city", "state", "country", "postal_code", "is_active"):
            value = getattr(patch, attr)
            if value is not None:
                setattr(self, attr, value)
        self.updated_at = datetime.now(timezone.utc)
