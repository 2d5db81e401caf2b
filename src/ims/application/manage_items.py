"""Application services: Inventory Item Store use cases.

Quantities never change here directly.  Creating stock, setting a new
on-hand figure and manual adjustments are all expressed as ledger
postings inside the same unit of work as the item write.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog

from ims.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from ims.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from ims.domain.model.inventory import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    DEFAULT_REORDER_POINT,
    DEFAULT_REORDER_QUANTITY,
    InventoryItem,
    ItemPatch,
)
from ims.domain.model.transaction import TransactionType
from ims.domain.repository.unit_of_work import UnitOfWork
from ims.domain.service.ledger import InventoryLedger

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ItemDefaults:
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    reorder_point: int = DEFAULT_REORDER_POINT
    reorder_quantity: int = DEFAULT_REORDER_QUANTITY


def _require_count(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError(f"{name} cannot be negative (got {value})")


def _load(uow: UnitOfWork, inventory_id: str) -> InventoryItem:
    item = uow.items.get(inventory_id)
    if item is None:
        raise EntityNotFoundError(f"Inventory item '{inventory_id}' not found")
    return item


class CreateItemHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        defaults: ItemDefaults | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._uow = uow
        self._defaults = defaults or ItemDefaults()
        self._max_attempts = max_attempts

    def handle(
        self,
        product_id: str,
        sku: str,
        location_id: str,
        quantity: int = 0,
        reserved_quantity: int = 0,
        low_stock_threshold: int | None = None,
        reorder_point: int | None = None,
        reorder_quantity: int | None = None,
        last_restock_date: datetime | None = None,
        created_by: str | None = None,
    ) -> InventoryItem:
        """Register stock for a SKU at a location.

        Steps:
        1. Validate input and resolve the location.
        2. Refuse a second item for the same (sku, location).
        3. Insert the item empty, then post the starting stock as a
           ``restock`` (and any starting hold as a ``reservation``).
        """
        _require_count("quantity", quantity)
        _require_count("reserved_quantity", reserved_quantity)

        def _create() -> InventoryItem:
            with self._uow:
                if self._uow.locations.get(location_id) is None:
                    raise EntityNotFoundError(f"Location '{location_id}' not found")
                if self._uow.items.get_by_sku(sku, location_id) is not None:
                    raise ConflictError(
                        f"Inventory item with SKU {sku} already exists at location {location_id}"
                    )

                item = InventoryItem.create(
                    product_id=product_id,
                    sku=sku,
                    location_id=location_id,
                    low_stock_threshold=self._pick(low_stock_threshold, self._defaults.low_stock_threshold),
                    reorder_point=self._pick(reorder_point, self._defaults.reorder_point),
                    reorder_quantity=self._pick(reorder_quantity, self._defaults.reorder_quantity),
                )
                self._uow.items.add(item)

                ledger = InventoryLedger(self._uow)
                if quantity > 0:
                    ledger.post(
                        item.id,
                        TransactionType.RESTOCK,
                        quantity,
                        notes="Initial inventory setup",
                        created_by=created_by,
                    )
                if reserved_quantity > 0:
                    ledger.post(
                        item.id,
                        TransactionType.RESERVATION,
                        reserved_quantity,
                        notes="Initial reserved quantity",
                        created_by=created_by,
                    )

                created = _load(self._uow, item.id)
                if last_restock_date is not None:
                    created.apply_metadata(ItemPatch(last_restock_date=last_restock_date))
                    self._uow.items.save_metadata(created)
                self._uow.commit()
            return created

        created = run_with_retry(_create, self._max_attempts)
        logger.info(
            "Inventory item created",
            inventory_id=created.id,
            sku=created.sku,
            location_id=created.location_id,
            quantity=created.quantity,
        )
        return created

    @staticmethod
    def _pick(value: int | None, default: int) -> int:
        return default if value is None else value


class UpdateItemHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        inventory_id: str,
        patch: ItemPatch,
        created_by: str | None = None,
    ) -> InventoryItem:
        """Apply a partial update.

        A new ``quantity`` is posted as an ``adjustment`` of the difference
        and a new ``reserved_quantity`` as a ``reservation``/``release`` of
        the difference, so ``available_quantity`` is always recomputed by
        the ledger.
        """
        patch.validate()

        def _update() -> InventoryItem:
            with self._uow:
                item = _load(self._uow, inventory_id)
                ledger = InventoryLedger(self._uow)

                if patch.quantity is not None and patch.quantity != item.quantity:
                    ledger.post(
                        inventory_id,
                        TransactionType.ADJUSTMENT,
                        patch.quantity - item.quantity,
                        notes=f"Quantity set to {patch.quantity}",
                        created_by=created_by,
                    )
                if (
                    patch.reserved_quantity is not None
                    and patch.reserved_quantity != item.reserved_quantity
                ):
                    diff = patch.reserved_quantity - item.reserved_quantity
                    ledger.post(
                        inventory_id,
                        TransactionType.RESERVATION if diff > 0 else TransactionType.RELEASE,
                        abs(diff),
                        notes=f"Reserved quantity set to {patch.reserved_quantity}",
                        created_by=created_by,
                    )

                updated = _load(self._uow, inventory_id)
                if patch.touches_metadata:
                    updated.apply_metadata(patch)
                    self._uow.items.save_metadata(updated)
                self._uow.commit()
            return updated

        return run_with_retry(_update, self._max_attempts)


class AdjustQuantityHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        inventory_id: str,
        delta: int,
        reason: str | None = None,
        reference: str | None = None,
        created_by: str | None = None,
    ) -> InventoryItem:
        """Post a signed manual correction and return the updated item."""
        if not isinstance(delta, int) or isinstance(delta, bool):
            raise ValidationError("Quantity adjustment value is required and must be an integer")

        def _adjust() -> InventoryItem:
            with self._uow:
                InventoryLedger(self._uow).post(
                    inventory_id,
                    TransactionType.ADJUSTMENT,
                    delta,
                    reference=reference,
                    notes=reason or "Manual inventory adjustment",
                    created_by=created_by,
                )
                updated = _load(self._uow, inventory_id)
                self._uow.commit()
            return updated

        return run_with_retry(_adjust, self._max_attempts)


class DeleteItemHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, inventory_id: str) -> None:
        """Remove an item that has no ledger history and no reservations."""
        with self._uow:
            item = _load(self._uow, inventory_id)
            if self._uow.transactions.exists_for_item(inventory_id):
                raise ConflictError(
                    f"Inventory item {item.sku} has transaction history and cannot be deleted"
                )
            if self._uow.reservations.exists_for_item(inventory_id):
                raise ConflictError(
                    f"Inventory item {item.sku} has reservations and cannot be deleted"
                )
            self._uow.items.delete(inventory_id)
            self._uow.commit()

        logger.info("Inventory item deleted", inventory_id=inventory_id)
