"""Tests for item creation, update, adjustment and removal."""

from datetime import datetime, timedelta, timezone

import pytest

from ims.application.create_reservation import CreateReservationHandler
from ims.application.manage_items import (
    AdjustQuantityHandler,
    CreateItemHandler,
    DeleteItemHandler,
    ItemDefaults,
    UpdateItemHandler,
)
from ims.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from ims.domain.model.inventory import ItemPatch
from ims.domain.model.reservation import InventoryReservation
from ims.domain.model.transaction import TransactionType


class TestCreateItem:

    def test_initial_stock_goes_through_the_ledger(self, store, make_item):
        item = make_item(quantity=10, reserved_quantity=4, created_by="bob")

        assert (item.quantity, item.reserved_quantity, item.available_quantity) == (10, 4, 6)
        history = store.transactions_for(item.id)
        assert [(t.transaction_type, t.quantity, t.notes) for t in history] == [
            (TransactionType.RESTOCK, 10, "Initial inventory setup"),
            (TransactionType.RESERVATION, 4, "Initial reserved quantity"),
        ]
        assert all(t.created_by == "bob" for t in history)

    def test_reserved_above_quantity_clamps_available(self, make_item):
        item = make_item(quantity=2, reserved_quantity=5)
        assert (item.quantity, item.reserved_quantity, item.available_quantity) == (2, 5, 0)

    def test_empty_item_has_no_history(self, store, make_item):
        item = make_item()
        assert store.transactions_for(item.id) == []

    def test_configured_defaults_apply(self, uow, location):
        handler = CreateItemHandler(uow, defaults=ItemDefaults(low_stock_threshold=3))
        item = handler.handle(product_id="p1", sku="Z9", location_id=location.id)
        assert item.low_stock_threshold == 3
        assert item.reorder_point == 5

    def test_explicit_restock_date_kept(self, make_item):
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        item = make_item(quantity=1, last_restock_date=when)
        assert item.last_restock_date == when

    def test_duplicate_sku_at_location_rejected(self, store, location, make_item):
        make_item(sku="A1")
        with pytest.raises(ConflictError, match=f"SKU A1 already exists at location {location.id}"):
            make_item(sku="A1", quantity=4)
        assert len(store.items) == 1

    def test_unknown_location_rejected(self, make_item):
        with pytest.raises(EntityNotFoundError, match="Location 'nowhere' not found"):
            make_item(location_id="nowhere")

    def test_negative_quantity_rejected(self, store, make_item):
        with pytest.raises(ValidationError, match="quantity cannot be negative"):
            make_item(quantity=-1)
        assert store.items == {}


class TestUpdateItem:

    def test_quantity_change_is_an_adjustment(self, uow, store, make_item):
        item = make_item(quantity=10)
        updated = UpdateItemHandler(uow).handle(item.id, ItemPatch(quantity=7))

        assert (updated.quantity, updated.available_quantity) == (7, 7)
        last = store.transactions_for(item.id)[-1]
        assert (last.transaction_type, last.quantity) == (TransactionType.ADJUSTMENT, -3)

    def test_reserved_change_recomputes_available(self, uow, store, make_item):
        item = make_item(quantity=10, reserved_quantity=2)
        handler = UpdateItemHandler(uow)

        raised = handler.handle(item.id, ItemPatch(reserved_quantity=6))
        assert (raised.reserved_quantity, raised.available_quantity) == (6, 4)

        lowered = handler.handle(item.id, ItemPatch(reserved_quantity=1))
        assert (lowered.reserved_quantity, lowered.available_quantity) == (1, 9)

        types = [t.transaction_type for t in store.transactions_for(item.id)][-2:]
        assert types == [TransactionType.RESERVATION, TransactionType.RELEASE]

    def test_metadata_only_posts_nothing(self, uow, store, make_item):
        item = make_item(quantity=10)
        before = len(store.transactions)
        updated = UpdateItemHandler(uow).handle(
            item.id, ItemPatch(low_stock_threshold=2, reorder_point=1, reorder_quantity=50)
        )
        assert (updated.low_stock_threshold, updated.reorder_point, updated.reorder_quantity) == (2, 1, 50)
        assert len(store.transactions) == before
        assert store.items[item.id].low_stock_threshold == 2

    def test_negative_values_rejected(self, uow, make_item):
        item = make_item(quantity=10)
        with pytest.raises(ValidationError):
            UpdateItemHandler(uow).handle(item.id, ItemPatch(reserved_quantity=-1))

    def test_unknown_item(self, uow):
        with pytest.raises(EntityNotFoundError):
            UpdateItemHandler(uow).handle("missing", ItemPatch(quantity=1))


class TestAdjustQuantity:

    def test_signed_adjustment(self, uow, store, make_item):
        item = make_item(quantity=10)
        updated = AdjustQuantityHandler(uow).handle(item.id, -4, reason="Damaged in transit", created_by="ops")

        assert updated.quantity == 6
        last = store.transactions_for(item.id)[-1]
        assert last.notes == "Damaged in transit"
        assert last.created_by == "ops"

    def test_default_reason(self, uow, store, make_item):
        item = make_item(quantity=1)
        AdjustQuantityHandler(uow).handle(item.id, 2)
        assert store.transactions_for(item.id)[-1].notes == "Manual inventory adjustment"

    def test_non_integer_delta_rejected(self, uow, make_item):
        item = make_item(quantity=1)
        with pytest.raises(ValidationError, match="must be an integer"):
            AdjustQuantityHandler(uow).handle(item.id, "3")


class TestDeleteItem:

    def test_item_with_history_cannot_be_deleted(self, uow, store, make_item):
        item = make_item(quantity=1)
        with pytest.raises(ConflictError, match="has transaction history"):
            DeleteItemHandler(uow).handle(item.id)
        assert item.id in store.items

    def test_item_with_reservations_cannot_be_deleted(self, uow, make_item):
        item = make_item()
        expires = datetime.now(timezone.utc) + timedelta(minutes=1)
        with uow:
            uow.reservations.add(InventoryReservation.create(item.id, 1, expires, cart_id="c"))
            uow.commit()

        with pytest.raises(ConflictError, match="has reservations"):
            DeleteItemHandler(uow).handle(item.id)

    def test_rejected_reservation_leaves_item_deletable(self, uow, store, make_item):
        item = make_item()
        expires = datetime.now(timezone.utc) + timedelta(minutes=1)
        with pytest.raises(ConflictError):
            CreateReservationHandler(uow).handle(item.id, 1, expires, cart_id="c")

        assert store.reservations == {}
        DeleteItemHandler(uow).handle(item.id)
        assert item.id not in store.items

    def test_unknown_item(self, uow):
        with pytest.raises(EntityNotFoundError):
            DeleteItemHandler(uow).handle("missing")
