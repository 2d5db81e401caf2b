"""Tests for the read-side handlers: items, history, reservations, availability."""

from datetime import datetime, timedelta, timezone

import pytest

from ims.application.check_availability import CheckAvailabilityHandler
from ims.application.create_reservation import CreateReservationHandler
from ims.application.manage_locations import CreateLocationHandler
from ims.application.post_transaction import TransactionHistoryHandler
from ims.application.show_inventory import ShowInventoryHandler
from ims.application.show_reservations import ShowReservationsHandler
from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.inventory import ItemFilter


@pytest.fixture
def second_location(uow):
    return CreateLocationHandler(uow).handle(name="Corner Shop", type="store")


class TestShowInventory:

    def test_find_by_sku_at_location(self, uow, second_location, make_item):
        make_item(sku="A1", quantity=1)
        there = make_item(sku="A1", quantity=2, location_id=second_location.id)

        found = ShowInventoryHandler(uow).find_by_sku("A1", second_location.id)
        assert found.id == there.id

    def test_unknown_sku(self, uow):
        with pytest.raises(EntityNotFoundError, match="No inventory item with SKU X"):
            ShowInventoryHandler(uow).find_by_sku("X")

    def test_filters(self, uow, location, second_location, make_item):
        plenty = make_item(sku="P", quantity=50)
        low = make_item(sku="L", quantity=3)
        empty = make_item(sku="E", quantity=0, location_id=second_location.id)
        show = ShowInventoryHandler(uow)

        assert {i.id for i in show.low_stock()} == {low.id, empty.id}
        assert [i.id for i in show.out_of_stock()] == [empty.id]
        assert {i.id for i in show.by_location(location.id)} == {plenty.id, low.id}
        page = show.handle(ItemFilter(location_id=location.id, low_stock=True))
        assert [i.id for i in page] == [low.id]

    def test_paging(self, uow, make_item):
        for n in range(5):
            make_item(sku=f"S{n}")
        show = ShowInventoryHandler(uow)
        assert len(show.handle(limit=2)) == 2
        assert len(show.handle(limit=2, offset=4)) == 1

    def test_bad_paging_rejected(self, uow):
        with pytest.raises(ValidationError):
            ShowInventoryHandler(uow).handle(limit=0)


class TestHistory:

    def test_newest_first_and_by_reference(self, uow, make_item):
        item = make_item(quantity=5)
        reservation = CreateReservationHandler(uow).handle(
            item.id, 2, datetime.now(timezone.utc) + timedelta(minutes=5), order_id="o1"
        )
        history = TransactionHistoryHandler(uow)

        assert [t.transaction_type.value for t in history.by_item(item.id)] == [
            "reservation",
            "restock",
        ]
        by_ref = history.by_reference(reservation.id)
        assert len(by_ref) == 1
        assert history.find(by_ref[0].id) == by_ref[0]

    def test_unknown_transaction(self, uow):
        with pytest.raises(EntityNotFoundError):
            TransactionHistoryHandler(uow).find("nope")


class TestShowReservations:

    def test_lookups(self, uow, make_item):
        item = make_item(quantity=5)
        expires = datetime.now(timezone.utc) + timedelta(minutes=5)
        create = CreateReservationHandler(uow)
        by_order = create.handle(item.id, 1, expires, order_id="o1")
        by_cart = create.handle(item.id, 2, expires, cart_id="c1")
        show = ShowReservationsHandler(uow)

        assert {r.id for r in show.by_item(item.id)} == {by_order.id, by_cart.id}
        assert [r.id for r in show.by_order("o1")] == [by_order.id]
        assert [r.id for r in show.by_cart("c1")] == [by_cart.id]
        assert show.find(by_cart.id).quantity == 2

    def test_unknown_reservation(self, uow):
        with pytest.raises(EntityNotFoundError):
            ShowReservationsHandler(uow).find("nope")


class TestCheckAvailability:

    def test_across_locations(self, uow, second_location, make_item):
        make_item(sku="A1", product_id="p1", quantity=3)
        make_item(sku="A1", product_id="p1", quantity=4, reserved_quantity=1, location_id=second_location.id)
        check = CheckAvailabilityHandler(uow)

        dto = check.handle("p1", 6)
        assert dto.available
        assert (dto.total_quantity, dto.total_available) == (7, 6)
        assert not check.handle("p1", 7).available

    def test_repeated_reads_agree(self, uow, make_item):
        make_item(product_id="p1", quantity=9)
        check = CheckAvailabilityHandler(uow)
        assert check.totals("p1") == check.totals("p1")

    def test_negative_request_rejected(self, uow):
        with pytest.raises(ValidationError):
            CheckAvailabilityHandler(uow).handle("p1", -1)
