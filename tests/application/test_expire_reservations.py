"""Tests for the reservation expiry sweep and cart release."""

from datetime import datetime, timedelta, timezone

from ims.application.create_reservation import CreateReservationHandler
from ims.application.expire_reservations import ExpireReservationsHandler
from ims.application.show_reservations import ShowReservationsHandler
from ims.application.transition_reservation import (
    ReleaseCartReservationsHandler,
    TransitionReservationHandler,
)
from ims.domain.model.reservation import ReservationStatus
from tests.fakes import FlakyUnitOfWork

NOW = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


def _reserve(uow, item_id, quantity, expires_at, **holder):
    return CreateReservationHandler(uow).handle(item_id, quantity, expires_at, **holder)


class TestSweep:

    def test_expires_only_lapsed_reservations(self, uow, store, make_item):
        item = make_item(quantity=10)
        stale = _reserve(uow, item.id, 3, NOW - timedelta(minutes=1), cart_id="c1")
        fresh = _reserve(uow, item.id, 2, NOW + timedelta(minutes=10), cart_id="c2")

        result = ExpireReservationsHandler(uow).handle(now=NOW)

        assert (result.examined, result.expired, result.skipped) == (1, 1, 0)
        assert store.reservations[stale.id].status is ReservationStatus.EXPIRED
        assert store.reservations[fresh.id].status is ReservationStatus.ACTIVE
        stored = store.items[item.id]
        assert (stored.reserved_quantity, stored.available_quantity) == (2, 8)

    def test_second_sweep_finds_nothing(self, uow, make_item):
        item = make_item(quantity=10)
        _reserve(uow, item.id, 3, NOW - timedelta(minutes=1), cart_id="c1")
        sweep = ExpireReservationsHandler(uow)

        sweep.handle(now=NOW)
        again = sweep.handle(now=NOW)

        assert (again.examined, again.expired) == (0, 0)

    def test_ignores_reservations_already_settled(self, uow, store, make_item):
        item = make_item(quantity=10)
        done = _reserve(uow, item.id, 3, NOW - timedelta(minutes=1), order_id="o1")
        TransitionReservationHandler(uow).handle(done.id, "fulfilled")
        before = len(store.transactions)

        result = ExpireReservationsHandler(uow).handle(now=NOW)

        assert result.examined == 0
        assert len(store.transactions) == before

    def test_contended_reservation_is_skipped_not_fatal(self, uow, store, make_item):
        item = make_item(quantity=10)
        stuck = _reserve(uow, item.id, 3, NOW - timedelta(minutes=5), cart_id="c1")
        free = _reserve(uow, item.id, 2, NOW - timedelta(minutes=1), cart_id="c2")

        # both attempts on the older reservation lose the race
        sweep = ExpireReservationsHandler(FlakyUnitOfWork(store, failures=2), max_attempts=2)
        result = sweep.handle(now=NOW)

        assert (result.examined, result.expired, result.skipped) == (2, 1, 1)
        assert store.reservations[stuck.id].status is ReservationStatus.ACTIVE
        assert store.reservations[free.id].status is ReservationStatus.EXPIRED
        assert store.items[item.id].reserved_quantity == 3

        again = ExpireReservationsHandler(uow).handle(now=NOW)
        assert (again.examined, again.expired) == (1, 1)


class TestReleaseCart:

    def test_cancels_every_active_hold_of_the_cart(self, uow, store, make_item):
        a = make_item(sku="A1", quantity=5)
        b = make_item(sku="B1", quantity=5)
        later = NOW + timedelta(days=365 * 10)
        _reserve(uow, a.id, 2, later, cart_id="cart-1")
        _reserve(uow, b.id, 1, later, cart_id="cart-1")
        other = _reserve(uow, a.id, 1, later, cart_id="cart-2")

        released = ReleaseCartReservationsHandler(uow).handle("cart-1")

        assert released == 2
        assert ShowReservationsHandler(uow).by_cart("cart-1") == []
        assert store.reservations[other.id].status is ReservationStatus.ACTIVE
        assert store.items[a.id].reserved_quantity == 1
        assert store.items[b.id].reserved_quantity == 0

    def test_unknown_cart_releases_nothing(self, uow):
        assert ReleaseCartReservationsHandler(uow).handle("nobody") == 0

    def test_contended_hold_does_not_stop_the_rest(self, uow, store, make_item):
        item = make_item(quantity=10)
        later = NOW + timedelta(days=365 * 10)
        stuck = _reserve(uow, item.id, 2, later, cart_id="cart-1")
        _reserve(uow, item.id, 3, later, cart_id="cart-1")

        release = ReleaseCartReservationsHandler(FlakyUnitOfWork(store, failures=2), max_attempts=2)

        assert release.handle("cart-1") == 1
        assert [r.id for r in ShowReservationsHandler(uow).by_cart("cart-1")] == [stuck.id]
        assert store.items[item.id].reserved_quantity == 2
