"""Competing writers on a real database file, one session per thread."""

import threading
from datetime import datetime, timedelta, timezone

from ims.application.create_reservation import CreateReservationHandler
from ims.application.expire_reservations import ExpireReservationsHandler
from ims.application.manage_items import CreateItemHandler
from ims.application.manage_locations import CreateLocationHandler
from ims.application.post_transaction import PostTransactionHandler, TransactionHistoryHandler
from ims.application.transition_reservation import TransitionReservationHandler
from ims.domain.exceptions import ConflictError, InvalidTransitionError
from ims.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


def _run_concurrently(*targets):
    barrier = threading.Barrier(len(targets))
    outcomes = [None] * len(targets)

    def _runner(index, target):
        barrier.wait()
        try:
            outcomes[index] = target()
        except Exception as exc:  # collected for the assertions below
            outcomes[index] = exc

    threads = [threading.Thread(target=_runner, args=(i, t)) for i, t in enumerate(targets)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return outcomes


def _item(uow, quantity):
    location = CreateLocationHandler(uow).handle(name="Main Warehouse", type="warehouse")
    return CreateItemHandler(uow).handle(
        product_id="p1", sku="A1", location_id=location.id, quantity=quantity
    )


class TestReservationRace:

    def test_exactly_one_reservation_wins(self, session_factory):
        item = _item(SqlAlchemyUnitOfWork(session_factory), 5)
        expires = datetime.now(timezone.utc) + timedelta(minutes=30)

        def _reserve(cart):
            return lambda: CreateReservationHandler(SqlAlchemyUnitOfWork(session_factory)).handle(
                item.id, 5, expires, cart_id=cart
            )

        outcomes = _run_concurrently(_reserve("c1"), _reserve("c2"))

        failures = [o for o in outcomes if isinstance(o, Exception)]
        assert len(failures) == 1, outcomes
        assert isinstance(failures[0], ConflictError)

        uow = SqlAlchemyUnitOfWork(session_factory)
        with uow:
            stored = uow.items.get(item.id)
            active = uow.reservations.list_active_by_item(item.id)
        assert (stored.reserved_quantity, stored.available_quantity) == (5, 0)
        assert len(active) == 1


class TestNoLostUpdates:

    def test_parallel_restocks_all_land(self, session_factory):
        item = _item(SqlAlchemyUnitOfWork(session_factory), 0)

        def _restock():
            return PostTransactionHandler(SqlAlchemyUnitOfWork(session_factory)).handle(
                item.id, "restock", 1
            )

        outcomes = _run_concurrently(*[_restock for _ in range(8)])

        assert not [o for o in outcomes if isinstance(o, Exception)], outcomes
        result = TransactionHistoryHandler(SqlAlchemyUnitOfWork(session_factory)).replay(item.id)
        assert result.quantity == 8
        assert result.consistent


class TestSweepAgainstCancel:

    def test_hold_is_released_once(self, session_factory):
        item = _item(SqlAlchemyUnitOfWork(session_factory), 5)
        reservation = CreateReservationHandler(SqlAlchemyUnitOfWork(session_factory)).handle(
            item.id, 5, datetime.now(timezone.utc) - timedelta(seconds=1), cart_id="c1"
        )

        def _cancel():
            return TransitionReservationHandler(SqlAlchemyUnitOfWork(session_factory)).handle(
                reservation.id, "cancelled"
            )

        def _sweep():
            return ExpireReservationsHandler(SqlAlchemyUnitOfWork(session_factory)).handle()

        cancelled, swept = _run_concurrently(_cancel, _sweep)

        # whichever lost sees a settled reservation, never a second release
        assert not isinstance(swept, Exception)
        cancel_won = not isinstance(cancelled, Exception)
        if not cancel_won:
            assert isinstance(cancelled, InvalidTransitionError)
        assert swept.expired + int(cancel_won) == 1

        uow = SqlAlchemyUnitOfWork(session_factory)
        with uow:
            stored = uow.items.get(item.id)
            releases = [
                t for t in uow.transactions.list_by_reference(reservation.id)
                if t.transaction_type.value == "release"
            ]
        assert len(releases) == 1
        assert (stored.reserved_quantity, stored.available_quantity) == (0, 5)


class _HeldPostingUnitOfWork(SqlAlchemyUnitOfWork):
    """Stops every posting just before it touches the item row."""

    def __init__(self, session_factory, reached, resume):
        super().__init__(session_factory)
        self._reached = reached
        self._resume = resume

    def __enter__(self):
        super().__enter__()
        apply_posting = self.items.apply_posting

        def _held(*args, **kwargs):
            self._reached.set()
            assert self._resume.wait(timeout=10)
            return apply_posting(*args, **kwargs)

        self.items.apply_posting = _held
        return self


class TestLedgerOrderUnderContention:

    def test_replay_follows_apply_order_not_clock(self, session_factory):
        item = _item(SqlAlchemyUnitOfWork(session_factory), 10)
        reached, resume = threading.Event(), threading.Event()
        outcome = {}

        def _slow_sale():
            uow = _HeldPostingUnitOfWork(session_factory, reached, resume)
            try:
                outcome["sale"] = PostTransactionHandler(uow).handle(item.id, "sale", 3)
            except Exception as exc:  # surfaced by the assertions below
                outcome["sale"] = exc

        worker = threading.Thread(target=_slow_sale)
        worker.start()
        assert reached.wait(timeout=10)
        # the sale started first but the reservation lands first
        reservation = PostTransactionHandler(SqlAlchemyUnitOfWork(session_factory)).handle(
            item.id, "reservation", 2
        )
        resume.set()
        worker.join(timeout=30)

        sale = outcome["sale"]
        assert not isinstance(sale, Exception), sale
        assert sale.sequence == reservation.sequence + 1

        result = TransactionHistoryHandler(SqlAlchemyUnitOfWork(session_factory)).replay(item.id)
        assert (result.quantity, result.reserved_quantity) == (7, 0)
        assert (result.replayed_quantity, result.replayed_reserved_quantity) == (7, 0)
        assert result.consistent
