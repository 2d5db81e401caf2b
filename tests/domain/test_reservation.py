"""Unit tests for the InventoryReservation state machine."""

from datetime import datetime, timedelta, timezone

import pytest

from ims.domain.exceptions import InvalidTransitionError, ValidationError
from ims.domain.model.reservation import InventoryReservation, ReservationStatus

_SOON = datetime.now(timezone.utc) + timedelta(minutes=30)
_TERMINAL = [ReservationStatus.FULFILLED, ReservationStatus.EXPIRED, ReservationStatus.CANCELLED]


def _reservation(**overrides) -> InventoryReservation:
    kwargs = {"inventory_id": "i1", "quantity": 2, "expires_at": _SOON, "cart_id": "c1"}
    kwargs.update(overrides)
    return InventoryReservation.create(**kwargs)


class TestReservationCreate:

    def test_starts_active(self):
        r = _reservation()
        assert r.status is ReservationStatus.ACTIVE
        assert r.cart_id == "c1"
        assert r.order_id is None

    def test_needs_a_holder(self):
        with pytest.raises(ValidationError, match="Either order_id or cart_id is required"):
            _reservation(cart_id=None)

    def test_cannot_hold_for_both(self):
        with pytest.raises(ValidationError, match="not both"):
            _reservation(order_id="o1")

    def test_needs_expiry(self):
        with pytest.raises(ValidationError, match="expires_at is required"):
            _reservation(expires_at=None)

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _reservation(quantity=0)

    def test_naive_expiry_is_treated_as_utc(self):
        r = _reservation(expires_at=datetime(2030, 1, 1, 12, 0))
        assert r.expires_at.tzinfo is timezone.utc


class TestStateMachine:

    @pytest.mark.parametrize("target", _TERMINAL)
    def test_active_reaches_every_terminal_state(self, target):
        r = _reservation()
        r.transition_to(target)
        assert r.status is target

    def test_active_to_active_rejected(self):
        with pytest.raises(InvalidTransitionError):
            _reservation().transition_to(ReservationStatus.ACTIVE)

    @pytest.mark.parametrize("start", _TERMINAL)
    @pytest.mark.parametrize("target", list(ReservationStatus))
    def test_terminal_states_are_closed(self, start, target):
        r = _reservation()
        r.transition_to(start)
        with pytest.raises(InvalidTransitionError) as exc_info:
            r.transition_to(target)
        assert exc_info.value.current == start.value
        assert exc_info.value.attempted == target.value

    def test_error_names_both_states(self):
        r = _reservation()
        r.transition_to(ReservationStatus.FULFILLED)
        with pytest.raises(InvalidTransitionError, match="from 'fulfilled' to 'active'"):
            r.transition_to(ReservationStatus.ACTIVE)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError, match="Unknown reservation status"):
            ReservationStatus.parse("paused")

    def test_only_expired_and_cancelled_release(self):
        assert ReservationStatus.EXPIRED.releases_hold
        assert ReservationStatus.CANCELLED.releases_hold
        assert not ReservationStatus.FULFILLED.releases_hold


class TestLapsed:

    def test_past_expiry_is_lapsed(self):
        r = _reservation()
        assert r.is_lapsed(r.expires_at + timedelta(seconds=1))

    def test_not_lapsed_at_exact_expiry(self):
        r = _reservation()
        assert not r.is_lapsed(r.expires_at)

    def test_terminal_reservation_never_lapses(self):
        r = _reservation()
        r.transition_to(ReservationStatus.CANCELLED)
        assert not r.is_lapsed(r.expires_at + timedelta(days=1))
