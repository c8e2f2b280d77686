from datetime import date, time
from decimal import Decimal
from uuid import uuid4

import pytest

from apps.finances.domain import PaymentKind
from apps.reservations.domain import Reservation, ReservationStatus
from apps.reservations.domain.errors import ReservationAlreadyTerminalError
from apps.reservations.domain.events import (
    ReservationCancelled,
    ReservationCompleted,
    ReservationConfirmed,
)
from shared.domain.errors import InvalidStateError
from shared.domain.value_objects import Money, TimeSlot


def make_reservation(total="500.00"):
    return Reservation(
        customer_id=1,
        venue_id=uuid4(),
        reservation_date=date(2030, 6, 15),
        slot=TimeSlot(time(14), time(19)),
        total_amount=Money(Decimal(total), "USD"),
    )


def test_new_reservation_is_pending_and_unpaid():
    reservation = make_reservation()

    assert reservation.status == ReservationStatus.PENDING
    assert reservation.paid_amount == Money.zero("USD")
    assert reservation.blocks_slot


def test_first_installment_confirms_before_full_payment():
    reservation = make_reservation("500.00")

    confirmed = reservation.apply_settlement(Decimal("200.00"), PaymentKind.INSTALLMENT_1)

    assert confirmed
    assert reservation.status == ReservationStatus.CONFIRMED
    assert reservation.paid_amount.amount == Decimal("200.00")
    assert reservation.confirmed_at is not None
    assert [type(e) for e in reservation.events] == [ReservationConfirmed]


def test_full_payment_kind_confirms_even_when_short():
    reservation = make_reservation("500.00")

    assert reservation.apply_settlement(Decimal("100.00"), PaymentKind.FULL)
    assert reservation.status == ReservationStatus.CONFIRMED


def test_second_installment_alone_confirms_only_when_fully_paid():
    reservation = make_reservation("500.00")

    assert not reservation.apply_settlement(Decimal("200.00"), PaymentKind.INSTALLMENT_2)
    assert reservation.status == ReservationStatus.PENDING

    assert reservation.apply_settlement(Decimal("300.00"), PaymentKind.INSTALLMENT_2)
    assert reservation.status == ReservationStatus.CONFIRMED


def test_settlement_after_confirmation_only_adds_money():
    reservation = make_reservation("500.00")
    reservation.apply_settlement(Decimal("200.00"), PaymentKind.INSTALLMENT_1)
    reservation.clear_events()

    assert not reservation.apply_settlement(Decimal("300.00"), PaymentKind.INSTALLMENT_2)
    assert reservation.paid_amount.amount == Decimal("500.00")
    assert reservation.events == []


def test_settlement_on_cancelled_reservation_keeps_status():
    reservation = make_reservation()
    reservation.cancel("changed plans")

    assert not reservation.apply_settlement(Decimal("500.00"), PaymentKind.FULL)
    assert reservation.status == ReservationStatus.CANCELLED
    assert reservation.paid_amount.amount == Decimal("500.00")


@pytest.mark.parametrize("confirm_first", [False, True])
def test_cancel_from_live_states(confirm_first):
    reservation = make_reservation()
    if confirm_first:
        reservation.apply_settlement(Decimal("500.00"), PaymentKind.FULL)
    reservation.clear_events()

    reservation.cancel("venue double-booked offline")

    assert reservation.status == ReservationStatus.CANCELLED
    assert reservation.cancellation_reason == "venue double-booked offline"
    assert reservation.cancelled_at is not None
    assert not reservation.blocks_slot
    (event,) = reservation.events
    assert isinstance(event, ReservationCancelled)
    assert event.old_status == ("CONFIRMED" if confirm_first else "PENDING")


def test_cancel_twice_is_rejected_and_state_unchanged():
    reservation = make_reservation()
    reservation.cancel("first")
    cancelled_at = reservation.cancelled_at

    with pytest.raises(ReservationAlreadyTerminalError) as excinfo:
        reservation.cancel("second")

    assert isinstance(excinfo.value, InvalidStateError)
    assert reservation.cancellation_reason == "first"
    assert reservation.cancelled_at == cancelled_at


def test_cancel_keeps_payments():
    reservation = make_reservation()
    reservation.apply_settlement(Decimal("500.00"), PaymentKind.FULL)

    reservation.cancel("")

    assert reservation.paid_amount.amount == Decimal("500.00")


def test_complete_requires_confirmation():
    reservation = make_reservation()

    with pytest.raises(InvalidStateError):
        reservation.complete()

    reservation.apply_settlement(Decimal("500.00"), PaymentKind.FULL)
    reservation.clear_events()
    reservation.complete()

    assert reservation.status == ReservationStatus.COMPLETED
    assert not reservation.blocks_slot
    assert [type(e) for e in reservation.events] == [ReservationCompleted]


def test_nothing_leaves_completed():
    reservation = make_reservation()
    reservation.apply_settlement(Decimal("500.00"), PaymentKind.FULL)
    reservation.complete()

    with pytest.raises(ReservationAlreadyTerminalError):
        reservation.cancel("too late")
    with pytest.raises(InvalidStateError):
        reservation.complete()


def test_refund_reservation_never_drives_paid_below_zero():
    reservation = make_reservation()
    reservation.apply_settlement(Decimal("200.00"), PaymentKind.INSTALLMENT_1)

    reservation.reserve_refund(Decimal("150.00"))
    assert reservation.paid_amount.amount == Decimal("50.00")

    with pytest.raises(ValueError):
        reservation.reserve_refund(Decimal("50.01"))
    with pytest.raises(ValueError):
        reservation.reserve_refund(Decimal("0"))

    reservation.release_refund(Decimal("150.00"))
    assert reservation.paid_amount.amount == Decimal("200.00")


def test_overlaps_uses_half_open_slots():
    reservation = make_reservation()  # 14:00-19:00

    assert reservation.overlaps(date(2030, 6, 15), TimeSlot(time(18), time(20)))
    assert not reservation.overlaps(date(2030, 6, 15), TimeSlot(time(19), time(21)))
    assert not reservation.overlaps(date(2030, 6, 15), TimeSlot(time(12), time(14)))
    assert not reservation.overlaps(date(2030, 6, 16), TimeSlot(time(14), time(19)))
