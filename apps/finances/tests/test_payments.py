import threading
from decimal import Decimal
from unittest.mock import Mock
from uuid import uuid4

import pytest

from apps.finances.domain import EntryStatus, PaymentKind, PaymentLedger
from apps.finances.domain.errors import (
    GatewayFailureError,
    InvalidAmountError,
    InvalidRefundAmountError,
    NoSuccessfulPaymentError,
    PaymentNotFoundError,
)
from apps.reservations.domain import ReservationStatus
from apps.reservations.domain.errors import ReservationAlreadyTerminalError, ReservationNotFoundError
from apps.reservations.domain.events import PaymentSettled, RefundIssued, ReservationConfirmed
from shared.domain.errors import InvalidStateError, NotAuthorizedError
from shared.tests.factories import CUSTOMER_ID, OTHER_CUSTOMER_ID, OWNER_ID, STAFF_ID


def pay(world, reservation, amount, kind=PaymentKind.FULL):
    entry = world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal(amount), kind)
    return world.engine.settle_payment(entry.external_reference), entry


def assert_paid_matches_ledger(world, reservation_id):
    stored = world.reservations.get(reservation_id)
    ledger = PaymentLedger(world.ledger.list_for_reservation(reservation_id))
    assert stored.paid_amount.amount >= 0
    assert stored.paid_amount.amount == ledger.net_paid()
    assert stored.paid_amount.amount <= ledger.total_settled() - ledger.total_refunded()


@pytest.fixture
def reservation(reserve):
    # 14:00-19:00 at $100/h -> $500
    return reserve(14, 19)


# ===== Payment intents =====

def test_payment_intent_appends_pending_charge(world, reservation):
    entry = world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("200.00"), PaymentKind.INSTALLMENT_1)

    assert entry.status == EntryStatus.PENDING
    assert entry.amount == Decimal("200.00")
    assert entry.external_reference == f"sim_{entry.id.hex}"
    assert world.ledger.list_for_reservation(reservation.id) == [entry]
    assert world.reservations.get(reservation.id).paid_amount.amount == 0


def test_payment_intent_only_for_own_reservation(world, reservation):
    with pytest.raises(NotAuthorizedError):
        world.engine.create_payment_intent(OTHER_CUSTOMER_ID, reservation.id, Decimal("200.00"))


@pytest.mark.parametrize("amount", ["0", "-5.00", "0.004"])
def test_payment_intent_amount_must_be_positive(world, reservation, amount):
    world.gateway.create_charge = Mock(wraps=world.gateway.create_charge)

    with pytest.raises(InvalidAmountError):
        world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal(amount))

    world.gateway.create_charge.assert_not_called()
    assert world.ledger.list_for_reservation(reservation.id) == []


def test_payment_intent_rejected_for_cancelled_reservation(world, reservation):
    world.engine.cancel_reservation(reservation.id, CUSTOMER_ID, "")

    with pytest.raises(ReservationAlreadyTerminalError):
        world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("200.00"))


def test_gateway_failure_on_charge_writes_nothing(world, reservation):
    world.gateway.create_charge = Mock(side_effect=GatewayFailureError("create charge", "timeout"))

    with pytest.raises(GatewayFailureError):
        world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("200.00"))

    assert world.ledger.list_for_reservation(reservation.id) == []
    stored = world.reservations.get(reservation.id)
    assert stored.status == ReservationStatus.PENDING
    assert stored.paid_amount.amount == 0


# ===== Settlement =====

def test_first_installment_confirms_reservation(world, reservation):
    settled, entry = pay(world, reservation, "200.00", PaymentKind.INSTALLMENT_1)

    assert settled.status == ReservationStatus.CONFIRMED
    assert settled.paid_amount.amount == Decimal("200.00")
    assert settled.total_amount.amount == Decimal("500.00")
    assert world.ledger.get(entry.id).status == EntryStatus.SUCCESS
    assert [type(e) for e in world.events[-2:]] == [ReservationConfirmed, PaymentSettled]
    assert_paid_matches_ledger(world, reservation.id)


def test_second_installment_alone_stays_pending(world, reservation):
    settled, _ = pay(world, reservation, "200.00", PaymentKind.INSTALLMENT_2)

    assert settled.status == ReservationStatus.PENDING


def test_settlement_is_idempotent_per_reference(world, reservation):
    entry = world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("200.00"), PaymentKind.INSTALLMENT_1)

    first = world.engine.settle_payment(entry.external_reference)
    settled_events = sum(isinstance(e, PaymentSettled) for e in world.events)
    second = world.engine.settle_payment(entry.external_reference)

    assert first.paid_amount.amount == second.paid_amount.amount == Decimal("200.00")
    assert world.settlements.get(entry.external_reference) == entry.id
    assert sum(isinstance(e, PaymentSettled) for e in world.events) == settled_events
    assert len(world.ledger.list_for_reservation(reservation.id)) == 1


def test_concurrent_settlements_count_once(world, reservation):
    entry = world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("200.00"))
    barrier = threading.Barrier(6)

    def settle():
        barrier.wait()
        world.engine.settle_payment(entry.external_reference)

    threads = [threading.Thread(target=settle) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert world.reservations.get(reservation.id).paid_amount.amount == Decimal("200.00")
    assert_paid_matches_ledger(world, reservation.id)


def test_settle_unknown_reference(world):
    with pytest.raises(PaymentNotFoundError):
        world.engine.settle_payment("pi_missing")


def test_failed_charge_cannot_be_settled(world, reservation):
    entry = world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("200.00"))
    failed = world.engine.fail_payment(entry.external_reference, "card declined")

    with pytest.raises(InvalidStateError):
        world.engine.settle_payment(entry.external_reference)

    assert failed.status == EntryStatus.FAILED
    assert world.reservations.get(reservation.id).paid_amount.amount == 0


def test_settled_charge_cannot_fail(world, reservation):
    _, entry = pay(world, reservation, "500.00")

    with pytest.raises(InvalidStateError):
        world.engine.fail_payment(entry.external_reference, "too late")


def test_settlement_after_cancel_records_money_without_transition(world, reservation):
    entry = world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("500.00"))
    world.engine.cancel_reservation(reservation.id, CUSTOMER_ID, "")

    settled = world.engine.settle_payment(entry.external_reference)

    assert settled.status == ReservationStatus.CANCELLED
    assert settled.paid_amount.amount == Decimal("500.00")


# ===== Refunds =====

def test_refund_defaults_to_first_successful_charge(world, reservation):
    pay(world, reservation, "200.00", PaymentKind.INSTALLMENT_1)
    pay(world, reservation, "300.00", PaymentKind.INSTALLMENT_2)

    refund = world.engine.process_refund(reservation.id, CUSTOMER_ID)

    assert refund.amount == Decimal("-200.00")
    assert refund.status == EntryStatus.REFUNDED
    assert world.reservations.get(reservation.id).paid_amount.amount == Decimal("300.00")
    assert isinstance(world.events[-1], RefundIssued)
    assert_paid_matches_ledger(world, reservation.id)


def test_default_refund_is_capped_at_paid_amount(world, reservation):
    pay(world, reservation, "500.00")
    world.engine.process_refund(reservation.id, OWNER_ID, Decimal("400.00"))

    refund = world.engine.process_refund(reservation.id, OWNER_ID)

    assert refund.amount == Decimal("-100.00")
    assert world.reservations.get(reservation.id).paid_amount.amount == Decimal("0.00")
    assert_paid_matches_ledger(world, reservation.id)


def test_repeated_refunds_never_go_negative(world, reservation):
    pay(world, reservation, "500.00")
    world.engine.process_refund(reservation.id, STAFF_ID)

    with pytest.raises(NoSuccessfulPaymentError):
        world.engine.process_refund(reservation.id, STAFF_ID)

    assert world.reservations.get(reservation.id).paid_amount.amount == Decimal("0.00")


@pytest.mark.parametrize("amount", ["0", "-1.00", "0.004", "500.01", "500.005"])
def test_explicit_refund_amount_must_fit_paid(world, reservation, amount):
    pay(world, reservation, "500.00")

    with pytest.raises(InvalidRefundAmountError):
        world.engine.process_refund(reservation.id, CUSTOMER_ID, Decimal(amount))

    assert world.reservations.get(reservation.id).paid_amount.amount == Decimal("500.00")
    assert len(world.ledger.list_for_reservation(reservation.id)) == 1


def test_refund_without_successful_payment(world, reservation):
    world.engine.create_payment_intent(CUSTOMER_ID, reservation.id, Decimal("200.00"))

    with pytest.raises(NoSuccessfulPaymentError):
        world.engine.process_refund(reservation.id, CUSTOMER_ID)


def test_refund_requires_customer_or_management(world, reservation):
    pay(world, reservation, "500.00")

    with pytest.raises(NotAuthorizedError):
        world.engine.process_refund(reservation.id, OTHER_CUSTOMER_ID)


def test_refund_of_cancelled_reservation(world, reservation):
    pay(world, reservation, "500.00")
    world.engine.cancel_reservation(reservation.id, CUSTOMER_ID, "")

    refund = world.engine.process_refund(reservation.id, CUSTOMER_ID)

    assert refund.amount == Decimal("-500.00")
    stored = world.reservations.get(reservation.id)
    assert stored.status == ReservationStatus.CANCELLED
    assert stored.paid_amount.amount == 0


def test_gateway_failure_on_refund_restores_paid_amount(world, reservation):
    pay(world, reservation, "500.00")
    world.gateway.create_refund = Mock(side_effect=GatewayFailureError("process refund", "503"))

    with pytest.raises(GatewayFailureError):
        world.engine.process_refund(reservation.id, CUSTOMER_ID, Decimal("100.00"))

    stored = world.reservations.get(reservation.id)
    assert stored.paid_amount.amount == Decimal("500.00")
    refunds = [e for e in world.ledger.list_for_reservation(reservation.id) if e.is_refund]
    assert [(e.amount, e.status) for e in refunds] == [(Decimal("-100.00"), EntryStatus.FAILED)]
    assert_paid_matches_ledger(world, reservation.id)


def test_unexpected_gateway_error_on_refund_restores_paid_amount(world, reservation):
    pay(world, reservation, "500.00")
    world.gateway.create_refund = Mock(side_effect=RuntimeError("connection reset"))

    with pytest.raises(RuntimeError):
        world.engine.process_refund(reservation.id, CUSTOMER_ID, Decimal("100.00"))

    stored = world.reservations.get(reservation.id)
    assert stored.paid_amount.amount == Decimal("500.00")
    refunds = [e for e in world.ledger.list_for_reservation(reservation.id) if e.is_refund]
    assert [(e.amount, e.status) for e in refunds] == [(Decimal("-100.00"), EntryStatus.FAILED)]
    assert_paid_matches_ledger(world, reservation.id)

    del world.gateway.create_refund
    refund = world.engine.process_refund(reservation.id, CUSTOMER_ID, Decimal("100.00"))
    assert refund.status == EntryStatus.REFUNDED


def test_gateway_is_called_without_holding_the_reservation(world, reservation):
    pay(world, reservation, "500.00")
    seen = {}

    def refund_while_cancelling(reference, amount):
        # Another request on the same reservation must not block behind the gateway
        done = threading.Event()

        def cancel():
            world.engine.cancel_reservation(reservation.id, OWNER_ID, "during refund")
            done.set()

        threading.Thread(target=cancel).start()
        seen["cancelled"] = done.wait(timeout=5)
        seen["paid_during_call"] = world.reservations.get(reservation.id).paid_amount.amount

    world.gateway.create_refund = refund_while_cancelling

    world.engine.process_refund(reservation.id, CUSTOMER_ID, Decimal("100.00"))

    assert seen == {"cancelled": True, "paid_during_call": Decimal("400.00")}
    stored = world.reservations.get(reservation.id)
    assert stored.status == ReservationStatus.CANCELLED
    assert stored.paid_amount.amount == Decimal("400.00")


def test_list_payments(world, reservation):
    pay(world, reservation, "200.00", PaymentKind.INSTALLMENT_1)
    world.engine.process_refund(reservation.id, CUSTOMER_ID, Decimal("50.00"))

    entries = world.engine.list_payments(reservation.id, OWNER_ID)

    assert [e.amount for e in entries] == [Decimal("200.00"), Decimal("-50.00")]
    with pytest.raises(NotAuthorizedError):
        world.engine.list_payments(reservation.id, OTHER_CUSTOMER_ID)


def test_list_payments_unknown_reservation(world):
    with pytest.raises(ReservationNotFoundError):
        world.engine.list_payments(uuid4(), CUSTOMER_ID)
