from decimal import Decimal
from uuid import uuid4

import pytest

from apps.finances.domain import EntryStatus, LedgerEntry, PaymentKind, PaymentLedger
from shared.domain.errors import InvalidStateError


def charge(reservation_id, amount, kind=PaymentKind.FULL, reference=None):
    return LedgerEntry.charge(
        reservation_id=reservation_id,
        amount=Decimal(amount),
        kind=kind,
        external_reference=reference or f"pi_{uuid4().hex}",
        currency="USD",
    )


def test_charge_starts_pending():
    entry = charge(uuid4(), "200.00")

    assert entry.status == EntryStatus.PENDING
    assert entry.is_charge and not entry.is_refund


def test_charge_amount_must_be_positive():
    with pytest.raises(ValueError):
        charge(uuid4(), "0")


def test_refund_is_a_new_negative_entry():
    original = charge(uuid4(), "200.00", reference="pi_1")
    original.mark_success()

    refund = LedgerEntry.refund_of(original, Decimal("50.00"))

    assert refund.id != original.id
    assert refund.amount == Decimal("-50.00")
    assert refund.external_reference == "pi_1"
    assert refund.is_refund
    assert original.amount == Decimal("200.00")


def test_entry_status_only_moves_forward():
    entry = charge(uuid4(), "200.00")
    entry.mark_success()

    with pytest.raises(InvalidStateError):
        entry.mark_success()
    with pytest.raises(InvalidStateError):
        entry.mark_failed("late failure")
    with pytest.raises(InvalidStateError):
        entry.mark_refunded()


def test_failed_charge_keeps_reason():
    entry = charge(uuid4(), "200.00")

    entry.mark_failed("card declined")

    assert entry.status == EntryStatus.FAILED
    assert entry.failure_reason == "card declined"


def test_ledger_arithmetic():
    reservation_id = uuid4()
    first = charge(reservation_id, "200.00", PaymentKind.INSTALLMENT_1)
    first.mark_success()
    second = charge(reservation_id, "300.00", PaymentKind.INSTALLMENT_2)
    second.mark_success()
    pending = charge(reservation_id, "99.00")
    failed = charge(reservation_id, "50.00")
    failed.mark_failed("declined")
    refunded = LedgerEntry.refund_of(first, Decimal("120.00"))
    refunded.mark_refunded()
    in_flight = LedgerEntry.refund_of(first, Decimal("30.00"))
    failed_refund = LedgerEntry.refund_of(first, Decimal("10.00"))
    failed_refund.mark_failed("gateway down")

    ledger = PaymentLedger([first, second, pending, failed, refunded, in_flight, failed_refund])

    assert ledger.first_successful_charge() == first
    assert ledger.total_settled() == Decimal("500.00")
    assert ledger.total_refunded() == Decimal("120.00")
    assert ledger.refunds_in_flight() == Decimal("30.00")
    assert ledger.net_paid() == Decimal("350.00")


def test_empty_ledger():
    ledger = PaymentLedger([])

    assert ledger.first_successful_charge() is None
    assert ledger.net_paid() == Decimal("0")


def test_confirming_kinds():
    assert PaymentKind.FULL.confirms_reservation
    assert PaymentKind.INSTALLMENT_1.confirms_reservation
    assert not PaymentKind.INSTALLMENT_2.confirms_reservation
