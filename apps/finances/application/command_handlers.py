"""
Payment Command Handlers

Use cases that move money for a reservation. Every gateway call happens
outside the per-reservation critical section:

- CreatePaymentIntentCommand: gateway charge first, then a PENDING ledger entry
- SettlePaymentCommand: PENDING charge -> SUCCESS, paid amount and status follow
- FailPaymentCommand: PENDING charge -> FAILED
- ProcessRefundCommand: reserve refund (locked) -> gateway -> finalize (locked)
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4
import logging

from apps.finances.domain import EntryStatus, LedgerEntry, PaymentKind, PaymentLedger
from apps.finances.domain.errors import (
    InvalidAmountError,
    InvalidRefundAmountError,
    NoSuccessfulPaymentError,
    PaymentNotFoundError,
)
from apps.reservations.application.command_handlers import (
    UnitOfWorkFactory,
    ensure_can_manage,
    reservation_section,
)
from apps.reservations.domain import Reservation
from apps.reservations.domain.errors import ReservationNotFoundError
from apps.reservations.domain.events import PaymentSettled, RefundIssued
from shared.application.locks import KeyedLock, keyed_lock
from shared.domain.errors import InvalidStateError, NotAuthorizedError
from shared.domain.value_objects import round_half_up

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreatePaymentIntentCommand:
    """Command to open a charge with the payment gateway"""
    customer_id: int
    reservation_id: UUID
    amount: Decimal
    kind: PaymentKind = PaymentKind.FULL


@dataclass
class SettlePaymentCommand:
    """Command to settle a charge reported successful by the gateway"""
    external_reference: str


@dataclass
class FailPaymentCommand:
    """Command to mark a charge as failed"""
    external_reference: str
    reason: str = ''


@dataclass
class ProcessRefundCommand:
    """Command to refund (part of) what was paid for a reservation"""
    reservation_id: UUID
    actor_id: int
    amount: Optional[Decimal] = None


# ===== Command Handlers =====

class _PaymentHandler:

    def __init__(self, reservations, ledger, uow_factory: UnitOfWorkFactory,
                 locks: KeyedLock | None = None):
        self.reservations = reservations
        self.ledger = ledger
        self.uow_factory = uow_factory
        self.locks = locks or keyed_lock

    def _load_reservation(self, reservation_id: UUID, lock: bool = False) -> Reservation:
        reservation = self.reservations.get(reservation_id, lock=lock)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    def _find_charge(self, reference: str) -> LedgerEntry:
        charge = self.ledger.find_charge_by_reference(reference)
        if charge is None:
            raise PaymentNotFoundError(reference)
        return charge


class CreatePaymentIntentHandler(_PaymentHandler):
    """
    Handler for CreatePaymentIntent command

    The gateway is called before anything is written, so a GatewayFailureError
    leaves no ledger or reservation change behind.
    """

    def __init__(self, reservations, ledger, gateway, uow_factory: UnitOfWorkFactory,
                 locks: KeyedLock | None = None):
        super().__init__(reservations, ledger, uow_factory, locks)
        self.gateway = gateway

    def handle(self, command: CreatePaymentIntentCommand) -> LedgerEntry:
        amount = round_half_up(Decimal(command.amount))
        if amount <= 0:
            raise InvalidAmountError(amount)

        reservation = self._load_reservation(command.reservation_id)
        if reservation.customer_id != command.customer_id:
            raise NotAuthorizedError("pay for this reservation")
        reservation.assert_accepts_payments()

        entry_id = uuid4()
        reference = self.gateway.create_charge(
            amount,
            reservation.currency,
            {
                "entry_id": str(entry_id),
                "reservation_id": str(reservation.id),
                "customer_id": str(reservation.customer_id),
                "kind": command.kind.value,
            },
        )

        with reservation_section(self.locks, reservation.id):
            with self.uow_factory():
                reservation = self._load_reservation(reservation.id, lock=True)
                reservation.assert_accepts_payments()

                entry = LedgerEntry.charge(
                    reservation_id=reservation.id,
                    amount=amount,
                    kind=command.kind,
                    external_reference=reference,
                    currency=reservation.currency,
                    entry_id=entry_id,
                )
                self.ledger.add(entry)

        logger.info(
            f"Payment intent {reference} created for reservation {reservation.id}: "
            f"{amount} {reservation.currency} ({command.kind.value})"
        )
        return entry


class SettlePaymentHandler(_PaymentHandler):
    """
    Handler for SettlePayment command

    Idempotent per external reference: the first call flips the charge to
    SUCCESS and adds it to the paid amount, later calls return the current
    reservation without counting the money again.
    """

    def __init__(self, reservations, ledger, settlements, uow_factory: UnitOfWorkFactory,
                 locks: KeyedLock | None = None):
        super().__init__(reservations, ledger, uow_factory, locks)
        self.settlements = settlements

    def handle(self, command: SettlePaymentCommand) -> Reservation:
        reference = command.external_reference
        charge = self._find_charge(reference)

        with reservation_section(self.locks, charge.reservation_id):
            with self.uow_factory() as uow:
                reservation = self._load_reservation(charge.reservation_id, lock=True)

                if self.settlements.get(reference) is not None:
                    logger.info(f"Payment {reference} already settled, ignoring")
                    return reservation

                entry = self.ledger.get(charge.id)
                if entry.status == EntryStatus.SUCCESS:
                    # Settled before the idempotency record existed
                    self.settlements.record(reference, entry.id)
                    return reservation
                if entry.status != EntryStatus.PENDING:
                    raise InvalidStateError(
                        f"Payment {reference} cannot be settled from status {entry.status.value}"
                    )

                entry.mark_success()
                self.ledger.save(entry)

                confirmed = reservation.apply_settlement(entry.amount, entry.kind)
                reservation.add_event(PaymentSettled(
                    aggregate_id=reservation.id,
                    reservation_id=reservation.id,
                    entry_id=entry.id,
                    external_reference=reference,
                    amount=entry.amount,
                ))

                uow.collect_events(reservation)
                self.reservations.save(reservation)
                self.settlements.record(reference, entry.id)

        logger.info(
            f"Payment {reference} settled for reservation {reservation.id}: "
            f"paid {reservation.paid_amount} of {reservation.total_amount}"
            f"{' (confirmed)' if confirmed else ''}"
        )
        return reservation


class FailPaymentHandler(_PaymentHandler):
    """Handler for FailPayment command"""

    def handle(self, command: FailPaymentCommand) -> LedgerEntry:
        charge = self._find_charge(command.external_reference)

        with reservation_section(self.locks, charge.reservation_id):
            with self.uow_factory():
                entry = self.ledger.get(charge.id)
                if entry.status == EntryStatus.FAILED:
                    return entry
                entry.mark_failed(command.reason)
                self.ledger.save(entry)

        logger.warning(f"Payment {command.external_reference} failed: {command.reason}")
        return entry


class ProcessRefundHandler(_PaymentHandler):
    """
    Handler for ProcessRefund command

    Two phases around the gateway call:
    1. Under the reservation lock: validate, append a PENDING refund entry
       and take the amount out of paid_amount.
    2. Without a lock: ask the gateway to refund.
    3. Under the reservation lock: mark the entry REFUNDED, or (whatever the
       gateway raised) mark it FAILED and give the amount back to paid_amount.

    A concurrent refund therefore only ever sees what is left to refund.
    """

    def __init__(self, venues, access, reservations, ledger, gateway,
                 uow_factory: UnitOfWorkFactory, locks: KeyedLock | None = None):
        super().__init__(reservations, ledger, uow_factory, locks)
        self.venues = venues
        self.access = access
        self.gateway = gateway

    def handle(self, command: ProcessRefundCommand) -> LedgerEntry:
        logger.info(f"Processing refund for reservation {command.reservation_id} by actor {command.actor_id}")

        refund, charge = self._reserve(command)

        try:
            self.gateway.create_refund(charge.external_reference, -refund.amount)
        except Exception as e:
            # Nothing moved at the gateway; give the reserved amount back
            self._finalize(refund, failure=str(e) or e.__class__.__name__)
            raise

        return self._finalize(refund)

    def _reserve(self, command: ProcessRefundCommand) -> tuple[LedgerEntry, LedgerEntry]:
        with reservation_section(self.locks, command.reservation_id):
            with self.uow_factory():
                reservation = self._load_reservation(command.reservation_id, lock=True)
                ensure_can_manage(
                    reservation, command.actor_id, self.venues, self.access,
                    "refund this reservation",
                )

                ledger = PaymentLedger(self.ledger.list_for_reservation(reservation.id))
                charge = ledger.first_successful_charge()
                paid = reservation.paid_amount.amount
                if charge is None or paid <= 0:
                    raise NoSuccessfulPaymentError(reservation.id)

                if command.amount is None:
                    amount = min(charge.amount, paid)
                else:
                    amount = round_half_up(Decimal(command.amount))
                    if amount <= 0 or amount > paid:
                        raise InvalidRefundAmountError(amount, paid)

                refund = LedgerEntry.refund_of(charge, amount)
                self.ledger.add(refund)
                reservation.reserve_refund(amount)
                self.reservations.save(reservation)

        logger.info(f"Reserved refund {refund.id} of {amount} for reservation {reservation.id}")
        return refund, charge

    def _finalize(self, refund: LedgerEntry, failure: str | None = None) -> LedgerEntry:
        with reservation_section(self.locks, refund.reservation_id):
            with self.uow_factory() as uow:
                reservation = self._load_reservation(refund.reservation_id, lock=True)
                refund = self.ledger.get(refund.id)
                amount = -refund.amount

                if failure is None:
                    refund.mark_refunded()
                    reservation.add_event(RefundIssued(
                        aggregate_id=reservation.id,
                        reservation_id=reservation.id,
                        entry_id=refund.id,
                        external_reference=refund.external_reference,
                        amount=amount,
                    ))
                    uow.collect_events(reservation)
                else:
                    refund.mark_failed(failure)
                    reservation.release_refund(amount)
                    self.reservations.save(reservation)

                self.ledger.save(refund)

        if failure is None:
            logger.info(f"Refund {refund.id} of {amount} issued for reservation {reservation.id}")
        else:
            logger.error(f"Refund {refund.id} for reservation {reservation.id} failed: {failure}")
        return refund
