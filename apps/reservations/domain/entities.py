"""
Reservation Domain Entities

- Reservation: aggregate representing a customer's claim on a venue slot
- ReservationStatus: FSM states for the reservation lifecycle
- PaymentMode: how the customer intends to pay
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from apps.finances.domain.ledger import PaymentKind
from apps.reservations.domain.errors import ReservationAlreadyTerminalError
from shared.domain.base import Aggregate, utcnow
from shared.domain.errors import InvalidStateError
from shared.domain.value_objects import Money, TimeSlot


class ReservationStatus(Enum):
    """
    Reservation Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (a settled payment satisfies the confirm policy)
    - PENDING -> CANCELLED
    - CONFIRMED -> CANCELLED
    - CONFIRMED -> COMPLETED (reservation window has passed)

    CANCELLED and COMPLETED are terminal.
    """
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.CANCELLED, ReservationStatus.COMPLETED)

    @property
    def blocks_slot(self) -> bool:
        return self in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


BLOCKING_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


class PaymentMode(Enum):
    FULL = 'FULL'
    INSTALLMENT = 'INSTALLMENT'


@dataclass(eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    Key invariants:
    - slot.end > slot.start (enforced by TimeSlot)
    - total_amount is fixed at creation
    - paid_amount never goes below zero (Money rejects negatives, and
      refunds are checked against it first)
    - only the transition methods below change status
    """

    customer_id: int
    venue_id: UUID
    reservation_date: date
    slot: TimeSlot
    total_amount: Money
    payment_mode: PaymentMode = PaymentMode.FULL
    paid_amount: Money | None = None
    status: ReservationStatus = ReservationStatus.PENDING
    cancellation_reason: str = ''
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self):
        if self.paid_amount is None:
            self.paid_amount = Money.zero(self.total_amount.currency)

    @property
    def currency(self) -> str:
        return self.total_amount.currency

    @property
    def blocks_slot(self) -> bool:
        return self.status.blocks_slot

    @property
    def ends_at(self) -> datetime:
        """Naive local datetime at which the reservation window closes."""
        return datetime.combine(self.reservation_date, self.slot.end)

    def overlaps(self, on_date: date, slot: TimeSlot) -> bool:
        return self.reservation_date == on_date and self.slot.overlaps_with(slot)

    def apply_settlement(self, amount: Decimal, kind: PaymentKind) -> bool:
        """
        Add a settled charge to the paid amount (and maybe confirm)

        PENDING -> CONFIRMED when the reservation is fully paid, or when the
        charge is a full payment or the first installment. Terminal
        reservations still record the money but do not change status.

        Returns True if this settlement confirmed the reservation.
        """
        self.paid_amount = self.paid_amount + Money(amount, self.currency)
        self.touch()

        if self.status != ReservationStatus.PENDING:
            return False

        if self.paid_amount >= self.total_amount or kind.confirms_reservation:
            from apps.reservations.domain.events import ReservationConfirmed

            self.status = ReservationStatus.CONFIRMED
            self.confirmed_at = utcnow()
            self.add_event(ReservationConfirmed(
                aggregate_id=self.id,
                reservation_id=self.id,
                venue_id=self.venue_id,
                customer_id=self.customer_id,
                paid_amount=self.paid_amount,
            ))
            return True
        return False

    def cancel(self, reason: str):
        """
        Cancel reservation (PENDING|CONFIRMED -> CANCELLED)

        Frees the slot. Payments are left untouched; refunding is separate.
        """
        if self.status.is_terminal:
            raise ReservationAlreadyTerminalError(self.id, self.status)

        from apps.reservations.domain.events import ReservationCancelled

        old_status = self.status
        self.status = ReservationStatus.CANCELLED
        self.cancellation_reason = reason or ''
        self.cancelled_at = utcnow()
        self.touch()

        self.add_event(ReservationCancelled(
            aggregate_id=self.id,
            reservation_id=self.id,
            venue_id=self.venue_id,
            reason=self.cancellation_reason,
            old_status=old_status.value,
        ))

    def complete(self):
        """Complete reservation (CONFIRMED -> COMPLETED)"""
        if self.status != ReservationStatus.CONFIRMED:
            raise InvalidStateError(
                f"Cannot complete reservation from status {self.status.value}. "
                f"Reservation must be CONFIRMED."
            )

        from apps.reservations.domain.events import ReservationCompleted

        self.status = ReservationStatus.COMPLETED
        self.completed_at = utcnow()
        self.touch()

        self.add_event(ReservationCompleted(
            aggregate_id=self.id,
            reservation_id=self.id,
            venue_id=self.venue_id,
            customer_id=self.customer_id,
        ))

    def reserve_refund(self, amount: Decimal):
        """Take a refund out of the paid amount before the gateway is called."""
        if amount <= 0:
            raise ValueError("Refund amount must be positive")
        if amount > self.paid_amount.amount:
            raise ValueError(
                f"Refund {amount} exceeds paid amount {self.paid_amount.amount}"
            )
        self.paid_amount = self.paid_amount - Money(amount, self.currency)
        self.touch()

    def release_refund(self, amount: Decimal):
        """Put back a reserved refund the gateway rejected."""
        self.paid_amount = self.paid_amount + Money(amount, self.currency)
        self.touch()

    def assert_accepts_payments(self):
        if self.status.is_terminal:
            raise ReservationAlreadyTerminalError(self.id, self.status)

    def __str__(self):
        return f"Reservation {self.id} {self.reservation_date} {self.slot} ({self.status.value})"

    def __repr__(self):
        return (
            f"Reservation(id={self.id}, venue_id={self.venue_id}, "
            f"status={self.status.value}, date={self.reservation_date}, slot={self.slot!r})"
        )
