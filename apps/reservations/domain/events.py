"""
Reservation Domain Events

Published through the message bus after the transaction that produced them
commits.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, TimeSlot


@dataclass(kw_only=True)
class ReservationCreated(DomainEvent):
    """A PENDING reservation now holds the slot."""
    reservation_id: UUID
    venue_id: UUID
    customer_id: int
    reservation_date: date
    slot: TimeSlot
    total_amount: Money


@dataclass(kw_only=True)
class ReservationConfirmed(DomainEvent):
    """PENDING -> CONFIRMED after a settled payment."""
    reservation_id: UUID
    venue_id: UUID
    customer_id: int
    paid_amount: Money


@dataclass(kw_only=True)
class ReservationCancelled(DomainEvent):
    """The slot is free again; payments are not reversed by this."""
    reservation_id: UUID
    venue_id: UUID
    reason: str
    old_status: str


@dataclass(kw_only=True)
class ReservationCompleted(DomainEvent):
    """CONFIRMED -> COMPLETED once the reservation window has passed."""
    reservation_id: UUID
    venue_id: UUID
    customer_id: int


@dataclass(kw_only=True)
class PaymentSettled(DomainEvent):
    """A charge was settled and added to the paid amount."""
    reservation_id: UUID
    entry_id: UUID
    external_reference: str
    amount: Decimal


@dataclass(kw_only=True)
class RefundIssued(DomainEvent):
    """A refund was confirmed by the gateway."""
    reservation_id: UUID
    entry_id: UUID
    external_reference: str
    amount: Decimal
