"""
Reservation Command Handlers

These are the use cases for the reservation domain.
They orchestrate domain operations within transactions.

Commands:
- CreateReservationCommand: Reserve a venue for a date and time window
- CancelReservationCommand: Cancel a reservation (customer or hall management)
- CompleteReservationCommand: Close a confirmed reservation once it is over
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Callable
from uuid import UUID
import logging

from apps.reservations.domain import PaymentMode, Reservation
from apps.reservations.domain.availability import AvailabilityGuard
from apps.reservations.domain.errors import (
    CustomerNotFoundError,
    DurationTooShortError,
    InvalidTimeSlotError,
    ReservationNotFoundError,
)
from apps.reservations.domain.events import ReservationCreated
from apps.venues.domain.errors import VenueNotFoundError
from apps.venues.domain.pricing import PricingCalculator
from shared.application.locks import KeyedLock, keyed_lock
from shared.application.uow import AbstractUnitOfWork
from shared.domain.errors import NotAuthorizedError
from shared.domain.value_objects import TimeSlot

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """
    Command to create a new reservation

    This is the primary entry point for reserving a venue.
    """
    customer_id: int
    venue_id: UUID
    reservation_date: date
    start_time: time
    end_time: time
    payment_mode: PaymentMode = PaymentMode.FULL


@dataclass
class CancelReservationCommand:
    """Command to cancel a reservation"""
    reservation_id: UUID
    actor_id: int  # Customer, hall owner or hall staff
    reason: str = ''


@dataclass
class CompleteReservationCommand:
    """Command to complete a reservation whose window has passed"""
    reservation_id: UUID


# ===== Helpers =====

def reservation_section(locks: KeyedLock, reservation_id: UUID):
    """Per-reservation critical section shared by every mutating handler."""
    return locks.hold(('reservation', reservation_id))


def ensure_can_manage(reservation: Reservation, actor_id: int, venues, access, action: str):
    """
    The customer who made the reservation, the hall owner and hall staff may
    act on a reservation; anyone else gets NotAuthorizedError.
    """
    if reservation.customer_id == actor_id:
        return
    venue = venues.get_venue(reservation.venue_id)
    if venue is not None and access.is_management_of(venue.hall_id, actor_id):
        return
    raise NotAuthorizedError(action)


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    This implements the critical business logic for creating reservations
    with double booking prevention.

    Strategy (Defense in Depth):
    1. Validate the request (customer, slot shape) outside any lock
    2. Enter the per-venue critical section (keyed lock)
    3. Start database transaction and lock the venue row (SELECT FOR UPDATE)
    4. Check venue minimum duration
    5. Check availability against live reservations
    6. Price the slot and freeze the total on the new aggregate
    7. Save, commit, then publish events (after commit)
    """

    def __init__(self, venues, access, reservations, uow_factory: UnitOfWorkFactory,
                 locks: KeyedLock | None = None):
        self.venues = venues
        self.access = access
        self.reservations = reservations
        self.uow_factory = uow_factory
        self.guard = AvailabilityGuard(reservations, locks or keyed_lock)
        self.pricing = PricingCalculator(venues)

    def handle(self, command: CreateReservationCommand) -> Reservation:
        """
        Handle reservation creation

        Returns: Created Reservation aggregate (PENDING)

        Raises:
            CustomerNotFoundError, VenueNotFoundError, InvalidTimeSlotError,
            DurationTooShortError, SlotUnavailableError
        """
        logger.info(
            f"Creating reservation for venue {command.venue_id}, "
            f"customer {command.customer_id}, {command.reservation_date} "
            f"{command.start_time}-{command.end_time}"
        )

        if not self.access.customer_exists(command.customer_id):
            raise CustomerNotFoundError(command.customer_id)

        if command.end_time <= command.start_time:
            raise InvalidTimeSlotError("End time must be after start time")
        slot = TimeSlot(command.start_time, command.end_time)

        with self.guard.venue_section(command.venue_id):
            with self.uow_factory() as uow:
                venue = self.venues.get_venue(command.venue_id, lock=True)
                if venue is None or not venue.active:
                    raise VenueNotFoundError(command.venue_id)

                if slot.minutes < venue.min_booking_minutes:
                    raise DurationTooShortError(venue.min_booking_duration_hours)

                self.guard.ensure_available(venue.id, command.reservation_date, slot)

                total = self.pricing.price(venue, command.reservation_date, slot)

                reservation = Reservation(
                    customer_id=command.customer_id,
                    venue_id=venue.id,
                    reservation_date=command.reservation_date,
                    slot=slot,
                    total_amount=total,
                    payment_mode=command.payment_mode,
                )
                reservation.add_event(ReservationCreated(
                    aggregate_id=reservation.id,
                    reservation_id=reservation.id,
                    venue_id=venue.id,
                    customer_id=reservation.customer_id,
                    reservation_date=reservation.reservation_date,
                    slot=slot,
                    total_amount=total,
                ))

                uow.collect_events(reservation)
                self.reservations.add(reservation)

        logger.info(
            f"Reservation {reservation.id} created for venue {venue.id} "
            f"with total {total}"
        )
        return reservation


class CancelReservationHandler:
    """Handler for CancelReservation command"""

    def __init__(self, venues, access, reservations, uow_factory: UnitOfWorkFactory,
                 locks: KeyedLock | None = None):
        self.venues = venues
        self.access = access
        self.reservations = reservations
        self.uow_factory = uow_factory
        self.locks = locks or keyed_lock

    def handle(self, command: CancelReservationCommand) -> Reservation:
        """
        Handle reservation cancellation

        Raises:
            ReservationNotFoundError, NotAuthorizedError,
            ReservationAlreadyTerminalError
        """
        logger.info(f"Cancelling reservation {command.reservation_id} by actor {command.actor_id}")

        with reservation_section(self.locks, command.reservation_id):
            with self.uow_factory() as uow:
                reservation = self.reservations.get(command.reservation_id, lock=True)
                if reservation is None:
                    raise ReservationNotFoundError(command.reservation_id)

                ensure_can_manage(
                    reservation, command.actor_id, self.venues, self.access,
                    "cancel this reservation",
                )

                reservation.cancel(command.reason)

                uow.collect_events(reservation)
                self.reservations.save(reservation)

        logger.info(f"Reservation {reservation.id} cancelled: {command.reason}")
        return reservation


class CompleteReservationHandler:
    """Handler for CompleteReservation command"""

    def __init__(self, reservations, uow_factory: UnitOfWorkFactory, locks: KeyedLock | None = None):
        self.reservations = reservations
        self.uow_factory = uow_factory
        self.locks = locks or keyed_lock

    def handle(self, command: CompleteReservationCommand) -> Reservation:
        with reservation_section(self.locks, command.reservation_id):
            with self.uow_factory() as uow:
                reservation = self.reservations.get(command.reservation_id, lock=True)
                if reservation is None:
                    raise ReservationNotFoundError(command.reservation_id)

                reservation.complete()

                uow.collect_events(reservation)
                self.reservations.save(reservation)

        logger.info(f"Reservation {reservation.id} completed")
        return reservation
