"""
Reservation Queries

Read-only use cases. None of them take locks; they may run in parallel with
anything else.
"""

from datetime import date, time
from uuid import UUID
import logging

from apps.finances.domain import LedgerEntry
from apps.reservations.application.command_handlers import ensure_can_manage
from apps.reservations.domain import Reservation
from apps.reservations.domain.errors import InvalidTimeSlotError, ReservationNotFoundError
from apps.venues.domain.errors import HallNotFoundError, VenueNotFoundError
from apps.venues.domain.pricing import PricingCalculator
from shared.domain.errors import NotAuthorizedError
from shared.domain.value_objects import Money, TimeSlot

logger = logging.getLogger(__name__)


class ReservationQueries:

    def __init__(self, venues, access, reservations, ledger):
        self.venues = venues
        self.access = access
        self.reservations = reservations
        self.ledger = ledger
        self.pricing = PricingCalculator(venues)

    def _visible_reservation(self, reservation_id: UUID, actor_id: int, action: str) -> Reservation:
        reservation = self.reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        ensure_can_manage(reservation, actor_id, self.venues, self.access, action)
        return reservation

    def get_reservation(self, reservation_id: UUID, actor_id: int) -> Reservation:
        """Visible to the reservation's customer and the hall's management."""
        return self._visible_reservation(reservation_id, actor_id, "view this reservation")

    def list_customer_reservations(self, customer_id: int) -> list[Reservation]:
        return self.reservations.list_for_customer(customer_id)

    def list_hall_reservations(self, hall_id: UUID, actor_id: int) -> list[Reservation]:
        """Every reservation of every venue in the hall, newest first."""
        if not self.access.hall_exists(hall_id):
            raise HallNotFoundError(hall_id)
        if not self.access.is_management_of(hall_id, actor_id):
            raise NotAuthorizedError("view reservations of this hall")
        venue_ids = self.venues.list_venue_ids(hall_id)
        if not venue_ids:
            return []
        return self.reservations.list_for_venues(venue_ids)

    def list_payments(self, reservation_id: UUID, actor_id: int) -> list[LedgerEntry]:
        """Ledger entries of a reservation, oldest first."""
        reservation = self._visible_reservation(reservation_id, actor_id, "view payments of this reservation")
        return self.ledger.list_for_reservation(reservation.id)

    def quote_price(self, venue_id: UUID, on_date: date, start_time: time, end_time: time) -> Money:
        """Price a slot without reserving it."""
        venue = self.venues.get_venue(venue_id)
        if venue is None or not venue.active:
            raise VenueNotFoundError(venue_id)
        if end_time <= start_time:
            raise InvalidTimeSlotError("End time must be after start time")
        return self.pricing.price(venue, on_date, TimeSlot(start_time, end_time))
