"""
Availability Guard

This is the CRITICAL component for preventing double bookings.

Two live reservations (PENDING or CONFIRMED) of the same venue must never
overlap. Slots are half-open, so a reservation ending at 17:00 and one
starting at 17:00 do not conflict; CANCELLED and COMPLETED reservations
never block.

Strategy (Defense in Depth):
1. Per-venue critical section: a process-local keyed lock plus
   SELECT FOR UPDATE on the venue row, held across check and insert
2. Domain validation: check_available() against live reservations
3. Database constraint on the reservation row (valid slot, paid >= 0)
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterator
from uuid import UUID
import logging

from apps.reservations.domain.errors import SlotUnavailableError
from shared.application.locks import KeyedLock, keyed_lock
from shared.domain.value_objects import TimeSlot

logger = logging.getLogger(__name__)


class AvailabilityGuard:
    """
    Usage:
        with guard.venue_section(venue_id):
            with uow:
                venue = venue_store.get_venue(venue_id, lock=True)
                guard.ensure_available(venue_id, on_date, slot)
                reservation_store.add(reservation)
    """

    def __init__(self, reservation_store, locks: KeyedLock | None = None):
        self._reservations = reservation_store
        self._locks = locks or keyed_lock

    @contextmanager
    def venue_section(self, venue_id: UUID) -> Iterator[None]:
        """Serialize check-and-insert for one venue."""
        with self._locks.hold(('venue', venue_id)):
            yield

    def conflicts(self, venue_id: UUID, on_date: date, slot: TimeSlot, exclude_id: UUID | None = None):
        return [
            reservation
            for reservation in self._reservations.list_blocking(venue_id, on_date, slot)
            if reservation.id != exclude_id
            and reservation.blocks_slot
            and reservation.overlaps(on_date, slot)
        ]

    def check_available(
        self, venue_id: UUID, on_date: date, slot: TimeSlot, exclude_id: UUID | None = None
    ) -> bool:
        return not self.conflicts(venue_id, on_date, slot, exclude_id)

    def ensure_available(
        self, venue_id: UUID, on_date: date, slot: TimeSlot, exclude_id: UUID | None = None
    ) -> None:
        overlapping = self.conflicts(venue_id, on_date, slot, exclude_id)
        if overlapping:
            logger.info(
                f"Venue {venue_id} not available on {on_date} {slot}: "
                f"{len(overlapping)} overlapping reservation(s)"
            )
            raise SlotUnavailableError(venue_id, on_date, slot)
