"""In-process implementation of the reservation store."""

from copy import deepcopy
from datetime import date, datetime
from typing import Iterable
from uuid import UUID
import threading

from apps.reservations.domain import Reservation, ReservationStatus
from apps.reservations.stores.interfaces import ReservationStore
from shared.domain.value_objects import TimeSlot


class InMemoryReservationStore(ReservationStore):
    """
    Keeps copies of aggregates so that unsaved changes never leak into the
    store; callers get their own object on every read.
    """

    def __init__(self):
        self._mutex = threading.Lock()
        self._rows: dict[UUID, Reservation] = {}

    def _snapshot(self, reservation: Reservation) -> Reservation:
        copy = deepcopy(reservation)
        copy.clear_events()
        return copy

    def get(self, reservation_id: UUID, lock: bool = False) -> Reservation | None:
        with self._mutex:
            row = self._rows.get(reservation_id)
            return self._snapshot(row) if row else None

    def add(self, reservation: Reservation) -> None:
        with self._mutex:
            if reservation.id in self._rows:
                raise ValueError(f"Reservation {reservation.id} already exists")
            self._rows[reservation.id] = self._snapshot(reservation)

    def save(self, reservation: Reservation) -> None:
        with self._mutex:
            if reservation.id not in self._rows:
                raise KeyError(reservation.id)
            self._rows[reservation.id] = self._snapshot(reservation)

    def _select(self, predicate) -> list[Reservation]:
        # Newest insert first among equal timestamps
        with self._mutex:
            rows = [self._snapshot(r) for r in reversed(self._rows.values()) if predicate(r)]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    def list_blocking(self, venue_id: UUID, on_date: date, slot: TimeSlot) -> list[Reservation]:
        return self._select(
            lambda r: r.venue_id == venue_id and r.blocks_slot and r.overlaps(on_date, slot)
        )

    def list_for_customer(self, customer_id: int) -> list[Reservation]:
        return self._select(lambda r: r.customer_id == customer_id)

    def list_for_venues(self, venue_ids: Iterable[UUID]) -> list[Reservation]:
        wanted = set(venue_ids)
        return self._select(lambda r: r.venue_id in wanted)

    def list_confirmed_ending_before(self, moment: datetime) -> list[Reservation]:
        return self._select(
            lambda r: r.status == ReservationStatus.CONFIRMED and r.ends_at <= moment
        )
