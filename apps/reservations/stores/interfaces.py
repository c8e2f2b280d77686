"""Store interfaces for reservations."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable
from uuid import UUID

from apps.reservations.domain import Reservation
from shared.domain.value_objects import TimeSlot


class ReservationStore(ABC):
    """Interface for reservation persistence operations."""

    @abstractmethod
    def get(self, reservation_id: UUID, lock: bool = False) -> Reservation | None:
        """Return a reservation by ID, or None if not found.

        With ``lock=True`` the row stays locked until the transaction ends.
        """
        ...

    @abstractmethod
    def add(self, reservation: Reservation) -> None:
        ...

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        ...

    @abstractmethod
    def list_blocking(self, venue_id: UUID, on_date: date, slot: TimeSlot) -> list[Reservation]:
        """Return PENDING/CONFIRMED reservations of the venue overlapping the slot."""
        ...

    @abstractmethod
    def list_for_customer(self, customer_id: int) -> list[Reservation]:
        """Return the customer's reservations, newest first."""
        ...

    @abstractmethod
    def list_for_venues(self, venue_ids: Iterable[UUID]) -> list[Reservation]:
        """Return reservations of the given venues, newest first."""
        ...

    @abstractmethod
    def list_confirmed_ending_before(self, moment: datetime) -> list[Reservation]:
        """Return CONFIRMED reservations whose window closed before ``moment`` (naive local)."""
        ...
