"""In-process implementations of the venue stores.

Useful wherever the engine runs without a database (embedding, tests).
"""

from collections import defaultdict
from datetime import date
from typing import Iterable
from uuid import UUID
import threading

from apps.venues.domain import PricingOverride, Venue
from apps.venues.stores.interfaces import AccessPolicy, VenueStore


class InMemoryVenueStore(VenueStore):

    def __init__(self, venues: Iterable[Venue] = ()):
        self._mutex = threading.Lock()
        self._venues: dict[UUID, Venue] = {venue.id: venue for venue in venues}
        self._overrides: dict[tuple[UUID, date], list[PricingOverride]] = defaultdict(list)

    def add_venue(self, venue: Venue) -> None:
        with self._mutex:
            self._venues[venue.id] = venue

    def get_venue(self, venue_id: UUID, lock: bool = False) -> Venue | None:
        # Venues are immutable value objects here; callers serialize with KeyedLock
        with self._mutex:
            return self._venues.get(venue_id)

    def list_venue_ids(self, hall_id: UUID) -> list[UUID]:
        with self._mutex:
            return [v.id for v in self._venues.values() if v.hall_id == hall_id]

    def list_overrides(self, venue_id: UUID, on_date: date) -> list[PricingOverride]:
        with self._mutex:
            overrides = list(self._overrides.get((venue_id, on_date), ()))
        return sorted(overrides, key=lambda o: o.slot.start)

    def replace_overrides(
        self, venue_id: UUID, on_date: date, overrides: Iterable[PricingOverride]
    ) -> None:
        with self._mutex:
            self._overrides[(venue_id, on_date)] = list(overrides)


class InMemoryAccessPolicy(AccessPolicy):
    """
    Hall ownership and staff kept in dictionaries.

    ``customers=None`` treats every actor id as a known customer.
    """

    def __init__(self, customers: Iterable[int] | None = None):
        self._owners: dict[UUID, int] = {}
        self._staff: dict[UUID, set[int]] = defaultdict(set)
        self._customers = set(customers) if customers is not None else None

    def add_hall(self, hall_id: UUID, owner_id: int, staff: Iterable[int] = ()) -> None:
        self._owners[hall_id] = owner_id
        self._staff[hall_id].update(staff)

    def add_customer(self, customer_id: int) -> None:
        if self._customers is not None:
            self._customers.add(customer_id)

    def hall_exists(self, hall_id: UUID) -> bool:
        return hall_id in self._owners

    def is_management_of(self, hall_id: UUID, actor_id: int) -> bool:
        return self._owners.get(hall_id) == actor_id or actor_id in self._staff.get(hall_id, ())

    def customer_exists(self, customer_id: int) -> bool:
        return self._customers is None or customer_id in self._customers
