"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable
from uuid import UUID

from apps.venues.domain import PricingOverride, Venue


class VenueStore(ABC):
    """Interface for venue and pricing override persistence."""

    @abstractmethod
    def get_venue(self, venue_id: UUID, lock: bool = False) -> Venue | None:
        """Return a venue by ID, or None if not found.

        With ``lock=True`` the venue row is held until the surrounding
        transaction ends; reservation creation serializes on it.
        """
        ...

    @abstractmethod
    def list_venue_ids(self, hall_id: UUID) -> list[UUID]:
        """Return the ids of every venue in a hall, active or not."""
        ...

    @abstractmethod
    def list_overrides(self, venue_id: UUID, on_date: date) -> list[PricingOverride]:
        """Return the overrides for a venue and date, ordered by slot start."""
        ...

    @abstractmethod
    def replace_overrides(
        self, venue_id: UUID, on_date: date, overrides: Iterable[PricingOverride]
    ) -> None:
        """Delete every override for (venue, date), then insert ``overrides``."""
        ...


class AccessPolicy(ABC):
    """Answers who may act on a hall and who is a known customer."""

    @abstractmethod
    def hall_exists(self, hall_id: UUID) -> bool:
        ...

    @abstractmethod
    def is_management_of(self, hall_id: UUID, actor_id: int) -> bool:
        """True if the actor owns the hall or is on its staff."""
        ...

    @abstractmethod
    def customer_exists(self, customer_id: int) -> bool:
        ...
