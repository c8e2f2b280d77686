"""Domain models for venues and their pricing.

These are pure domain objects; Django ORM models are in apps/venues/models.py.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from shared.domain.value_objects import Money, TimeSlot


@dataclass(frozen=True)
class Venue:
    """Domain representation of a bookable venue inside a hall."""

    id: UUID
    hall_id: UUID
    name: str
    capacity: int
    min_booking_duration_hours: int
    base_price_per_hour: Money
    active: bool = True

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError("Capacity cannot be negative")
        if self.min_booking_duration_hours < 0:
            raise ValueError("Minimum booking duration cannot be negative")

    @property
    def currency(self) -> str:
        return self.base_price_per_hour.currency

    @property
    def min_booking_minutes(self) -> int:
        return self.min_booking_duration_hours * 60


@dataclass(frozen=True)
class PricingOverride:
    """A date-and-time-scoped hourly price for a venue."""

    venue_id: UUID
    effective_date: date
    slot: TimeSlot
    price: Money
