"""
Pricing Calculator

Turns a venue's base hourly rate and the pricing overrides dated for the
reservation day into the amount owed for a time slot.

Rules:
- No overrides for the date: base rate x hours.
- Overrides present: each override contributes price x hours of its overlap
  with the requested slot. Time not covered by any override is not charged.
- If overrides exist but contribute exactly zero, fall back to the base rate.
- Hours are minutes / 60 rounded to 2 dp half-up; the final amount is rounded
  to 2 dp half-up.

Everything here is pure, so it is safe to call from any thread without locks.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from apps.venues.domain.entities import PricingOverride, Venue
from shared.domain.value_objects import Money, TimeSlot, round_half_up


def _base_rate_amount(venue: Venue, slot: TimeSlot) -> Money:
    return Money(round_half_up(venue.base_price_per_hour.amount * slot.hours), venue.currency)


def calculate_amount(venue: Venue, overrides: Iterable[PricingOverride], slot: TimeSlot) -> Money:
    """Price ``slot`` for ``venue`` given the overrides dated for that day."""
    overrides = list(overrides)
    if not overrides:
        return _base_rate_amount(venue, slot)

    total = Decimal('0')
    for override in overrides:
        overlap = slot.intersection(override.slot)
        if overlap is None:
            continue
        total += override.price.amount * overlap.hours

    if total == 0:
        return _base_rate_amount(venue, slot)

    return Money(round_half_up(total), venue.currency)


class PricingCalculator:
    """Loads the overrides for (venue, date) and prices a slot."""

    def __init__(self, venue_store):
        self._venues = venue_store

    def price(self, venue: Venue, on_date: date, slot: TimeSlot) -> Money:
        overrides = self._venues.list_overrides(venue.id, on_date)
        return calculate_amount(venue, overrides, slot)
