"""Pricing override management for hall owners and staff."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Iterable
from uuid import UUID
import logging

from apps.venues.domain import PricingOverride
from apps.venues.domain.errors import HallNotFoundError, InvalidPricingError, VenueNotFoundError
from apps.venues.stores.interfaces import AccessPolicy, VenueStore
from shared.domain.errors import NotAuthorizedError
from shared.domain.value_objects import Money, TimeSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingSlotInput:
    """One requested override row, as received from a management actor."""

    effective_date: date
    slot_start: time
    slot_end: time
    price: Decimal


class VenuePricingService:
    """Replaces and reads the dated pricing overrides of a venue."""

    def __init__(self, venues: VenueStore, access: AccessPolicy):
        self._venues = venues
        self._access = access

    def replace_pricing(
        self,
        hall_id: UUID,
        venue_id: UUID,
        slots: Iterable[PricingSlotInput],
        actor_id: int,
    ) -> dict[date, list[PricingOverride]]:
        """
        Replace the overrides of every date mentioned in ``slots``.

        For each such date all existing overrides are deleted before the new
        ones are inserted; dates not mentioned are left untouched.

        Raises:
            HallNotFoundError, VenueNotFoundError, NotAuthorizedError,
            InvalidPricingError
        """
        if not self._access.hall_exists(hall_id):
            raise HallNotFoundError(hall_id)
        if not self._access.is_management_of(hall_id, actor_id):
            raise NotAuthorizedError("manage this hall")

        venue = self._venues.get_venue(venue_id)
        if venue is None or venue.hall_id != hall_id:
            raise VenueNotFoundError(venue_id)

        by_date: "OrderedDict[date, list[PricingOverride]]" = OrderedDict()
        for slot in slots:
            by_date.setdefault(slot.effective_date, []).append(
                self._to_override(venue_id, venue.currency, slot)
            )

        for on_date, overrides in by_date.items():
            self._venues.replace_overrides(venue_id, on_date, overrides)
            logger.info(
                f"Replaced pricing for venue {venue_id} on {on_date}: "
                f"{len(overrides)} slot(s) by actor {actor_id}"
            )

        return dict(by_date)

    def get_pricing(self, venue_id: UUID, on_date: date) -> list[PricingOverride]:
        if self._venues.get_venue(venue_id) is None:
            raise VenueNotFoundError(venue_id)
        return self._venues.list_overrides(venue_id, on_date)

    @staticmethod
    def _to_override(venue_id: UUID, currency: str, slot: PricingSlotInput) -> PricingOverride:
        try:
            time_slot = TimeSlot(slot.slot_start, slot.slot_end)
        except ValueError as e:
            raise InvalidPricingError(str(e)) from e
        try:
            price = Money.of(slot.price, currency)
        except (ValueError, InvalidOperation) as e:
            raise InvalidPricingError(f"Invalid price {slot.price!r}") from e
        return PricingOverride(
            venue_id=venue_id,
            effective_date=slot.effective_date,
            slot=time_slot,
            price=price,
        )
