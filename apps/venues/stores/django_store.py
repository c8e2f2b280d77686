"""Django ORM implementation of the venue stores."""

from datetime import date
from typing import Iterable
from uuid import UUID

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore

from apps.venues import models
from apps.venues.domain import PricingOverride, Venue
from apps.venues.stores.interfaces import AccessPolicy, VenueStore
from shared.domain.value_objects import Money, TimeSlot


def venue_to_domain(row: models.Venue) -> Venue:
    return Venue(
        id=row.id,
        hall_id=row.hall_id,
        name=row.name,
        capacity=row.capacity,
        min_booking_duration_hours=row.min_booking_duration_hours,
        base_price_per_hour=Money(row.base_price_per_hour, row.currency),
        active=row.active,
    )


class DjangoVenueStore(VenueStore):
    """Database-backed venue store."""

    def get_venue(self, venue_id: UUID, lock: bool = False) -> Venue | None:
        queryset = models.Venue.objects.filter(pk=venue_id)
        if lock:
            # No-op on SQLite; a row lock on PostgreSQL
            queryset = queryset.select_for_update()
        row = queryset.first()
        return venue_to_domain(row) if row else None

    def list_venue_ids(self, hall_id: UUID) -> list[UUID]:
        return list(models.Venue.objects.filter(hall_id=hall_id).values_list("id", flat=True))

    def list_overrides(self, venue_id: UUID, on_date: date) -> list[PricingOverride]:
        rows = models.PricingOverride.objects.filter(
            venue_id=venue_id,
            effective_date=on_date,
        ).select_related("venue").order_by("slot_start")
        return [
            PricingOverride(
                venue_id=row.venue_id,
                effective_date=row.effective_date,
                slot=TimeSlot(row.slot_start, row.slot_end),
                price=Money(row.price, row.venue.currency),
            )
            for row in rows
        ]

    @transaction.atomic
    def replace_overrides(
        self, venue_id: UUID, on_date: date, overrides: Iterable[PricingOverride]
    ) -> None:
        models.PricingOverride.objects.filter(venue_id=venue_id, effective_date=on_date).delete()
        models.PricingOverride.objects.bulk_create([
            models.PricingOverride(
                venue_id=venue_id,
                effective_date=on_date,
                slot_start=override.slot.start,
                slot_end=override.slot.end,
                price=override.price.amount,
            )
            for override in overrides
        ])


class DjangoAccessPolicy(AccessPolicy):
    """Hall ownership/staff from the venues tables, customers from the user model."""

    def hall_exists(self, hall_id: UUID) -> bool:
        return models.Hall.objects.filter(pk=hall_id).exists()

    def is_management_of(self, hall_id: UUID, actor_id: int) -> bool:
        if models.Hall.objects.filter(pk=hall_id, owner_id=actor_id).exists():
            return True
        return models.HallStaff.objects.filter(hall_id=hall_id, user_id=actor_id).exists()

    def customer_exists(self, customer_id: int) -> bool:
        return get_user_model().objects.filter(pk=customer_id, is_active=True).exists()
