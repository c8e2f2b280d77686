"""Venue persistence models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Hall(models.Model):
    """A property that contains one or more bookable venues."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    owner_id = models.BigIntegerField(db_index=True, help_text=_("User id of the hall owner."))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Hall")
        verbose_name_plural = _("Halls")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class HallStaff(models.Model):
    """A user with management rights over a hall."""

    hall = models.ForeignKey(Hall, on_delete=models.CASCADE, related_name="staff")
    user_id = models.BigIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Hall staff member")
        verbose_name_plural = _("Hall staff")
        constraints = [
            models.UniqueConstraint(fields=["hall", "user_id"], name="hall_staff_unique_member"),
        ]

    def __str__(self) -> str:
        return f"Staff {self.user_id} @ {self.hall_id}"


class Venue(models.Model):
    """A bookable space within a hall."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    hall = models.ForeignKey(Hall, on_delete=models.CASCADE, related_name="venues")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    capacity = models.PositiveIntegerField()
    min_booking_duration_hours = models.PositiveSmallIntegerField(default=2)
    base_price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default="USD")
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Venue")
        verbose_name_plural = _("Venues")
        ordering = ["hall", "name"]
        indexes = [
            models.Index(fields=["hall", "active"], name="venues_venu_hall_id_5b1f3c_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class PricingOverride(models.Model):
    """Hourly price for a venue within a time slot on one date."""

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="pricing_overrides")
    effective_date = models.DateField()
    slot_start = models.TimeField()
    slot_end = models.TimeField()
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    class Meta:
        verbose_name = _("Pricing override")
        verbose_name_plural = _("Pricing overrides")
        ordering = ["effective_date", "slot_start"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(slot_end__gt=models.F("slot_start")),
                name="pricing_override_valid_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["venue", "effective_date"], name="venues_pric_venue_i_8c2d41_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.venue_id} {self.effective_date} {self.slot_start}-{self.slot_end}: {self.price}"
