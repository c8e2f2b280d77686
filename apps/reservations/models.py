"""Reservation persistence model."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Reservation(models.Model):
    """A customer's reservation of a venue for a date and time window."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending payment")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        CANCELLED = "CANCELLED", _("Cancelled")
        COMPLETED = "COMPLETED", _("Completed")

    class PaymentMode(models.TextChoices):
        FULL = "FULL", _("Full payment")
        INSTALLMENT = "INSTALLMENT", _("Installments")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer_id = models.BigIntegerField(db_index=True)
    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    reservation_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Price fixed when the reservation was created."),
    )
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_mode = models.CharField(
        max_length=20,
        choices=PaymentMode.choices,
        default=PaymentMode.FULL,
    )
    cancellation_reason = models.TextField(blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="reservation_valid_slot",
            ),
            models.CheckConstraint(
                condition=models.Q(paid_amount__gte=0),
                name="reservation_paid_not_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["venue", "reservation_date", "status"], name="reservation_venue_i_3e9a07_idx"),
            models.Index(fields=["status", "reservation_date"], name="reservation_status_4f0b2c_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.id} {self.reservation_date} {self.start_time}-{self.end_time}"
