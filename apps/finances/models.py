"""Financial persistence models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class LedgerEntry(models.Model):
    """A charge (positive) or refund (negative) against a reservation."""

    class Kind(models.TextChoices):
        FULL = "FULL", _("Full payment")
        INSTALLMENT_1 = "INSTALLMENT_1", _("First installment")
        INSTALLMENT_2 = "INSTALLMENT_2", _("Second installment")

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        SUCCESS = "SUCCESS", _("Settled")
        FAILED = "FAILED", _("Failed")
        REFUNDED = "REFUNDED", _("Refunded")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reservation = models.ForeignKey(
        "reservations.Reservation",
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Positive for charges, negative for refunds."),
    )
    currency = models.CharField(max_length=3, default="USD")
    kind = models.CharField(max_length=20, choices=Kind.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    external_reference = models.CharField(max_length=255, db_index=True)
    failure_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Ledger entry")
        verbose_name_plural = _("Ledger entries")
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(amount=Decimal("0.00")),
                name="ledger_entry_nonzero_amount",
            ),
            models.UniqueConstraint(
                fields=["external_reference"],
                condition=models.Q(amount__gt=0),
                name="ledger_entry_unique_charge_reference",
            ),
        ]
        indexes = [
            models.Index(fields=["reservation", "created_at"], name="finances_le_reserva_6d1e52_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.kind} {self.amount} {self.currency} ({self.status})"


class SettledPaymentReference(models.Model):
    """Idempotency record: an external reference settles at most once."""

    reference = models.CharField(max_length=255, unique=True)
    entry = models.ForeignKey(LedgerEntry, on_delete=models.PROTECT, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Settled payment reference")
        verbose_name_plural = _("Settled payment references")

    def __str__(self) -> str:
        return self.reference
