"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "venue",
        "customer_id",
        "reservation_date",
        "start_time",
        "end_time",
        "status",
        "total_amount",
        "paid_amount",
        "created_at",
    )
    list_filter = ("status", "payment_mode", "reservation_date")
    search_fields = ("id", "venue__name", "customer_id")
    # Status and money only change through the reservation engine
    readonly_fields = (
        "id",
        "status",
        "total_amount",
        "paid_amount",
        "confirmed_at",
        "cancelled_at",
        "completed_at",
        "created_at",
        "updated_at",
    )
