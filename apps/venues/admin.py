"""Admin registration for halls, venues and pricing overrides."""

from __future__ import annotations

from django.contrib import admin

from .models import Hall, HallStaff, PricingOverride, Venue


class HallStaffInline(admin.TabularInline):
    model = HallStaff
    extra = 0


class PricingOverrideInline(admin.TabularInline):
    model = PricingOverride
    extra = 0
    ordering = ("effective_date", "slot_start")


@admin.register(Hall)
class HallAdmin(admin.ModelAdmin):
    list_display = ("name", "owner_id", "created_at")
    search_fields = ("name",)
    inlines = [HallStaffInline]


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "hall",
        "capacity",
        "min_booking_duration_hours",
        "base_price_per_hour",
        "currency",
        "active",
    )
    list_filter = ("active", "currency")
    search_fields = ("name", "hall__name")
    inlines = [PricingOverrideInline]
