"""Admin registration for the payment ledger."""

from __future__ import annotations

from django.contrib import admin

from .models import LedgerEntry, SettledPaymentReference


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = (
        "external_reference",
        "reservation",
        "amount",
        "currency",
        "kind",
        "status",
        "created_at",
    )
    list_filter = ("status", "kind", "currency")
    search_fields = ("external_reference", "reservation__id")

    # Append-only: entries are written by the engine, never edited here
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SettledPaymentReference)
class SettledPaymentReferenceAdmin(admin.ModelAdmin):
    list_display = ("reference", "entry", "created_at")
    search_fields = ("reference",)
    readonly_fields = ("reference", "entry", "created_at")
