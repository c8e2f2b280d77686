"""URL configuration for the reservation engine.

The engine is used in-process; the only HTTP surface is the Django admin
over halls, venues, reservations and the payment ledger.
"""
from django.contrib import admin  # type: ignore
from django.urls import path  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
]
