"""Celery tasks for the reservation domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from apps.reservations.application.engine import build_engine
from apps.reservations.stores.django_store import DjangoReservationStore
from shared.domain.errors import DomainError

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="reservations.complete_finished_reservations")
def complete_finished_reservations() -> dict[str, int]:
    """
    Complete confirmed reservations whose time window has passed.

    Reservation dates and times are wall-clock values of the venue, so they
    are compared with the current local time.

    Runs every 15 minutes via Celery Beat.

    Returns:
        dict: {"completed": number of reservations completed}
    """
    now = timezone.localtime().replace(tzinfo=None)
    engine = build_engine()
    completed_count = 0

    for reservation in DjangoReservationStore().list_confirmed_ending_before(now):
        try:
            engine.complete_reservation(reservation.id)
            completed_count += 1
        except DomainError as e:
            # Cancelled or completed concurrently since it was listed
            logger.warning(f"Skipping completion of reservation {reservation.id}: {e}")

    if completed_count > 0:
        logger.info(f"Completed {completed_count} reservations")

    return {"completed": completed_count}
