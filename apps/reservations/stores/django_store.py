"""Django ORM implementation of the reservation store."""

from datetime import date, datetime
from typing import Iterable
from uuid import UUID

from django.db.models import Q  # type: ignore

from apps.reservations import models
from apps.reservations.domain import PaymentMode, Reservation, ReservationStatus
from apps.reservations.domain.entities import BLOCKING_STATUSES
from apps.reservations.stores.interfaces import ReservationStore
from shared.domain.value_objects import Money, TimeSlot


def reservation_to_domain(row: models.Reservation) -> Reservation:
    return Reservation(
        id=row.id,
        customer_id=row.customer_id,
        venue_id=row.venue_id,
        reservation_date=row.reservation_date,
        slot=TimeSlot(row.start_time, row.end_time),
        total_amount=Money(row.total_amount, row.currency),
        paid_amount=Money(row.paid_amount, row.currency),
        payment_mode=PaymentMode(row.payment_mode),
        status=ReservationStatus(row.status),
        cancellation_reason=row.cancellation_reason,
        confirmed_at=row.confirmed_at,
        cancelled_at=row.cancelled_at,
        completed_at=row.completed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _mutable_fields(reservation: Reservation) -> dict:
    return {
        "paid_amount": reservation.paid_amount.amount,
        "status": reservation.status.value,
        "cancellation_reason": reservation.cancellation_reason,
        "confirmed_at": reservation.confirmed_at,
        "cancelled_at": reservation.cancelled_at,
        "completed_at": reservation.completed_at,
        "updated_at": reservation.updated_at,
    }


class DjangoReservationStore(ReservationStore):

    def get(self, reservation_id: UUID, lock: bool = False) -> Reservation | None:
        queryset = models.Reservation.objects.filter(pk=reservation_id)
        if lock:
            queryset = queryset.select_for_update()
        row = queryset.first()
        return reservation_to_domain(row) if row else None

    def add(self, reservation: Reservation) -> None:
        models.Reservation.objects.create(
            id=reservation.id,
            customer_id=reservation.customer_id,
            venue_id=reservation.venue_id,
            reservation_date=reservation.reservation_date,
            start_time=reservation.slot.start,
            end_time=reservation.slot.end,
            total_amount=reservation.total_amount.amount,
            currency=reservation.currency,
            payment_mode=reservation.payment_mode.value,
            created_at=reservation.created_at,
            **_mutable_fields(reservation),
        )

    def save(self, reservation: Reservation) -> None:
        # total_amount and the slot are frozen after creation
        models.Reservation.objects.filter(pk=reservation.id).update(**_mutable_fields(reservation))

    def list_blocking(self, venue_id: UUID, on_date: date, slot: TimeSlot) -> list[Reservation]:
        overlapping_filter = Q(start_time__lt=slot.end) & Q(end_time__gt=slot.start)
        rows = models.Reservation.objects.filter(
            venue_id=venue_id,
            reservation_date=on_date,
            status__in=[status.value for status in BLOCKING_STATUSES],
        ).filter(overlapping_filter)
        return [reservation_to_domain(row) for row in rows]

    def list_for_customer(self, customer_id: int) -> list[Reservation]:
        rows = models.Reservation.objects.filter(customer_id=customer_id).order_by("-created_at")
        return [reservation_to_domain(row) for row in rows]

    def list_for_venues(self, venue_ids: Iterable[UUID]) -> list[Reservation]:
        rows = models.Reservation.objects.filter(venue_id__in=list(venue_ids)).order_by("-created_at")
        return [reservation_to_domain(row) for row in rows]

    def list_confirmed_ending_before(self, moment: datetime) -> list[Reservation]:
        day, clock = moment.date(), moment.time()
        rows = models.Reservation.objects.filter(
            status=models.Reservation.Status.CONFIRMED,
        ).filter(
            Q(reservation_date__lt=day) | (Q(reservation_date=day) & Q(end_time__lte=clock))
        )
        return [reservation_to_domain(row) for row in rows]
