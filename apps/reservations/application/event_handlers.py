"""
Reservation Event Handlers

Subscribers for reservation domain events. They run after the transaction
that produced the event has committed and write one audit line per event.
"""

import logging

from apps.reservations.domain.events import (
    PaymentSettled,
    RefundIssued,
    ReservationCancelled,
    ReservationCompleted,
    ReservationConfirmed,
    ReservationCreated,
)

logger = logging.getLogger("apps.reservations.audit")


def on_reservation_created(event: ReservationCreated):
    logger.info(
        f"Reservation {event.reservation_id} created: venue {event.venue_id}, "
        f"customer {event.customer_id}, {event.reservation_date} {event.slot}, "
        f"total {event.total_amount}"
    )


def on_reservation_confirmed(event: ReservationConfirmed):
    logger.info(f"Reservation {event.reservation_id} confirmed with {event.paid_amount} paid")


def on_reservation_cancelled(event: ReservationCancelled):
    logger.info(
        f"Reservation {event.reservation_id} cancelled from {event.old_status}: "
        f"{event.reason or 'no reason given'}"
    )


def on_reservation_completed(event: ReservationCompleted):
    logger.info(f"Reservation {event.reservation_id} completed")


def on_payment_settled(event: PaymentSettled):
    logger.info(
        f"Payment {event.external_reference} settled for reservation "
        f"{event.reservation_id}: {event.amount}"
    )


def on_refund_issued(event: RefundIssued):
    logger.info(
        f"Refund {event.entry_id} of {event.amount} issued against "
        f"{event.external_reference} for reservation {event.reservation_id}"
    )


HANDLERS = {
    ReservationCreated: on_reservation_created,
    ReservationConfirmed: on_reservation_confirmed,
    ReservationCancelled: on_reservation_cancelled,
    ReservationCompleted: on_reservation_completed,
    PaymentSettled: on_payment_settled,
    RefundIssued: on_refund_issued,
}


def register_event_handlers(bus):
    """Subscribe the audit handlers; safe to call more than once."""
    for event_type, handler in HANDLERS.items():
        bus.register_event_handler(event_type, handler)
