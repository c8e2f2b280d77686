from apps.reservations.domain.entities import PaymentMode, Reservation, ReservationStatus

__all__ = [
    "PaymentMode",
    "Reservation",
    "ReservationStatus",
]
