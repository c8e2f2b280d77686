"""Reservation context errors."""

from shared.domain.errors import DomainError, ErrorCode, InvalidStateError, NotFoundError


class ReservationNotFoundError(NotFoundError):
    """Raised when a reservation does not exist."""

    def __init__(self, reservation_id) -> None:
        super().__init__(
            code=ErrorCode.RESERVATION_NOT_FOUND,
            message="Reservation not found",
        )
        self.reservation_id = reservation_id


class CustomerNotFoundError(NotFoundError):
    """Raised when the customer id does not resolve to a user."""

    def __init__(self, customer_id) -> None:
        super().__init__(
            code=ErrorCode.CUSTOMER_NOT_FOUND,
            message="Customer not found",
        )
        self.customer_id = customer_id


class SlotUnavailableError(DomainError):
    """Raised when the requested slot overlaps a live reservation."""

    def __init__(self, venue_id, on_date, slot) -> None:
        super().__init__(
            code=ErrorCode.SLOT_UNAVAILABLE,
            message="The selected time slot is not available",
        )
        self.venue_id = venue_id
        self.on_date = on_date
        self.slot = slot


class DurationTooShortError(DomainError):
    """Raised when a slot is shorter than the venue's minimum duration."""

    def __init__(self, minimum_hours: int) -> None:
        super().__init__(
            code=ErrorCode.DURATION_TOO_SHORT,
            message=f"Minimum booking duration is {minimum_hours} hours",
        )
        self.minimum_hours = minimum_hours


class InvalidTimeSlotError(DomainError):
    """Raised when end time is not after start time."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TIME_SLOT, message=message)


class ReservationAlreadyTerminalError(InvalidStateError):
    """Raised when acting on a cancelled or completed reservation."""

    def __init__(self, reservation_id, status) -> None:
        super().__init__(f"Reservation is already {status.value.lower()}")
        self.reservation_id = reservation_id
        self.status = status
