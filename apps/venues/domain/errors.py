"""Venue context errors."""

from shared.domain.errors import DomainError, ErrorCode, NotFoundError


class VenueNotFoundError(NotFoundError):
    """Raised when a venue does not exist or is not active."""

    def __init__(self, venue_id) -> None:
        super().__init__(
            code=ErrorCode.VENUE_NOT_FOUND,
            message="Venue not found or not active",
        )
        self.venue_id = venue_id


class HallNotFoundError(NotFoundError):
    """Raised when a hall does not exist."""

    def __init__(self, hall_id) -> None:
        super().__init__(
            code=ErrorCode.HALL_NOT_FOUND,
            message="Hall not found",
        )
        self.hall_id = hall_id


class InvalidPricingError(DomainError):
    """Raised when pricing override input is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PRICING, message=message)
