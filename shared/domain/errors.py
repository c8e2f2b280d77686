"""Domain error codes shared by all contexts."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VENUE_NOT_FOUND = "VENUE_NOT_FOUND"
    HALL_NOT_FOUND = "HALL_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    DURATION_TOO_SHORT = "DURATION_TOO_SHORT"
    INVALID_TIME_SLOT = "INVALID_TIME_SLOT"
    INVALID_STATE = "INVALID_STATE"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    NO_SUCCESSFUL_PAYMENT = "NO_SUCCESSFUL_PAYMENT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_PRICING = "INVALID_PRICING"
    GATEWAY_FAILURE = "GATEWAY_FAILURE"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Base for every 'missing entity' condition."""


class NotAuthorizedError(DomainError):
    """Raised when an actor lacks rights over a reservation or hall."""

    def __init__(self, action: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_AUTHORIZED,
            message=f"Not authorized to {action}",
        )
        self.action = action


class InvalidStateError(DomainError):
    """Raised on an illegal state transition."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_STATE, message=message)
