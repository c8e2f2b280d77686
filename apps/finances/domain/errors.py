"""Finance context errors."""

from decimal import Decimal

from shared.domain.errors import DomainError, ErrorCode, NotFoundError


class PaymentNotFoundError(NotFoundError):
    """Raised when no charge exists for an external payment reference."""

    def __init__(self, reference: str) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_NOT_FOUND,
            message="Payment not found",
        )
        self.reference = reference


class NoSuccessfulPaymentError(DomainError):
    """Raised when a refund is requested but nothing was paid."""

    def __init__(self, reservation_id) -> None:
        super().__init__(
            code=ErrorCode.NO_SUCCESSFUL_PAYMENT,
            message="No successful payment found for this reservation",
        )
        self.reservation_id = reservation_id


class InvalidAmountError(DomainError):
    """Raised for a non-positive payment or refund amount."""

    def __init__(self, amount, message: str = "Amount must be greater than zero") -> None:
        super().__init__(code=ErrorCode.INVALID_AMOUNT, message=message)
        self.amount = amount


class InvalidRefundAmountError(InvalidAmountError):
    """Raised when a refund is not positive or would exceed what has been paid."""

    def __init__(self, amount: Decimal, refundable: Decimal) -> None:
        if amount <= 0:
            message = "Refund amount must be greater than zero"
        else:
            message = f"Refund of {amount} exceeds refundable amount {refundable}"
        super().__init__(amount, message=message)
        self.refundable = refundable


class GatewayFailureError(DomainError):
    """Raised when the external payment processor rejects or fails a call."""

    def __init__(self, operation: str, detail: str = "") -> None:
        message = f"Payment gateway failed to {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(code=ErrorCode.GATEWAY_FAILURE, message=message)
        self.operation = operation
