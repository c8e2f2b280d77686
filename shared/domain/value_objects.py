"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
- TimeSlot: Represents a half-open time-of-day interval [start, end)
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

from shared.domain.base import ValueObject

CENTS = Decimal('0.01')
SUPPORTED_CURRENCIES = ('USD', 'EUR', 'GBP', 'KZT')


def round_half_up(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a non-negative monetary amount with currency.
    Immutable and supports arithmetic operations.
    """
    amount: Decimal
    currency: str = 'USD'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def of(cls, amount, currency: str = 'USD') -> 'Money':
        """Build a Money rounded to cents (half-up)."""
        return cls(round_half_up(Decimal(str(amount))), currency)

    @classmethod
    def zero(cls, currency: str = 'USD') -> 'Money':
        return cls(Decimal('0.00'), currency)

    def rounded(self) -> 'Money':
        return Money(round_half_up(self.amount), self.currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def _check_currency(self, other: 'Money', operation: str):
        if not isinstance(other, Money):
            raise TypeError(f"Can only {operation} Money and Money")
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {operation} different currencies: {self.currency} and {other.currency}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, 'add')
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, 'subtract')
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        """Multiply money by a factor"""
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * Decimal(factor), self.currency)

    def __lt__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount >= other.amount

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class TimeSlot(ValueObject):
    """
    Time slot value object

    Represents a range from start (inclusive) to end (exclusive) within a
    single day. Used for reservation windows and pricing override slots.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time ({self.start}) must be before end time ({self.end})")

    def overlaps_with(self, other: 'TimeSlot') -> bool:
        """
        Check if this slot overlaps with another

        Note: end is exclusive, so back-to-back slots don't overlap.

        Examples:
            - TimeSlot(14:00, 17:00) overlaps with TimeSlot(16:00, 18:00) -> True
            - TimeSlot(14:00, 17:00) overlaps with TimeSlot(17:00, 19:00) -> False
        """
        if not isinstance(other, TimeSlot):
            raise TypeError("Can only check overlap with another TimeSlot")

        # Overlap formula: start1 < end2 AND start2 < end1
        return self.start < other.end and other.start < self.end

    def intersection(self, other: 'TimeSlot') -> 'TimeSlot | None':
        """Return the overlapping part of two slots, or None."""
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if start < end:
            return TimeSlot(start, end)
        return None

    @property
    def minutes(self) -> int:
        anchor = date.min
        delta = datetime.combine(anchor, self.end) - datetime.combine(anchor, self.start)
        return int(delta.total_seconds() // 60)

    @property
    def hours(self) -> Decimal:
        """Duration in hours: minutes / 60 rounded to 2 dp half-up."""
        return round_half_up(Decimal(self.minutes) / Decimal(60))

    def __str__(self):
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"

    def __repr__(self):
        return f"TimeSlot({self.start}, {self.end})"
