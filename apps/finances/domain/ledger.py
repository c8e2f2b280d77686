"""
Payment Ledger

Append-only record of the money moved for a reservation:
- LedgerEntry: one charge (positive amount) or refund (negative amount)
- EntryStatus: FSM of a single entry
- PaymentLedger: arithmetic over a reservation's entries

Amounts are never changed after an entry is written; only its status moves
forward:
- charge: PENDING -> SUCCESS (settled) | FAILED
- refund: PENDING -> REFUNDED (gateway confirmed) | FAILED
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, List
from uuid import UUID

from shared.domain.base import Entity
from shared.domain.errors import InvalidStateError


class PaymentKind(Enum):
    """What a charge pays for."""
    FULL = 'FULL'
    INSTALLMENT_1 = 'INSTALLMENT_1'
    INSTALLMENT_2 = 'INSTALLMENT_2'

    @property
    def confirms_reservation(self) -> bool:
        """Settling a full payment or the first installment confirms a reservation."""
        return self in (PaymentKind.FULL, PaymentKind.INSTALLMENT_1)


class EntryStatus(Enum):
    PENDING = 'PENDING'
    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'
    REFUNDED = 'REFUNDED'


@dataclass(eq=False)
class LedgerEntry(Entity):
    """A single charge or refund against a reservation."""

    reservation_id: UUID
    amount: Decimal
    kind: PaymentKind
    external_reference: str
    currency: str = 'USD'
    status: EntryStatus = EntryStatus.PENDING
    failure_reason: str = ''

    @classmethod
    def charge(cls, reservation_id: UUID, amount: Decimal, kind: PaymentKind,
               external_reference: str, currency: str,
               entry_id: UUID | None = None) -> 'LedgerEntry':
        if amount <= 0:
            raise ValueError("Charge amount must be positive")
        extra = {"id": entry_id} if entry_id is not None else {}
        return cls(
            **extra,
            reservation_id=reservation_id,
            amount=amount,
            kind=kind,
            external_reference=external_reference,
            currency=currency,
        )

    @classmethod
    def refund_of(cls, charge: 'LedgerEntry', amount: Decimal) -> 'LedgerEntry':
        """Build a pending refund entry against a settled charge."""
        if amount <= 0:
            raise ValueError("Refund amount must be positive")
        return cls(
            reservation_id=charge.reservation_id,
            amount=-amount,
            kind=charge.kind,
            external_reference=charge.external_reference,
            currency=charge.currency,
        )

    @property
    def is_charge(self) -> bool:
        return self.amount > 0

    @property
    def is_refund(self) -> bool:
        return self.amount < 0

    def mark_success(self):
        if not self.is_charge or self.status != EntryStatus.PENDING:
            raise InvalidStateError(
                f"Cannot settle entry {self.id} with status {self.status.value}"
            )
        self.status = EntryStatus.SUCCESS
        self.touch()

    def mark_refunded(self):
        if not self.is_refund or self.status != EntryStatus.PENDING:
            raise InvalidStateError(
                f"Cannot finalize refund {self.id} with status {self.status.value}"
            )
        self.status = EntryStatus.REFUNDED
        self.touch()

    def mark_failed(self, reason: str = ''):
        if self.status != EntryStatus.PENDING:
            raise InvalidStateError(
                f"Cannot fail entry {self.id} with status {self.status.value}"
            )
        self.status = EntryStatus.FAILED
        self.failure_reason = reason
        self.touch()

    def __str__(self):
        return f"LedgerEntry {self.external_reference} {self.amount} ({self.status.value})"


class PaymentLedger:
    """Read-side arithmetic over the entries of one reservation."""

    def __init__(self, entries: Iterable[LedgerEntry]):
        self._entries: List[LedgerEntry] = sorted(entries, key=lambda e: e.created_at)

    @property
    def entries(self) -> List[LedgerEntry]:
        return list(self._entries)

    def successful_charges(self) -> List[LedgerEntry]:
        return [e for e in self._entries if e.is_charge and e.status == EntryStatus.SUCCESS]

    def first_successful_charge(self) -> LedgerEntry | None:
        charges = self.successful_charges()
        return charges[0] if charges else None

    def total_settled(self) -> Decimal:
        return sum((e.amount for e in self.successful_charges()), Decimal('0'))

    def total_refunded(self) -> Decimal:
        """Refunds confirmed by the gateway (positive number)."""
        return -sum(
            (e.amount for e in self._entries if e.is_refund and e.status == EntryStatus.REFUNDED),
            Decimal('0'),
        )

    def refunds_in_flight(self) -> Decimal:
        """Refunds reserved locally but not yet confirmed (positive number)."""
        return -sum(
            (e.amount for e in self._entries if e.is_refund and e.status == EntryStatus.PENDING),
            Decimal('0'),
        )

    def net_paid(self) -> Decimal:
        """What a reservation's paid amount must equal."""
        return self.total_settled() - self.total_refunded() - self.refunds_in_flight()
