from apps.finances.domain.ledger import (
    EntryStatus,
    LedgerEntry,
    PaymentKind,
    PaymentLedger,
)

__all__ = [
    "EntryStatus",
    "LedgerEntry",
    "PaymentKind",
    "PaymentLedger",
]
