"""Store interfaces for the payment ledger."""

from abc import ABC, abstractmethod
from uuid import UUID

from apps.finances.domain import LedgerEntry


class LedgerStore(ABC):
    """Append-only persistence of ledger entries."""

    @abstractmethod
    def add(self, entry: LedgerEntry) -> None:
        """Insert a new entry."""
        ...

    @abstractmethod
    def save(self, entry: LedgerEntry) -> None:
        """Persist a status change of an existing entry."""
        ...

    @abstractmethod
    def get(self, entry_id: UUID) -> LedgerEntry | None:
        ...

    @abstractmethod
    def list_for_reservation(self, reservation_id: UUID) -> list[LedgerEntry]:
        """Return entries ordered by created_at ascending."""
        ...

    @abstractmethod
    def find_charge_by_reference(self, reference: str) -> LedgerEntry | None:
        """Return the charge (positive entry) carrying an external reference."""
        ...


class SettlementStore(ABC):
    """Keyed idempotency record of settled external payment references."""

    @abstractmethod
    def get(self, reference: str) -> UUID | None:
        """Return the ledger entry id a reference settled, if any."""
        ...

    @abstractmethod
    def record(self, reference: str, entry_id: UUID) -> None:
        ...
