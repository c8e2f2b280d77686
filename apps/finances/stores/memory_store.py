"""In-process implementations of the ledger stores."""

from copy import deepcopy
from uuid import UUID
import threading

from apps.finances.domain import LedgerEntry
from apps.finances.stores.interfaces import LedgerStore, SettlementStore


class InMemoryLedgerStore(LedgerStore):

    def __init__(self):
        self._mutex = threading.Lock()
        self._entries: dict[UUID, LedgerEntry] = {}

    def add(self, entry: LedgerEntry) -> None:
        with self._mutex:
            if entry.id in self._entries:
                raise ValueError(f"Ledger entry {entry.id} already exists")
            if entry.is_charge and any(
                e.is_charge and e.external_reference == entry.external_reference
                for e in self._entries.values()
            ):
                raise ValueError(f"Charge {entry.external_reference} already recorded")
            self._entries[entry.id] = deepcopy(entry)

    def save(self, entry: LedgerEntry) -> None:
        with self._mutex:
            if entry.id not in self._entries:
                raise KeyError(entry.id)
            self._entries[entry.id] = deepcopy(entry)

    def get(self, entry_id: UUID) -> LedgerEntry | None:
        with self._mutex:
            entry = self._entries.get(entry_id)
            return deepcopy(entry) if entry else None

    def list_for_reservation(self, reservation_id: UUID) -> list[LedgerEntry]:
        with self._mutex:
            entries = [deepcopy(e) for e in self._entries.values() if e.reservation_id == reservation_id]
        return sorted(entries, key=lambda e: e.created_at)

    def find_charge_by_reference(self, reference: str) -> LedgerEntry | None:
        with self._mutex:
            for entry in self._entries.values():
                if entry.is_charge and entry.external_reference == reference:
                    return deepcopy(entry)
        return None


class InMemorySettlementStore(SettlementStore):

    def __init__(self):
        self._mutex = threading.Lock()
        self._settled: dict[str, UUID] = {}

    def get(self, reference: str) -> UUID | None:
        with self._mutex:
            return self._settled.get(reference)

    def record(self, reference: str, entry_id: UUID) -> None:
        with self._mutex:
            self._settled.setdefault(reference, entry_id)
