"""Django ORM implementation of the ledger stores."""

from uuid import UUID

from apps.finances import models
from apps.finances.domain import EntryStatus, LedgerEntry, PaymentKind
from apps.finances.stores.interfaces import LedgerStore, SettlementStore


def entry_to_domain(row: models.LedgerEntry) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        reservation_id=row.reservation_id,
        amount=row.amount,
        kind=PaymentKind(row.kind),
        external_reference=row.external_reference,
        currency=row.currency,
        status=EntryStatus(row.status),
        failure_reason=row.failure_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoLedgerStore(LedgerStore):

    def add(self, entry: LedgerEntry) -> None:
        models.LedgerEntry.objects.create(
            id=entry.id,
            reservation_id=entry.reservation_id,
            amount=entry.amount,
            currency=entry.currency,
            kind=entry.kind.value,
            status=entry.status.value,
            external_reference=entry.external_reference,
            failure_reason=entry.failure_reason,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )

    def save(self, entry: LedgerEntry) -> None:
        # Amounts are immutable; only the status columns move
        models.LedgerEntry.objects.filter(pk=entry.id).update(
            status=entry.status.value,
            failure_reason=entry.failure_reason,
            updated_at=entry.updated_at,
        )

    def get(self, entry_id: UUID) -> LedgerEntry | None:
        row = models.LedgerEntry.objects.filter(pk=entry_id).first()
        return entry_to_domain(row) if row else None

    def list_for_reservation(self, reservation_id: UUID) -> list[LedgerEntry]:
        rows = models.LedgerEntry.objects.filter(reservation_id=reservation_id).order_by("created_at")
        return [entry_to_domain(row) for row in rows]

    def find_charge_by_reference(self, reference: str) -> LedgerEntry | None:
        row = models.LedgerEntry.objects.filter(external_reference=reference, amount__gt=0).first()
        return entry_to_domain(row) if row else None


class DjangoSettlementStore(SettlementStore):

    def get(self, reference: str) -> UUID | None:
        return (
            models.SettledPaymentReference.objects
            .filter(reference=reference)
            .values_list("entry_id", flat=True)
            .first()
        )

    def record(self, reference: str, entry_id: UUID) -> None:
        models.SettledPaymentReference.objects.get_or_create(
            reference=reference,
            defaults={"entry_id": entry_id},
        )
