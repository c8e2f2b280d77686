"""
Reservation Engine

Single entry point for the reservation use cases. Every mutating call is
turned into a command and dispatched through the engine's MessageBus to its
handler; reads go straight to ReservationQueries.

    engine = build_engine()
    reservation = engine.create_reservation(customer_id, venue_id, day, start, end)
    entry = engine.create_payment_intent(customer_id, reservation.id, reservation.total_amount.amount)
    engine.settle_payment(entry.external_reference)
"""

from datetime import date, time
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID
import logging

from apps.finances.application.command_handlers import (
    CreatePaymentIntentCommand,
    CreatePaymentIntentHandler,
    FailPaymentCommand,
    FailPaymentHandler,
    ProcessRefundCommand,
    ProcessRefundHandler,
    SettlePaymentCommand,
    SettlePaymentHandler,
)
from apps.finances.domain import LedgerEntry, PaymentKind
from apps.reservations.application.command_handlers import (
    CancelReservationCommand,
    CancelReservationHandler,
    CompleteReservationCommand,
    CompleteReservationHandler,
    CreateReservationCommand,
    CreateReservationHandler,
    UnitOfWorkFactory,
)
from apps.reservations.application.queries import ReservationQueries
from apps.reservations.domain import PaymentMode, Reservation
from apps.venues.domain import PricingOverride
from apps.venues.services import PricingSlotInput, VenuePricingService
from shared.application.locks import KeyedLock, keyed_lock
from shared.application.message_bus import MessageBus
from shared.domain.value_objects import Money

logger = logging.getLogger(__name__)


class ReservationEngine:
    """
    Composes availability, pricing, the reservation state machine and the
    payment ledger behind one facade.

    Stores, gateway and unit of work are injected so the same engine runs on
    the Django ORM (build_engine) or on in-memory stores.
    """

    def __init__(self, *, venues, access, reservations, ledger, settlements, gateway,
                 uow_factory: UnitOfWorkFactory, locks: KeyedLock | None = None):
        locks = locks or keyed_lock
        self.bus = MessageBus()
        self.queries = ReservationQueries(venues, access, reservations, ledger)
        self.pricing = VenuePricingService(venues, access)

        handlers = {
            CreateReservationCommand: CreateReservationHandler(
                venues, access, reservations, uow_factory, locks),
            CancelReservationCommand: CancelReservationHandler(
                venues, access, reservations, uow_factory, locks),
            CompleteReservationCommand: CompleteReservationHandler(
                reservations, uow_factory, locks),
            CreatePaymentIntentCommand: CreatePaymentIntentHandler(
                reservations, ledger, gateway, uow_factory, locks),
            SettlePaymentCommand: SettlePaymentHandler(
                reservations, ledger, settlements, uow_factory, locks),
            FailPaymentCommand: FailPaymentHandler(
                reservations, ledger, uow_factory, locks),
            ProcessRefundCommand: ProcessRefundHandler(
                venues, access, reservations, ledger, gateway, uow_factory, locks),
        }
        for command_type, handler in handlers.items():
            self.bus.register_command_handler(command_type, handler.handle)

    # ----- Reservations -----

    def create_reservation(self, customer_id: int, venue_id: UUID, reservation_date: date,
                           start_time: time, end_time: time,
                           payment_mode: PaymentMode = PaymentMode.FULL) -> Reservation:
        return self.bus.handle_command(CreateReservationCommand(
            customer_id=customer_id,
            venue_id=venue_id,
            reservation_date=reservation_date,
            start_time=start_time,
            end_time=end_time,
            payment_mode=payment_mode,
        ))

    def cancel_reservation(self, reservation_id: UUID, actor_id: int, reason: str = '') -> Reservation:
        return self.bus.handle_command(CancelReservationCommand(
            reservation_id=reservation_id, actor_id=actor_id, reason=reason,
        ))

    def complete_reservation(self, reservation_id: UUID) -> Reservation:
        return self.bus.handle_command(CompleteReservationCommand(reservation_id=reservation_id))

    # ----- Payments -----

    def create_payment_intent(self, customer_id: int, reservation_id: UUID, amount: Decimal,
                              kind: PaymentKind = PaymentKind.FULL) -> LedgerEntry:
        return self.bus.handle_command(CreatePaymentIntentCommand(
            customer_id=customer_id, reservation_id=reservation_id, amount=amount, kind=kind,
        ))

    def settle_payment(self, external_reference: str) -> Reservation:
        return self.bus.handle_command(SettlePaymentCommand(external_reference=external_reference))

    def fail_payment(self, external_reference: str, reason: str = '') -> LedgerEntry:
        return self.bus.handle_command(FailPaymentCommand(
            external_reference=external_reference, reason=reason,
        ))

    def process_refund(self, reservation_id: UUID, actor_id: int,
                       amount: Optional[Decimal] = None) -> LedgerEntry:
        return self.bus.handle_command(ProcessRefundCommand(
            reservation_id=reservation_id, actor_id=actor_id, amount=amount,
        ))

    # ----- Pricing -----

    def replace_pricing(self, hall_id: UUID, venue_id: UUID, slots: Iterable[PricingSlotInput],
                        actor_id: int) -> dict[date, list[PricingOverride]]:
        return self.pricing.replace_pricing(hall_id, venue_id, slots, actor_id)

    def get_pricing(self, venue_id: UUID, on_date: date) -> list[PricingOverride]:
        return self.pricing.get_pricing(venue_id, on_date)

    def quote_price(self, venue_id: UUID, on_date: date, start_time: time, end_time: time) -> Money:
        return self.queries.quote_price(venue_id, on_date, start_time, end_time)

    # ----- Queries -----

    def get_reservation(self, reservation_id: UUID, actor_id: int) -> Reservation:
        return self.queries.get_reservation(reservation_id, actor_id)

    def list_customer_reservations(self, customer_id: int) -> list[Reservation]:
        return self.queries.list_customer_reservations(customer_id)

    def list_hall_reservations(self, hall_id: UUID, actor_id: int) -> list[Reservation]:
        return self.queries.list_hall_reservations(hall_id, actor_id)

    def list_payments(self, reservation_id: UUID, actor_id: int) -> list[LedgerEntry]:
        return self.queries.list_payments(reservation_id, actor_id)


def build_engine(gateway=None) -> ReservationEngine:
    """Engine backed by the Django ORM and the configured payment gateway."""
    from apps.finances.gateways import get_payment_gateway
    from apps.finances.stores.django_store import DjangoLedgerStore, DjangoSettlementStore
    from apps.reservations.stores.django_store import DjangoReservationStore
    from apps.venues.stores.django_store import DjangoAccessPolicy, DjangoVenueStore
    from shared.application.uow import DjangoUnitOfWork

    return ReservationEngine(
        venues=DjangoVenueStore(),
        access=DjangoAccessPolicy(),
        reservations=DjangoReservationStore(),
        ledger=DjangoLedgerStore(),
        settlements=DjangoSettlementStore(),
        gateway=gateway or get_payment_gateway(),
        uow_factory=DjangoUnitOfWork,
    )
