"""Shared pytest fixtures: an engine wired to in-memory stores."""

from datetime import time
from types import SimpleNamespace
from uuid import uuid4

import pytest

from apps.finances.gateways import SimulatedPaymentGateway
from apps.finances.stores.memory_store import InMemoryLedgerStore, InMemorySettlementStore
from apps.reservations.application.engine import ReservationEngine
from apps.reservations.stores.memory_store import InMemoryReservationStore
from apps.venues.stores.memory_store import InMemoryAccessPolicy, InMemoryVenueStore
from shared.application.locks import KeyedLock
from shared.application.message_bus import MessageBus
from shared.application.uow import InMemoryUnitOfWork
from shared.tests.factories import (
    CUSTOMER_ID,
    OTHER_CUSTOMER_ID,
    OWNER_ID,
    RESERVATION_DAY,
    STAFF_ID,
    make_venue,
)


@pytest.fixture
def world():
    """
    One hall (owner 100, staff 101) with a $100/h venue, two customers and
    an engine over in-memory stores. Published events land in ``events``.
    """
    hall_id = uuid4()
    venue = make_venue(hall_id)

    venues = InMemoryVenueStore([venue])
    access = InMemoryAccessPolicy(customers=[CUSTOMER_ID, OTHER_CUSTOMER_ID, OWNER_ID, STAFF_ID])
    access.add_hall(hall_id, owner_id=OWNER_ID, staff=[STAFF_ID])

    events = []
    bus = MessageBus()
    reservations = InMemoryReservationStore()
    ledger = InMemoryLedgerStore()
    settlements = InMemorySettlementStore()
    gateway = SimulatedPaymentGateway()

    def uow_factory():
        return InMemoryUnitOfWork(bus=bus)

    engine = ReservationEngine(
        venues=venues,
        access=access,
        reservations=reservations,
        ledger=ledger,
        settlements=settlements,
        gateway=gateway,
        uow_factory=uow_factory,
        locks=KeyedLock(),
    )

    world = SimpleNamespace(
        hall_id=hall_id,
        venue=venue,
        venues=venues,
        access=access,
        bus=bus,
        events=events,
        reservations=reservations,
        ledger=ledger,
        settlements=settlements,
        gateway=gateway,
        engine=engine,
        uow_factory=uow_factory,
    )

    def record(event):
        events.append(event)

    from apps.reservations.application.event_handlers import HANDLERS
    for event_type in HANDLERS:
        bus.register_event_handler(event_type, record)

    return world


@pytest.fixture
def reserve(world):
    """Create a reservation on the world's venue: reserve(start_hour, end_hour, **kw)."""

    def _reserve(start_hour, end_hour, customer_id=CUSTOMER_ID, day=RESERVATION_DAY, venue_id=None, **kwargs):
        return world.engine.create_reservation(
            customer_id=customer_id,
            venue_id=venue_id or world.venue.id,
            reservation_date=day,
            start_time=time(start_hour),
            end_time=time(end_hour),
            **kwargs,
        )

    return _reserve
