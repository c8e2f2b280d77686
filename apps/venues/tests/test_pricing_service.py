from datetime import date, time
from decimal import Decimal
from uuid import uuid4

import pytest

from apps.venues import models
from apps.venues.domain.errors import HallNotFoundError, InvalidPricingError, VenueNotFoundError
from apps.venues.services import PricingSlotInput, VenuePricingService
from apps.venues.stores.django_store import DjangoAccessPolicy, DjangoVenueStore
from apps.venues.stores.memory_store import InMemoryAccessPolicy, InMemoryVenueStore
from shared.domain.errors import NotAuthorizedError
from shared.tests.factories import make_venue

DAY = date(2030, 6, 15)
OTHER_DAY = date(2030, 6, 16)
OWNER_ID = 10
STAFF_ID = 11
STRANGER_ID = 12


def slot(start, end, price, day=DAY):
    return PricingSlotInput(effective_date=day, slot_start=time(start), slot_end=time(end), price=Decimal(price))


@pytest.fixture
def setup():
    hall_id = uuid4()
    venue = make_venue(hall_id)
    venues = InMemoryVenueStore([venue])
    access = InMemoryAccessPolicy()
    access.add_hall(hall_id, owner_id=OWNER_ID, staff=[STAFF_ID])
    return VenuePricingService(venues, access), hall_id, venue


def test_replace_pricing_by_owner(setup):
    service, hall_id, venue = setup

    result = service.replace_pricing(hall_id, venue.id, [slot(18, 22, "150.00")], OWNER_ID)

    assert list(result) == [DAY]
    overrides = service.get_pricing(venue.id, DAY)
    assert len(overrides) == 1
    assert overrides[0].slot.start == time(18)
    assert overrides[0].price.amount == Decimal("150.00")


def test_replace_pricing_deletes_previous_overrides_for_that_date_only(setup):
    service, hall_id, venue = setup
    service.replace_pricing(
        hall_id, venue.id,
        [slot(9, 12, "80.00"), slot(12, 15, "90.00"), slot(9, 12, "70.00", day=OTHER_DAY)],
        OWNER_ID,
    )

    service.replace_pricing(hall_id, venue.id, [slot(18, 20, "200.00")], STAFF_ID)

    assert [o.slot.start for o in service.get_pricing(venue.id, DAY)] == [time(18)]
    assert [o.price.amount for o in service.get_pricing(venue.id, OTHER_DAY)] == [Decimal("70.00")]


def test_replace_pricing_rejects_stranger(setup):
    service, hall_id, venue = setup

    with pytest.raises(NotAuthorizedError):
        service.replace_pricing(hall_id, venue.id, [slot(18, 22, "150.00")], STRANGER_ID)

    assert service.get_pricing(venue.id, DAY) == []


def test_replace_pricing_unknown_hall(setup):
    service, _, venue = setup

    with pytest.raises(HallNotFoundError):
        service.replace_pricing(uuid4(), venue.id, [], OWNER_ID)


def test_replace_pricing_venue_of_another_hall(setup):
    service, hall_id, _ = setup
    foreign_venue = make_venue(uuid4())
    service._venues.add_venue(foreign_venue)

    with pytest.raises(VenueNotFoundError):
        service.replace_pricing(hall_id, foreign_venue.id, [slot(18, 22, "150.00")], OWNER_ID)


@pytest.mark.parametrize(
    "bad_slot",
    [
        slot(20, 18, "150.00"),
        slot(18, 18, "150.00"),
        slot(18, 22, "-1.00"),
    ],
)
def test_replace_pricing_rejects_malformed_slots(setup, bad_slot):
    service, hall_id, venue = setup

    with pytest.raises(InvalidPricingError):
        service.replace_pricing(hall_id, venue.id, [bad_slot], OWNER_ID)


def test_get_pricing_unknown_venue(setup):
    service, _, _ = setup

    with pytest.raises(VenueNotFoundError):
        service.get_pricing(uuid4(), DAY)


@pytest.mark.django_db
def test_replace_pricing_with_django_stores():
    hall = models.Hall.objects.create(name="Grand Hall", owner_id=OWNER_ID)
    models.HallStaff.objects.create(hall=hall, user_id=STAFF_ID)
    venue = models.Venue.objects.create(
        hall=hall, name="Ballroom", capacity=200, base_price_per_hour=Decimal("100.00"),
    )
    models.PricingOverride.objects.create(
        venue=venue, effective_date=DAY, slot_start=time(8), slot_end=time(10), price=Decimal("10.00"),
    )
    service = VenuePricingService(DjangoVenueStore(), DjangoAccessPolicy())

    service.replace_pricing(hall.id, venue.id, [slot(18, 22, "150.00"), slot(10, 12, "120.00")], STAFF_ID)

    rows = models.PricingOverride.objects.filter(venue=venue, effective_date=DAY).order_by("slot_start")
    assert [(r.slot_start, r.price) for r in rows] == [
        (time(10), Decimal("120.00")),
        (time(18), Decimal("150.00")),
    ]
    overrides = service.get_pricing(venue.id, DAY)
    assert [o.slot.start for o in overrides] == [time(10), time(18)]


@pytest.mark.django_db
def test_django_access_policy():
    hall = models.Hall.objects.create(name="Grand Hall", owner_id=OWNER_ID)
    models.HallStaff.objects.create(hall=hall, user_id=STAFF_ID)
    policy = DjangoAccessPolicy()

    assert policy.hall_exists(hall.id)
    assert not policy.hall_exists(uuid4())
    assert policy.is_management_of(hall.id, OWNER_ID)
    assert policy.is_management_of(hall.id, STAFF_ID)
    assert not policy.is_management_of(hall.id, STRANGER_ID)
