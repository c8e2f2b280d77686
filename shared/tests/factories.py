"""Test data shared by the app test suites."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

from apps.venues.domain import Venue
from shared.domain.value_objects import Money

OWNER_ID = 100
STAFF_ID = 101
CUSTOMER_ID = 1
OTHER_CUSTOMER_ID = 2
RESERVATION_DAY = date(2030, 6, 15)


def make_venue(hall_id, base_rate="100.00", min_hours=2, active=True, name="Main Room"):
    return Venue(
        id=uuid4(),
        hall_id=hall_id,
        name=name,
        capacity=120,
        min_booking_duration_hours=min_hours,
        base_price_per_hour=Money(Decimal(base_rate), "USD"),
        active=active,
    )
