from apps.venues.domain.entities import PricingOverride, Venue
from apps.venues.domain.pricing import PricingCalculator, calculate_amount

__all__ = [
    "Venue",
    "PricingOverride",
    "PricingCalculator",
    "calculate_amount",
]
