# backend/tourbooking/services/pricing.py
"""
Order price calculation.

Discount thresholds are passed in explicitly as PricingConfig;
get_pricing_config() builds the value from settings at the API edge.
"""

from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class PricingConfig:
    """
    Attributes:
        discount_threshold: Attendees count from which the discount applies
        discount_rate: Fraction taken off the total (0.10 = 10%)
    """
    discount_threshold: int = 5
    discount_rate: float = 0.10

    def __post_init__(self):
        if not 0 <= self.discount_rate < 1:
            raise ValueError(f"discount_rate must be in [0, 1), got {self.discount_rate}")
        if self.discount_threshold < 1:
            raise ValueError(f"discount_threshold must be >= 1, got {self.discount_threshold}")


@lru_cache
def get_pricing_config() -> PricingConfig:
    from ..config import settings

    return PricingConfig(
        discount_threshold=settings.discount_threshold,
        discount_rate=settings.discount_rate,
    )


def calc_order_total(
    base_price: float,
    attendees_count: int,
    config: PricingConfig,
) -> float:
    """
    base_price × attendees, minus discount_rate when
    attendees_count >= discount_threshold. Rounded to 2 decimals.
    """
    total = base_price * attendees_count

    if attendees_count >= config.discount_threshold:
        total = total * (1 - config.discount_rate)

    return round(total, 2)
