from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .errors import UnsupportedDurationError, UnsupportedMembersError

BASE_PRICE_PER_HOUR = {6: 250, 12: 400}

# duration (hours) -> multiplier applied to base * duration
DURATION_MULTIPLIERS = {
    1: Decimal("1"),
    3: Decimal("1"),
    6: Decimal("0.90"),
    12: Decimal("0.85"),
}
DURATION_DISCOUNT_LABELS = {1: "0%", 3: "0%", 6: "10%", 12: "15%"}

LOYALTY_THRESHOLD = 5
LOYALTY_DISCOUNT_PERCENT = 2


@dataclass(frozen=True)
class PriceBreakdown:
    base_price_per_hour: int
    subtotal: int
    total_price: int
    final_price: int
    duration_discount_label: str
    promo_discount_percent: int
    loyalty_discount_percent: int


def calculate_price(
    members: int,
    duration: int,
    booking_count: int,
    promo_discount_percent: int = 0,
) -> PriceBreakdown:
    """
    Price a booking block.

    `total_price` and `final_price` are rounded independently from the same
    unrounded tier subtotal; rounding is half-up to whole currency units.
    The loyalty discount applies once `booking_count` reaches 5.
    """
    if members not in BASE_PRICE_PER_HOUR:
        raise UnsupportedMembersError(f"members must be one of {sorted(BASE_PRICE_PER_HOUR)}")
    if duration not in DURATION_MULTIPLIERS:
        raise UnsupportedDurationError(f"duration must be one of {sorted(DURATION_MULTIPLIERS)}")

    base = BASE_PRICE_PER_HOUR[members]
    tier_subtotal = Decimal(base) * duration * DURATION_MULTIPLIERS[duration]

    final = tier_subtotal * (1 - Decimal(promo_discount_percent) / 100)
    loyalty = LOYALTY_DISCOUNT_PERCENT if booking_count >= LOYALTY_THRESHOLD else 0
    if loyalty:
        final = final * (1 - Decimal(loyalty) / 100)

    return PriceBreakdown(
        base_price_per_hour=base,
        subtotal=base * duration,
        total_price=_round_half_up(tier_subtotal),
        final_price=_round_half_up(final),
        duration_discount_label=DURATION_DISCOUNT_LABELS[duration],
        promo_discount_percent=promo_discount_percent,
        loyalty_discount_percent=loyalty,
    )


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
