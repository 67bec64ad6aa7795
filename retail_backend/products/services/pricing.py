# products/services/pricing.py

"""
PRICING TIER RESOLVER

resolve_tier(quantity, medium=, wholesale=):
- |quantity| >= wholesale  -> wholesale
- |quantity| >= medium     -> medium
- otherwise                -> retail

Correction lines carry negative quantities; the absolute value is what selects
the tier, so a return is priced like the sale it reverses.

Thresholds:
- Settings writes reject non-positive thresholds.
- If a non-positive threshold still reaches this module (legacy rows, direct
  calls), it is treated as "always triggers": |q| >= 0 holds for every q.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

TIER_RETAIL = "retail"
TIER_MEDIUM = "medium"
TIER_WHOLESALE = "wholesale"

TIERS = (TIER_RETAIL, TIER_MEDIUM, TIER_WHOLESALE)

TIER_CHOICES = [
    (TIER_RETAIL, "Menudeo"),
    (TIER_MEDIUM, "Medio mayoreo"),
    (TIER_WHOLESALE, "Mayoreo"),
]

TWOPLACES = Decimal("0.01")

_PRICE_FIELD = {
    TIER_RETAIL: "price_retail",
    TIER_MEDIUM: "price_medium",
    TIER_WHOLESALE: "price_wholesale",
}


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineQuote:
    tier: str
    unit_price: Decimal
    amount: Decimal


def resolve_tier(quantity: int, *, medium: int, wholesale: int) -> str:
    q = abs(int(quantity))

    if q >= int(wholesale):
        return TIER_WHOLESALE
    if q >= int(medium):
        return TIER_MEDIUM
    return TIER_RETAIL


def price_for_tier(product, tier: str) -> Decimal:
    field = _PRICE_FIELD.get(tier)
    if field is None:
        raise ValueError(f"Unknown price tier: {tier}")
    return _money(getattr(product, field))


def quote_line(product, quantity: int, *, settings) -> LineQuote:
    """
    Price a line from the product's CURRENT tier prices.
    amount is signed (follows the quantity sign).
    """
    tier = resolve_tier(
        quantity,
        medium=settings.medium_threshold,
        wholesale=settings.wholesale_threshold,
    )
    unit_price = price_for_tier(product, tier)
    return LineQuote(
        tier=tier,
        unit_price=unit_price,
        amount=_money(unit_price * Decimal(int(quantity))),
    )
