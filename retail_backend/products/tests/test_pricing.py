# products/tests/test_pricing.py

from decimal import Decimal

from django.test import SimpleTestCase

from products.models import Product
from products.services.pricing import (
    TIER_MEDIUM,
    TIER_RETAIL,
    TIER_WHOLESALE,
    price_for_tier,
    quote_line,
    resolve_tier,
)
from store.services.context import SettingsSnapshot


class ResolveTierTests(SimpleTestCase):
    """
    GUARANTEES:
    - |q| >= wholesale -> wholesale
    - medium <= |q| < wholesale -> medium
    - otherwise retail
    """

    def test_tier_boundaries_for_all_small_quantities(self):
        for medium, wholesale in [(6, 12), (1, 1), (3, 10), (5, 5)]:
            for q in range(-30, 31):
                tier = resolve_tier(q, medium=medium, wholesale=wholesale)
                if abs(q) >= wholesale:
                    self.assertEqual(tier, TIER_WHOLESALE, (q, medium, wholesale))
                elif abs(q) >= medium:
                    self.assertEqual(tier, TIER_MEDIUM, (q, medium, wholesale))
                else:
                    self.assertEqual(tier, TIER_RETAIL, (q, medium, wholesale))

    def test_negative_quantity_uses_absolute_value(self):
        self.assertEqual(resolve_tier(-12, medium=6, wholesale=12), TIER_WHOLESALE)
        self.assertEqual(resolve_tier(-7, medium=6, wholesale=12), TIER_MEDIUM)
        self.assertEqual(resolve_tier(-1, medium=6, wholesale=12), TIER_RETAIL)

    def test_non_positive_threshold_always_triggers(self):
        self.assertEqual(resolve_tier(1, medium=0, wholesale=50), TIER_MEDIUM)
        self.assertEqual(resolve_tier(1, medium=0, wholesale=-1), TIER_WHOLESALE)

    def test_unknown_tier_rejected(self):
        product = Product(
            sku="X",
            name="X",
            price_retail=Decimal("1"),
            price_medium=Decimal("1"),
            price_wholesale=Decimal("1"),
        )
        with self.assertRaises(ValueError):
            price_for_tier(product, "vip")


class QuoteLineScenarioTests(SimpleTestCase):
    """
    Product with retail=10, medium=8, wholesale=6 and thresholds 6/12.
    """

    def setUp(self):
        self.product = Product(
            sku="P-1",
            name="Producto",
            price_retail=Decimal("10.00"),
            price_medium=Decimal("8.00"),
            price_wholesale=Decimal("6.00"),
        )
        self.settings = SettingsSnapshot(medium_threshold=6, wholesale_threshold=12)

    def test_quantity_5_is_retail(self):
        q = quote_line(self.product, 5, settings=self.settings)
        self.assertEqual(q.tier, TIER_RETAIL)
        self.assertEqual(q.unit_price, Decimal("10.00"))
        self.assertEqual(q.amount, Decimal("50.00"))

    def test_quantity_6_is_medium(self):
        q = quote_line(self.product, 6, settings=self.settings)
        self.assertEqual(q.tier, TIER_MEDIUM)
        self.assertEqual(q.unit_price, Decimal("8.00"))
        self.assertEqual(q.amount, Decimal("48.00"))

    def test_quantity_12_is_wholesale(self):
        q = quote_line(self.product, 12, settings=self.settings)
        self.assertEqual(q.tier, TIER_WHOLESALE)
        self.assertEqual(q.unit_price, Decimal("6.00"))
        self.assertEqual(q.amount, Decimal("72.00"))

    def test_correction_amount_is_negative(self):
        q = quote_line(self.product, -2, settings=self.settings)
        self.assertEqual(q.unit_price, Decimal("10.00"))
        self.assertEqual(q.amount, Decimal("-20.00"))
