# products/tests/test_stock.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from products.models import Product, StockMovement
from products.services.stock import InsufficientStockError, adjust_stock

User = get_user_model()


class StockLedgerTests(TestCase):
    """
    GUARANTEES:
    - stock_current moves only by atomic deltas
    - decrements below zero are rejected (default policy)
    - every change leaves an immutable movement
    """

    def setUp(self):
        self.user = User.objects.create_user(
            email="stock_admin@example.com",
            password="password123",
            role="admin",
        )
        self.product = Product.objects.create(
            sku="DET-001",
            name="Detergente",
            price_retail=Decimal("32.00"),
            price_medium=Decimal("28.00"),
            price_wholesale=Decimal("25.00"),
            stock_initial=10,
            stock_current=10,
        )

    def test_decrement_and_increment(self):
        adjust_stock(
            product=self.product,
            delta=-4,
            reason=StockMovement.Reason.SALE,
            actor=self.user,
            folio="00001",
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 6)

        adjust_stock(
            product=self.product,
            delta=4,
            reason=StockMovement.Reason.CANCELLATION,
            actor=self.user,
            folio="00001",
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 10)

        movements = list(self.product.stock_movements.order_by("created_at"))
        self.assertEqual([m.quantity for m in movements], [-4, 4])
        self.assertEqual([m.stock_after for m in movements], [6, 10])

    def test_decrement_below_zero_is_rejected(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            adjust_stock(
                product=self.product,
                delta=-11,
                reason=StockMovement.Reason.SALE,
                folio="00002",
            )

        self.assertEqual(ctx.exception.available, 10)
        self.assertEqual(ctx.exception.requested, 11)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 10)
        self.assertFalse(StockMovement.objects.exists())

    @override_settings(ALLOW_NEGATIVE_STOCK=True)
    def test_negative_stock_allowed_by_policy(self):
        adjust_stock(
            product=self.product,
            delta=-15,
            reason=StockMovement.Reason.SALE,
            folio="00003",
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, -5)

    def test_zero_delta_is_noop(self):
        self.assertIsNone(
            adjust_stock(product=self.product, delta=0, reason=StockMovement.Reason.PURCHASE)
        )
        self.assertFalse(StockMovement.objects.exists())

    def test_sale_movement_requires_folio(self):
        with self.assertRaises(ValidationError):
            adjust_stock(product=self.product, delta=-1, reason=StockMovement.Reason.SALE)

    def test_movements_are_immutable(self):
        mv = adjust_stock(product=self.product, delta=5, reason=StockMovement.Reason.PURCHASE)

        with self.assertRaises(ValidationError):
            mv.save()

        with self.assertRaises(ValidationError):
            mv.delete()
