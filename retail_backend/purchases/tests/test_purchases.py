# purchases/tests/test_purchases.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from products.models import Product, StockMovement
from products.services.stock import InsufficientStockError
from purchases.models import Purchase
from purchases.services.purchase_service import (
    PurchaseError,
    PurchasePermissionError,
    delete_purchase,
    record_purchase,
    update_purchase,
)

User = get_user_model()


def _product(sku, stock=10):
    return Product.objects.create(
        sku=sku,
        name=f"Producto {sku}",
        price_retail=Decimal("20.00"),
        price_medium=Decimal("18.00"),
        price_wholesale=Decimal("15.00"),
        stock_initial=stock,
        stock_current=stock,
    )


class PurchaseServiceTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="purchases_admin@example.com", password="password123", role="admin", name="Compras"
        )
        self.seller = User.objects.create_user(
            email="purchases_seller@example.com", password="password123", role="seller"
        )
        self.cloro = _product("CLO-100")
        self.pino = _product("PIN-200", stock=4)

    def _stock(self, product):
        product.refresh_from_db()
        return product.stock_current

    def test_record_increments_stock(self):
        purchase = record_purchase(
            actor=self.admin,
            product=self.cloro,
            quantity=24,
            cost_unit=Decimal("7.50"),
            supplier="Químicos del Norte",
        )

        self.assertEqual(purchase.cost_total, Decimal("180.00"))
        self.assertEqual(purchase.sku, "CLO-100")
        self.assertEqual(purchase.user_name, "Compras")
        self.assertEqual(self._stock(self.cloro), 34)

        movement = StockMovement.objects.get(reference=str(purchase.id))
        self.assertEqual(movement.reason, StockMovement.Reason.PURCHASE)
        self.assertEqual(movement.quantity, 24)

    def test_blank_supplier_defaults(self):
        purchase = record_purchase(actor=self.admin, product=self.cloro, quantity=1, cost_unit="1")
        self.assertEqual(purchase.supplier, "Unknown")

    def test_invalid_quantity(self):
        with self.assertRaises(PurchaseError):
            record_purchase(actor=self.admin, product=self.cloro, quantity=0, cost_unit="5")
        self.assertEqual(self._stock(self.cloro), 10)

    def test_requires_products_manage(self):
        with self.assertRaises(PurchasePermissionError):
            record_purchase(actor=self.seller, product=self.cloro, quantity=1, cost_unit="5")

    def test_update_quantity_moves_delta(self):
        purchase = record_purchase(actor=self.admin, product=self.cloro, quantity=10, cost_unit="5")

        purchase = update_purchase(actor=self.admin, purchase=purchase, quantity=6, cost_unit="6")
        self.assertEqual(self._stock(self.cloro), 16)
        self.assertEqual(purchase.cost_total, Decimal("36.00"))

        edit = StockMovement.objects.get(reason=StockMovement.Reason.PURCHASE_EDIT)
        self.assertEqual(edit.quantity, -4)

    def test_update_product_moves_stock_between_products(self):
        purchase = record_purchase(actor=self.admin, product=self.cloro, quantity=5, cost_unit="5")

        purchase = update_purchase(actor=self.admin, purchase=purchase, product=self.pino, quantity=3)

        self.assertEqual(self._stock(self.cloro), 10)
        self.assertEqual(self._stock(self.pino), 7)
        self.assertEqual(purchase.sku, "PIN-200")

    def test_delete_returns_stock(self):
        purchase = record_purchase(actor=self.admin, product=self.cloro, quantity=5, cost_unit="5")

        delete_purchase(actor=self.admin, purchase=purchase)

        self.assertEqual(self._stock(self.cloro), 10)
        self.assertFalse(Purchase.objects.exists())
        self.assertTrue(
            StockMovement.objects.filter(reason=StockMovement.Reason.PURCHASE_DELETE, quantity=-5).exists()
        )

    def test_delete_rejected_when_stock_already_sold(self):
        purchase = record_purchase(actor=self.admin, product=self.pino, quantity=2, cost_unit="5")
        Product.objects.filter(pk=self.pino.pk).update(stock_current=1)

        with self.assertRaises(InsufficientStockError):
            delete_purchase(actor=self.admin, purchase=purchase)

        self.assertTrue(Purchase.objects.filter(pk=purchase.pk).exists())
        self.assertEqual(self._stock(self.pino), 1)


class PurchaseApiTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.admin = User.objects.create_user(
            email="purchases_api_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="purchases_api_seller@example.com", password="password123", role="seller"
        )
        self.product = _product("JAB-300")

    def test_create_list_update_delete(self):
        self.api.force_authenticate(self.admin)

        res = self.api.post(
            "/api/purchases/",
            {"product_id": str(self.product.id), "quantity": 12, "cost_unit": "9.90", "supplier": "Distribuidora"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["cost_total"], "118.80")
        purchase_id = res.data["id"]

        res = self.api.get("/api/purchases/", {"sku": "JAB-300"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)

        res = self.api.patch(f"/api/purchases/{purchase_id}/", {"quantity": 10}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 20)

        res = self.api.delete(f"/api/purchases/{purchase_id}/")
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 10)

    def test_seller_can_read_but_not_write(self):
        self.api.force_authenticate(self.seller)

        res = self.api.get("/api/purchases/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        res = self.api.post(
            "/api/purchases/",
            {"product_id": str(self.product.id), "quantity": 1, "cost_unit": "1.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
