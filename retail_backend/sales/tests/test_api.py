# sales/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from pos.services.cart_service import add_line, get_active_cart
from products.models import Product
from sales.models import Sale
from sales.services.checkout_orchestrator import checkout_cart
from store.services.context import build_context

User = get_user_model()


class FolioApiTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.admin = User.objects.create_user(
            email="sales_api_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="sales_api_seller@example.com", password="password123", role="seller"
        )
        self.product = Product.objects.create(
            sku="DES-010",
            name="Desengrasante",
            unit="Litro",
            price_retail=Decimal("25.00"),
            price_medium=Decimal("22.00"),
            price_wholesale=Decimal("20.00"),
            stock_initial=50,
            stock_current=50,
        )

        ctx = build_context(self.seller)
        cart = get_active_cart(ctx=ctx)
        add_line(ctx=ctx, cart=cart, product=self.product, quantity=2)
        self.folio = checkout_cart(ctx=ctx, cart=cart, payment_method="card_debit").folio

    def test_list_and_detail(self):
        self.api.force_authenticate(self.seller)

        res = self.api.get("/api/sales/folios/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        row = res.data["results"][0]
        self.assertEqual(row["folio"], self.folio)
        self.assertEqual(row["total"], "50.00")
        self.assertEqual(row["payment_method"], "card_debit")

        res = self.api.get(f"/api/sales/folios/{self.folio}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["lines"]), 1)
        self.assertEqual(res.data["lines"][0]["sku"], "DES-010")

    def test_unknown_folio(self):
        self.api.force_authenticate(self.seller)
        res = self.api.get("/api/sales/folios/99999/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "FOLIO_NOT_FOUND")

    def test_seller_cannot_cancel(self):
        self.api.force_authenticate(self.seller)
        res = self.api.post(
            f"/api/sales/folios/{self.folio}/cancel/", {"reason": "Error"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Sale.objects.filter(is_cancelled=True).exists())

    def test_admin_cancel_is_idempotent(self):
        self.api.force_authenticate(self.admin)
        url = f"/api/sales/folios/{self.folio}/cancel/"

        res = self.api.post(url, {"reason": "Error de cobro"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["is_cancelled"])
        self.assertTrue(res.data["cancelled_now"])

        res = self.api.post(url, {"reason": "Error de cobro"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertFalse(res.data["cancelled_now"])

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 50)

    def test_date_edit_admin_only(self):
        url = f"/api/sales/folios/{self.folio}/date/"

        self.api.force_authenticate(self.seller)
        res = self.api.patch(url, {"date": "2024-05-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(self.admin)
        res = self.api.patch(url, {"date": "not-a-date"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.api.patch(url, {"date": "2024-05-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["date"].startswith("2024-05-01T12:00"))

    def test_line_quantity_edit(self):
        line = Sale.objects.get(folio=self.folio)

        self.api.force_authenticate(self.admin)
        res = self.api.patch(f"/api/sales/lines/{line.id}/quantity/", {"quantity": 4}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["quantity"], 4)
        self.assertEqual(res.data["amount"], "100.00")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 46)

    def test_cancelled_folio_edit_conflicts(self):
        self.api.force_authenticate(self.admin)
        self.api.post(f"/api/sales/folios/{self.folio}/cancel/", {"reason": "x"}, format="json")

        res = self.api.patch(f"/api/sales/folios/{self.folio}/client/", {"client_id": None}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "FOLIO_CANCELLED")
