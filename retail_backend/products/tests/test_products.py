# products/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from products.models import Product, StockMovement
from store.models import StoreSettings

User = get_user_model()


def _product_payload(**overrides):
    data = {
        "sku": "det-002",
        "name": "Detergente 5L",
        "category": "Limpieza",
        "unit": "Galón",
        "cost": "90.00",
        "price_retail": "150.00",
        "price_medium": "135.00",
        "price_wholesale": "120.00",
        "stock_initial": 25,
    }
    data.update(overrides)
    return data


class ProductModelTests(TestCase):
    """
    GUARANTEES:
    - SKU uniqueness is enforced (stored upper-case)
    """

    def test_sku_is_upper_cased_and_unique(self):
        p = Product.objects.create(
            name="Cloro",
            sku=" clo-1 ",
            price_retail=Decimal("15.00"),
            price_medium=Decimal("13.00"),
            price_wholesale=Decimal("11.00"),
        )
        self.assertEqual(p.sku, "CLO-1")

        with self.assertRaises(IntegrityError):
            Product.objects.create(
                name="Cloro dup",
                sku="CLO-1",
                price_retail=Decimal("15.00"),
                price_medium=Decimal("13.00"),
                price_wholesale=Decimal("11.00"),
            )


class ProductAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="pass1234", role="admin"
        )
        self.seller = User.objects.create_user(
            email="seller@example.com", password="pass1234", role="seller"
        )

    def test_admin_creates_product_with_initial_stock_movement(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(reverse("products-list"), _product_payload(), format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["sku"], "DET-002")
        self.assertEqual(res.data["stock_current"], 25)

        product = Product.objects.get(sku="DET-002")
        mv = product.stock_movements.get()
        self.assertEqual(mv.reason, StockMovement.Reason.INITIAL)
        self.assertEqual(mv.quantity, 25)

    def test_stock_current_is_read_only(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("products-list"),
            _product_payload(stock_current=999),
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["stock_current"], 25)

    def test_seller_can_read_but_not_write(self):
        self.client.force_authenticate(self.seller)

        self.assertEqual(
            self.client.get(reverse("products-list")).status_code,
            status.HTTP_200_OK,
        )
        self.assertEqual(
            self.client.post(reverse("products-list"), _product_payload(), format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )

    def test_quote_uses_current_thresholds(self):
        StoreSettings.objects.create(medium_threshold=3, wholesale_threshold=10)
        product = Product.objects.create(
            sku="Q-1",
            name="Quote",
            price_retail=Decimal("10.00"),
            price_medium=Decimal("8.00"),
            price_wholesale=Decimal("6.00"),
        )
        self.client.force_authenticate(self.seller)

        res = self.client.get(reverse("products-quote", args=[product.id]), {"quantity": 4})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["tier"], "medium")
        self.assertEqual(Decimal(res.data["amount"]), Decimal("32.00"))
