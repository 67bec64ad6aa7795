# store/tests/test_settings.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from store.services.context import SettingsSnapshot, build_context
from store.services.settings_service import (
    StoreSettingsError,
    StoreSettingsPermissionError,
    get_store_settings,
    update_store_settings,
)

User = get_user_model()


class StoreSettingsServiceTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="store_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="store_seller@example.com", password="password123", role="seller"
        )

    def test_defaults(self):
        obj = get_store_settings()
        self.assertEqual(obj.medium_threshold, 6)
        self.assertEqual(obj.wholesale_threshold, 12)
        self.assertEqual(obj.loyalty_percentage, Decimal("1.00"))

    def test_update_and_snapshot(self):
        update_store_settings(actor=self.admin, wholesale_threshold=20, loyalty_percentage=Decimal("2.5"))

        ctx = build_context(self.seller)
        self.assertEqual(ctx.settings.wholesale_threshold, 20)
        self.assertEqual(ctx.settings.loyalty_percentage, Decimal("2.50"))

    def test_snapshot_is_frozen(self):
        snapshot = SettingsSnapshot.from_model(get_store_settings())
        update_store_settings(actor=self.admin, medium_threshold=3)
        self.assertEqual(snapshot.medium_threshold, 6)

    def test_invalid_thresholds_rejected(self):
        with self.assertRaises(StoreSettingsError):
            update_store_settings(actor=self.admin, medium_threshold=0)
        with self.assertRaises(StoreSettingsError):
            update_store_settings(actor=self.admin, medium_threshold=15, wholesale_threshold=12)
        with self.assertRaises(StoreSettingsError):
            update_store_settings(actor=self.admin, loyalty_percentage=Decimal("101"))

        self.assertEqual(get_store_settings().medium_threshold, 6)

    def test_seller_cannot_update(self):
        with self.assertRaises(StoreSettingsPermissionError):
            update_store_settings(actor=self.seller, company_name="Otra")


class StoreSettingsApiTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.admin = User.objects.create_user(
            email="store_api_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="store_api_seller@example.com", password="password123", role="seller"
        )

    def test_any_staff_can_read(self):
        self.api.force_authenticate(self.seller)
        res = self.api.get("/api/store/settings/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["wholesale_threshold"], 12)

    def test_patch_requires_permission(self):
        self.api.force_authenticate(self.seller)
        res = self.api.patch("/api/store/settings/", {"company_name": "X"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(self.admin)
        res = self.api.patch("/api/store/settings/", {"company_name": "Limpieza Total"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["company_name"], "Limpieza Total")

    def test_patch_invalid_thresholds(self):
        self.api.force_authenticate(self.admin)
        res = self.api.patch(
            "/api/store/settings/",
            {"medium_threshold": 30},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_SETTINGS")
