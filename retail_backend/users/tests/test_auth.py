# users/tests/test_auth.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()


class AuthTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.admin = User.objects.create_user(
            email="auth_admin@example.com",
            username="jefa",
            password="password123",
            role="admin",
            name="Jefa de Tienda",
        )
        self.seller = User.objects.create_user(
            username="caja1",
            password="password123",
            role="seller",
        )

    def test_login_with_username_or_email(self):
        for identifier in ("jefa", "auth_admin@example.com"):
            res = self.api.post(
                "/api/auth/login/",
                {"identifier": identifier, "password": "password123"},
                format="json",
            )
            self.assertEqual(res.status_code, status.HTTP_200_OK)
            self.assertIn("access", res.data)
            self.assertEqual(res.data["name"], "Jefa de Tienda")
            self.assertIn("sales:cancel", res.data["permissions"])

    def test_bad_credentials(self):
        res = self.api.post(
            "/api/auth/login/",
            {"identifier": "caja1", "password": "wrong"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_lists_effective_permissions(self):
        self.api.force_authenticate(self.seller)
        res = self.api.get("/api/auth/me/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("sales:create", res.data["permissions"])
        self.assertNotIn("sales:cancel", res.data["permissions"])

    def test_register_requires_users_manage(self):
        payload = {"username": "caja2", "password": "password123", "role": "seller"}

        self.api.force_authenticate(self.seller)
        res = self.api.post("/api/auth/register/", payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(self.admin)
        res = self.api.post("/api/auth/register/", payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.filter(username="caja2").exists())

    def test_custom_role_uses_explicit_permissions(self):
        user = User.objects.create_user(
            username="inventario",
            password="password123",
            role="custom",
            permissions=["products:read", "products:manage"],
        )
        self.api.force_authenticate(user)
        res = self.api.get("/api/auth/me/")
        self.assertEqual(sorted(res.data["permissions"]), ["products:manage", "products:read"])
