# clients/tests/test_clients.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from clients.models import GENERAL_CLIENT_ID, Client
from clients.services.client_service import (
    ClientPermissionError,
    DuplicatePhoneError,
    ReservedClientError,
    WalletActivationError,
    approve_wallet_activation,
    create_client,
    delete_client,
    request_wallet_activation,
    update_client,
)
from loyalty.services.ledger import KIND_DEPOSIT, post_manual_entry
from store.services.context import build_context

User = get_user_model()


class ClientServiceTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="clients_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="clients_seller@example.com", password="password123", role="seller"
        )

    def test_general_client_exists(self):
        general = Client.objects.get(pk=GENERAL_CLIENT_ID)
        self.assertEqual(general.name, "PÚBLICO GENERAL")
        self.assertTrue(general.is_general)

    def test_create_forces_inactive_and_normalizes_phone(self):
        client = create_client(actor=self.admin, name="Ana Ruiz", phone="(55) 1234-5678")
        self.assertEqual(client.phone, "5512345678")
        self.assertEqual(client.wallet_status, Client.WALLET_INACTIVE)

    def test_create_rejects_duplicate_phone_and_reserved_name(self):
        create_client(actor=self.admin, name="Ana Ruiz", phone="5512345678")

        with self.assertRaises(DuplicatePhoneError):
            create_client(actor=self.admin, name="Otra Ana", phone="55 1234 5678")

        with self.assertRaises(ReservedClientError):
            create_client(actor=self.admin, name="Publico General Sucursal")

    def test_seller_cannot_create(self):
        with self.assertRaises(ClientPermissionError):
            create_client(actor=self.seller, name="Ana Ruiz")

    def test_general_client_cannot_be_deleted(self):
        with self.assertRaises(ReservedClientError):
            delete_client(actor=self.admin, client=Client.objects.get(pk=GENERAL_CLIENT_ID))

    def test_rename(self):
        client = create_client(actor=self.admin, name="Ana Ruiz")
        client = update_client(actor=self.admin, client=client, name="Ana Ruiz Méndez")
        self.assertEqual(client.name, "Ana Ruiz Méndez")

    def test_wallet_activation_flow(self):
        client = create_client(actor=self.admin, name="Ana Ruiz", phone="5512345678")

        client = request_wallet_activation(actor=self.seller, client=client)
        self.assertEqual(client.wallet_status, Client.WALLET_PENDING)

        with self.assertRaises(ClientPermissionError):
            approve_wallet_activation(actor=self.seller, client=client)

        client = approve_wallet_activation(actor=self.admin, client=client)
        self.assertEqual(client.wallet_status, Client.WALLET_ACTIVE)

    def test_wallet_activation_rules(self):
        with self.assertRaises(WalletActivationError):
            request_wallet_activation(
                actor=self.admin, client=Client.objects.get(pk=GENERAL_CLIENT_ID)
            )

        mostrador = create_client(actor=self.admin, name="Mostrador Norte", phone="5500000001")
        with self.assertRaises(WalletActivationError):
            request_wallet_activation(actor=self.admin, client=mostrador)

        short = create_client(actor=self.admin, name="Carlos Díaz", phone="12345")
        with self.assertRaises(WalletActivationError):
            request_wallet_activation(actor=self.admin, client=short)

        first = create_client(actor=self.admin, name="Rosa Vega", phone="5522223333")
        request_wallet_activation(actor=self.admin, client=first)

        second = create_client(actor=self.admin, name="Rosa Vega Hija")
        with self.assertRaises(WalletActivationError):
            request_wallet_activation(actor=self.admin, client=second, phone="5522223333")


class ClientApiTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.admin = User.objects.create_user(
            email="clients_api_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="clients_api_seller@example.com", password="password123", role="seller"
        )

    def test_create_and_duplicate_phone_conflict(self):
        self.api.force_authenticate(self.admin)

        res = self.api.post(
            "/api/clients/", {"name": "Ana Ruiz", "phone": "5512345678"}, format="json"
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["wallet_status"], "inactive")

        res = self.api.post(
            "/api/clients/", {"name": "Otra", "phone": "5512345678"}, format="json"
        )
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["error"]["code"], "DUPLICATE_PHONE")

    def test_seller_reads_but_cannot_write(self):
        self.api.force_authenticate(self.seller)

        self.assertEqual(self.api.get("/api/clients/").status_code, 200)
        res = self.api.post("/api/clients/", {"name": "Ana"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_wallet_endpoint(self):
        client = Client.objects.create(
            name="Ana Ruiz", phone="5512345678", wallet_status=Client.WALLET_ACTIVE
        )
        post_manual_entry(
            ctx=build_context(self.admin),
            client=client,
            kind=KIND_DEPOSIT,
            amount=Decimal("25"),
            description="Alta",
        )

        self.api.force_authenticate(self.seller)
        res = self.api.get(f"/api/clients/{client.id}/wallet/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["balance"], "25.00")
        self.assertEqual(len(res.data["transactions"]), 1)

    def test_request_then_approve_wallet(self):
        client = Client.objects.create(name="Ana Ruiz", phone="5512345678")

        self.api.force_authenticate(self.seller)
        res = self.api.post(f"/api/clients/{client.id}/request-wallet/", {}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["wallet_status"], "pending")

        res = self.api.post(f"/api/clients/{client.id}/approve-wallet/", {}, format="json")
        self.assertEqual(res.status_code, 403)

        self.api.force_authenticate(self.admin)
        res = self.api.post(f"/api/clients/{client.id}/approve-wallet/", {}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["wallet_status"], "active")
