# pos/tests.py

"""
POS TESTS

Run with:
    python manage.py test pos -v 2

Checkout touches:
POS -> Settlement -> Folio (sales) -> Stock ledger -> Loyalty ledger

Tests seed:
- products with three tier prices and stock
- clients with wallets in different states
- wallet balance through manual ledger entries
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from clients.models import Client
from loyalty.models import LoyaltyTransaction
from loyalty.services.ledger import KIND_DEPOSIT, balance, post_manual_entry
from pos.models import Cart, CartItem
from pos.services.cart_service import (
    CartError,
    add_line,
    get_active_cart,
    remove_line,
    set_cart_client,
    update_line_quantity,
)
from products.models import Product
from sales.models import Sale
from store.services.context import PosContext, SettingsSnapshot, build_context

User = get_user_model()


def _product(sku: str, *, retail="10.00", medium="8.00", wholesale="6.00", stock=100) -> Product:
    return Product.objects.create(
        sku=sku,
        name=f"Producto {sku}",
        unit="Litro",
        price_retail=Decimal(retail),
        price_medium=Decimal(medium),
        price_wholesale=Decimal(wholesale),
        stock_initial=stock,
        stock_current=stock,
    )


class CartServiceTests(TestCase):
    def setUp(self):
        self.seller = User.objects.create_user(
            email="pos_seller@example.com",
            password="password123",
            role="seller",
        )
        self.ctx = PosContext(
            actor=self.seller,
            settings=SettingsSnapshot(medium_threshold=6, wholesale_threshold=12),
        )
        self.product = _product("CLO-001")
        self.cart = get_active_cart(ctx=self.ctx)

    def test_one_active_cart_per_user(self):
        self.assertEqual(get_active_cart(ctx=self.ctx).pk, self.cart.pk)
        self.assertEqual(Cart.objects.filter(user=self.seller, is_active=True).count(), 1)

    def test_same_sku_and_flag_merges_quantities_and_amounts(self):
        add_line(ctx=self.ctx, cart=self.cart, product=self.product, quantity=5)
        item = add_line(ctx=self.ctx, cart=self.cart, product=self.product, quantity=1)

        self.assertEqual(CartItem.objects.filter(cart=self.cart).count(), 1)
        self.assertEqual(item.quantity, 6)
        self.assertEqual(item.amount, Decimal("60.00"))

    def test_correction_is_separate_negative_line(self):
        add_line(ctx=self.ctx, cart=self.cart, product=self.product, quantity=3)
        correction = add_line(
            ctx=self.ctx,
            cart=self.cart,
            product=self.product,
            quantity=2,
            is_correction=True,
            correction_note="Devolución",
        )

        self.assertEqual(CartItem.objects.filter(cart=self.cart).count(), 2)
        self.assertEqual(correction.quantity, -2)
        self.assertEqual(correction.amount, Decimal("-20.00"))
        self.assertEqual(self.cart.total_amount, Decimal("10.00"))

    def test_update_quantity_re_resolves_tier_from_current_prices(self):
        item = add_line(ctx=self.ctx, cart=self.cart, product=self.product, quantity=5)
        self.assertEqual(item.price_type, "retail")

        item = update_line_quantity(ctx=self.ctx, item=item, quantity=6)
        self.assertEqual(item.price_type, "medium")
        self.assertEqual(item.unit_price, Decimal("8.00"))
        self.assertEqual(item.amount, Decimal("48.00"))

        Product.objects.filter(pk=self.product.pk).update(price_wholesale=Decimal("5.50"))
        item = update_line_quantity(ctx=self.ctx, item=item, quantity=12)
        self.assertEqual(item.price_type, "wholesale")
        self.assertEqual(item.amount, Decimal("66.00"))

    def test_zero_quantity_rejected(self):
        with self.assertRaises(CartError):
            add_line(ctx=self.ctx, cart=self.cart, product=self.product, quantity=0)

    def test_remove_and_client_selection_have_no_side_effects(self):
        item = add_line(ctx=self.ctx, cart=self.cart, product=self.product, quantity=2)
        remove_line(item=item)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 100)
        self.assertTrue(self.cart.is_empty)

        client = Client.objects.create(name="Ana Ruiz")
        set_cart_client(cart=self.cart, client=client)
        self.assertEqual(self.cart.client, client)

        set_cart_client(cart=self.cart, client=None)
        self.assertIsNone(self.cart.client)


class CheckoutApiTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.admin = User.objects.create_user(
            email="pos_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="pos_api_seller@example.com", password="password123", role="seller"
        )
        self.api.force_authenticate(self.seller)

        self.product = _product("JAB-040", retail="40.00", medium="35.00", wholesale="30.00", stock=20)
        self.client_obj = Client.objects.create(
            name="Laura Gómez", phone="5511112222", wallet_status=Client.WALLET_ACTIVE
        )

    def _deposit(self, amount):
        post_manual_entry(
            ctx=build_context(self.admin),
            client=self.client_obj,
            kind=KIND_DEPOSIT,
            amount=Decimal(amount),
            description="Saldo inicial",
        )

    def _fill_cart(self, quantity=5, client=True):
        res = self.api.post(
            "/api/pos/cart/items/add/",
            {"product_id": str(self.product.id), "quantity": quantity},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        if client:
            res = self.api.put(
                "/api/pos/cart/client/", {"client_id": str(self.client_obj.id)}, format="json"
            )
            self.assertEqual(res.status_code, status.HTTP_200_OK)
        return res

    def test_cash_checkout_creates_folio(self):
        res = self._fill_cart(client=False)
        self.assertEqual(res.data["total_amount"], "200.00")

        res = self.api.post("/api/pos/checkout/", {"payment_method": "cash"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["folio"], "00001")
        self.assertEqual(res.data["client_name"], "PÚBLICO GENERAL")
        self.assertEqual(Decimal(res.data["total"]), Decimal("200.00"))

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 15)
        self.assertFalse(Cart.objects.get(user=self.seller, is_active=False).is_active)
        self.assertFalse(LoyaltyTransaction.objects.exists())

    def test_split_with_wallet_succeeds(self):
        self._deposit("50")
        self._fill_cart()

        res = self.api.post(
            "/api/pos/checkout/",
            {"payment_method": "multiple", "splits": {"cash": "150.00", "wallet": "50.00", "transfer": "0"}},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["payment_method"], "multiple")
        self.assertEqual(res.data["payment_details"], {"cash": "150.00", "wallet": "50.00"})

        folio = res.data["folio"]
        redeem = LoyaltyTransaction.objects.get(folio=folio, source=LoyaltyTransaction.SOURCE_SALE_REDEEM)
        self.assertEqual(redeem.amount, Decimal("-50.00"))

        # 50 deposited - 50 redeemed + 1% of 200 earned
        self.assertEqual(balance(self.client_obj), Decimal("2.00"))

    def test_wallet_shortfall_returns_proposal_and_writes_nothing(self):
        self._deposit("30")
        self._fill_cart()

        res = self.api.post(
            "/api/pos/cart/split-entry/",
            {"splits": {"cash": "150.00"}, "method": "wallet", "amount": "50.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["accepted"], "30.00")
        self.assertEqual(res.data["shortfall"], "20.00")

        res = self.api.post(
            "/api/pos/checkout/",
            {"payment_method": "multiple", "splits": {"cash": "150.00", "wallet": "50.00"}},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_WALLET_BALANCE")
        self.assertEqual(res.data["proposal"]["splits"], {"wallet": "30.00", "cash": "170.00"})
        self.assertEqual(res.data["proposal"]["shortfall"], "20.00")

        self.assertFalse(Sale.objects.exists())
        self.assertEqual(balance(self.client_obj), Decimal("30.00"))

        # caller accepts the proposal explicitly
        res = self.api.post(
            "/api/pos/checkout/",
            {"payment_method": "multiple", "splits": res.data["proposal"]["splits"]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

    def test_pending_wallet_cannot_pay(self):
        self._deposit("500")
        Client.objects.filter(pk=self.client_obj.pk).update(wallet_status=Client.WALLET_PENDING)
        self._fill_cart()

        res = self.api.post("/api/pos/checkout/", {"payment_method": "wallet"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "WALLET_NOT_ACTIVE")
        self.assertFalse(Sale.objects.exists())

    def test_split_mismatch_rejected(self):
        self._fill_cart(client=False)

        res = self.api.post(
            "/api/pos/checkout/",
            {"payment_method": "multiple", "splits": {"cash": "150.00", "card_debit": "49.98"}},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "SPLIT_MISMATCH")

    def test_insufficient_stock_rolls_back(self):
        self._fill_cart(quantity=25, client=False)

        res = self.api.post("/api/pos/checkout/", {"payment_method": "cash"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_STOCK")

        self.assertFalse(Sale.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_current, 20)
        self.assertTrue(Cart.objects.get(user=self.seller).is_active)

    def test_empty_cart(self):
        res = self.api.post("/api/pos/checkout/", {"payment_method": "cash"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "EMPTY_CART")
