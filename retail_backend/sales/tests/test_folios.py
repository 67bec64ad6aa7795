# sales/tests/test_folios.py

"""
Folio lifecycle tests.

confirm -> cancel (restock + loyalty reversal)
admin edits: date / client / line quantity
"""

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from django.test import TestCase
from django.utils import timezone

from clients.models import GENERAL_CLIENT_ID, Client
from loyalty.models import LoyaltyTransaction
from loyalty.services.ledger import balance
from pos.models import Cart
from pos.services.cart_service import CartInactiveError, add_line, get_active_cart
from products.models import Product, StockMovement
from sales.models import FolioSequence, Sale
from sales.services.checkout_orchestrator import checkout_cart
from sales.services.folio_service import (
    EmptyBatchError,
    FolioError,
    FolioPermissionError,
    FolioStateError,
    SettlementMismatchError,
    allocate_folio,
    cancel_folio,
    confirm_batch,
    folio_summary,
    list_folios,
    update_folio_client,
    update_folio_date,
    update_line_quantity,
)
from sales.services.settlement import Settlement
from store.services.context import PosContext, SettingsSnapshot

User = get_user_model()


class FolioTestBase(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="folio_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="folio_seller@example.com", password="password123", role="seller"
        )

        snapshot = SettingsSnapshot(loyalty_percentage=Decimal("5"))
        self.seller_ctx = PosContext(actor=self.seller, settings=snapshot)
        self.admin_ctx = PosContext(actor=self.admin, settings=snapshot)

        self.products = [
            Product.objects.create(
                sku=f"LIM-{i:03d}",
                name=f"Limpiador {i}",
                unit="Litro",
                price_retail=Decimal("100.00"),
                price_medium=Decimal("90.00"),
                price_wholesale=Decimal("80.00"),
                stock_initial=10,
                stock_current=10,
            )
            for i in range(1, 4)
        ]
        self.client_obj = Client.objects.create(
            name="María López", phone="5533334444", wallet_status=Client.WALLET_ACTIVE
        )

    def _checkout(self, *, client=None, quantity=1, method="cash"):
        cart = get_active_cart(ctx=self.seller_ctx)
        cart.client = client
        cart.save(update_fields=["client"])
        for product in self.products:
            add_line(ctx=self.seller_ctx, cart=cart, product=product, quantity=quantity)
        return checkout_cart(ctx=self.seller_ctx, cart=cart, payment_method=method)


class ConfirmAndCancelTests(FolioTestBase):
    def test_confirm_earns_on_total(self):
        confirmed = self._checkout(client=self.client_obj)

        self.assertEqual(confirmed.folio, "00001")
        self.assertEqual(confirmed.total, Decimal("300.00"))
        self.assertEqual(Sale.objects.filter(folio="00001").count(), 3)

        earn = LoyaltyTransaction.objects.get(folio="00001", source=LoyaltyTransaction.SOURCE_SALE_EARN)
        self.assertEqual(earn.amount, Decimal("15.00"))
        self.assertEqual(earn.rate, Decimal("5.00"))
        self.assertEqual(earn.description, "Compra Folio 00001")

        for product in self.products:
            product.refresh_from_db()
            self.assertEqual(product.stock_current, 9)

    def test_cancel_restocks_and_reverses_points(self):
        confirmed = self._checkout(client=self.client_obj)

        result = cancel_folio(ctx=self.admin_ctx, folio=confirmed.folio, reason="Error de captura")
        self.assertTrue(result.cancelled)
        self.assertEqual(result.restocked_lines, 3)

        lines = Sale.objects.filter(folio=confirmed.folio)
        self.assertEqual(lines.count(), 3)
        for line in lines:
            self.assertTrue(line.is_cancelled)
            self.assertEqual(line.amount, Decimal("100.00"))
            self.assertEqual(line.quantity, 1)
            self.assertEqual(line.correction_note, "CANCELADO: Error de captura")

        reversal = LoyaltyTransaction.objects.get(
            folio=confirmed.folio, source=LoyaltyTransaction.SOURCE_CANCEL_REVERSAL
        )
        self.assertEqual(reversal.amount, Decimal("-15.00"))
        self.assertEqual(reversal.type, LoyaltyTransaction.TYPE_ADJUSTMENT)
        self.assertEqual(balance(self.client_obj), Decimal("0.00"))

        for product in self.products:
            product.refresh_from_db()
            self.assertEqual(product.stock_current, 10)

        self.assertEqual(
            StockMovement.objects.filter(
                folio=confirmed.folio, reason=StockMovement.Reason.CANCELLATION
            ).count(),
            3,
        )

    def test_second_cancel_is_noop(self):
        confirmed = self._checkout(client=self.client_obj)
        cancel_folio(ctx=self.admin_ctx, folio=confirmed.folio, reason="Duplicado")

        again = cancel_folio(ctx=self.admin_ctx, folio=confirmed.folio, reason="Duplicado")
        self.assertFalse(again.cancelled)

        self.assertEqual(
            LoyaltyTransaction.objects.filter(
                folio=confirmed.folio, source=LoyaltyTransaction.SOURCE_CANCEL_REVERSAL
            ).count(),
            1,
        )
        self.products[0].refresh_from_db()
        self.assertEqual(self.products[0].stock_current, 10)

    def test_cancel_requires_permission_and_reason(self):
        confirmed = self._checkout()

        with self.assertRaises(FolioPermissionError):
            cancel_folio(ctx=self.seller_ctx, folio=confirmed.folio, reason="x")

        with self.assertRaises(FolioError):
            cancel_folio(ctx=self.admin_ctx, folio=confirmed.folio, reason="   ")

    def test_cancel_refunds_wallet_redeem(self):
        from loyalty.services.ledger import KIND_DEPOSIT, post_manual_entry

        post_manual_entry(
            ctx=self.admin_ctx,
            client=self.client_obj,
            kind=KIND_DEPOSIT,
            amount=Decimal("500"),
            description="Saldo",
        )
        confirmed = self._checkout(client=self.client_obj, method="wallet")
        # 500 - 300 + 15
        self.assertEqual(balance(self.client_obj), Decimal("215.00"))

        cancel_folio(ctx=self.admin_ctx, folio=confirmed.folio, reason="Cliente devolvió")
        self.assertEqual(balance(self.client_obj), Decimal("500.00"))

    def test_general_client_sale_has_no_ledger_entries(self):
        confirmed = self._checkout()

        summary = folio_summary(confirmed.folio)
        self.assertEqual(str(summary.client_id), str(GENERAL_CLIENT_ID))
        self.assertEqual(summary.client_name, "PÚBLICO GENERAL")
        self.assertFalse(LoyaltyTransaction.objects.exists())


class ConfirmGuardTests(FolioTestBase):
    def test_same_cart_cannot_check_out_twice(self):
        cart = get_active_cart(ctx=self.seller_ctx)
        add_line(ctx=self.seller_ctx, cart=cart, product=self.products[0], quantity=2)

        first = Cart.objects.get(pk=cart.pk)
        second = Cart.objects.get(pk=cart.pk)

        checkout_cart(ctx=self.seller_ctx, cart=first, payment_method="cash")
        with self.assertRaises(CartInactiveError):
            checkout_cart(ctx=self.seller_ctx, cart=second, payment_method="cash")

        self.assertEqual(Sale.objects.values("folio").distinct().count(), 1)
        self.products[0].refresh_from_db()
        self.assertEqual(self.products[0].stock_current, 8)

    def test_settlement_total_must_match_lines(self):
        cart = get_active_cart(ctx=self.seller_ctx)
        add_line(ctx=self.seller_ctx, cart=cart, product=self.products[0], quantity=1)
        lines = list(cart.items.select_related("product"))

        with self.assertRaises(SettlementMismatchError):
            with transaction.atomic():
                confirm_batch(
                    ctx=self.seller_ctx,
                    lines=lines,
                    client=self.client_obj,
                    settlement=Settlement(total=Decimal("99.98"), payment_method="cash"),
                )

        self.assertFalse(Sale.objects.exists())
        self.assertFalse(StockMovement.objects.filter(reason=StockMovement.Reason.SALE).exists())
        self.assertFalse(LoyaltyTransaction.objects.exists())

        # no folio number was consumed
        confirmed = checkout_cart(ctx=self.seller_ctx, cart=cart, payment_method="cash")
        self.assertEqual(confirmed.folio, "00001")

    def test_empty_batch_rejected(self):
        with self.assertRaises(EmptyBatchError):
            confirm_batch(
                ctx=self.seller_ctx,
                lines=[],
                client=None,
                settlement=Settlement(total=Decimal("0.00"), payment_method="cash"),
            )
        self.assertFalse(Sale.objects.exists())

    def test_cancel_touches_only_its_own_folio(self):
        first = self._checkout(client=self.client_obj)
        second = self._checkout()

        result = cancel_folio(ctx=self.admin_ctx, folio=first.folio, reason="Duplicado")
        self.assertEqual(result.restocked_lines, 3)

        self.assertFalse(Sale.objects.filter(folio=second.folio, is_cancelled=True).exists())
        self.assertEqual(Sale.objects.filter(folio=first.folio, is_cancelled=True).count(), 3)
        for product in self.products:
            product.refresh_from_db()
            self.assertEqual(product.stock_current, 9)


class FolioAllocationTests(FolioTestBase):
    def test_sequential_zero_padded(self):
        first = self._checkout()
        second = self._checkout()
        self.assertEqual((first.folio, second.folio), ("00001", "00002"))

    def test_counter_seeds_from_existing_rows(self):
        confirmed = self._checkout()
        Sale.objects.filter(folio=confirmed.folio).update(folio="00041")
        FolioSequence.objects.filter(pk=1).update(last_value=0)

        with transaction.atomic():
            self.assertEqual(allocate_folio(), "00042")


class AdminEditTests(FolioTestBase):
    def test_date_edit_stores_noon(self):
        confirmed = self._checkout()

        updated = update_folio_date(ctx=self.admin_ctx, folio=confirmed.folio, new_date=date(2024, 3, 10))
        self.assertEqual(updated, 3)

        for line in Sale.objects.filter(folio=confirmed.folio):
            local = timezone.localtime(line.date)
            self.assertEqual(local.date(), date(2024, 3, 10))
            self.assertEqual(local.hour, 12)

    def test_client_edit_has_no_loyalty_effect(self):
        confirmed = self._checkout()

        update_folio_client(ctx=self.admin_ctx, folio=confirmed.folio, client=self.client_obj)

        names = set(Sale.objects.filter(folio=confirmed.folio).values_list("client_name", flat=True))
        self.assertEqual(names, {"María López"})
        self.assertFalse(LoyaltyTransaction.objects.exists())

    def test_line_quantity_edit_moves_stock_by_delta(self):
        confirmed = self._checkout(client=self.client_obj)
        line = Sale.objects.filter(folio=confirmed.folio).order_by("sku").first()

        line = update_line_quantity(ctx=self.admin_ctx, sale=line, quantity=3)
        self.assertEqual(line.quantity, 3)
        self.assertEqual(line.amount, Decimal("300.00"))

        product = Product.objects.get(pk=line.product_id)
        self.assertEqual(product.stock_current, 7)

        movement = StockMovement.objects.get(folio=confirmed.folio, reason=StockMovement.Reason.SALE_EDIT)
        self.assertEqual(movement.quantity, -2)

        # loyalty ledger untouched
        self.assertEqual(LoyaltyTransaction.objects.filter(folio=confirmed.folio).count(), 1)

    def test_edits_are_admin_only(self):
        confirmed = self._checkout()

        with self.assertRaises(FolioPermissionError):
            update_folio_date(ctx=self.seller_ctx, folio=confirmed.folio, new_date=date(2024, 1, 1))
        with self.assertRaises(FolioPermissionError):
            update_folio_client(ctx=self.seller_ctx, folio=confirmed.folio, client=None)

    def test_cancelled_folio_is_not_editable(self):
        confirmed = self._checkout()
        cancel_folio(ctx=self.admin_ctx, folio=confirmed.folio, reason="Prueba")

        with self.assertRaises(FolioStateError):
            update_folio_date(ctx=self.admin_ctx, folio=confirmed.folio, new_date=date(2024, 1, 1))

        line = Sale.objects.filter(folio=confirmed.folio).first()
        with self.assertRaises(FolioStateError):
            update_line_quantity(ctx=self.admin_ctx, sale=line, quantity=2)


class FolioListingTests(FolioTestBase):
    def test_list_groups_lines_and_hides_cancelled_on_request(self):
        first = self._checkout()
        second = self._checkout(client=self.client_obj)
        cancel_folio(ctx=self.admin_ctx, folio=first.folio, reason="Prueba")

        rows = list_folios()
        self.assertEqual([r.folio for r in rows], [second.folio, first.folio])
        self.assertEqual(rows[0].total, Decimal("300.00"))
        self.assertEqual(rows[0].line_count, 3)
        self.assertTrue(rows[1].is_cancelled)

        active_only = list_folios(include_cancelled=False)
        self.assertEqual([r.folio for r in active_only], [second.folio])

        by_client = list_folios(client=self.client_obj)
        self.assertEqual([r.folio for r in by_client], [second.folio])
