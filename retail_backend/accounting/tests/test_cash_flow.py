# accounting/tests/test_cash_flow.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models import Expense
from accounting.services.cashflow_service import cash_flow_report
from accounting.services.exceptions import AccountingPermissionError, ReportRangeError
from accounting.services.expense_service import create_expense, record_cash_movement
from clients.models import GENERAL_CLIENT_ID, Client
from products.models import Product
from sales.models import Sale

User = get_user_model()


class CashFlowReportTests(TestCase):
    """
    Income per channel          cash 180 | card 100 | transfer 20 | wallet 50
    Expenses                    cash 40  | card 15  | transfer 25 + legacy 100
    Drawer                      +200 deposit, -70 withdrawal
    net_cash = 180 + 200 - 40 - 70 = 270
    """

    def setUp(self):
        self.admin = User.objects.create_user(
            email="cf_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="cf_seller@example.com", password="password123", role="seller"
        )
        self.product = Product.objects.create(
            sku="CF-001",
            name="Multiusos",
            price_retail=Decimal("10.00"),
            price_medium=Decimal("9.00"),
            price_wholesale=Decimal("8.00"),
        )
        self.general = Client.objects.get(pk=GENERAL_CLIENT_ID)

        self._sale("00001", "100.00", "cash")
        self._sale("00001", "50.00", "cash")
        self._sale("00002", "80.00", "card_credit")
        self._sale("00003", "20.00", "card")
        split = {"cash": "30.00", "wallet": "50.00", "transfer": "20.00"}
        self._sale("00004", "60.00", "multiple", details=split)
        self._sale("00004", "40.00", "multiple", details=split)
        self._sale("00005", "500.00", "cash", cancelled=True)

        create_expense(actor=self.admin, description="Luz", amount="40")
        create_expense(actor=self.admin, description="Limpieza", amount="15", payment_method="card")
        create_expense(actor=self.admin, description="Flete", amount="25", payment_method="transfer")
        Expense.objects.create(description="Renta [Pago: Transferencia]", amount=Decimal("100"))

        record_cash_movement(actor=self.admin, type="deposit", amount="200", description="Fondo")
        record_cash_movement(actor=self.admin, type="withdrawal", amount="70", description="Depósito banco")

    def _sale(self, folio, amount, method, *, details=None, cancelled=False):
        return Sale.objects.create(
            folio=folio,
            product=self.product,
            sku=self.product.sku,
            product_name=self.product.name,
            quantity=1,
            unit_price=Decimal(amount),
            amount=Decimal(amount),
            client=self.general,
            client_name=self.general.name,
            payment_method=method,
            payment_details=details,
            is_cancelled=cancelled,
        )

    def test_channels_and_net_cash(self):
        report = cash_flow_report()

        self.assertEqual(report.cash_in, Decimal("180.00"))
        self.assertEqual(report.card_in, Decimal("100.00"))
        self.assertEqual(report.transfer_in, Decimal("20.00"))
        self.assertEqual(report.wallet_in, Decimal("50.00"))
        self.assertEqual(report.total_income, Decimal("350.00"))

        self.assertEqual(report.cash_expenses, Decimal("40.00"))
        self.assertEqual(report.card_out, Decimal("15.00"))
        self.assertEqual(report.transfer_out, Decimal("125.00"))

        self.assertEqual(report.deposits, Decimal("200.00"))
        self.assertEqual(report.withdrawals, Decimal("70.00"))
        self.assertEqual(report.net_cash, Decimal("270.00"))

    def test_entries_include_cancelled_folios_flagged(self):
        report = cash_flow_report()

        sales = [e for e in report.entries if e["entry_type"] == "sale"]
        self.assertEqual(len(sales), 5)
        cancelled = [e for e in sales if e["is_cancelled"]]
        self.assertEqual([e["concept"] for e in cancelled], ["Venta Folio 00005"])
        self.assertEqual(len(report.entries), 5 + 4 + 2)

    def test_range_outside_data_is_empty(self):
        past = timezone.localdate() - timedelta(days=30)
        report = cash_flow_report(date_from=past, date_to=past)

        self.assertEqual(report.total_income, Decimal("0.00"))
        self.assertEqual(report.net_cash, Decimal("0.00"))
        self.assertEqual(report.entries, [])

    def test_invalid_range_and_permission(self):
        today = timezone.localdate()
        with self.assertRaises(ReportRangeError):
            cash_flow_report(date_from=today, date_to=today - timedelta(days=1))

        with self.assertRaises(AccountingPermissionError):
            cash_flow_report(actor=self.seller)

    def test_api(self):
        api = APIClient()

        api.force_authenticate(self.seller)
        self.assertEqual(api.get("/api/accounting/cash-flow/").status_code, status.HTTP_403_FORBIDDEN)

        api.force_authenticate(self.admin)
        res = api.get("/api/accounting/cash-flow/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["income"]["cash"], "180.00")
        self.assertEqual(res.data["net_cash"], "270.00")
