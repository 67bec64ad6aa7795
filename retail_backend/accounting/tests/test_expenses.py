# accounting/tests/test_expenses.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models import CashMovement, Expense
from accounting.services.exceptions import (
    AccountingPermissionError,
    CashMovementError,
    ExpenseError,
)
from accounting.services.expense_service import (
    create_expense,
    delete_expense,
    record_cash_movement,
)

User = get_user_model()


class ExpenseServiceTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="exp_admin@example.com", password="password123", role="admin", name="Admin"
        )
        self.seller = User.objects.create_user(
            email="exp_seller@example.com", password="password123", role="seller"
        )

    def test_non_cash_expense_is_tagged(self):
        transfer = create_expense(
            actor=self.admin, description="Renta local", amount="3500", payment_method="transfer", type="fijo"
        )
        card = create_expense(actor=self.admin, description="Papelería", amount="120.50", payment_method="card")
        cash = create_expense(actor=self.admin, description="Garrafón", amount="45")

        self.assertEqual(transfer.description, "Renta local [Pago: Transferencia]")
        self.assertEqual(card.description, "Papelería [Pago: Tarjeta]")
        self.assertEqual(cash.description, "Garrafón")
        self.assertEqual(transfer.user_name, "Admin")

    def test_existing_tag_not_duplicated(self):
        expense = create_expense(
            actor=self.admin,
            description="Luz [Pago: Transferencia]",
            amount="800",
            payment_method="transfer",
        )
        self.assertEqual(expense.description, "Luz [Pago: Transferencia]")

    def test_past_date_stored_at_noon(self):
        day = timezone.localdate() - timedelta(days=3)
        expense = create_expense(actor=self.admin, description="Gas", amount="300", date=day)

        local = timezone.localtime(expense.date)
        self.assertEqual(local.date(), day)
        self.assertEqual((local.hour, local.minute), (12, 0))

    def test_today_uses_current_time(self):
        before = timezone.now()
        expense = create_expense(actor=self.admin, description="Agua", amount="20", date=timezone.localdate())
        self.assertGreaterEqual(expense.date, before)

    def test_validation(self):
        with self.assertRaises(ExpenseError):
            create_expense(actor=self.admin, description="Nada", amount="0")
        with self.assertRaises(ExpenseError):
            create_expense(actor=self.admin, description="   ", amount="10")
        with self.assertRaises(ExpenseError):
            create_expense(actor=self.admin, description="X", amount="10", payment_method="bitcoin")
        with self.assertRaises(ExpenseError):
            create_expense(actor=self.admin, description="X", amount="10", type="mensual")

        self.assertFalse(Expense.objects.exists())

    def test_requires_expenses_manage(self):
        with self.assertRaises(AccountingPermissionError):
            create_expense(actor=self.seller, description="X", amount="10")

        expense = create_expense(actor=self.admin, description="X", amount="10")
        with self.assertRaises(AccountingPermissionError):
            delete_expense(actor=self.seller, expense=expense)

        delete_expense(actor=self.admin, expense=expense)
        self.assertFalse(Expense.objects.exists())

    def test_cash_movements_are_append_only(self):
        movement = record_cash_movement(actor=self.admin, type="deposit", amount="500", description="Fondo")
        self.assertEqual(movement.signed_amount, Decimal("500.00"))

        withdrawal = record_cash_movement(actor=self.admin, type="withdrawal", amount="200")
        self.assertEqual(withdrawal.signed_amount, Decimal("-200.00"))

        with self.assertRaises(ValidationError):
            movement.delete()

        movement.amount = Decimal("1")
        with self.assertRaises(ValidationError):
            movement.save()

        with self.assertRaises(CashMovementError):
            record_cash_movement(actor=self.admin, type="deposit", amount="-5")
        with self.assertRaises(CashMovementError):
            record_cash_movement(actor=self.admin, type="transfer", amount="5")

        self.assertEqual(CashMovement.objects.count(), 2)


class ExpenseApiTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.admin = User.objects.create_user(
            email="exp_api_admin@example.com", password="password123", role="admin"
        )
        self.seller = User.objects.create_user(
            email="exp_api_seller@example.com", password="password123", role="seller"
        )
        self.reader = User.objects.create_user(
            email="exp_api_reader@example.com",
            password="password123",
            role="custom",
            permissions=["cashflow:read"],
        )

    def test_create_list_delete(self):
        self.api.force_authenticate(self.admin)

        res = self.api.post(
            "/api/accounting/expenses/",
            {"description": "Internet", "amount": "599.00", "payment_method": "card", "date": "2024-02-10"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["description"], "Internet [Pago: Tarjeta]")
        expense_id = res.data["id"]

        res = self.api.get("/api/accounting/expenses/", {"date_from": "2024-02-01", "date_to": "2024-02-28"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)

        res = self.api.delete(f"/api/accounting/expenses/{expense_id}/")
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)

    def test_bad_date(self):
        self.api.force_authenticate(self.admin)
        res = self.api.post(
            "/api/accounting/expenses/",
            {"description": "Internet", "amount": "10", "date": "ayer"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_permissions(self):
        self.api.force_authenticate(self.seller)
        self.assertEqual(self.api.get("/api/accounting/expenses/").status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(self.reader)
        self.assertEqual(self.api.get("/api/accounting/expenses/").status_code, status.HTTP_200_OK)
        res = self.api.post(
            "/api/accounting/cash-movements/",
            {"type": "deposit", "amount": "100"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(self.admin)
        res = self.api.post(
            "/api/accounting/cash-movements/",
            {"type": "deposit", "amount": "100", "description": "Fondo de caja"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["amount"], "100.00")

    def test_past_date_input_is_noon(self):
        self.api.force_authenticate(self.admin)
        res = self.api.post(
            "/api/accounting/expenses/",
            {"description": "Renta", "amount": "10", "date": "2024-02-10"},
            format="json",
        )
        expense = Expense.objects.get(pk=res.data["id"])
        self.assertEqual(timezone.localtime(expense.date).date(), date(2024, 2, 10))
        self.assertEqual(timezone.localtime(expense.date).hour, 12)
