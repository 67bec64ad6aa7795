# accounting/models/expense.py

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

PAYMENT_TAG_TRANSFER = "[Pago: Transferencia]"
PAYMENT_TAG_CARD = "[Pago: Tarjeta]"


class Expense(models.Model):
    """
    Money paid out of the business (rent, supplies, services...).

    Rule:
    - description carries the payment tag for non-cash methods
      (" [Pago: Transferencia]" / " [Pago: Tarjeta]"), so rows written
      before payment_method existed still classify in the cash-flow report
    - amount is always positive; the report decides the sign
    """

    PAYMENT_CASH = "cash"
    PAYMENT_TRANSFER = "transfer"
    PAYMENT_CARD = "card"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Efectivo"),
        (PAYMENT_TRANSFER, "Transferencia"),
        (PAYMENT_CARD, "Tarjeta"),
    ]

    PAYMENT_TAGS = {
        PAYMENT_TRANSFER: PAYMENT_TAG_TRANSFER,
        PAYMENT_CARD: PAYMENT_TAG_CARD,
    }

    TYPE_FIXED = "fijo"
    TYPE_VARIABLE = "variable"

    TYPES = [
        (TYPE_FIXED, "Fijo"),
        (TYPE_VARIABLE, "Variable"),
    ]

    date = models.DateTimeField(default=timezone.now)

    description = models.CharField(max_length=255)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    type = models.CharField(max_length=10, choices=TYPES, default=TYPE_VARIABLE)
    category = models.CharField(max_length=120, blank=True, default="General")

    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHODS,
        default=PAYMENT_CASH,
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expenses",
    )
    user_name = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        indexes = [
            models.Index(fields=["date"], name="accounting_expense_date_idx"),
            models.Index(fields=["category"], name="accounting_expense_cat_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="chk_expense_amount_positive",
            )
        ]

    def __str__(self):
        return f"{self.description} - {self.amount} ({self.date:%Y-%m-%d})"

    @staticmethod
    def tagged_description(description: str, payment_method: str) -> str:
        text = (description or "").strip()
        tag = Expense.PAYMENT_TAGS.get(payment_method)
        if tag and tag.lower() not in text.lower():
            text = f"{text} {tag}"
        return text

    @staticmethod
    def classify_description(description: str) -> str:
        text = (description or "").lower()
        if PAYMENT_TAG_CARD.lower() in text:
            return Expense.PAYMENT_CARD
        if PAYMENT_TAG_TRANSFER.lower() in text:
            return Expense.PAYMENT_TRANSFER
        return Expense.PAYMENT_CASH

    def clean(self):
        if not (self.description or "").strip():
            raise ValidationError({"description": "description is required"})
        if self.amount is None or Decimal(self.amount) <= Decimal("0.00"):
            raise ValidationError({"amount": "amount must be greater than zero"})
