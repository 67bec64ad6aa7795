# accounting/models/cash_movement.py

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class CashMovement(models.Model):
    """
    Manual cash drawer movement (opening float, cash taken to the bank...).

    Deposits add to the cash on hand, withdrawals take from it.
    Rows are append-only: a wrong movement is fixed with the opposite one.
    """

    TYPE_DEPOSIT = "deposit"
    TYPE_WITHDRAWAL = "withdrawal"

    TYPES = [
        (TYPE_DEPOSIT, "Ingreso a caja"),
        (TYPE_WITHDRAWAL, "Retiro de caja"),
    ]

    type = models.CharField(max_length=12, choices=TYPES)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    description = models.CharField(max_length=255, blank=True, default="")
    date = models.DateTimeField(default=timezone.now)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_movements",
    )
    user_name = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["date"], name="accounting_cashmov_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="chk_cash_movement_amount_positive",
            )
        ]

    def __str__(self):
        return f"{self.get_type_display()} {self.amount}"

    @property
    def signed_amount(self) -> Decimal:
        if self.type == self.TYPE_WITHDRAWAL:
            return -self.amount
        return self.amount

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Cash movements are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Cash movements cannot be deleted")
