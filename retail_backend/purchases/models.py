# purchases/models.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models.product import Product

TWOPLACES = Decimal("0.01")

DEFAULT_SUPPLIER = "Unknown"


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


User = settings.AUTH_USER_MODEL


class Purchase(models.Model):
    """
    Stock received from a supplier.

    Stock effects are applied by purchases.services.purchase_service:
    - record   -> +quantity (PURCHASE)
    - update   -> quantity delta (PURCHASE_EDIT), moved across products on SKU change
    - delete   -> -quantity (PURCHASE_DELETE)

    sku / product_name / user_name are snapshots taken when the row is written.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    date = models.DateTimeField(default=timezone.now)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    sku = models.CharField(max_length=64)
    product_name = models.CharField(max_length=255, blank=True, default="")

    quantity = models.PositiveIntegerField()
    cost_unit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cost_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    supplier = models.CharField(max_length=200, blank=True, default=DEFAULT_SUPPLIER)
    notes = models.TextField(blank=True, default="")

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases_recorded",
    )
    user_name = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="purchase_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(cost_unit__gte=Decimal("0.00")),
                name="purchase_cost_unit_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["date"], name="purchases_date_idx"),
            models.Index(fields=["sku", "date"], name="purchases_sku_date_idx"),
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError({"quantity": "quantity must be greater than zero"})

        if self.cost_unit is None or Decimal(self.cost_unit) < Decimal("0.00"):
            raise ValidationError({"cost_unit": "cost_unit cannot be negative"})

    def save(self, *args, **kwargs):
        self.cost_unit = _money(self.cost_unit)
        self.cost_total = _money(self.cost_unit * Decimal(int(self.quantity or 0)))
        self.supplier = (self.supplier or "").strip() or DEFAULT_SUPPLIER
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.sku} x{self.quantity} ({self.supplier})"
