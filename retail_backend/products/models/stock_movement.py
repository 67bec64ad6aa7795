# products/models/stock_movement.py

"""
INVENTORY AUDIT LEDGER

Immutable record of every change applied to Product.stock_current.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is SIGNED: negative = stock out, positive = stock in
- stock_after is the product's stock_current right after the change
- Sale-linked movements carry the folio
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockMovement(models.Model):
    class Reason(models.TextChoices):
        INITIAL = "INITIAL", "Initial Stock"
        SALE = "SALE", "Sale"
        SALE_EDIT = "SALE_EDIT", "Sale Quantity Edit"
        CANCELLATION = "CANCELLATION", "Folio Cancellation"
        PURCHASE = "PURCHASE", "Purchase"
        PURCHASE_EDIT = "PURCHASE_EDIT", "Purchase Edit"
        PURCHASE_DELETE = "PURCHASE_DELETE", "Purchase Deleted"

    FOLIO_REASONS = {Reason.SALE, Reason.SALE_EDIT, Reason.CANCELLATION}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )

    reason = models.CharField(max_length=20, choices=Reason.choices)
    quantity = models.IntegerField()
    stock_after = models.IntegerField()

    folio = models.CharField(max_length=20, blank=True, default="", db_index=True)
    reference = models.CharField(max_length=64, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["reason"], name="products_st_reason_3a8d7b_idx"),
            models.Index(fields=["product", "created_at"], name="products_st_product_c41e9a_idx"),
        ]

    def clean(self):
        if not self.quantity:
            raise ValidationError("quantity must be non-zero")

        if self.reason in self.FOLIO_REASONS and not self.folio:
            raise ValidationError(f"{self.reason} movements must reference a folio")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity:+d}"
