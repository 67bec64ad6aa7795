# pos/models/cart_item.py

"""
CART ITEM MODEL

Purpose:
- One pending line of the in-progress sale.
- price_type / unit_price / amount are re-resolved from the product's CURRENT
  tier prices every time the quantity changes; they only freeze when the line
  becomes a Sale row at checkout.

Rules:
- One line per (cart, product, is_correction): adding the same SKU again merges.
- Corrections carry a negative quantity; normal lines a positive one.
- amount = unit_price × quantity (signed).
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product
from products.services.pricing import TIER_CHOICES, TIER_RETAIL

from .cart import Cart


class CartItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="cart_items",
    )
    sku = models.CharField(max_length=64)

    quantity = models.IntegerField(help_text="Signed: negative for corrections/returns")

    is_correction = models.BooleanField(default=False)
    correction_note = models.CharField(max_length=255, blank=True, default="")

    price_type = models.CharField(max_length=12, choices=TIER_CHOICES, default=TIER_RETAIL)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    amount = models.DecimalField(max_digits=14, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product", "is_correction"],
                name="one_line_per_product_and_kind",
            )
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) == 0:
            raise ValidationError({"quantity": "Quantity cannot be zero"})

        if self.is_correction and self.quantity > 0:
            raise ValidationError({"quantity": "Correction lines must be negative"})

        if not self.is_correction and self.quantity < 0:
            raise ValidationError({"quantity": "Sale lines must be positive"})

        if self.unit_price is None or self.unit_price < 0:
            raise ValidationError({"unit_price": "Unit price cannot be negative"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * Decimal(int(self.quantity or 0))

    def __str__(self):
        return f"{self.sku} x {self.quantity}"
