"""
PATH: pos/models/cart.py

CART MODEL

Purpose:
- In-progress POS sale (mutable until checkout).
- Holds the selected client (NULL = walk-in / general client).
- Derives total and unit count from its CartItems.

Rules:
- One active cart per user.
- Deactivated at checkout; read-only afterwards.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum

from clients.models import Client

User = settings.AUTH_USER_MODEL


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="carts",
    )

    client = models.ForeignKey(
        Client,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="carts",
        help_text="Selected client. Empty means the general client.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=models.Q(is_active=True),
                name="one_active_cart_per_user",
            )
        ]

    def clean(self):
        if self.user_id is None:
            raise ValidationError({"user": "user is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def item_count(self) -> int:
        total = self.items.aggregate(total=Sum("quantity")).get("total")
        return int(total or 0)

    @property
    def total_amount(self) -> Decimal:
        total = self.items.aggregate(total=Sum("amount")).get("total")
        return total or Decimal("0.00")

    @property
    def is_empty(self) -> bool:
        return not self.items.exists()

    def assert_active(self):
        if not self.is_active:
            raise ValueError("Cart is inactive and cannot be modified")

    def __str__(self):
        status = "ACTIVE" if self.is_active else "CLOSED"
        return f"Cart {self.id} | {self.user} | {status}"
