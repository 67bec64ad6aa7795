# sales/models/sale.py

"""
SALE LINE MODEL

One row per line item. A folio is NOT a stored entity: it is the grouping key
shared by every line confirmed in the same checkout.

Frozen at confirmation:
- sku / product_name / unit
- price_type / unit_price (tier snapshot)
- seller / client names

Mutations after confirmation (admin only, through sales.services.folio_service):
- quantity (amount = quantity × frozen unit_price)
- folio date / client
- cancellation: is_cancelled + correction_note; amounts and quantities are kept
  so the historical record stays reconstructible

Rows are never deleted.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from clients.models import Client
from products.models import Product
from products.services.pricing import TIER_CHOICES, TIER_RETAIL

PAYMENT_CASH = "cash"
PAYMENT_CARD_CREDIT = "card_credit"
PAYMENT_CARD_DEBIT = "card_debit"
PAYMENT_TRANSFER = "transfer"
PAYMENT_WALLET = "wallet"
PAYMENT_MULTIPLE = "multiple"
# legacy tag from older data; reported together with credit/debit
PAYMENT_CARD = "card"

PAYMENT_METHOD_CHOICES = [
    (PAYMENT_CASH, "Efectivo"),
    (PAYMENT_CARD_CREDIT, "Tarjeta de crédito"),
    (PAYMENT_CARD_DEBIT, "Tarjeta de débito"),
    (PAYMENT_TRANSFER, "Transferencia"),
    (PAYMENT_WALLET, "Monedero"),
    (PAYMENT_MULTIPLE, "Múltiple"),
    (PAYMENT_CARD, "Tarjeta"),
]


class Sale(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    folio = models.CharField(max_length=20)
    date = models.DateTimeField(default=timezone.now)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_lines",
    )
    sku = models.CharField(max_length=64)
    product_name = models.CharField(max_length=255)
    unit = models.CharField(max_length=40, blank=True, default="")

    quantity = models.IntegerField(help_text="Signed: negative for corrections/returns")
    price_type = models.CharField(max_length=12, choices=TIER_CHOICES, default=TIER_RETAIL)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    amount = models.DecimalField(max_digits=14, decimal_places=2)

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sale_lines",
    )
    seller_name = models.CharField(max_length=150, blank=True, default="")

    client = models.ForeignKey(
        Client,
        on_delete=models.PROTECT,
        related_name="sale_lines",
    )
    client_name = models.CharField(max_length=255, blank=True, default="")

    payment_method = models.CharField(max_length=12, choices=PAYMENT_METHOD_CHOICES)
    payment_details = models.JSONField(
        null=True,
        blank=True,
        encoder=DjangoJSONEncoder,
        help_text="method -> amount; only when payment_method = multiple",
    )

    is_correction = models.BooleanField(default=False)
    is_cancelled = models.BooleanField(default=False)
    correction_note = models.CharField(max_length=255, blank=True, default="")
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "folio"]
        indexes = [
            models.Index(fields=["folio"], name="sales_sale_folio_idx"),
            models.Index(fields=["date"], name="sales_sale_date_idx"),
            models.Index(fields=["client", "date"], name="sales_sale_client_date_idx"),
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) == 0:
            raise ValidationError({"quantity": "Quantity cannot be zero"})

        if self.payment_method == PAYMENT_MULTIPLE and not self.payment_details:
            raise ValidationError({"payment_details": "Required for multiple payments"})

        if self.payment_method != PAYMENT_MULTIPLE and self.payment_details:
            raise ValidationError({"payment_details": "Only allowed for multiple payments"})

    def delete(self, *args, **kwargs):
        raise ValidationError("Sale lines cannot be deleted; cancel the folio instead")

    def __str__(self):
        return f"{self.folio} | {self.sku} x {self.quantity}"
