# loyalty/models/loyalty_transaction.py

"""
LOYALTY LEDGER ENTRY (APPEND-ONLY)

A client's wallet balance is ALWAYS Σ amount over that client's entries.
There is no stored balance column.

GUARANTEES:
- Append-only: saving an existing row or deleting raises
- points mirrors amount
- Sale-linked entries carry their folio and a source tag; at most one entry
  per (folio, source), so a folio can never be redeemed, refunded or
  reversed twice
- Earn entries store the rate that was applied, so reversals never depend on
  the current loyalty percentage
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from clients.models import Client


class LoyaltyTransaction(models.Model):
    TYPE_EARN = "earn"
    TYPE_REDEEM = "redeem"
    TYPE_ADJUSTMENT = "adjustment"

    TYPES = [
        (TYPE_EARN, "Earn"),
        (TYPE_REDEEM, "Redeem"),
        (TYPE_ADJUSTMENT, "Adjustment"),
    ]

    SOURCE_SALE_EARN = "sale_earn"
    SOURCE_SALE_REDEEM = "sale_redeem"
    SOURCE_CANCEL_REFUND = "cancel_refund"
    SOURCE_CANCEL_REVERSAL = "cancel_reversal"
    SOURCE_MANUAL = "manual"

    SOURCES = [
        (SOURCE_SALE_EARN, "Sale earn"),
        (SOURCE_SALE_REDEEM, "Sale wallet payment"),
        (SOURCE_CANCEL_REFUND, "Cancellation wallet refund"),
        (SOURCE_CANCEL_REVERSAL, "Cancellation points reversal"),
        (SOURCE_MANUAL, "Manual entry"),
    ]

    FOLIO_SOURCES = {
        SOURCE_SALE_EARN,
        SOURCE_SALE_REDEEM,
        SOURCE_CANCEL_REFUND,
        SOURCE_CANCEL_REVERSAL,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    client = models.ForeignKey(
        Client,
        on_delete=models.PROTECT,
        related_name="loyalty_transactions",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    points = models.DecimalField(max_digits=12, decimal_places=2)

    type = models.CharField(max_length=12, choices=TYPES)
    source = models.CharField(max_length=20, choices=SOURCES, default=SOURCE_MANUAL)

    folio = models.CharField(max_length=20, null=True, blank=True, db_index=True)
    rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Earn percentage applied (earn entries only).",
    )

    description = models.CharField(max_length=255)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loyalty_transactions",
    )
    created_by_name = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["client", "created_at"], name="loyalty_tx_client_created_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["folio", "source"],
                condition=Q(folio__isnull=False),
                name="uniq_loyalty_entry_per_folio_source",
            ),
        ]

    def clean(self):
        if self.amount is None or self.amount == 0:
            raise ValidationError("amount must be non-zero")

        if self.source in self.FOLIO_SOURCES and not self.folio:
            raise ValidationError(f"{self.source} entries must reference a folio")

        if self.type == self.TYPE_EARN and self.amount < 0:
            raise ValidationError("earn entries must be positive")

        if self.type == self.TYPE_REDEEM and self.amount > 0:
            raise ValidationError("redeem entries must be negative")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Loyalty transactions are immutable")
        self.points = self.amount
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Loyalty transactions cannot be deleted")

    def __str__(self):
        return f"{self.client_id} | {self.type} | {self.amount}"
