# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - stock_current is a scalar column on the product.
    - It is mutated ONLY through products.services.stock (atomic F() updates),
      which also appends a StockMovement audit row.
    - stock_initial is the quantity the product was registered with.

    PRICING:
    - Three unit price tiers (retail / medium / wholesale), selected by quantity
      via products.services.pricing.resolve_tier().
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=120, blank=True, default="")
    unit = models.CharField(max_length=40, blank=True, default="Pieza")

    cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    price_retail = models.DecimalField(max_digits=12, decimal_places=2)
    price_medium = models.DecimalField(max_digits=12, decimal_places=2)
    price_wholesale = models.DecimalField(max_digits=12, decimal_places=2)

    stock_initial = models.IntegerField(default=0)
    stock_current = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="products_pr_name_9ff0a3_idx"),
            models.Index(fields=["category"], name="products_pr_categor_5f1c2e_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        self.sku = (self.sku or "").strip().upper()
        if not self.sku:
            raise ValidationError({"sku": "SKU is required"})

        for field in ("cost", "price_retail", "price_medium", "price_wholesale"):
            value = getattr(self, field)
            if value is None or Decimal(value) < Decimal("0.00"):
                raise ValidationError({field: "Must be zero or greater"})

    def save(self, *args, **kwargs):
        self.sku = (self.sku or "").strip().upper()
        return super().save(*args, **kwargs)
