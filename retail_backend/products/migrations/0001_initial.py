from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(db_index=True, max_length=64, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("category", models.CharField(blank=True, default="", max_length=120)),
                ("unit", models.CharField(blank=True, default="Pieza", max_length=40)),
                ("cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("price_retail", models.DecimalField(decimal_places=2, max_digits=12)),
                ("price_medium", models.DecimalField(decimal_places=2, max_digits=12)),
                ("price_wholesale", models.DecimalField(decimal_places=2, max_digits=12)),
                ("stock_initial", models.IntegerField(default=0)),
                ("stock_current", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="products_pr_name_9ff0a3_idx"),
                    models.Index(fields=["category"], name="products_pr_categor_5f1c2e_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("INITIAL", "Initial Stock"),
                            ("SALE", "Sale"),
                            ("SALE_EDIT", "Sale Quantity Edit"),
                            ("CANCELLATION", "Folio Cancellation"),
                            ("PURCHASE", "Purchase"),
                            ("PURCHASE_EDIT", "Purchase Edit"),
                            ("PURCHASE_DELETE", "Purchase Deleted"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity", models.IntegerField()),
                ("stock_after", models.IntegerField()),
                ("folio", models.CharField(blank=True, db_index=True, default="", max_length=20)),
                ("reference", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["reason"], name="products_st_reason_3a8d7b_idx"),
                    models.Index(fields=["product", "created_at"], name="products_st_product_c41e9a_idx"),
                ],
            },
        ),
    ]
