from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("sku", models.CharField(max_length=64)),
                ("product_name", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                ("cost_unit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("cost_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("supplier", models.CharField(blank=True, default="Unknown", max_length=200)),
                ("notes", models.TextField(blank=True, default="")),
                ("user_name", models.CharField(blank=True, default="", max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="products.product",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="purchases_recorded",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["date"], name="purchases_date_idx"),
                    models.Index(fields=["sku", "date"], name="purchases_sku_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="purchase_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("cost_unit__gte", Decimal("0.00"))),
                        name="purchase_cost_unit_nonnegative",
                    ),
                ],
            },
        ),
    ]
