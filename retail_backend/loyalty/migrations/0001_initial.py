from __future__ import annotations

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("clients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LoyaltyTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("points", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "type",
                    models.CharField(
                        choices=[("earn", "Earn"), ("redeem", "Redeem"), ("adjustment", "Adjustment")],
                        max_length=12,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("sale_earn", "Sale earn"),
                            ("sale_redeem", "Sale wallet payment"),
                            ("cancel_refund", "Cancellation wallet refund"),
                            ("cancel_reversal", "Cancellation points reversal"),
                            ("manual", "Manual entry"),
                        ],
                        default="manual",
                        max_length=20,
                    ),
                ),
                ("folio", models.CharField(blank=True, db_index=True, max_length=20, null=True)),
                (
                    "rate",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Earn percentage applied (earn entries only).",
                        max_digits=5,
                        null=True,
                    ),
                ),
                ("description", models.CharField(max_length=255)),
                ("created_by_name", models.CharField(blank=True, default="", max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="loyalty_transactions",
                        to="clients.client",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="loyalty_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["client", "created_at"], name="loyalty_tx_client_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("folio__isnull", False)),
                        fields=("folio", "source"),
                        name="uniq_loyalty_entry_per_folio_source",
                    ),
                ],
            },
        ),
    ]
