from __future__ import annotations

import uuid

import django.core.serializers.json
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def create_folio_sequence(apps, schema_editor):
    FolioSequence = apps.get_model("sales", "FolioSequence")
    FolioSequence.objects.get_or_create(pk=1, defaults={"last_value": 0})


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("clients", "0001_initial"),
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FolioSequence",
            fields=[
                ("id", models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ("last_value", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("folio", models.CharField(max_length=20)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("sku", models.CharField(max_length=64)),
                ("product_name", models.CharField(max_length=255)),
                ("unit", models.CharField(blank=True, default="", max_length=40)),
                ("quantity", models.IntegerField(help_text="Signed: negative for corrections/returns")),
                (
                    "price_type",
                    models.CharField(
                        choices=[("retail", "Menudeo"), ("medium", "Medio mayoreo"), ("wholesale", "Mayoreo")],
                        default="retail",
                        max_length=12,
                    ),
                ),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("seller_name", models.CharField(blank=True, default="", max_length=150)),
                ("client_name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("cash", "Efectivo"),
                            ("card_credit", "Tarjeta de crédito"),
                            ("card_debit", "Tarjeta de débito"),
                            ("transfer", "Transferencia"),
                            ("wallet", "Monedero"),
                            ("multiple", "Múltiple"),
                            ("card", "Tarjeta"),
                        ],
                        max_length=12,
                    ),
                ),
                (
                    "payment_details",
                    models.JSONField(
                        blank=True,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        help_text="method -> amount; only when payment_method = multiple",
                        null=True,
                    ),
                ),
                ("is_correction", models.BooleanField(default=False)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("correction_note", models.CharField(blank=True, default="", max_length=255)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_lines",
                        to="clients.client",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_lines",
                        to="products.product",
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sale_lines",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "folio"],
                "indexes": [
                    models.Index(fields=["folio"], name="sales_sale_folio_idx"),
                    models.Index(fields=["date"], name="sales_sale_date_idx"),
                    models.Index(fields=["client", "date"], name="sales_sale_client_date_idx"),
                ],
            },
        ),
        migrations.RunPython(create_folio_sequence, migrations.RunPython.noop),
    ]
