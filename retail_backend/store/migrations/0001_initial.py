from __future__ import annotations

from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StoreSettings",
            fields=[
                ("id", models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ("company_name", models.CharField(default="Mi Negocio", max_length=255)),
                ("razon_social", models.CharField(blank=True, default="", max_length=255)),
                ("rfc", models.CharField(blank=True, default="", max_length=20)),
                ("phone", models.CharField(blank=True, default="", max_length=30)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("zip_code", models.CharField(blank=True, default="", max_length=10)),
                ("colonia", models.CharField(blank=True, default="", max_length=120)),
                ("city", models.CharField(blank=True, default="", max_length=120)),
                ("state", models.CharField(blank=True, default="", max_length=120)),
                ("country", models.CharField(blank=True, default="México", max_length=120)),
                ("logo_url", models.URLField(blank=True, default="")),
                ("theme_id", models.CharField(default="blue", max_length=40)),
                ("ticket_footer_message", models.CharField(blank=True, default="", max_length=255)),
                ("medium_threshold", models.IntegerField(default=6)),
                ("wholesale_threshold", models.IntegerField(default=12)),
                ("loyalty_percentage", models.DecimalField(decimal_places=2, default=Decimal("1.00"), max_digits=5)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Store settings",
                "verbose_name_plural": "Store settings",
            },
        ),
    ]
