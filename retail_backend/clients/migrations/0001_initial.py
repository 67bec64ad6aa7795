from __future__ import annotations

import uuid

from django.db import migrations, models

GENERAL_CLIENT_ID = uuid.UUID(int=0)


def create_general_client(apps, schema_editor):
    Client = apps.get_model("clients", "Client")
    Client.objects.get_or_create(
        id=GENERAL_CLIENT_ID,
        defaults={"name": "PÚBLICO GENERAL", "wallet_status": "inactive"},
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, help_text="Razón social / nombre", max_length=255)),
                ("rfc", models.CharField(blank=True, default="", max_length=20)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone", models.CharField(blank=True, db_index=True, default="", max_length=20)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("zip_code", models.CharField(blank=True, default="", max_length=10)),
                ("colonia", models.CharField(blank=True, default="", max_length=120)),
                ("city", models.CharField(blank=True, default="", max_length=120)),
                ("state", models.CharField(blank=True, default="", max_length=120)),
                (
                    "wallet_status",
                    models.CharField(
                        choices=[("inactive", "Inactivo"), ("pending", "Pendiente"), ("active", "Activo")],
                        default="inactive",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.RunPython(create_general_client, migrations.RunPython.noop),
    ]
