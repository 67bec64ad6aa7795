# store/services/settings_service.py

"""
STORE SETTINGS SERVICE

- get_store_settings(): singleton read (created with defaults on first use)
- update_store_settings(): permission-checked, validated write

Threshold policy:
- Non-positive thresholds and medium > wholesale are rejected at write time,
  so the tier resolver never sees an ambiguous configuration.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from permissions.roles import PERM_SETTINGS_MANAGE, has_permission
from store.models import StoreSettings

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "company_name",
    "razon_social",
    "rfc",
    "phone",
    "email",
    "address",
    "zip_code",
    "colonia",
    "city",
    "state",
    "country",
    "logo_url",
    "theme_id",
    "ticket_footer_message",
    "medium_threshold",
    "wholesale_threshold",
    "loyalty_percentage",
}


class StoreSettingsError(ValueError):
    pass


class StoreSettingsPermissionError(StoreSettingsError):
    pass


def get_store_settings() -> StoreSettings:
    obj = StoreSettings.objects.filter(pk=StoreSettings.SINGLETON_PK).first()
    if obj is None:
        obj, _ = StoreSettings.objects.get_or_create(pk=StoreSettings.SINGLETON_PK)
    return obj


@transaction.atomic
def update_store_settings(*, actor, **changes) -> StoreSettings:
    if not has_permission(actor, PERM_SETTINGS_MANAGE):
        raise StoreSettingsPermissionError("You do not have permission to change settings.")

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise StoreSettingsError(f"Unknown settings fields: {sorted(unknown)}")

    get_store_settings()
    obj = StoreSettings.objects.select_for_update().get(pk=StoreSettings.SINGLETON_PK)

    for field, value in changes.items():
        setattr(obj, field, value)

    try:
        obj.save()
    except ValidationError as exc:
        raise StoreSettingsError("; ".join(exc.messages)) from exc

    logger.info(
        "Store settings updated",
        extra={"fields": sorted(changes), "actor_id": str(getattr(actor, "id", ""))},
    )
    return obj
