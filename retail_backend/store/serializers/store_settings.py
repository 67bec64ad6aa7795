from rest_framework import serializers

from store.models import StoreSettings


class StoreSettingsSerializer(serializers.ModelSerializer):
    """
    Business settings (singleton).
    Field-level rules are enforced by the service on write.
    """

    class Meta:
        model = StoreSettings
        fields = [
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
            "updated_at",
        ]
        read_only_fields = ["updated_at"]
