# sales/serializers/folio.py

from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import serializers

from .sale import SaleSerializer


class FolioSummarySerializer(serializers.Serializer):
    folio = serializers.CharField()
    date = serializers.DateTimeField()
    client_id = serializers.CharField()
    client_name = serializers.CharField()
    seller_name = serializers.CharField()
    payment_method = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    line_count = serializers.IntegerField()
    is_cancelled = serializers.BooleanField()


class FolioDetailSerializer(FolioSummarySerializer):
    payment_details = serializers.JSONField(allow_null=True)
    lines = SaleSerializer(many=True)


class FolioListQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    client = serializers.UUIDField(required=False)
    include_cancelled = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        start, end = attrs.get("date_from"), attrs.get("date_to")
        if start and end and start > end:
            raise serializers.ValidationError("date_from must be on or before date_to")
        return attrs


class FolioCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=200)


class FolioDateSerializer(serializers.Serializer):
    """
    Accepts either a bare date (YYYY-MM-DD, stored at 12:00) or a datetime.
    """

    date = serializers.CharField()

    def validate_date(self, value):
        value = (value or "").strip()
        try:
            parsed = parse_datetime(value) if "T" in value or " " in value else parse_date(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise serializers.ValidationError("Use YYYY-MM-DD or an ISO datetime")
        return parsed


class FolioClientSerializer(serializers.Serializer):
    client_id = serializers.UUIDField(allow_null=True)


class LineQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity cannot be zero")
        return value
