# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import Purchase


class PurchaseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Purchase
        fields = [
            "id",
            "date",
            "product",
            "sku",
            "product_name",
            "quantity",
            "cost_unit",
            "cost_total",
            "supplier",
            "notes",
            "user",
            "user_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PurchaseCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    cost_unit = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    supplier = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateTimeField(required=False)


class PurchaseUpdateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)
    cost_unit = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    supplier = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide at least one field to update.")
        return attrs
