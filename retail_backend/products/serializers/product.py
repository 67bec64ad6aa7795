# products/serializers/product.py

"""
PRODUCT SERIALIZER

- stock_current is read-only: it only moves through sales, purchases and
  cancellations (products.services.stock).
- stock_initial is writable on create only.
"""

from rest_framework import serializers

from products.models import Product, StockMovement


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "category",
            "unit",
            "cost",
            "price_retail",
            "price_medium",
            "price_wholesale",
            "stock_initial",
            "stock_current",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "stock_current",
            "created_at",
            "updated_at",
        ]

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value

    def validate_stock_initial(self, value):
        if self.instance is not None and value != self.instance.stock_initial:
            raise serializers.ValidationError("stock_initial cannot be changed after creation")
        if value is not None and value < 0:
            raise serializers.ValidationError("stock_initial must be zero or greater")
        return value

    def validate(self, attrs):
        for field in ("cost", "price_retail", "price_medium", "price_wholesale"):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: "Must be zero or greater"})
        return attrs


class StockMovementSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "sku",
            "reason",
            "quantity",
            "stock_after",
            "folio",
            "reference",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class QuoteQuerySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class QuoteResponseSerializer(serializers.Serializer):
    tier = serializers.CharField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
