"""
PATH: pos/serializers/cart_item.py

CART ITEM SERIALIZER

- price_type / unit_price / amount are read-only (server-resolved tier).
- quantity is signed: corrections come back negative.
"""

from rest_framework import serializers

from pos.models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    unit = serializers.CharField(source="product.unit", read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "sku",
            "product_name",
            "unit",
            "quantity",
            "is_correction",
            "correction_note",
            "price_type",
            "unit_price",
            "amount",
            "created_at",
        ]
        read_only_fields = fields
