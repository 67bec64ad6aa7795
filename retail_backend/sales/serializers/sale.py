# sales/serializers/sale.py

"""
SALE LINE SERIALIZER (READ-ONLY)

Sale lines are written only by the folio service; the API never accepts
them as input.
"""

from rest_framework import serializers

from sales.models import Sale


class SaleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Sale
        fields = [
            "id",
            "folio",
            "date",
            "product",
            "sku",
            "product_name",
            "unit",
            "quantity",
            "price_type",
            "unit_price",
            "amount",
            "seller",
            "seller_name",
            "client",
            "client_name",
            "payment_method",
            "payment_details",
            "is_correction",
            "is_cancelled",
            "correction_note",
            "cancelled_at",
            "created_at",
        ]
        read_only_fields = fields
