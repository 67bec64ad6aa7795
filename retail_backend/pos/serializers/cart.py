# pos/serializers/cart.py

"""
CART SERIALIZER

Purpose:
- Return the POS cart in a frontend-friendly shape.
- Totals are server-derived; the client never sends money.
- Wallet info for the selected client so the payment form can clamp entries.
"""

from rest_framework import serializers

from loyalty.services.ledger import balance
from pos.models import Cart

from .cart_item import CartItemSerializer


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)

    client_id = serializers.UUIDField(read_only=True, allow_null=True)
    client_name = serializers.SerializerMethodField()
    wallet_status = serializers.SerializerMethodField()
    wallet_balance = serializers.SerializerMethodField()

    item_count = serializers.IntegerField(read_only=True)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Cart
        fields = [
            "id",
            "user",
            "client_id",
            "client_name",
            "wallet_status",
            "wallet_balance",
            "is_active",
            "items",
            "item_count",
            "total_amount",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_client_name(self, obj) -> str:
        return obj.client.name if obj.client_id else "PÚBLICO GENERAL"

    def get_wallet_status(self, obj) -> str | None:
        return obj.client.wallet_status if obj.client_id else None

    def get_wallet_balance(self, obj) -> str:
        return str(balance(obj.client)) if obj.client_id else "0.00"
