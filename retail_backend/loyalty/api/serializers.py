# loyalty/api/serializers.py

from rest_framework import serializers

from loyalty.models import LoyaltyTransaction
from loyalty.services.ledger import KIND_DEPOSIT, KIND_WITHDRAWAL


class LoyaltyTransactionSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.name", read_only=True)

    class Meta:
        model = LoyaltyTransaction
        fields = [
            "id",
            "client",
            "client_name",
            "amount",
            "points",
            "type",
            "source",
            "folio",
            "rate",
            "description",
            "created_by",
            "created_by_name",
            "created_at",
        ]
        read_only_fields = fields


class WalletBalanceSerializer(serializers.Serializer):
    client = serializers.UUIDField()
    client_name = serializers.CharField()
    wallet_status = serializers.CharField()
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    can_redeem = serializers.BooleanField()


class ManualEntrySerializer(serializers.Serializer):
    client_id = serializers.UUIDField()
    kind = serializers.ChoiceField(choices=[KIND_DEPOSIT, KIND_WITHDRAWAL])
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField(max_length=255)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value
