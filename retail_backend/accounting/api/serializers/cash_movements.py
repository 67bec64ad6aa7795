# accounting/api/serializers/cash_movements.py

from rest_framework import serializers

from accounting.models.cash_movement import CashMovement


class CashMovementSerializer(serializers.ModelSerializer):
    class Meta:
        model = CashMovement
        fields = [
            "id",
            "type",
            "amount",
            "description",
            "date",
            "user",
            "user_name",
            "created_at",
        ]
        read_only_fields = fields


class CashMovementCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[c[0] for c in CashMovement.TYPES])
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    description = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("amount must be > 0")
        return value


class CashFlowQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("date_from"), attrs.get("date_to")
        if start and end and start > end:
            raise serializers.ValidationError("date_from must be on or before date_to")
        return attrs
