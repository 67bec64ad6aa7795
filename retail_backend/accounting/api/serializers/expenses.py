# accounting/api/serializers/expenses.py

from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import serializers

from accounting.models.expense import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth) - clean, stable contract.
    """

    class Meta:
        model = Expense
        fields = [
            "id",
            "date",
            "description",
            "amount",
            "type",
            "category",
            "payment_method",
            "user",
            "user_name",
            "created_at",
        ]
        read_only_fields = fields


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible).

    date accepts YYYY-MM-DD (today -> now, other days -> 12:00)
    or a full ISO datetime.
    """

    description = serializers.CharField(max_length=200)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    type = serializers.ChoiceField(choices=[c[0] for c in Expense.TYPES], default=Expense.TYPE_VARIABLE)
    category = serializers.CharField(required=False, allow_blank=True, default="General")
    payment_method = serializers.ChoiceField(
        choices=[c[0] for c in Expense.PAYMENT_METHODS],
        default=Expense.PAYMENT_CASH,
    )
    date = serializers.CharField(required=False)

    def validate_amount(self, value):
        if value is None:
            raise serializers.ValidationError("amount is required")
        if value <= 0:
            raise serializers.ValidationError("amount must be > 0")
        return value

    def validate_description(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("description is required")
        return v

    def validate_date(self, value):
        value = (value or "").strip()
        try:
            parsed = parse_datetime(value) if "T" in value or " " in value else parse_date(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise serializers.ValidationError("Use YYYY-MM-DD or an ISO datetime")
        return parsed
