# clients/api/serializers.py

from rest_framework import serializers

from clients.models import Client

CLIENT_FIELDS = [
    "name",
    "rfc",
    "email",
    "phone",
    "address",
    "zip_code",
    "colonia",
    "city",
    "state",
]


class ClientSerializer(serializers.ModelSerializer):
    is_general = serializers.BooleanField(read_only=True)

    class Meta:
        model = Client
        fields = ["id", *CLIENT_FIELDS, "wallet_status", "is_general", "created_at", "updated_at"]
        read_only_fields = ["id", "wallet_status", "is_general", "created_at", "updated_at"]


class ClientWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    rfc = serializers.CharField(max_length=20, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    zip_code = serializers.CharField(max_length=10, required=False, allow_blank=True)
    colonia = serializers.CharField(max_length=120, required=False, allow_blank=True)
    city = serializers.CharField(max_length=120, required=False, allow_blank=True)
    state = serializers.CharField(max_length=120, required=False, allow_blank=True)


class WalletRequestSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=20, required=False)
