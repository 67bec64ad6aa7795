# store/views/store_settings.py

"""
STORE SETTINGS VIEW

- GET   /api/store/settings/   any authenticated staff (POS needs thresholds)
- PATCH /api/store/settings/   settings:manage
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from store.serializers import StoreSettingsSerializer
from store.services.settings_service import (
    StoreSettingsError,
    StoreSettingsPermissionError,
    get_store_settings,
    update_store_settings,
)


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


class StoreSettingsView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StoreSettingsSerializer

    @extend_schema(responses={200: StoreSettingsSerializer})
    def get(self, request):
        return Response(StoreSettingsSerializer(get_store_settings()).data)

    @extend_schema(
        request=StoreSettingsSerializer,
        responses={200: StoreSettingsSerializer},
        description="Partially update business settings (requires settings:manage)",
    )
    def patch(self, request):
        serializer = StoreSettingsSerializer(get_store_settings(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            obj = update_store_settings(actor=request.user, **serializer.validated_data)
        except StoreSettingsPermissionError as exc:
            return error_response(
                code="FORBIDDEN",
                message=str(exc),
                http_status=status.HTTP_403_FORBIDDEN,
            )
        except StoreSettingsError as exc:
            return error_response(
                code="INVALID_SETTINGS",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(StoreSettingsSerializer(obj).data, status=status.HTTP_200_OK)
