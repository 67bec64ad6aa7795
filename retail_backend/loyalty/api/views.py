# loyalty/api/views.py

"""
LOYALTY API

GET  /api/loyalty/clients/<id>/balance/     derived wallet balance
GET  /api/loyalty/transactions/?client=<id> ledger history (newest first)
POST /api/loyalty/manual/                   operator deposit / withdrawal
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView, ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clients.models import Client
from loyalty.api.serializers import (
    LoyaltyTransactionSerializer,
    ManualEntrySerializer,
    WalletBalanceSerializer,
)
from loyalty.models import LoyaltyTransaction
from loyalty.services.ledger import (
    InsufficientWalletBalanceError,
    LedgerError,
    LedgerPermissionError,
    balance,
    post_manual_entry,
)
from permissions.roles import PERM_CLIENTS_MANAGE, PERM_CLIENTS_READ, HasPermission
from store.services.context import build_context


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


class WalletBalanceView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_CLIENTS_READ

    @extend_schema(tags=["loyalty"], responses={200: WalletBalanceSerializer})
    def get(self, request, client_id):
        client = get_object_or_404(Client, pk=client_id)
        payload = {
            "client": client.id,
            "client_name": client.name,
            "wallet_status": client.wallet_status,
            "balance": balance(client),
            "can_redeem": client.can_redeem,
        }
        return Response(WalletBalanceSerializer(payload).data)


class LoyaltyTransactionListView(ListAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_CLIENTS_READ
    serializer_class = LoyaltyTransactionSerializer
    filterset_fields = ["client", "folio", "type", "source"]

    def get_queryset(self):
        return LoyaltyTransaction.objects.select_related("client").order_by("-created_at")

    @extend_schema(
        tags=["loyalty"],
        parameters=[OpenApiParameter("client", str, required=False)],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ManualEntryView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_CLIENTS_MANAGE

    @extend_schema(
        tags=["loyalty"],
        request=ManualEntrySerializer,
        responses={201: LoyaltyTransactionSerializer},
    )
    def post(self, request):
        s = ManualEntrySerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        client = get_object_or_404(Client, pk=data["client_id"])
        ctx = build_context(request.user)

        try:
            entry = post_manual_entry(
                ctx=ctx,
                client=client,
                kind=data["kind"],
                amount=data["amount"],
                description=data["description"],
            )
        except LedgerPermissionError as exc:
            return error_response(
                code="FORBIDDEN", message=str(exc), http_status=status.HTTP_403_FORBIDDEN
            )
        except InsufficientWalletBalanceError as exc:
            return Response(
                {
                    "error": {"code": "INSUFFICIENT_WALLET_BALANCE", "message": str(exc)},
                    "requested": str(exc.requested),
                    "available": str(exc.available),
                    "shortfall": str(exc.shortfall),
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        except LedgerError as exc:
            return error_response(
                code="INVALID_ENTRY", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
            )

        return Response(LoyaltyTransactionSerializer(entry).data, status=status.HTTP_201_CREATED)
