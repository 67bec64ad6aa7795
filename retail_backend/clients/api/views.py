# clients/api/views.py

"""
CLIENTS API

/api/clients/                          list (clients:read) / create (clients:manage)
/api/clients/<id>/                     retrieve / update / delete
/api/clients/<id>/request-wallet/      inactive -> pending (clients:read)
/api/clients/<id>/approve-wallet/      pending -> active   (admin)
/api/clients/<id>/deactivate-wallet/   any -> inactive     (admin)
/api/clients/<id>/wallet/              balance + ledger history
"""

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clients.api.serializers import (
    ClientSerializer,
    ClientWriteSerializer,
    WalletRequestSerializer,
)
from clients.models import Client
from clients.services.client_service import (
    ClientError,
    ClientInUseError,
    ClientPermissionError,
    DuplicatePhoneError,
    ReservedClientError,
    approve_wallet_activation,
    create_client,
    deactivate_wallet,
    delete_client,
    request_wallet_activation,
    update_client,
)
from loyalty.api.serializers import LoyaltyTransactionSerializer
from loyalty.services.ledger import balance, history
from permissions.roles import PERM_CLIENTS_MANAGE, PERM_CLIENTS_READ, HasPermission


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def _client_error(exc: ClientError):
    if isinstance(exc, ClientPermissionError):
        return error_response(code="FORBIDDEN", message=str(exc), http_status=status.HTTP_403_FORBIDDEN)
    if isinstance(exc, DuplicatePhoneError):
        return error_response(code="DUPLICATE_PHONE", message=str(exc), http_status=status.HTTP_409_CONFLICT)
    if isinstance(exc, ReservedClientError):
        return error_response(code="RESERVED_CLIENT", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, ClientInUseError):
        return error_response(code="CLIENT_IN_USE", message=str(exc), http_status=status.HTTP_409_CONFLICT)
    return error_response(code="INVALID_CLIENT", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)


READ_ACTIONS = {"list", "retrieve", "wallet", "request_wallet"}


class ClientViewSet(viewsets.ModelViewSet):
    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated, HasPermission]
    filterset_fields = ["wallet_status", "phone"]

    required_permission = PERM_CLIENTS_READ

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            self.required_permission = PERM_CLIENTS_READ
        else:
            # approve/deactivate are further restricted to admins in the service
            self.required_permission = PERM_CLIENTS_MANAGE
        return [IsAuthenticated(), HasPermission()]

    def get_queryset(self):
        qs = Client.objects.all().order_by("name")

        term = (self.request.query_params.get("q") or "").strip()
        if term:
            qs = qs.filter(
                Q(name__icontains=term) | Q(phone__icontains=term) | Q(rfc__icontains=term)
            )

        return qs

    @extend_schema(request=ClientWriteSerializer, responses={201: ClientSerializer})
    def create(self, request, *args, **kwargs):
        s = ClientWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            client = create_client(actor=request.user, **s.validated_data)
        except ClientError as exc:
            return _client_error(exc)

        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ClientWriteSerializer, responses={200: ClientSerializer})
    def update(self, request, *args, **kwargs):
        client = self.get_object()
        s = ClientWriteSerializer(data=request.data, partial=kwargs.pop("partial", False))
        s.is_valid(raise_exception=True)

        try:
            client = update_client(actor=request.user, client=client, **s.validated_data)
        except ClientError as exc:
            return _client_error(exc)

        return Response(ClientSerializer(client).data)

    def destroy(self, request, *args, **kwargs):
        client = self.get_object()
        try:
            delete_client(actor=request.user, client=client)
        except ClientError as exc:
            return _client_error(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=WalletRequestSerializer, responses={200: ClientSerializer})
    @action(detail=True, methods=["post"], url_path="request-wallet")
    def request_wallet(self, request, pk=None):
        s = WalletRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            client = request_wallet_activation(
                actor=request.user,
                client=self.get_object(),
                phone=s.validated_data.get("phone"),
            )
        except ClientError as exc:
            return _client_error(exc)

        return Response(ClientSerializer(client).data)

    @extend_schema(request=None, responses={200: ClientSerializer})
    @action(detail=True, methods=["post"], url_path="approve-wallet")
    def approve_wallet(self, request, pk=None):
        try:
            client = approve_wallet_activation(actor=request.user, client=self.get_object())
        except ClientError as exc:
            return _client_error(exc)
        return Response(ClientSerializer(client).data)

    @extend_schema(request=None, responses={200: ClientSerializer})
    @action(detail=True, methods=["post"], url_path="deactivate-wallet")
    def deactivate_wallet(self, request, pk=None):
        try:
            client = deactivate_wallet(actor=request.user, client=self.get_object())
        except ClientError as exc:
            return _client_error(exc)
        return Response(ClientSerializer(client).data)

    @extend_schema(responses={200: LoyaltyTransactionSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="wallet")
    def wallet(self, request, pk=None):
        client = self.get_object()
        entries = history(client)[:100]
        return Response(
            {
                "client": str(client.id),
                "wallet_status": client.wallet_status,
                "balance": str(balance(client)),
                "transactions": LoyaltyTransactionSerializer(entries, many=True).data,
            }
        )
