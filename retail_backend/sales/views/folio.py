# sales/views/folio.py

"""
FOLIO API

GET   /api/sales/folios/                    folio summaries (sales:read)
GET   /api/sales/folios/<folio>/            folio with its lines (sales:read)
POST  /api/sales/folios/<folio>/cancel/     cancel whole folio (sales:cancel)
PATCH /api/sales/folios/<folio>/date/       admin
PATCH /api/sales/folios/<folio>/client/     admin
GET   /api/sales/lines/                     raw sale lines (sales:read)
PATCH /api/sales/lines/<id>/quantity/       admin
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clients.models import Client
from permissions.roles import (
    PERM_SALES_CANCEL,
    PERM_SALES_READ,
    HasPermission,
    IsAdmin,
)
from products.services.stock import InsufficientStockError
from sales.models import Sale
from sales.serializers import (
    FolioCancelSerializer,
    FolioClientSerializer,
    FolioDateSerializer,
    FolioDetailSerializer,
    FolioListQuerySerializer,
    FolioSummarySerializer,
    LineQuantitySerializer,
    SaleSerializer,
)
from sales.services.folio_service import (
    FolioError,
    FolioNotFoundError,
    FolioPermissionError,
    FolioStateError,
    cancel_folio,
    folio_summary,
    list_folios,
    update_folio_client,
    update_folio_date,
    update_line_quantity,
)
from store.services.context import build_context


# ======================================================
# API ERROR NORMALIZATION
# ======================================================

def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def folio_error_response(exc: Exception):
    if isinstance(exc, FolioPermissionError):
        return error_response(code="FORBIDDEN", message=str(exc), http_status=status.HTTP_403_FORBIDDEN)
    if isinstance(exc, FolioNotFoundError):
        return error_response(code="FOLIO_NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, FolioStateError):
        return error_response(code="FOLIO_CANCELLED", message=str(exc), http_status=status.HTTP_409_CONFLICT)
    if isinstance(exc, InsufficientStockError):
        return error_response(code="INSUFFICIENT_STOCK", message=str(exc), http_status=status.HTTP_409_CONFLICT)
    return error_response(code="INVALID_FOLIO_OPERATION", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)


def _detail_payload(folio: str) -> dict:
    return FolioDetailSerializer(folio_summary(folio)).data


# ======================================================
# FOLIO VIEWS
# ======================================================

class FolioListView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_SALES_READ

    @extend_schema(
        tags=["sales"],
        parameters=[
            OpenApiParameter("date_from", str, required=False),
            OpenApiParameter("date_to", str, required=False),
            OpenApiParameter("client", str, required=False),
            OpenApiParameter("include_cancelled", bool, required=False),
        ],
        responses={200: FolioSummarySerializer(many=True)},
    )
    def get(self, request):
        query = FolioListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data

        client = None
        if data.get("client"):
            client = get_object_or_404(Client, pk=data["client"])

        rows = list_folios(
            date_from=data.get("date_from"),
            date_to=data.get("date_to"),
            client=client,
            include_cancelled=data.get("include_cancelled", True),
        )

        page = self.paginate_queryset(rows)
        if page is not None:
            return self.get_paginated_response(FolioSummarySerializer(page, many=True).data)

        return Response(FolioSummarySerializer(rows, many=True).data)


class FolioDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_SALES_READ

    @extend_schema(tags=["sales"], responses={200: FolioDetailSerializer})
    def get(self, request, folio):
        try:
            return Response(_detail_payload(folio))
        except FolioError as exc:
            return folio_error_response(exc)


class FolioCancelView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_SALES_CANCEL

    @extend_schema(
        tags=["sales"],
        request=FolioCancelSerializer,
        responses={200: FolioDetailSerializer},
        description="Cancel every line of a folio (restock + loyalty reversal). Idempotent.",
    )
    def post(self, request, folio):
        s = FolioCancelSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        ctx = build_context(request.user)
        try:
            result = cancel_folio(ctx=ctx, folio=folio, reason=s.validated_data["reason"])
        except (FolioError, InsufficientStockError) as exc:
            return folio_error_response(exc)

        payload = _detail_payload(folio)
        payload["cancelled_now"] = result.cancelled
        return Response(payload, status=status.HTTP_200_OK)


class FolioDateView(GenericAPIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(tags=["sales"], request=FolioDateSerializer, responses={200: FolioDetailSerializer})
    def patch(self, request, folio):
        s = FolioDateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            update_folio_date(
                ctx=build_context(request.user),
                folio=folio,
                new_date=s.validated_data["date"],
            )
        except FolioError as exc:
            return folio_error_response(exc)

        return Response(_detail_payload(folio))


class FolioClientView(GenericAPIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(tags=["sales"], request=FolioClientSerializer, responses={200: FolioDetailSerializer})
    def patch(self, request, folio):
        s = FolioClientSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        client = None
        if s.validated_data.get("client_id"):
            client = get_object_or_404(Client, pk=s.validated_data["client_id"])

        try:
            update_folio_client(ctx=build_context(request.user), folio=folio, client=client)
        except FolioError as exc:
            return folio_error_response(exc)

        return Response(_detail_payload(folio))


# ======================================================
# SALE LINES
# ======================================================

class SaleLineViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Raw sale lines (read) + admin quantity correction.
    """

    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_SALES_READ
    filterset_fields = ["folio", "client", "sku", "is_cancelled", "payment_method"]

    def get_queryset(self):
        return Sale.objects.select_related("client", "product").order_by("-date", "folio")

    def get_permissions(self):
        if self.action == "quantity":
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), HasPermission()]

    @extend_schema(request=LineQuantitySerializer, responses={200: SaleSerializer})
    @action(detail=True, methods=["patch"], url_path="quantity")
    def quantity(self, request, pk=None):
        line = self.get_object()

        s = LineQuantitySerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            line = update_line_quantity(
                ctx=build_context(request.user),
                sale=line,
                quantity=s.validated_data["quantity"],
            )
        except (FolioError, InsufficientStockError) as exc:
            return folio_error_response(exc)

        return Response(SaleSerializer(line).data)
