# purchases/api/views.py

"""
PURCHASES API

GET    /api/purchases/                 list (products:read)
POST   /api/purchases/                 record + stock in (products:manage)
GET    /api/purchases/<id>/            detail (products:read)
PATCH  /api/purchases/<id>/            edit, stock follows the delta (products:manage)
DELETE /api/purchases/<id>/            delete, stock goes back out (products:manage)
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import PERM_PRODUCTS_MANAGE, PERM_PRODUCTS_READ, HasPermission
from products.models import Product
from products.services.stock import InsufficientStockError
from purchases.api.serializers import (
    PurchaseCreateSerializer,
    PurchaseSerializer,
    PurchaseUpdateSerializer,
)
from purchases.models import Purchase
from purchases.services.purchase_service import (
    PurchaseError,
    PurchasePermissionError,
    delete_purchase,
    record_purchase,
    update_purchase,
)


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def purchase_error_response(exc: Exception):
    if isinstance(exc, PurchasePermissionError):
        return error_response(code="FORBIDDEN", message=str(exc), http_status=status.HTTP_403_FORBIDDEN)
    if isinstance(exc, InsufficientStockError):
        return error_response(code="INSUFFICIENT_STOCK", message=str(exc), http_status=status.HTTP_409_CONFLICT)
    return error_response(code="INVALID_PURCHASE", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)


class PurchaseBaseView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    serializer_class = PurchaseSerializer

    @property
    def required_permission(self):
        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            return PERM_PRODUCTS_READ
        return PERM_PRODUCTS_MANAGE


class PurchaseListCreateView(PurchaseBaseView):
    filterset_fields = ["sku", "supplier", "product"]

    def get_queryset(self):
        qs = Purchase.objects.select_related("product").order_by("-date", "-created_at")

        date_from = self.request.query_params.get("date_from")
        date_to = self.request.query_params.get("date_to")
        if date_from:
            qs = qs.filter(date__date__gte=date_from)
        if date_to:
            qs = qs.filter(date__date__lte=date_to)
        return qs

    @extend_schema(tags=["purchases"], responses=PurchaseSerializer(many=True))
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PurchaseSerializer(page, many=True).data)

        return Response(PurchaseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseCreateSerializer,
        responses={201: PurchaseSerializer},
    )
    def post(self, request):
        s = PurchaseCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        product = get_object_or_404(Product, id=data["product_id"])

        try:
            purchase = record_purchase(
                actor=request.user,
                product=product,
                quantity=data["quantity"],
                cost_unit=data["cost_unit"],
                supplier=data.get("supplier", ""),
                notes=data.get("notes", ""),
                date=data.get("date"),
            )
        except PurchaseError as exc:
            return purchase_error_response(exc)

        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)


class PurchaseDetailView(PurchaseBaseView):
    def get_queryset(self):
        return Purchase.objects.select_related("product")

    @extend_schema(tags=["purchases"], responses={200: PurchaseSerializer})
    def get(self, request, purchase_id):
        purchase = get_object_or_404(self.get_queryset(), id=purchase_id)
        return Response(PurchaseSerializer(purchase).data)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseUpdateSerializer,
        responses={200: PurchaseSerializer},
    )
    def patch(self, request, purchase_id):
        purchase = get_object_or_404(self.get_queryset(), id=purchase_id)

        s = PurchaseUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        changes = dict(s.validated_data)

        product_id = changes.pop("product_id", None)
        if product_id:
            changes["product"] = get_object_or_404(Product, id=product_id)

        try:
            purchase = update_purchase(actor=request.user, purchase=purchase, **changes)
        except (PurchaseError, InsufficientStockError) as exc:
            return purchase_error_response(exc)

        return Response(PurchaseSerializer(purchase).data)

    @extend_schema(tags=["purchases"], responses={204: None})
    def delete(self, request, purchase_id):
        purchase = get_object_or_404(self.get_queryset(), id=purchase_id)

        try:
            delete_purchase(actor=request.user, purchase=purchase)
        except (PurchaseError, InsufficientStockError) as exc:
            return purchase_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)
