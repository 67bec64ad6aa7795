# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Product catalogue CRUD (products:manage to write, products:read to browse)
- Tier quote for a quantity (what the POS will charge)
- Stock movement history per product (audit)
"""

from django.db import transaction
from django.db.models import ProtectedError, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import PERM_PRODUCTS_MANAGE, PERM_PRODUCTS_READ, HasPermission
from products.models import Product
from products.serializers.product import (
    ProductSerializer,
    QuoteQuerySerializer,
    QuoteResponseSerializer,
    StockMovementSerializer,
)
from products.services.pricing import quote_line
from products.services.stock import record_initial_stock
from store.services.context import build_context


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


READ_ACTIONS = {"list", "retrieve", "quote", "movements"}


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, HasPermission]
    filterset_fields = ["category", "sku"]

    required_permission = PERM_PRODUCTS_READ

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            self.required_permission = PERM_PRODUCTS_READ
        else:
            self.required_permission = PERM_PRODUCTS_MANAGE
        return [IsAuthenticated(), HasPermission()]

    def get_queryset(self):
        qs = Product.objects.all().order_by("name")

        term = (self.request.query_params.get("q") or "").strip()
        if term:
            qs = qs.filter(Q(name__icontains=term) | Q(sku__icontains=term))

        return qs

    @transaction.atomic
    def perform_create(self, serializer):
        initial = int(serializer.validated_data.get("stock_initial") or 0)
        product = serializer.save(stock_current=initial)
        record_initial_stock(product=product, actor=self.request.user)

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        try:
            product.delete()
        except ProtectedError:
            return error_response(
                code="PRODUCT_IN_USE",
                message="Product has sales, purchases or stock history and cannot be deleted.",
                http_status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[OpenApiParameter("quantity", int, required=True)],
        responses={200: QuoteResponseSerializer},
        description="Resolve price tier and amount for a quantity using current settings",
    )
    @action(detail=True, methods=["get"], url_path="quote")
    def quote(self, request, pk=None):
        product = self.get_object()

        query = QuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        ctx = build_context(request.user)
        q = quote_line(product, query.validated_data["quantity"], settings=ctx.settings)

        return Response(
            QuoteResponseSerializer(
                {"tier": q.tier, "unit_price": q.unit_price, "amount": q.amount}
            ).data
        )

    @extend_schema(responses={200: StockMovementSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        product = self.get_object()
        qs = product.stock_movements.select_related("product").order_by("-created_at")

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockMovementSerializer(page, many=True).data)

        return Response(StockMovementSerializer(qs, many=True).data)
