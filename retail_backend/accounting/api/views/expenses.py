# PATH: accounting/api/views/expenses.py

"""
EXPENSES & CASH DRAWER API

GET    /api/accounting/expenses/              expenses:manage or cashflow:read
POST   /api/accounting/expenses/              expenses:manage
DELETE /api/accounting/expenses/<id>/         expenses:manage
GET    /api/accounting/cash-movements/        expenses:manage or cashflow:read
POST   /api/accounting/cash-movements/        expenses:manage
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers import (
    CashMovementCreateSerializer,
    CashMovementSerializer,
    ExpenseCreateSerializer,
    ExpenseSerializer,
)
from accounting.models import CashMovement, Expense
from accounting.services.exceptions import AccountingPermissionError, AccountingServiceError
from accounting.services.expense_service import (
    create_expense,
    delete_expense,
    record_cash_movement,
)
from permissions.roles import (
    PERM_CASHFLOW_READ,
    PERM_EXPENSES_MANAGE,
    HasAnyPermission,
    HasPermission,
)


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def accounting_error_response(exc: AccountingServiceError):
    if isinstance(exc, AccountingPermissionError):
        return error_response(code="FORBIDDEN", message=str(exc), http_status=status.HTTP_403_FORBIDDEN)
    return error_response(code="INVALID_ENTRY", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)


def _date_bounded(request, qs):
    date_from = request.query_params.get("date_from")
    date_to = request.query_params.get("date_to")
    if date_from:
        qs = qs.filter(date__date__gte=date_from)
    if date_to:
        qs = qs.filter(date__date__lte=date_to)
    return qs


class AccountingWriteGuardMixin:
    """
    Reads: expenses:manage OR cashflow:read. Writes: expenses:manage.
    """

    required_permission = PERM_EXPENSES_MANAGE
    required_any_permissions = {PERM_EXPENSES_MANAGE, PERM_CASHFLOW_READ}

    def get_permissions(self):
        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            return [IsAuthenticated(), HasAnyPermission()]
        return [IsAuthenticated(), HasPermission()]


DATE_PARAMS = [
    OpenApiParameter("date_from", str, required=False),
    OpenApiParameter("date_to", str, required=False),
]


class ExpenseListCreateView(AccountingWriteGuardMixin, GenericAPIView):
    serializer_class = ExpenseCreateSerializer
    filterset_fields = ["type", "category", "payment_method"]

    def get_queryset(self):
        return _date_bounded(self.request, Expense.objects.order_by("-date", "-created_at"))

    @extend_schema(
        tags=["accounting"],
        parameters=DATE_PARAMS,
        responses=ExpenseSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ExpenseSerializer(page, many=True).data)

        return Response(ExpenseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=ExpenseCreateSerializer,
        responses={201: ExpenseSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            expense = create_expense(
                actor=request.user,
                description=data["description"],
                amount=data["amount"],
                payment_method=data["payment_method"],
                type=data["type"],
                category=data.get("category", "General"),
                date=data.get("date"),
            )
        except AccountingServiceError as exc:
            return accounting_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class ExpenseDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_EXPENSES_MANAGE
    serializer_class = ExpenseSerializer

    @extend_schema(tags=["accounting"], responses={204: None})
    def delete(self, request, expense_id):
        expense = get_object_or_404(Expense, id=expense_id)

        try:
            delete_expense(actor=request.user, expense=expense)
        except AccountingServiceError as exc:
            return accounting_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)


class CashMovementListCreateView(AccountingWriteGuardMixin, GenericAPIView):
    serializer_class = CashMovementCreateSerializer
    filterset_fields = ["type"]

    def get_queryset(self):
        return _date_bounded(self.request, CashMovement.objects.order_by("-date", "-created_at"))

    @extend_schema(
        tags=["accounting"],
        parameters=DATE_PARAMS,
        responses=CashMovementSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CashMovementSerializer(page, many=True).data)

        return Response(CashMovementSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=CashMovementCreateSerializer,
        responses={201: CashMovementSerializer},
    )
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            movement = record_cash_movement(
                actor=request.user,
                type=data["type"],
                amount=data["amount"],
                description=data.get("description", ""),
            )
        except AccountingServiceError as exc:
            return accounting_error_response(exc)

        return Response(CashMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
