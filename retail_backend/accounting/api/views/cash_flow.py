# accounting/api/views/cash_flow.py

"""
PATH: accounting/api/views/cash_flow.py

CASH FLOW REPORT

GET /api/accounting/cash-flow/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
- Requires cashflow:read
- Both bounds default to today (local date)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.serializers import CashFlowQuerySerializer
from accounting.api.views.expenses import accounting_error_response
from accounting.services.cashflow_service import cash_flow_report
from accounting.services.exceptions import AccountingServiceError
from permissions.roles import PERM_CASHFLOW_READ, HasPermission


class CashFlowReportView(APIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_CASHFLOW_READ

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter("date_from", str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter("date_to", str, required=False, description="YYYY-MM-DD"),
        ],
        responses={200: dict},
    )
    def get(self, request):
        query = CashFlowQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            report = cash_flow_report(
                date_from=query.validated_data.get("date_from"),
                date_to=query.validated_data.get("date_to"),
                actor=request.user,
            )
        except AccountingServiceError as exc:
            return accounting_error_response(exc)

        return Response(report.as_dict(), status=status.HTTP_200_OK)
