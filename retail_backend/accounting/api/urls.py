# accounting/api/urls.py

from django.urls import path

from accounting.api.views import (
    CashFlowReportView,
    CashMovementListCreateView,
    ExpenseDetailView,
    ExpenseListCreateView,
)

urlpatterns = [
    path("expenses/", ExpenseListCreateView.as_view(), name="expenses"),
    path("expenses/<int:expense_id>/", ExpenseDetailView.as_view(), name="expense-detail"),
    path("cash-movements/", CashMovementListCreateView.as_view(), name="cash-movements"),
    path("cash-flow/", CashFlowReportView.as_view(), name="cash-flow"),
]
