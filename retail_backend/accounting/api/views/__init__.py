# accounting/api/views/__init__.py

"""
accounting.api.views package

Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.cash_flow import CashFlowReportView
from accounting.api.views.expenses import (
    CashMovementListCreateView,
    ExpenseDetailView,
    ExpenseListCreateView,
)

__all__ = [
    "ExpenseListCreateView",
    "ExpenseDetailView",
    "CashMovementListCreateView",
    "CashFlowReportView",
]
