# accounting/api/serializers/__init__.py

from accounting.api.serializers.cash_movements import (
    CashFlowQuerySerializer,
    CashMovementCreateSerializer,
    CashMovementSerializer,
)
from accounting.api.serializers.expenses import (
    ExpenseCreateSerializer,
    ExpenseSerializer,
)

__all__ = [
    "ExpenseSerializer",
    "ExpenseCreateSerializer",
    "CashMovementSerializer",
    "CashMovementCreateSerializer",
    "CashFlowQuerySerializer",
]
