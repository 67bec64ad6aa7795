# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.cash_movement import CashMovement
from accounting.models.expense import Expense

__all__ = [
    "Expense",
    "CashMovement",
]
