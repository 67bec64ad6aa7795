# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for expense, cash drawer and report services.
"""


class AccountingServiceError(ValueError):
    """Base exception for all accounting service failures."""


class AccountingPermissionError(AccountingServiceError):
    """Raised when the actor lacks expenses:manage / cashflow:read."""


class ExpenseError(AccountingServiceError):
    """Raised when an expense payload is invalid."""


class CashMovementError(AccountingServiceError):
    """Raised when a cash drawer movement is invalid."""


class ReportRangeError(AccountingServiceError):
    """Raised when a report date range is invalid."""
