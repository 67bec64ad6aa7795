# PATH: accounting/services/expense_service.py

"""
EXPENSE & CASH DRAWER SERVICE

Responsibilities:
- Validate expense payload
- Tag the description with the payment method (non-cash)
- Normalize the expense date
- Create / delete Expense records
- Record manual cash drawer movements (deposit / withdrawal)

Security:
- Writing expenses and cash movements requires expenses:manage

Date rule:
- a bare date equal to today is stored with the current time
- any other bare date is stored at 12:00 local, so timezone shifts keep the day
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from accounting.models import CashMovement, Expense
from accounting.services.exceptions import (
    AccountingPermissionError,
    CashMovementError,
    ExpenseError,
)
from permissions.roles import PERM_EXPENSES_MANAGE, has_permission

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _actor_name(actor) -> str:
    return str(getattr(actor, "display_name", "") or getattr(actor, "username", "") or "")


def _assert_can_manage(*, actor) -> None:
    if not has_permission(actor, PERM_EXPENSES_MANAGE):
        raise AccountingPermissionError("You do not have permission to manage expenses.")


def normalize_entry_date(value) -> datetime:
    if value is None:
        return timezone.now()

    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value, timezone.get_current_timezone())
        return value

    if isinstance(value, date_type):
        if value == timezone.localdate():
            return timezone.now()
        return timezone.make_aware(datetime.combine(value, time(12, 0)), timezone.get_current_timezone())

    raise ExpenseError("date must be a date or datetime")


@transaction.atomic
def create_expense(
    *,
    actor,
    description: str,
    amount,
    payment_method: str = Expense.PAYMENT_CASH,
    type: str = Expense.TYPE_VARIABLE,
    category: str = "General",
    date=None,
) -> Expense:
    _assert_can_manage(actor=actor)

    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise ExpenseError("Amount must be > 0")

    description = (description or "").strip()
    if not description:
        raise ExpenseError("Description is required")

    method = (payment_method or Expense.PAYMENT_CASH).lower().strip()
    if method not in dict(Expense.PAYMENT_METHODS):
        raise ExpenseError("Invalid payment_method. Use 'cash', 'transfer', or 'card'.")

    if type not in dict(Expense.TYPES):
        raise ExpenseError("Invalid type. Use 'fijo' or 'variable'.")

    expense = Expense(
        date=normalize_entry_date(date),
        description=Expense.tagged_description(description, method),
        amount=amt,
        type=type,
        category=(category or "").strip() or "General",
        payment_method=method,
        user=actor if getattr(actor, "pk", None) else None,
        user_name=_actor_name(actor),
    )

    try:
        expense.full_clean()
    except ValidationError as exc:
        raise ExpenseError("; ".join(exc.messages)) from exc

    expense.save()

    logger.info(
        "Expense recorded",
        extra={"expense_id": expense.id, "amount": str(amt), "payment_method": method},
    )
    return expense


@transaction.atomic
def delete_expense(*, actor, expense: Expense) -> None:
    _assert_can_manage(actor=actor)

    logger.info(
        "Expense deleted",
        extra={"expense_id": expense.id, "amount": str(expense.amount)},
    )
    expense.delete()


@transaction.atomic
def record_cash_movement(*, actor, type: str, amount, description: str = "", date=None) -> CashMovement:
    _assert_can_manage(actor=actor)

    if type not in dict(CashMovement.TYPES):
        raise CashMovementError("Invalid type. Use 'deposit' or 'withdrawal'.")

    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise CashMovementError("Amount must be > 0")

    try:
        when = normalize_entry_date(date)
    except ExpenseError as exc:
        raise CashMovementError(str(exc)) from exc

    try:
        movement = CashMovement.objects.create(
            type=type,
            amount=amt,
            description=(description or "").strip(),
            date=when,
            user=actor if getattr(actor, "pk", None) else None,
            user_name=_actor_name(actor),
        )
    except ValidationError as exc:
        raise CashMovementError("; ".join(exc.messages)) from exc

    logger.info(
        "Cash movement recorded",
        extra={"movement_id": movement.id, "type": type, "amount": str(amt)},
    )
    return movement
