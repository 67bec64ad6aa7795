# PATH: accounting/services/cashflow_service.py

"""
CASH FLOW REPORT SERVICE

Read-only report over a date range (inclusive, local dates):

Income (non-cancelled sale lines only):
- single-method lines add their amount to the channel
  cash | card (card_credit + card_debit + legacy card) | transfer | wallet
- multiple folios add their payment_details split ONCE per folio

Outflows:
- expenses classified by payment tag: cash | card | transfer
- manual cash drawer withdrawals

Cash on hand:
    net_cash = cash_in + deposits - cash_expenses - withdrawals

The entries list mixes folios (cancelled ones flagged), expenses and cash
movements, newest first, for the movements table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as date_type
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Sum
from django.utils import timezone

from accounting.models import CashMovement, Expense
from accounting.services.exceptions import AccountingPermissionError, ReportRangeError
from permissions.roles import PERM_CASHFLOW_READ, has_permission
from sales.models import Sale
from sales.models.sale import (
    PAYMENT_CARD,
    PAYMENT_CARD_CREDIT,
    PAYMENT_CARD_DEBIT,
    PAYMENT_CASH,
    PAYMENT_MULTIPLE,
    PAYMENT_TRANSFER,
    PAYMENT_WALLET,
)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

CHANNEL_CASH = "cash"
CHANNEL_CARD = "card"
CHANNEL_TRANSFER = "transfer"
CHANNEL_WALLET = "wallet"

METHOD_CHANNELS = {
    PAYMENT_CASH: CHANNEL_CASH,
    PAYMENT_CARD_CREDIT: CHANNEL_CARD,
    PAYMENT_CARD_DEBIT: CHANNEL_CARD,
    PAYMENT_CARD: CHANNEL_CARD,
    PAYMENT_TRANSFER: CHANNEL_TRANSFER,
    PAYMENT_WALLET: CHANNEL_WALLET,
}


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass
class CashFlowReport:
    date_from: date_type
    date_to: date_type

    cash_in: Decimal = ZERO
    card_in: Decimal = ZERO
    transfer_in: Decimal = ZERO
    wallet_in: Decimal = ZERO

    cash_expenses: Decimal = ZERO
    card_out: Decimal = ZERO
    transfer_out: Decimal = ZERO

    deposits: Decimal = ZERO
    withdrawals: Decimal = ZERO

    entries: list = field(default_factory=list)

    @property
    def total_income(self) -> Decimal:
        return _money(self.cash_in + self.card_in + self.transfer_in + self.wallet_in)

    @property
    def total_expenses(self) -> Decimal:
        return _money(self.cash_expenses + self.card_out + self.transfer_out)

    @property
    def net_cash(self) -> Decimal:
        return _money(self.cash_in + self.deposits - self.cash_expenses - self.withdrawals)

    def add_income(self, method: str, amount) -> None:
        channel = METHOD_CHANNELS.get(method)
        if channel is None:
            return
        attr = f"{channel}_in"
        setattr(self, attr, _money(getattr(self, attr) + _money(amount)))

    def as_dict(self) -> dict:
        return {
            "date_from": self.date_from.isoformat(),
            "date_to": self.date_to.isoformat(),
            "income": {
                "cash": str(self.cash_in),
                "card": str(self.card_in),
                "transfer": str(self.transfer_in),
                "wallet": str(self.wallet_in),
                "total": str(self.total_income),
            },
            "expenses": {
                "cash": str(self.cash_expenses),
                "card": str(self.card_out),
                "transfer": str(self.transfer_out),
                "total": str(self.total_expenses),
            },
            "cash_drawer": {
                "deposits": str(self.deposits),
                "withdrawals": str(self.withdrawals),
            },
            "net_cash": str(self.net_cash),
            "entries": self.entries,
        }


def _sale_income(report: CashFlowReport, sales) -> None:
    singles = (
        sales.filter(is_cancelled=False)
        .exclude(payment_method=PAYMENT_MULTIPLE)
        .values("payment_method")
        .annotate(total=Sum("amount"))
    )
    for row in singles:
        report.add_income(row["payment_method"], row["total"])

    seen: set[str] = set()
    multiples = (
        sales.filter(is_cancelled=False, payment_method=PAYMENT_MULTIPLE)
        .order_by("folio", "created_at")
        .values("folio", "payment_details")
    )
    for row in multiples:
        if row["folio"] in seen:
            continue
        seen.add(row["folio"])
        for method, amount in (row["payment_details"] or {}).items():
            report.add_income(method, amount)


def _folio_entries(sales) -> list[dict]:
    folios: dict[str, dict] = {}
    for line in sales.order_by("date", "created_at"):
        entry = folios.get(line.folio)
        if entry is None:
            entry = folios[line.folio] = {
                "entry_type": "sale",
                "date": line.date.isoformat(),
                "concept": f"Venta Folio {line.folio}",
                "method": line.payment_method,
                "amount": ZERO,
                "is_cancelled": line.is_cancelled,
            }
        entry["amount"] += _money(line.amount)

    out = []
    for entry in folios.values():
        entry["amount"] = str(_money(entry["amount"]))
        out.append(entry)
    return out


def cash_flow_report(*, date_from=None, date_to=None, actor=None) -> CashFlowReport:
    """
    Build the cash-flow report. When actor is given it must hold cashflow:read.
    Missing bounds default to today.
    """
    if actor is not None and not has_permission(actor, PERM_CASHFLOW_READ):
        raise AccountingPermissionError("You do not have permission to view the cash flow.")

    today = timezone.localdate()
    date_from = date_from or today
    date_to = date_to or today
    if date_from > date_to:
        raise ReportRangeError("date_from must be on or before date_to")

    report = CashFlowReport(date_from=date_from, date_to=date_to)

    sales = Sale.objects.filter(date__date__gte=date_from, date__date__lte=date_to)
    _sale_income(report, sales)

    entries = _folio_entries(sales)

    expenses = Expense.objects.filter(date__date__gte=date_from, date__date__lte=date_to)
    for expense in expenses:
        channel = Expense.classify_description(expense.description)
        if channel == Expense.PAYMENT_CASH:
            channel = expense.payment_method

        if channel == Expense.PAYMENT_CARD:
            report.card_out = _money(report.card_out + expense.amount)
        elif channel == Expense.PAYMENT_TRANSFER:
            report.transfer_out = _money(report.transfer_out + expense.amount)
        else:
            report.cash_expenses = _money(report.cash_expenses + expense.amount)

        entries.append(
            {
                "entry_type": "expense",
                "date": expense.date.isoformat(),
                "concept": expense.description,
                "method": channel,
                "amount": str(-_money(expense.amount)),
                "is_cancelled": False,
            }
        )

    movements = CashMovement.objects.filter(date__date__gte=date_from, date__date__lte=date_to)
    for movement in movements:
        if movement.type == CashMovement.TYPE_DEPOSIT:
            report.deposits = _money(report.deposits + movement.amount)
        else:
            report.withdrawals = _money(report.withdrawals + movement.amount)

        entries.append(
            {
                "entry_type": "movement",
                "date": movement.date.isoformat(),
                "concept": movement.description or movement.get_type_display(),
                "method": PAYMENT_CASH,
                "amount": str(_money(movement.signed_amount)),
                "is_cancelled": False,
            }
        )

    entries.sort(key=lambda e: e["date"], reverse=True)
    report.entries = entries
    return report
