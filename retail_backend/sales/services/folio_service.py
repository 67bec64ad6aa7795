# sales/services/folio_service.py

"""
FOLIO SERVICE (APPLICATION SERVICE)

confirm_batch:
    allocate folio -> persist lines -> decrement stock -> post loyalty effects
cancel_folio:
    compare-and-set is_cancelled -> reverse loyalty -> restock

Both run inside ONE transaction.atomic block: any failure (insufficient stock,
wallet rejected under lock, DB error) rolls back every sale row, stock
movement and ledger entry of the flow.

Admin edits (date, client, line quantity) are only allowed on active folios.
Date and client edits have no stock or loyalty side effects; a quantity edit
moves stock by the delta (SALE_EDIT) and does not touch the loyalty ledger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as date_cls
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import CharField, Count, IntegerField, Max, Min, Q, Sum
from django.db.models.functions import Cast
from django.utils import timezone

from clients.models import GENERAL_CLIENT_ID, GENERAL_CLIENT_NAME, Client
from loyalty.services.ledger import post_sale_effects, reverse_folio_effects
from permissions.roles import (
    PERM_SALES_CANCEL,
    PERM_SALES_CREATE,
    has_permission,
    is_admin,
)
from products.models import StockMovement
from products.services.stock import adjust_stock
from sales.models import FolioSequence, Sale
from sales.services.sale_lifecycle import (
    FOLIO_ACTIVE,
    FOLIO_CANCELLED,
    InvalidFolioTransitionError,
    assert_editable,
    folio_state,
    validate_transition,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

CANCEL_NOTE_PREFIX = "CANCELADO: "


def _money(v) -> Decimal:
    if v is None or v == "":
        return ZERO
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# ============================================================
# ERRORS
# ============================================================


class FolioError(ValueError):
    pass


class FolioPermissionError(FolioError):
    pass


class FolioNotFoundError(FolioError):
    pass


class EmptyBatchError(FolioError):
    pass


class SettlementMismatchError(FolioError):
    pass


class FolioStateError(FolioError):
    pass


# ============================================================
# RESULT TYPES
# ============================================================


@dataclass(frozen=True)
class ConfirmedFolio:
    folio: str
    lines: list
    total: Decimal
    payment_method: str


@dataclass(frozen=True)
class CancelResult:
    folio: str
    cancelled: bool
    restocked_lines: int = 0
    ledger_entries: int = 0


@dataclass
class FolioSummary:
    folio: str
    date: datetime | None
    client_id: object
    client_name: str
    seller_name: str
    payment_method: str
    payment_details: dict | None
    total: Decimal
    line_count: int
    is_cancelled: bool
    lines: list = field(default_factory=list)


# ============================================================
# HELPERS
# ============================================================


def _pad_width() -> int:
    return int(getattr(settings, "FOLIO_PAD_WIDTH", 5))


def _epsilon() -> Decimal:
    return Decimal(str(getattr(settings, "SPLIT_EPSILON", "0.01")))


def _require(ctx, permission: str) -> None:
    if not has_permission(ctx.actor, permission):
        raise FolioPermissionError(f"Missing permission: {permission}")


def _require_admin(ctx) -> None:
    if not is_admin(ctx.actor):
        raise FolioPermissionError("Only an admin can edit confirmed folios.")


def _lock_lines(folio: str) -> list[Sale]:
    lines = list(Sale.objects.select_for_update().filter(folio=folio).order_by("created_at"))
    if not lines:
        raise FolioNotFoundError(f"Folio {folio} not found")
    return lines


def _assert_active(folio: str, lines) -> None:
    try:
        assert_editable(folio=folio, state=folio_state(lines))
    except InvalidFolioTransitionError as exc:
        raise FolioStateError(str(exc)) from exc


def _resolve_client(client) -> Client:
    if client is None:
        return Client.objects.get(pk=GENERAL_CLIENT_ID)
    return client


def allocate_folio() -> str:
    """
    Next folio from the locked counter row. Must run inside a transaction.
    The first allocation seeds the counter from existing sale rows.
    """
    seq, _ = FolioSequence.objects.select_for_update().get_or_create(pk=1)

    if seq.last_value == 0:
        current_max = (
            Sale.objects.filter(folio__regex=r"^[0-9]+$")
            .aggregate(m=Max(Cast("folio", IntegerField())))
            .get("m")
        )
        seq.last_value = int(current_max or 0)

    seq.last_value += 1
    seq.save(update_fields=["last_value", "updated_at"])

    return str(seq.last_value).zfill(_pad_width())


# ============================================================
# CONFIRM
# ============================================================


@transaction.atomic
def confirm_batch(*, ctx, lines, client, settlement) -> ConfirmedFolio:
    """
    Persist pending lines as one folio.

    lines: iterable of objects exposing product, quantity, price_type,
           unit_price, amount, is_correction, correction_note (CartItem works)
    client: Client or None (general)
    settlement: validated sales.services.settlement.Settlement
    """
    _require(ctx, PERM_SALES_CREATE)

    lines = list(lines)
    if not lines:
        raise EmptyBatchError("Cannot confirm an empty sale")

    lines_total = sum((_money(line.amount) for line in lines), ZERO)
    if abs(lines_total - _money(settlement.total)) > _epsilon():
        raise SettlementMismatchError(
            f"Settlement total {settlement.total} does not match lines total {lines_total}"
        )

    client = _resolve_client(client)
    folio = allocate_folio()
    now = timezone.now()

    created: list[Sale] = []
    for line in lines:
        product = line.product
        sale = Sale(
            folio=folio,
            date=now,
            product=product,
            sku=product.sku,
            product_name=product.name,
            unit=product.unit,
            quantity=int(line.quantity),
            price_type=line.price_type,
            unit_price=_money(line.unit_price),
            amount=_money(line.amount),
            seller=ctx.actor if getattr(ctx.actor, "pk", None) else None,
            seller_name=ctx.actor_name,
            client=client,
            client_name=client.name or GENERAL_CLIENT_NAME,
            payment_method=settlement.payment_method,
            payment_details=settlement.details_for_storage(),
            is_correction=bool(line.is_correction),
            correction_note=line.correction_note or "",
        )
        sale.full_clean()
        sale.save()
        created.append(sale)

    # stable lock order across concurrent checkouts
    for sale in sorted(created, key=lambda s: str(s.product_id)):
        adjust_stock(
            product=sale.product,
            delta=-sale.quantity,
            reason=StockMovement.Reason.SALE,
            actor=ctx.actor,
            folio=folio,
            reference=sale.id,
        )

    post_sale_effects(
        ctx=ctx,
        folio=folio,
        client=client,
        line_amounts=[s.amount for s in created],
        wallet_amount=settlement.wallet_amount,
    )

    logger.info(
        "Folio confirmed",
        extra={
            "folio": folio,
            "client_id": str(client.pk),
            "total": str(lines_total),
            "payment_method": settlement.payment_method,
            "lines": len(created),
        },
    )

    return ConfirmedFolio(
        folio=folio,
        lines=created,
        total=lines_total,
        payment_method=settlement.payment_method,
    )


# ============================================================
# CANCEL
# ============================================================


@transaction.atomic
def cancel_folio(*, ctx, folio: str, reason: str) -> CancelResult:
    """
    Cancel every line of a folio. Amounts and quantities are preserved.

    The is_cancelled flag is flipped with a conditional UPDATE
    (compare-and-set): only the caller that flips it applies the stock and
    ledger reversal. A second cancel is a logged no-op.
    """
    _require(ctx, PERM_SALES_CANCEL)

    reason = (reason or "").strip()
    if not reason:
        raise FolioError("A cancellation reason is required.")

    lines = _lock_lines(folio)
    state = folio_state(lines)

    if state == FOLIO_CANCELLED:
        logger.info("Folio cancel no-op (already cancelled)", extra={"folio": folio})
        return CancelResult(folio=folio, cancelled=False)

    validate_transition(folio=folio, from_state=FOLIO_ACTIVE, to_state=FOLIO_CANCELLED)

    pending = [line for line in lines if not line.is_cancelled]

    flipped = Sale.objects.filter(
        pk__in=[line.pk for line in pending],
        is_cancelled=False,
    ).update(
        is_cancelled=True,
        correction_note=f"{CANCEL_NOTE_PREFIX}{reason}",
        cancelled_at=timezone.now(),
        updated_at=timezone.now(),
    )

    if flipped == 0:
        logger.info("Folio cancel no-op (lost race)", extra={"folio": folio})
        return CancelResult(folio=folio, cancelled=False)

    ledger_entries = reverse_folio_effects(ctx=ctx, folio=folio)

    for line in sorted(pending, key=lambda s: str(s.product_id)):
        adjust_stock(
            product=line.product,
            delta=line.quantity,
            reason=StockMovement.Reason.CANCELLATION,
            actor=ctx.actor,
            folio=folio,
            reference=line.id,
        )

    logger.info(
        "Folio cancelled",
        extra={
            "folio": folio,
            "reason": reason,
            "lines": len(pending),
            "ledger_entries": len(ledger_entries),
        },
    )

    return CancelResult(
        folio=folio,
        cancelled=True,
        restocked_lines=len(pending),
        ledger_entries=len(ledger_entries),
    )


# ============================================================
# ADMIN EDITS
# ============================================================


def _normalize_folio_date(value) -> datetime:
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return value

    if isinstance(value, date_cls):
        # a bare date is stored at noon so timezone shifts keep the same day
        return timezone.make_aware(datetime.combine(value, time(12, 0)))

    raise FolioError("A date or datetime is required.")


@transaction.atomic
def update_folio_date(*, ctx, folio: str, new_date) -> int:
    _require_admin(ctx)

    lines = _lock_lines(folio)
    _assert_active(folio, lines)

    when = _normalize_folio_date(new_date)
    updated = Sale.objects.filter(folio=folio).update(date=when, updated_at=timezone.now())

    logger.info("Folio date updated", extra={"folio": folio, "date": when.isoformat()})
    return updated


@transaction.atomic
def update_folio_client(*, ctx, folio: str, client) -> int:
    _require_admin(ctx)

    lines = _lock_lines(folio)
    _assert_active(folio, lines)

    client = _resolve_client(client)
    updated = Sale.objects.filter(folio=folio).update(
        client=client,
        client_name=client.name,
        updated_at=timezone.now(),
    )

    logger.info("Folio client updated", extra={"folio": folio, "client_id": str(client.pk)})
    return updated


@transaction.atomic
def update_line_quantity(*, ctx, sale: Sale, quantity: int) -> Sale:
    """
    Admin correction of a confirmed line.
    amount = quantity × frozen unit_price; stock moves by the difference.
    """
    _require_admin(ctx)

    lines = _lock_lines(sale.folio)
    _assert_active(sale.folio, lines)

    line = next((item for item in lines if item.pk == sale.pk), None)
    if line is None:
        raise FolioNotFoundError(f"Line {sale.pk} not found in folio {sale.folio}")

    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise FolioError("quantity must be an integer") from exc

    if qty == 0:
        raise FolioError("quantity cannot be zero; cancel the folio instead")

    qty = -abs(qty) if line.is_correction else abs(qty)
    delta = qty - line.quantity

    if delta == 0:
        return line

    adjust_stock(
        product=line.product,
        delta=-delta,
        reason=StockMovement.Reason.SALE_EDIT,
        actor=ctx.actor,
        folio=line.folio,
        reference=line.id,
    )

    line.quantity = qty
    line.amount = _money(line.unit_price * Decimal(qty))
    line.save(update_fields=["quantity", "amount", "updated_at"])

    logger.info(
        "Sale line quantity updated",
        extra={"folio": line.folio, "sku": line.sku, "quantity": qty, "delta": delta},
    )
    return line


# ============================================================
# READS
# ============================================================


def folio_summary(folio: str) -> FolioSummary:
    lines = list(
        Sale.objects.filter(folio=folio).select_related("client").order_by("created_at")
    )
    if not lines:
        raise FolioNotFoundError(f"Folio {folio} not found")

    first = lines[0]
    return FolioSummary(
        folio=folio,
        date=first.date,
        client_id=first.client_id,
        client_name=first.client_name,
        seller_name=first.seller_name,
        payment_method=first.payment_method,
        payment_details=first.payment_details,
        total=sum((_money(line.amount) for line in lines), ZERO),
        line_count=len(lines),
        is_cancelled=folio_state(lines) == FOLIO_CANCELLED,
        lines=lines,
    )


def list_folios(*, date_from=None, date_to=None, client=None, include_cancelled=True):
    """
    One row per folio, newest first. date_from/date_to are inclusive dates.
    """
    qs = Sale.objects.all()

    if date_from:
        qs = qs.filter(date__date__gte=date_from)
    if date_to:
        qs = qs.filter(date__date__lte=date_to)
    if client is not None:
        qs = qs.filter(client=client)

    rows = (
        qs.values("folio")
        .annotate(
            first_date=Min("date"),
            client_ref=Max(Cast("client_id", CharField())),
            client_label=Max("client_name"),
            seller_label=Max("seller_name"),
            method=Max("payment_method"),
            total=Sum("amount"),
            line_count=Count("id"),
            cancelled_count=Count("id", filter=Q(is_cancelled=True)),
        )
        .order_by("-first_date", "-folio")
    )

    out = []
    for row in rows:
        is_cancelled = row["cancelled_count"] == row["line_count"]
        if is_cancelled and not include_cancelled:
            continue
        out.append(
            FolioSummary(
                folio=row["folio"],
                date=row["first_date"],
                client_id=row["client_ref"],
                client_name=row["client_label"],
                seller_name=row["seller_label"],
                payment_method=row["method"],
                payment_details=None,
                total=_money(row["total"]),
                line_count=row["line_count"],
                is_cancelled=is_cancelled,
            )
        )
    return out
