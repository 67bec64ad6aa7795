# products/services/stock.py

"""
======================================================
PATH: products/services/stock.py
======================================================
STOCK LEDGER SERVICE

Purpose:
- The ONLY writer of Product.stock_current.
- Every change is an atomic UPDATE ... SET stock_current = stock_current + delta
  followed by an immutable StockMovement row.

Rules:
- delta is a signed integer (negative = out, positive = in).
- Decrements are guarded: the UPDATE only matches while stock_current >= -delta.
  If it does not match, InsufficientStockError is raised (unless
  settings.ALLOW_NEGATIVE_STOCK is on).
- Callers run inside their own transaction.atomic block; a raised error rolls
  back every movement of the flow.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F

from products.models import Product, StockMovement

logger = logging.getLogger(__name__)


class StockError(Exception):
    """Base stock ledger exception"""


class InsufficientStockError(StockError):
    def __init__(self, *, product, requested: int, available: int):
        self.product = product
        self.requested = int(requested)
        self.available = int(available)
        super().__init__(
            f"Insufficient stock for {product.name} ({product.sku}). "
            f"Available: {self.available}, Requested: {self.requested}"
        )


def _allow_negative() -> bool:
    return bool(getattr(settings, "ALLOW_NEGATIVE_STOCK", False))


@transaction.atomic
def adjust_stock(
    *,
    product: Product,
    delta: int,
    reason: str,
    actor=None,
    folio: str = "",
    reference: str = "",
) -> StockMovement | None:
    """
    Apply a signed stock change to a product and log it.
    Returns the StockMovement, or None when delta == 0.
    """
    delta = int(delta)
    if delta == 0:
        return None

    qs = Product.objects.filter(pk=product.pk)
    if delta < 0 and not _allow_negative():
        qs = qs.filter(stock_current__gte=-delta)

    updated = qs.update(stock_current=F("stock_current") + delta)

    if not updated:
        current = (
            Product.objects.filter(pk=product.pk)
            .values_list("stock_current", flat=True)
            .first()
        )
        if current is None:
            raise StockError(f"Product {product.pk} no longer exists")

        logger.warning(
            "Stock decrement rejected",
            extra={
                "sku": product.sku,
                "requested": -delta,
                "available": current,
                "reason": reason,
                "folio": folio,
            },
        )
        raise InsufficientStockError(product=product, requested=-delta, available=current)

    product.refresh_from_db(fields=["stock_current"])

    return StockMovement.objects.create(
        product=product,
        reason=reason,
        quantity=delta,
        stock_after=product.stock_current,
        folio=folio or "",
        reference=str(reference or ""),
        performed_by=actor if getattr(actor, "pk", None) else None,
    )


def record_initial_stock(*, product: Product, actor=None) -> StockMovement | None:
    """
    Log the INITIAL movement for a freshly created product whose stock_current
    was set at creation time (no UPDATE needed).
    """
    qty = int(product.stock_current or 0)
    if qty == 0:
        return None

    return StockMovement.objects.create(
        product=product,
        reason=StockMovement.Reason.INITIAL,
        quantity=qty,
        stock_after=qty,
        performed_by=actor if getattr(actor, "pk", None) else None,
    )
