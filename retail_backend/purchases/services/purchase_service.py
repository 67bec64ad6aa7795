# purchases/services/purchase_service.py

"""
======================================================
PATH: purchases/services/purchase_service.py
======================================================
PURCHASE SERVICE

record_purchase:
    validate -> persist Purchase -> stock +quantity (PURCHASE)
update_purchase:
    lock row -> stock delta (PURCHASE_EDIT) -> persist changes
    a product change returns the old quantity and receives the new one
delete_purchase:
    lock row -> stock -quantity (PURCHASE_DELETE) -> delete row

Every flow runs in ONE transaction: a rejected stock decrement (stock already
sold) rolls back the purchase write as well.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from permissions.roles import PERM_PRODUCTS_MANAGE, has_permission
from products.models import Product, StockMovement
from products.services.stock import adjust_stock
from purchases.models import Purchase

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

EDITABLE_FIELDS = {"product", "quantity", "cost_unit", "supplier", "notes", "date"}


class PurchaseError(ValueError):
    pass


class PurchasePermissionError(PurchaseError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _require(actor) -> None:
    if not has_permission(actor, PERM_PRODUCTS_MANAGE):
        raise PurchasePermissionError("You do not have permission to record purchases.")


def _actor_name(actor) -> str:
    return str(getattr(actor, "display_name", "") or getattr(actor, "username", "") or "")


def _positive_quantity(value) -> int:
    try:
        qty = int(value)
    except (TypeError, ValueError) as exc:
        raise PurchaseError("quantity must be an integer") from exc
    if qty <= 0:
        raise PurchaseError("quantity must be greater than zero")
    return qty


def _save(purchase: Purchase) -> Purchase:
    try:
        purchase.save()
    except ValidationError as exc:
        raise PurchaseError("; ".join(exc.messages)) from exc
    return purchase


@transaction.atomic
def record_purchase(
    *,
    actor,
    product: Product,
    quantity,
    cost_unit,
    supplier: str = "",
    notes: str = "",
    date=None,
) -> Purchase:
    _require(actor)

    qty = _positive_quantity(quantity)
    cost = _money(cost_unit)
    if cost < Decimal("0.00"):
        raise PurchaseError("cost_unit cannot be negative")

    purchase = _save(
        Purchase(
            date=date or timezone.now(),
            product=product,
            sku=product.sku,
            product_name=product.name,
            quantity=qty,
            cost_unit=cost,
            supplier=supplier,
            notes=notes or "",
            user=actor if getattr(actor, "pk", None) else None,
            user_name=_actor_name(actor),
        )
    )

    adjust_stock(
        product=product,
        delta=qty,
        reason=StockMovement.Reason.PURCHASE,
        actor=actor,
        reference=purchase.id,
    )

    logger.info(
        "Purchase recorded",
        extra={"purchase_id": str(purchase.id), "sku": product.sku, "quantity": qty},
    )
    return purchase


@transaction.atomic
def update_purchase(*, actor, purchase: Purchase, **changes) -> Purchase:
    """
    Edit a recorded purchase. Only the quantity (or product) drives stock;
    cost, supplier, notes and date are plain field updates.
    """
    _require(actor)

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise PurchaseError(f"Unknown purchase fields: {sorted(unknown)}")

    locked = Purchase.objects.select_for_update().select_related("product").get(pk=purchase.pk)

    old_product = locked.product
    old_qty = int(locked.quantity)

    new_product = changes.get("product") or old_product
    new_qty = _positive_quantity(changes["quantity"]) if "quantity" in changes else old_qty

    if new_product.pk != old_product.pk:
        # stable lock order: lowest product id first
        moves = sorted(
            [(old_product, -old_qty), (new_product, new_qty)],
            key=lambda m: str(m[0].pk),
        )
        for product, delta in moves:
            adjust_stock(
                product=product,
                delta=delta,
                reason=StockMovement.Reason.PURCHASE_EDIT,
                actor=actor,
                reference=locked.id,
            )
        locked.product = new_product
        locked.sku = new_product.sku
        locked.product_name = new_product.name
    elif new_qty != old_qty:
        adjust_stock(
            product=old_product,
            delta=new_qty - old_qty,
            reason=StockMovement.Reason.PURCHASE_EDIT,
            actor=actor,
            reference=locked.id,
        )

    locked.quantity = new_qty
    if "cost_unit" in changes:
        locked.cost_unit = _money(changes["cost_unit"])
    for field in ("supplier", "notes", "date"):
        if field in changes and changes[field] is not None:
            setattr(locked, field, changes[field])

    _save(locked)

    logger.info(
        "Purchase updated",
        extra={
            "purchase_id": str(locked.id),
            "sku": locked.sku,
            "old_quantity": old_qty,
            "quantity": new_qty,
        },
    )
    return locked


@transaction.atomic
def delete_purchase(*, actor, purchase: Purchase) -> None:
    _require(actor)

    locked = Purchase.objects.select_for_update().select_related("product").get(pk=purchase.pk)

    adjust_stock(
        product=locked.product,
        delta=-int(locked.quantity),
        reason=StockMovement.Reason.PURCHASE_DELETE,
        actor=actor,
        reference=locked.id,
    )

    logger.info(
        "Purchase deleted",
        extra={"purchase_id": str(locked.id), "sku": locked.sku, "quantity": locked.quantity},
    )
    locked.delete()
