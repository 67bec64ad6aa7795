# pos/services/cart_service.py

"""
CART SERVICE

Pending lines of the in-progress sale. Nothing here touches stock or the
loyalty ledger; those effects only happen when the cart is confirmed as a
folio (sales.services.folio_service.confirm_batch).

Rules:
- add_line merges into an existing line with the same SKU and correction flag,
  adding quantities and amounts.
- Corrections are stored with quantity = -abs(requested).
- update_line_quantity re-resolves the tier from the product's CURRENT prices
  (last edit wins until checkout).
- remove_line / clear_cart have no side effects.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.utils import timezone

from clients.models import Client
from pos.models import Cart, CartItem
from products.services.pricing import quote_line

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or 0)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


class CartError(ValueError):
    pass


class CartInactiveError(CartError):
    pass


class EmptyCartError(CartError):
    pass


def _signed(quantity: int, is_correction: bool) -> int:
    try:
        q = int(quantity)
    except (TypeError, ValueError) as exc:
        raise CartError("quantity must be an integer") from exc

    if q == 0:
        raise CartError("quantity cannot be zero")

    return -abs(q) if is_correction else abs(q)


def _assert_active(cart: Cart) -> None:
    if not cart.is_active:
        raise CartInactiveError("Cart is inactive and cannot be modified")


def get_active_cart(*, ctx) -> Cart:
    cart, _ = Cart.objects.get_or_create(user=ctx.actor, is_active=True)
    return cart


@transaction.atomic
def add_line(
    *,
    ctx,
    cart: Cart,
    product,
    quantity: int,
    is_correction: bool = False,
    correction_note: str = "",
) -> CartItem:
    _assert_active(cart)

    qty = _signed(quantity, is_correction)
    quote = quote_line(product, qty, settings=ctx.settings)

    item = (
        CartItem.objects.select_for_update()
        .filter(cart=cart, product=product, is_correction=is_correction)
        .first()
    )

    if item is None:
        item = CartItem.objects.create(
            cart=cart,
            product=product,
            sku=product.sku,
            quantity=qty,
            is_correction=is_correction,
            correction_note=(correction_note or "").strip() if is_correction else "",
            price_type=quote.tier,
            unit_price=quote.unit_price,
            amount=quote.amount,
        )
        return item

    item.quantity = item.quantity + qty
    item.amount = _money(item.amount + quote.amount)
    if is_correction and correction_note:
        item.correction_note = correction_note.strip()
    item.save()

    return item


@transaction.atomic
def update_line_quantity(*, ctx, item: CartItem, quantity: int) -> CartItem:
    _assert_active(item.cart)

    qty = _signed(quantity, item.is_correction)

    # re-read prices: the catalogue may have changed since the line was added
    product = item.product
    product.refresh_from_db()
    quote = quote_line(product, qty, settings=ctx.settings)

    item.quantity = qty
    item.price_type = quote.tier
    item.unit_price = quote.unit_price
    item.amount = quote.amount
    item.save()

    return item


@transaction.atomic
def remove_line(*, item: CartItem) -> None:
    _assert_active(item.cart)
    item.delete()


@transaction.atomic
def clear_cart(*, cart: Cart) -> None:
    _assert_active(cart)
    cart.items.all().delete()


@transaction.atomic
def set_cart_client(*, cart: Cart, client: Client | None) -> Cart:
    _assert_active(cart)

    cart.client = None if client is None or client.is_general else client
    cart.save(update_fields=["client", "updated_at"])
    return cart


def cart_total(cart: Cart) -> Decimal:
    return _money(cart.total_amount)


def close_cart(cart: Cart) -> None:
    closed = Cart.objects.filter(pk=cart.pk, is_active=True).update(
        is_active=False, updated_at=timezone.now()
    )
    if not closed:
        raise CartInactiveError("Cart is already checked out")
    cart.is_active = False
