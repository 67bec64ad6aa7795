# sales/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Turn the active cart into a confirmed folio in ONE transaction:
    settle payment -> confirm_batch (lines + stock + loyalty) -> close cart

Hard rules:
- Money is computed server-side from the cart lines; the caller only chooses
  the payment method and, for multiple, the split map.
- The wallet state used for settlement is read from the ledger at checkout;
  the ledger re-checks it under a row lock when posting the redeem entry.
"""

from __future__ import annotations

from django.conf import settings
from django.db import transaction

from loyalty.services.ledger import balance
from pos.models import Cart
from pos.services.cart_service import CartInactiveError, EmptyCartError, cart_total, close_cart
from sales.services.folio_service import ConfirmedFolio, confirm_batch
from sales.services.settlement import Settlement, WalletState, settle


def wallet_state_for(client) -> WalletState:
    if client is None or client.is_general:
        return WalletState()
    return WalletState.for_client(client, balance(client))


def settle_cart(*, cart, payment_method: str, splits=None) -> Settlement:
    return settle(
        cart_total(cart),
        payment_method,
        wallet=wallet_state_for(cart.client),
        splits=splits,
        epsilon=getattr(settings, "SPLIT_EPSILON", "0.01"),
    )


@transaction.atomic
def checkout_cart(*, ctx, cart, payment_method: str, splits=None) -> ConfirmedFolio:
    # the locked row decides: a second submission of the same cart waits here,
    # then sees it closed
    cart = Cart.objects.select_for_update().get(pk=cart.pk)
    if not cart.is_active:
        raise CartInactiveError("Cart is already checked out")

    lines = list(cart.items.select_related("product").order_by("created_at"))
    if not lines:
        raise EmptyCartError("Cart is empty")

    settlement = settle_cart(cart=cart, payment_method=payment_method, splits=splits)

    confirmed = confirm_batch(
        ctx=ctx,
        lines=lines,
        client=cart.client,
        settlement=settlement,
    )

    close_cart(cart)
    return confirmed
