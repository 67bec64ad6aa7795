# loyalty/services/ledger.py

"""
LOYALTY LEDGER SERVICE

Balance:
- balance(client) = Σ amount of the client's entries (always derived).

Sale effects (called by folio confirmation, inside its transaction):
- earn:   one entry per folio = Σ(positive line amounts) × rate / 100,
          storing the applied rate
- redeem: one entry per folio = −(wallet amount of the settlement)

Cancellation (called by folio cancellation, inside its transaction):
- cancel_refund:   +|stored redeem amount|       (adjustment)
- cancel_reversal: −(stored earn amount)         (adjustment)
Both reference the STORED entries, never the current percentage.

Concurrency:
- Redemption locks the client row (select_for_update) before reading the
  balance, so two redemptions for the same client serialize.
- The (folio, source) unique constraint makes double redemption and double
  reversal impossible even if a caller guard is bypassed.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import Sum

from clients.models import Client
from loyalty.models import LoyaltyTransaction
from permissions.roles import PERM_CLIENTS_MANAGE, has_permission

logger = logging.getLogger("loyalty")

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

KIND_DEPOSIT = "deposit"
KIND_WITHDRAWAL = "withdrawal"


def _money(v) -> Decimal:
    if v is None or v == "":
        return ZERO
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


class LedgerError(ValueError):
    pass


class LedgerPermissionError(LedgerError):
    pass


class WalletNotEligibleError(LedgerError):
    pass


class InsufficientWalletBalanceError(LedgerError):
    def __init__(self, *, requested, available):
        self.requested = _money(requested)
        self.available = _money(available)
        self.shortfall = _money(self.requested - self.available)
        super().__init__(
            f"Insufficient wallet balance. Available: {self.available}, "
            f"Requested: {self.requested}"
        )


# ============================================================
# READS
# ============================================================


def balance(client) -> Decimal:
    if client is None:
        return ZERO
    client_id = getattr(client, "pk", client)
    total = (
        LoyaltyTransaction.objects.filter(client_id=client_id)
        .aggregate(total=Sum("amount"))
        .get("total")
    )
    return _money(total)


def history(client):
    return LoyaltyTransaction.objects.filter(client=client).order_by("-created_at")


def folio_entries(folio: str):
    return LoyaltyTransaction.objects.filter(folio=folio)


# ============================================================
# WRITES
# ============================================================


def _append(*, ctx, client, amount, type_, source, description, folio=None, rate=None):
    actor = ctx.actor if ctx is not None else None
    return LoyaltyTransaction.objects.create(
        client=client,
        amount=_money(amount),
        type=type_,
        source=source,
        folio=folio,
        rate=rate,
        description=description,
        created_by=actor if getattr(actor, "pk", None) else None,
        created_by_name=ctx.actor_name if ctx is not None else "",
    )


def _lock_client(client) -> Client:
    return Client.objects.select_for_update().get(pk=client.pk)


@transaction.atomic
def post_sale_effects(
    *, ctx, folio: str, client, line_amounts, wallet_amount=ZERO
) -> list[LoyaltyTransaction]:
    """
    Post earn + redeem entries for a confirmed folio.

    line_amounts: iterable of line amounts (signed; corrections are negative)
    wallet_amount: wallet portion of the settlement (0 when not used)
    """
    if client is None or client.is_general:
        return []

    posted: list[LoyaltyTransaction] = []
    wallet_amount = _money(wallet_amount)

    if wallet_amount > ZERO:
        locked = _lock_client(client)
        if not locked.can_redeem:
            raise WalletNotEligibleError(
                f"Wallet for {locked.name} is {locked.wallet_status}; only active wallets can pay."
            )

        available = balance(locked)
        if wallet_amount > available:
            raise InsufficientWalletBalanceError(requested=wallet_amount, available=available)

        posted.append(
            _append(
                ctx=ctx,
                client=locked,
                amount=-wallet_amount,
                type_=LoyaltyTransaction.TYPE_REDEEM,
                source=LoyaltyTransaction.SOURCE_SALE_REDEEM,
                description=f"Pago Folio {folio}",
                folio=folio,
            )
        )
        logger.info(
            "Wallet redeem posted",
            extra={"folio": folio, "client_id": str(client.pk), "amount": str(wallet_amount)},
        )

    rate = _money(ctx.settings.loyalty_percentage)
    if rate > ZERO:
        earn_base = sum((_money(a) for a in line_amounts if _money(a) > ZERO), ZERO)
        earned = _money(earn_base * rate / Decimal("100"))
        if earned > ZERO:
            posted.append(
                _append(
                    ctx=ctx,
                    client=client,
                    amount=earned,
                    type_=LoyaltyTransaction.TYPE_EARN,
                    source=LoyaltyTransaction.SOURCE_SALE_EARN,
                    description=f"Compra Folio {folio}",
                    folio=folio,
                    rate=rate,
                )
            )
            logger.info(
                "Points earned",
                extra={"folio": folio, "client_id": str(client.pk), "amount": str(earned), "rate": str(rate)},
            )

    return posted


@transaction.atomic
def reverse_folio_effects(*, ctx, folio: str) -> list[LoyaltyTransaction]:
    """
    Undo the wallet effects of a folio using its stored entries.
    Already-reversed components are skipped, so calling twice is harmless.
    """
    entries = {e.source: e for e in folio_entries(folio).select_related("client")}
    posted: list[LoyaltyTransaction] = []

    redeem = entries.get(LoyaltyTransaction.SOURCE_SALE_REDEEM)
    if redeem is not None and LoyaltyTransaction.SOURCE_CANCEL_REFUND not in entries:
        posted.append(
            _append(
                ctx=ctx,
                client=redeem.client,
                amount=abs(redeem.amount),
                type_=LoyaltyTransaction.TYPE_ADJUSTMENT,
                source=LoyaltyTransaction.SOURCE_CANCEL_REFUND,
                description=f"Reembolso por Cancelación Folio {folio}",
                folio=folio,
            )
        )

    earn = entries.get(LoyaltyTransaction.SOURCE_SALE_EARN)
    if earn is not None and LoyaltyTransaction.SOURCE_CANCEL_REVERSAL not in entries:
        posted.append(
            _append(
                ctx=ctx,
                client=earn.client,
                amount=-abs(earn.amount),
                type_=LoyaltyTransaction.TYPE_ADJUSTMENT,
                source=LoyaltyTransaction.SOURCE_CANCEL_REVERSAL,
                description=f"Cancelación Puntos Folio {folio}",
                folio=folio,
                rate=earn.rate,
            )
        )

    if posted:
        logger.info(
            "Folio wallet effects reversed",
            extra={"folio": folio, "entries": [str(p.amount) for p in posted]},
        )

    return posted


@transaction.atomic
def post_manual_entry(*, ctx, client, kind: str, amount, description: str) -> LoyaltyTransaction:
    """
    Operator wallet movement, independent of any sale.

    deposit    -> adjustment  (+amount)
    withdrawal -> redeem      (−amount), cannot exceed the balance
    """
    if not has_permission(ctx.actor, PERM_CLIENTS_MANAGE):
        raise LedgerPermissionError("You do not have permission to adjust wallets.")

    if client is None or client.is_general:
        raise LedgerError("The general client has no wallet.")

    amount = _money(amount)
    if amount <= ZERO:
        raise LedgerError("Amount must be greater than zero.")

    description = (description or "").strip()
    if not description:
        raise LedgerError("A description is required.")

    locked = _lock_client(client)

    if kind == KIND_DEPOSIT:
        entry = _append(
            ctx=ctx,
            client=locked,
            amount=amount,
            type_=LoyaltyTransaction.TYPE_ADJUSTMENT,
            source=LoyaltyTransaction.SOURCE_MANUAL,
            description=description,
        )
    elif kind == KIND_WITHDRAWAL:
        available = balance(locked)
        if amount > available:
            raise InsufficientWalletBalanceError(requested=amount, available=available)
        entry = _append(
            ctx=ctx,
            client=locked,
            amount=-amount,
            type_=LoyaltyTransaction.TYPE_REDEEM,
            source=LoyaltyTransaction.SOURCE_MANUAL,
            description=description,
        )
    else:
        raise LedgerError(f"Unknown entry kind: {kind}")

    logger.info(
        "Manual wallet entry",
        extra={"client_id": str(locked.pk), "kind": kind, "amount": str(amount)},
    )
    return entry
