# sales/services/settlement.py

"""
PAYMENT SETTLEMENT ENGINE (PURE)

No database access. Given a cart total, a payment method and (for multiple)
a split map, produce a validated Settlement or raise.

Single methods: cash, card_credit, card_debit, transfer, wallet.
Split (multiple): an explicit {method: amount} map over the single methods.

Wallet rules:
- Only an ACTIVE wallet can pay. Pending/inactive wallets are a hard rejection.
- Paying more from the wallet than its balance is never silently accepted:
  - while the split is being entered, the wallet entry is clamped to the
    balance and the shortfall is reported (enter_split_amount)
  - at settle time, a wallet amount over the balance raises
    WalletShortfallError carrying a proposal (wallet capped at the balance,
    the excess added to cash, other split entries kept) that the caller must
    explicitly accept by re-submitting as multiple

Split validation:
- negative entries clamp to 0
- |Σ splits − total| must be <= epsilon (0.01)
- zero entries are dropped from the canonical payment_details
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from sales.models.sale import (
    PAYMENT_CARD_CREDIT,
    PAYMENT_CARD_DEBIT,
    PAYMENT_CASH,
    PAYMENT_MULTIPLE,
    PAYMENT_TRANSFER,
    PAYMENT_WALLET,
)

logger = logging.getLogger("payments")

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
DEFAULT_EPSILON = Decimal("0.01")

SINGLE_METHODS = (
    PAYMENT_CASH,
    PAYMENT_CARD_CREDIT,
    PAYMENT_CARD_DEBIT,
    PAYMENT_TRANSFER,
    PAYMENT_WALLET,
)
SETTLEMENT_METHODS = SINGLE_METHODS + (PAYMENT_MULTIPLE,)


def _money(v) -> Decimal:
    if v is None or v == "":
        return ZERO
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# ============================================================
# ERRORS
# ============================================================


class SettlementError(ValueError):
    pass


class InvalidPaymentMethodError(SettlementError):
    pass


class WalletBlockedError(SettlementError):
    pass


class SplitMismatchError(SettlementError):
    def __init__(self, *, total, split_sum):
        self.total = _money(total)
        self.split_sum = _money(split_sum)
        super().__init__(
            f"Payment split {self.split_sum} does not match the sale total {self.total}"
        )


class WalletShortfallError(SettlementError):
    def __init__(self, *, proposal: "WalletFallbackProposal"):
        self.proposal = proposal
        super().__init__(
            f"Insufficient wallet balance ({proposal.available}). "
            f"Use the full balance and pay {proposal.shortfall} with another method?"
        )


# ============================================================
# VALUE TYPES
# ============================================================


@dataclass(frozen=True)
class WalletState:
    status: str = "inactive"
    balance: Decimal = ZERO

    @property
    def can_redeem(self) -> bool:
        return self.status == "active"

    @property
    def available(self) -> Decimal:
        return max(_money(self.balance), ZERO)

    @classmethod
    def for_client(cls, client, balance) -> "WalletState":
        if client is None or client.is_general:
            return cls()
        return cls(status=client.wallet_status, balance=_money(balance))


@dataclass(frozen=True)
class Settlement:
    total: Decimal
    payment_method: str
    payment_details: dict[str, Decimal] | None = None

    @property
    def wallet_amount(self) -> Decimal:
        if self.payment_method == PAYMENT_WALLET:
            return max(self.total, ZERO)
        if self.payment_method == PAYMENT_MULTIPLE and self.payment_details:
            return self.payment_details.get(PAYMENT_WALLET, ZERO)
        return ZERO

    def details_for_storage(self) -> dict[str, str] | None:
        if not self.payment_details:
            return None
        return {k: str(v) for k, v in self.payment_details.items()}


@dataclass(frozen=True)
class SplitEntry:
    splits: dict[str, Decimal]
    requested: Decimal
    accepted: Decimal

    @property
    def shortfall(self) -> Decimal:
        return _money(self.requested - self.accepted)

    @property
    def was_clamped(self) -> bool:
        return self.accepted != self.requested


@dataclass(frozen=True)
class WalletFallbackProposal:
    total: Decimal
    available: Decimal
    shortfall: Decimal
    fallback_method: str = PAYMENT_CASH
    splits: dict[str, Decimal] = field(default_factory=dict)

    payment_method = PAYMENT_MULTIPLE

    def as_dict(self) -> dict:
        return {
            "payment_method": self.payment_method,
            "total": str(self.total),
            "available": str(self.available),
            "shortfall": str(self.shortfall),
            "splits": {k: str(v) for k, v in self.splits.items()},
        }


# ============================================================
# OPERATIONS
# ============================================================


def enter_split_amount(
    splits: dict | None, method: str, amount, *, wallet: WalletState
) -> SplitEntry:
    """
    Record one split entry the way the payment form does while typing:
    negatives clamp to 0 and the wallet entry clamps to the available balance.
    Returns a new map; the input is not modified.
    """
    if method not in SINGLE_METHODS:
        raise InvalidPaymentMethodError(f"Unknown payment method: {method}")

    requested = max(_money(amount), ZERO)
    accepted = requested

    if method == PAYMENT_WALLET and accepted > wallet.available:
        accepted = wallet.available

    out = {k: _money(v) for k, v in (splits or {}).items()}
    out[method] = accepted

    if accepted != requested:
        logger.info(
            "Wallet split clamped to balance",
            extra={"requested": str(requested), "accepted": str(accepted)},
        )

    return SplitEntry(splits=out, requested=requested, accepted=accepted)


def propose_wallet_fallback(
    total, wallet: WalletState, *, splits: dict | None = None, fallback_method: str = PAYMENT_CASH
) -> WalletFallbackProposal:
    """
    Cap the wallet entry at the available balance and move the excess onto
    fallback_method. Every other split entry is kept as entered.
    Without splits the whole total is the wallet request.
    """
    if fallback_method not in SINGLE_METHODS or fallback_method == PAYMENT_WALLET:
        raise InvalidPaymentMethodError(f"Invalid fallback method: {fallback_method}")

    total = _money(total)
    entries = _clean_splits(splits) if splits is not None else {PAYMENT_WALLET: total}

    requested = entries.pop(PAYMENT_WALLET, ZERO)
    use = min(wallet.available, requested)
    shortfall = _money(requested - use)

    proposed = {}
    if use > ZERO:
        proposed[PAYMENT_WALLET] = use
    proposed.update(entries)
    if shortfall > ZERO:
        proposed[fallback_method] = _money(proposed.get(fallback_method, ZERO) + shortfall)

    return WalletFallbackProposal(
        total=total,
        available=wallet.available,
        shortfall=shortfall,
        fallback_method=fallback_method,
        splits=proposed,
    )


def _require_redeemable(wallet: WalletState) -> None:
    if not wallet.can_redeem:
        label = "PENDIENTE" if wallet.status == "pending" else "INACTIVO"
        logger.warning("Wallet payment rejected", extra={"wallet_status": wallet.status})
        raise WalletBlockedError(
            f"Wallet is {label}: it can accrue points but cannot be used to pay."
        )


def _clean_splits(splits: dict) -> dict[str, Decimal]:
    cleaned: dict[str, Decimal] = {}
    for method, amount in (splits or {}).items():
        if method not in SINGLE_METHODS:
            raise InvalidPaymentMethodError(f"Unknown payment method in split: {method}")
        value = max(_money(amount), ZERO)
        if value > ZERO:
            cleaned[method] = value
    return cleaned


def settle(
    total,
    method: str,
    *,
    wallet: WalletState,
    splits: dict | None = None,
    epsilon=DEFAULT_EPSILON,
) -> Settlement:
    total = _money(total)
    epsilon = Decimal(str(epsilon))

    if method not in SETTLEMENT_METHODS:
        raise InvalidPaymentMethodError(f"Unknown payment method: {method}")

    if method == PAYMENT_WALLET:
        _require_redeemable(wallet)
        if total > wallet.available:
            proposal = propose_wallet_fallback(total, wallet)
            logger.info("Wallet shortfall, fallback proposed", extra=proposal.as_dict())
            raise WalletShortfallError(proposal=proposal)
        return Settlement(total=total, payment_method=PAYMENT_WALLET)

    if method != PAYMENT_MULTIPLE:
        return Settlement(total=total, payment_method=method)

    cleaned = _clean_splits(splits)

    wallet_part = cleaned.get(PAYMENT_WALLET, ZERO)
    if wallet_part > ZERO:
        _require_redeemable(wallet)
        if wallet_part > wallet.available:
            proposal = propose_wallet_fallback(total, wallet, splits=cleaned)
            logger.info("Wallet split over balance", extra=proposal.as_dict())
            raise WalletShortfallError(proposal=proposal)

    split_sum = sum(cleaned.values(), ZERO)
    if abs(split_sum - total) > epsilon:
        logger.warning(
            "Settlement rejected: split mismatch",
            extra={"total": str(total), "split_sum": str(split_sum)},
        )
        raise SplitMismatchError(total=total, split_sum=split_sum)

    return Settlement(total=total, payment_method=PAYMENT_MULTIPLE, payment_details=cleaned)
