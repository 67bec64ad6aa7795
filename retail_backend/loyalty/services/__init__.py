from .ledger import (
    InsufficientWalletBalanceError,
    LedgerError,
    WalletNotEligibleError,
    balance,
    history,
    post_manual_entry,
    post_sale_effects,
    reverse_folio_effects,
)

__all__ = [
    "balance",
    "history",
    "post_sale_effects",
    "reverse_folio_effects",
    "post_manual_entry",
    "LedgerError",
    "WalletNotEligibleError",
    "InsufficientWalletBalanceError",
]
