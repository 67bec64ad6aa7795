from .pricing import TIER_MEDIUM, TIER_RETAIL, TIER_WHOLESALE, quote_line, resolve_tier
from .stock import InsufficientStockError, StockError, adjust_stock

__all__ = [
    "TIER_RETAIL",
    "TIER_MEDIUM",
    "TIER_WHOLESALE",
    "resolve_tier",
    "quote_line",
    "adjust_stock",
    "StockError",
    "InsufficientStockError",
]
