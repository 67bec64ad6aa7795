from .purchase_service import (
    PurchaseError,
    PurchasePermissionError,
    delete_purchase,
    record_purchase,
    update_purchase,
)

__all__ = [
    "PurchaseError",
    "PurchasePermissionError",
    "record_purchase",
    "update_purchase",
    "delete_purchase",
]
