# products/serializers/__init__.py

from .product import ProductSerializer, StockMovementSerializer

__all__ = [
    "ProductSerializer",
    "StockMovementSerializer",
]
