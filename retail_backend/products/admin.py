# products/admin.py
"""
Admin rules:
- Products are editable, except stock_current (moves only through the stock ledger).
- StockMovement rows are immutable (read-only admin).
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, StockMovement


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "price_retail",
        "price_medium",
        "price_wholesale",
        "stock_current",
    )
    search_fields = ("sku", "name")
    list_filter = ("category",)
    readonly_fields = ("stock_current", "created_at", "updated_at")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("product", "reason", "quantity", "stock_after", "folio", "created_at")
    list_filter = ("reason",)
    search_fields = ("product__sku", "folio")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
