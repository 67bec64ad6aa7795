# sales/admin.py

from django.contrib import admin

from sales.models import FolioSequence, Sale


# ======================================================
# SALE LINE ADMIN (READ-ONLY: edits go through the folio service)
# ======================================================


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "folio",
        "date",
        "sku",
        "quantity",
        "unit_price",
        "amount",
        "client_name",
        "payment_method",
        "is_cancelled",
    )
    search_fields = ("folio", "sku", "client_name")
    list_filter = ("payment_method", "is_cancelled", "is_correction")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FolioSequence)
class FolioSequenceAdmin(admin.ModelAdmin):
    list_display = ("id", "last_value", "updated_at")
    readonly_fields = ("id", "last_value", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
