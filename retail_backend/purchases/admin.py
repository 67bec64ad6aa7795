from django.contrib import admin

from purchases.models import Purchase


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ("date", "sku", "product_name", "quantity", "cost_unit", "cost_total", "supplier", "user_name")
    list_filter = ("supplier",)
    search_fields = ("sku", "product_name", "supplier")
    # stock is only moved through the purchase service
    readonly_fields = [f.name for f in Purchase._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
