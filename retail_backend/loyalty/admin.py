from django.contrib import admin

from loyalty.models import LoyaltyTransaction


@admin.register(LoyaltyTransaction)
class LoyaltyTransactionAdmin(admin.ModelAdmin):
    list_display = ("client", "type", "source", "amount", "folio", "created_by_name", "created_at")
    list_filter = ("type", "source")
    search_fields = ("client__name", "folio", "description")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
