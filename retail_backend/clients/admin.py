from django.contrib import admin

from clients.models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "wallet_status", "created_at")
    list_filter = ("wallet_status",)
    search_fields = ("name", "phone", "rfc")
    readonly_fields = ("wallet_status", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_general:
            return False
        return super().has_delete_permission(request, obj)
