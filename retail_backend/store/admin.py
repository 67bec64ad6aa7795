from django.contrib import admin

from store.models import StoreSettings


@admin.register(StoreSettings)
class StoreSettingsAdmin(admin.ModelAdmin):
    list_display = (
        "company_name",
        "medium_threshold",
        "wholesale_threshold",
        "loyalty_percentage",
        "updated_at",
    )

    def has_add_permission(self, request):
        return not StoreSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
