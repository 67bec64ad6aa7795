# accounting/admin.py

from django.contrib import admin

from accounting.models import CashMovement, Expense

# ============================================================
# EXPENSES
# ============================================================


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "description",
        "amount",
        "type",
        "category",
        "payment_method",
        "user_name",
    )
    list_filter = ("type", "payment_method", "category")
    search_fields = ("description", "category", "user_name")
    readonly_fields = ("created_at",)
    ordering = ("-date",)


# ============================================================
# CASH DRAWER
# ============================================================


@admin.register(CashMovement)
class CashMovementAdmin(admin.ModelAdmin):
    list_display = ("date", "type", "amount", "description", "user_name")
    list_filter = ("type",)
    readonly_fields = [f.name for f in CashMovement._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
