from django.contrib import admin

from .models import Cart, CartItem

# =====================================================
# CART ITEM INLINE (READ-ONLY)
# =====================================================


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "sku",
        "quantity",
        "is_correction",
        "price_type",
        "unit_price",
        "amount",
        "created_at",
    )
    exclude = ("product",)

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# CART ADMIN
# =====================================================


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "client",
        "is_active",
        "created_at",
        "total_amount",
        "item_count",
    )

    readonly_fields = (
        "id",
        "user",
        "client",
        "is_active",
        "created_at",
        "updated_at",
        "total_amount",
        "item_count",
    )

    search_fields = ("user__email", "client__name")
    list_filter = ("is_active", "created_at")

    inlines = [CartItemInline]
