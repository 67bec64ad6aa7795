"""
PATH: pos/urls.py

POS URLS

Purpose:
- POS health check
- Cart lifecycle and line operations
- Client selection and split entry
- Checkout (cart -> folio via checkout orchestrator)
"""

from django.urls import path

from pos.views.api import (
    ActiveCartView,
    AddCartItemView,
    CartClientView,
    CheckoutCartView,
    ClearCartView,
    POSHealthCheckView,
    RemoveCartItemView,
    SplitEntryView,
    UpdateCartItemView,
)

app_name = "pos"

urlpatterns = [
    path("health/", POSHealthCheckView.as_view(), name="health"),

    path("cart/", ActiveCartView.as_view(), name="active-cart"),
    path("cart/clear/", ClearCartView.as_view(), name="clear-cart"),
    path("cart/client/", CartClientView.as_view(), name="cart-client"),
    path("cart/split-entry/", SplitEntryView.as_view(), name="split-entry"),

    path("cart/items/add/", AddCartItemView.as_view(), name="add-cart-item"),
    path("cart/items/<uuid:item_id>/update/", UpdateCartItemView.as_view(), name="update-cart-item"),
    path("cart/items/<uuid:item_id>/remove/", RemoveCartItemView.as_view(), name="remove-cart-item"),

    path("checkout/", CheckoutCartView.as_view(), name="checkout"),
]
