# products/urls.py

"""
PRODUCTS URLS

- /api/products/products/                  list / create
- /api/products/products/<id>/             retrieve / update / delete
- /api/products/products/<id>/quote/       tier quote for ?quantity=
- /api/products/products/<id>/movements/   stock audit trail
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import ProductViewSet

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
