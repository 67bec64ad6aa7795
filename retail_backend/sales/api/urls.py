# sales/api/urls.py

"""
SALES API URLS

Rules:
- Explicit folio routes are registered BEFORE router URLs.
- Folios are zero-padded digit strings, matched with <str:folio>.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.views.folio import (
    FolioCancelView,
    FolioClientView,
    FolioDateView,
    FolioDetailView,
    FolioListView,
    SaleLineViewSet,
)

router = DefaultRouter()
router.register(r"lines", SaleLineViewSet, basename="sale-lines")

urlpatterns = [
    path("folios/", FolioListView.as_view(), name="folio-list"),
    path("folios/<str:folio>/", FolioDetailView.as_view(), name="folio-detail"),
    path("folios/<str:folio>/cancel/", FolioCancelView.as_view(), name="folio-cancel"),
    path("folios/<str:folio>/date/", FolioDateView.as_view(), name="folio-date"),
    path("folios/<str:folio>/client/", FolioClientView.as_view(), name="folio-client"),

    path("", include(router.urls)),
]
