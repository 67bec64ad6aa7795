# loyalty/api/urls.py

from django.urls import path

from loyalty.api.views import LoyaltyTransactionListView, ManualEntryView, WalletBalanceView

urlpatterns = [
    path(
        "clients/<uuid:client_id>/balance/",
        WalletBalanceView.as_view(),
        name="loyalty-balance",
    ),
    path("transactions/", LoyaltyTransactionListView.as_view(), name="loyalty-transactions"),
    path("manual/", ManualEntryView.as_view(), name="loyalty-manual"),
]
