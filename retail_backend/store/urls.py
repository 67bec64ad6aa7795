# store/urls.py

from django.urls import path

from store.views import StoreSettingsView

app_name = "store"

urlpatterns = [
    path("settings/", StoreSettingsView.as_view(), name="settings"),
]
