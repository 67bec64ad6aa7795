# clients/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from clients.api.views import ClientViewSet

router = SimpleRouter()
router.register(r"", ClientViewSet, basename="clients")

urlpatterns = [
    path("", include(router.urls)),
]
