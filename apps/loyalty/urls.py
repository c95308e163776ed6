"""URL routing for loyalty."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import LoyaltyViewSet

router = SimpleRouter()
router.register(r"", LoyaltyViewSet, basename="loyalty")

urlpatterns = [
    path("", include(router.urls)),
]
