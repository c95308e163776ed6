"""URL routing for the spa registry."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import SpaViewSet

router = SimpleRouter()
router.register(r"", SpaViewSet, basename="spa")

urlpatterns = [
    path("", include(router.urls)),
]
