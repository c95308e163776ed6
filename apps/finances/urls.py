"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AvailableProfitView, PayoutViewSet

router = SimpleRouter()
router.register(r"payouts", PayoutViewSet, basename="payout")

urlpatterns = [
    path("available-profit/", AvailableProfitView.as_view(), name="available-profit"),
    path("", include(router.urls)),
]
