"""URL routing for the feedback domain."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import FeedbackViewSet

router = SimpleRouter()
router.register(r'', FeedbackViewSet, basename='feedback')

urlpatterns = [path('', include(router.urls))]
