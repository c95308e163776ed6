"""API views for feedback."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import principal_from_request

from .models import Feedback
from .serializers import FeedbackCreateSerializer, FeedbackSerializer
from .services import submit_feedback


class FeedbackViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Public feedback listing; customers post feedback for their bookings."""

    serializer_class = FeedbackSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filterset_fields = ['spa', 'rating']
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        return Feedback.objects.visible().select_related('spa', 'customer')

    def create(self, request, *args, **kwargs):  # type: ignore
        payload = FeedbackCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        feedback = submit_feedback(
            principal_from_request(request),
            data['booking'],
            data['rating'],
            data['comment'],
        )
        return Response(FeedbackSerializer(feedback).data, status=status.HTTP_201_CREATED)
