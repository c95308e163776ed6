"""API views for loyalty standing."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import IsAdmin

from .serializers import LoyaltyHistorySerializer, LoyaltyStandingSerializer
from .services import LoyaltyService


class LoyaltyViewSet(viewsets.ViewSet):
    """Own standing and history for customers; any user's standing for admins."""

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action == "retrieve":
            return [IsAdmin()]
        return super().get_permissions()

    @action(detail=False, methods=["get"])
    def me(self, request):  # type: ignore
        return Response(LoyaltyStandingSerializer(LoyaltyService().standing_for(request.user.pk)).data)

    @action(detail=False, methods=["get"], url_path="me/history")
    def history(self, request):  # type: ignore
        entries = LoyaltyService().history_for(request.user.pk)[:100]
        return Response(LoyaltyHistorySerializer(entries, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        return Response(LoyaltyStandingSerializer(LoyaltyService().standing_for(int(pk))).data)
