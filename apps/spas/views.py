"""API views for spa listing and nearby search."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import SpaFilterSet
from .models import Spa
from .serializers import NearbyQuerySerializer, NearbySpaSerializer, SpaSerializer
from .services import find_nearby_spas


class SpaViewSet(viewsets.ReadOnlyModelViewSet):
    """Approved spas with their active services and staff."""

    queryset = Spa.objects.approved().prefetch_related("services", "staff")
    serializer_class = SpaSerializer
    permission_classes = [permissions.AllowAny]
    filterset_class = SpaFilterSet

    @action(detail=False, methods=["get"])
    def nearby(self, request):  # type: ignore
        params = NearbyQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        results = find_nearby_spas(
            params.validated_data["lat"],
            params.validated_data["lng"],
            params.validated_data.get("radius"),
        )
        return Response(NearbySpaSerializer(results, many=True).data)
