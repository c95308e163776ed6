"""API views for the commission and payout ledger."""

from __future__ import annotations

from uuid import UUID

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.api.permissions import IsAdmin, IsOwnerOrAdmin, principal_from_request

from .models import Payout
from .serializers import (
    LedgerBalanceSerializer,
    PayoutCompleteSerializer,
    PayoutRequestSerializer,
    PayoutReviewSerializer,
    PayoutSerializer,
)
from .services import CommissionLedger


class AvailableProfitView(APIView):
    """Withdrawable balance of the caller (platform pool for administrators)."""

    permission_classes = [IsOwnerOrAdmin]

    def get(self, request):  # type: ignore
        balance = CommissionLedger().balance_for(principal_from_request(request))
        return Response(LedgerBalanceSerializer(balance).data)


class PayoutViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = PayoutSerializer
    permission_classes = [IsOwnerOrAdmin]
    filterset_fields = ["status", "owner"]
    lookup_value_regex = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

    def get_permissions(self):  # type: ignore
        if self.action in ("review", "complete"):
            return [IsAdmin()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        return CommissionLedger().payouts_visible_to(principal_from_request(self.request))

    def create(self, request, *args, **kwargs):  # type: ignore
        payload = PayoutRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        payout = CommissionLedger().request_payout(
            principal_from_request(request),
            payload.validated_data["amount"],
            payload.validated_data["notes"],
        )
        return Response(PayoutSerializer(Payout.objects.get(pk=payout.id)).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def review(self, request, pk=None):  # type: ignore
        payload = PayoutReviewSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        payout = CommissionLedger().review(
            principal_from_request(request),
            self._payout_id(pk),
            payload.validated_data["approved"],
            payload.validated_data["notes"],
        )
        return Response(PayoutSerializer(Payout.objects.get(pk=payout.id)).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        payload = PayoutCompleteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        payout = CommissionLedger().complete(
            principal_from_request(request),
            self._payout_id(pk),
            payload.validated_data["notes"],
        )
        return Response(PayoutSerializer(Payout.objects.get(pk=payout.id)).data)

    @staticmethod
    def _payout_id(pk) -> UUID:  # type: ignore
        return UUID(str(pk))
