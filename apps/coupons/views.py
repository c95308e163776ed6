"""API views for the discount engine."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import IsOwnerOrAdmin, principal_from_request
from shared.application.config import MarketplaceConfig
from shared.domain.value_objects import Money

from .serializers import CouponCreateSerializer, CouponSerializer, CouponValidateSerializer
from .services import DiscountEngine


class CouponViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Issue, list and deactivate coupons; anyone signed in may validate a code."""

    serializer_class = CouponSerializer
    permission_classes = [IsOwnerOrAdmin]
    engine_class = DiscountEngine
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action == "validate":
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def get_engine(self) -> DiscountEngine:
        return self.engine_class()

    def get_queryset(self):  # type: ignore
        return self.get_engine().visible_to(principal_from_request(self.request))

    def create(self, request, *args, **kwargs):  # type: ignore
        payload = CouponCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        coupon = self.get_engine().create_coupon(
            principal_from_request(request),
            code=data["code"],
            discount_percent=data["discount_percent"],
            spa_id=data.get("spa"),
            expires_at=data.get("expires_at"),
            max_redemptions=data.get("max_redemptions"),
        )
        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def validate(self, request):  # type: ignore
        payload = CouponValidateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        engine = self.get_engine()
        response = {}
        if data.get("base_price") is not None:
            currency = MarketplaceConfig.from_settings().currency
            quote = engine.preview(data["code"], Money(data["base_price"], currency), data["spa"])
            terms = quote.coupon
            response["final_price"] = quote.final_price.to_primitive()
            response["currency"] = quote.final_price.currency
        else:
            terms = engine.validate(data["code"], data["spa"])
        response.update(
            {
                "code": terms.code,
                "discount_percent": str(terms.discount_percent),
                "remaining_redemptions": terms.remaining_redemptions,
                "valid": True,
            }
        )
        return Response(response)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        coupon = self.get_engine().deactivate(principal_from_request(request), int(pk))
        return Response(CouponSerializer(coupon).data)
