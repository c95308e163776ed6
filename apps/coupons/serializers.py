"""Serializers for coupon issuance and validation."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Coupon


class CouponSerializer(serializers.ModelSerializer):
    remaining_redemptions = serializers.SerializerMethodField()

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "spa",
            "issuer_role",
            "discount_percent",
            "expires_at",
            "max_redemptions",
            "current_redemptions",
            "remaining_redemptions",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields

    def get_remaining_redemptions(self, obj: Coupon):  # type: ignore
        return obj.to_terms().remaining_redemptions


class CouponCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2)
    spa = serializers.IntegerField(required=False, allow_null=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    max_redemptions = serializers.IntegerField(required=False, allow_null=True)


class CouponValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    spa = serializers.IntegerField()
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
