"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request by a customer."""

    spa = serializers.IntegerField(min_value=1)
    service = serializers.IntegerField(min_value=1)
    staff = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    scheduled_at = serializers.DateTimeField()
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)


class BookingRescheduleSerializer(serializers.Serializer):
    scheduled_at = serializers.DateTimeField()


class BookingReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking representation."""

    spa_id = serializers.ReadOnlyField()
    spa_name = serializers.ReadOnlyField(source="spa.name")
    service_id = serializers.ReadOnlyField()
    service_name = serializers.ReadOnlyField(source="service.name")
    staff_id = serializers.ReadOnlyField()
    customer_id = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "spa_id",
            "spa_name",
            "service_id",
            "service_name",
            "staff_id",
            "customer_id",
            "scheduled_at",
            "ends_at",
            "duration_minutes",
            "status",
            "base_price",
            "coupon_code",
            "discount_percent",
            "final_price",
            "commission_rate",
            "commission_amount",
            "currency",
            "cancellation_reason",
            "cancellation_source",
            "confirmed_at",
            "completed_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
