"""Serializers for balances and payouts."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Payout


class LedgerBalanceSerializer(serializers.Serializer):
    earned = serializers.DecimalField(max_digits=14, decimal_places=2)
    reserved = serializers.DecimalField(max_digits=14, decimal_places=2)
    available = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()


class PayoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payout
        fields = [
            "id",
            "owner",
            "amount",
            "currency",
            "status",
            "notes",
            "reviewed_by",
            "requested_at",
            "approved_at",
            "rejected_at",
            "completed_at",
        ]
        read_only_fields = fields


class PayoutRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class PayoutReviewSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class PayoutCompleteSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
