"""Serializers for loyalty standing and history."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import LoyaltyHistory


class LoyaltyStandingSerializer(serializers.Serializer):
    points = serializers.IntegerField()
    rank = serializers.CharField(source="rank.value")
    next_rank = serializers.SerializerMethodField()
    points_to_next_rank = serializers.IntegerField(allow_null=True)

    def get_next_rank(self, obj):  # type: ignore
        return obj.next_rank.value if obj.next_rank else None


class LoyaltyHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyHistory
        fields = ["id", "points", "reason", "booking", "created_at"]
        read_only_fields = fields
