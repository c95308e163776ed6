"""Serializers for feedback."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Feedback


class FeedbackCreateSerializer(serializers.Serializer):
    booking = serializers.UUIDField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class FeedbackSerializer(serializers.ModelSerializer):
    """Read serializer for feedback including related ids."""

    customer_name = serializers.ReadOnlyField(source='customer.username')
    spa_name = serializers.ReadOnlyField(source='spa.name')

    class Meta:
        model = Feedback
        fields = [
            'id',
            'booking',
            'spa',
            'spa_name',
            'customer',
            'customer_name',
            'rating',
            'comment',
            'created_at',
        ]
        read_only_fields = fields
